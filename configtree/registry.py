"""Lookup of format parsers by file extension."""

from __future__ import annotations

import functools
import string
from collections.abc import Callable

from configtree.cbor import CborParser
from configtree.env import EnvParser
from configtree.ini import IniParser
from configtree.jsonc import JsoncParser
from configtree.jsonl import JsonlParser
from configtree.node import FormatParser
from configtree.plist import PlistParser
from configtree.toml import TomlParser
from configtree.xml import XmlParser
from configtree.yaml import YamlParser

ParserFactory = Callable[[], FormatParser]

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

_BUILTIN: tuple[tuple[tuple[str, ...], ParserFactory], ...] = (
    (("json", "jsonc"), JsoncParser),
    (("toml", "tml"), TomlParser),
    (("ini", "cfg", "conf"), IniParser),
    (("yaml", "yml"), YamlParser),
    (("env",), EnvParser),
    (("jsonl", "ndjson"), JsonlParser),
    (("cbor",), CborParser),
    (("xml", "svg", "xhtml"), XmlParser),
    (("plist",), PlistParser),
)


def _fold(ext: str) -> str:
    return ext.translate(_ASCII_LOWER)


class ParserRegistry:
    """Maps lower-cased file extensions to parser factories."""

    def __init__(self) -> None:
        self._factories: dict[str, ParserFactory] = {}

    def register_parser(self, ext: str, factory: ParserFactory) -> None:
        """Register ``factory`` for ``ext``, replacing any earlier registration."""
        self._factories[_fold(ext)] = factory

    def parser_for(self, ext: str) -> FormatParser | None:
        """Return a new parser for ``ext``, or None when the extension is unknown."""
        factory = self._factories.get(_fold(ext))
        return None if factory is None else factory()

    def supported_extensions(self) -> list[str]:
        """Registered extensions, in registration order."""
        return list(self._factories)

    def register_builtin_parsers(self) -> None:
        """Register every parser that ships with the package; safe to call repeatedly."""
        for extensions, factory in _BUILTIN:
            for ext in extensions:
                self.register_parser(ext, factory)


@functools.cache
def default_registry() -> ParserRegistry:
    """The shared registry holding the built-in parsers."""
    registry = ParserRegistry()
    registry.register_builtin_parsers()
    return registry