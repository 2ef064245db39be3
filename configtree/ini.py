"""INI files: ``[section]`` headers, ``key = value`` entries, ``;`` and ``#`` comments."""

from __future__ import annotations

import re
import string
from collections import deque
from dataclasses import dataclass, field

from configtree.helpers import create_error_node
from configtree.node import ConfigNode, FormatParser, NodeType, ParseResult

MALFORMED_SECTION = "Malformed INI section header"

_WS = " \t\n\r\f\v"
_BLANK = " \t"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def _fold(name: str) -> str:
    return name.translate(_ASCII_LOWER)


class _MalformedIni(Exception):
    def __init__(self, message: str, line: int) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


@dataclass
class _SectionMeta:
    comment: str = ""
    line: int = -1


@dataclass
class _KeyMeta:
    line: int
    comment: str = ""
    override: str | None = None


@dataclass
class _Scan:
    sections: dict[str, _SectionMeta] = field(default_factory=dict)
    keys: dict[tuple[str, str], deque[_KeyMeta]] = field(default_factory=dict)


def _join(pending: str, comment: str) -> str:
    if not comment:
        return pending
    return f"{pending}\n{comment}" if pending else comment


def _find_inline_comment(value: str) -> int | None:
    quote = ""
    for i, ch in enumerate(value):
        if quote:
            if ch == quote:
                quote = ""
            continue
        if ch in "\"'":
            quote = ch
            continue
        if ch in ";#" and (i == 0 or value[i - 1] in _WS):
            return i
    return None


def _scan(text: str) -> _Scan:
    """Collect line numbers and comments of sections and keys."""
    scan = _Scan()
    section = ""
    pending = ""

    for line_no, raw in enumerate(text.split("\n"), start=1):
        trimmed = raw.removesuffix("\r").strip(_WS)
        if not trimmed:
            continue
        if trimmed[0] in ";#":
            pending = _join(pending, trimmed[1:].strip(_WS))
            continue
        if trimmed[0] == "[":
            close = trimmed.find("]")
            if close < 0:
                raise _MalformedIni(MALFORMED_SECTION, line_no)
            section = trimmed[1:close].strip(_WS)
            meta = scan.sections.setdefault(section, _SectionMeta())
            meta.line = line_no
            if pending:
                meta.comment = pending
                pending = ""
            continue

        sep = trimmed.find("=")
        if sep < 0:
            sep = trimmed.find(":")
        if sep < 0:
            continue
        key = trimmed[:sep].strip(_WS)
        value = trimmed[sep + 1:]
        meta = _KeyMeta(line=line_no)
        pos = _find_inline_comment(value)
        if pos is not None:
            meta.comment = value[pos + 1:].strip(_WS)
            meta.override = value[:pos].strip(_WS)
        elif pending:
            meta.comment = pending
            pending = ""
        scan.keys.setdefault((section, key), deque()).append(meta)

    return scan


@dataclass
class _Key:
    name: str
    values: list[str] = field(default_factory=list)


@dataclass
class _Section:
    name: str
    keys: dict[str, _Key] = field(default_factory=dict)


def _load(text: str) -> list[_Section]:
    """Read sections and entries; names compare case-insensitively, duplicate keys keep every value."""
    sections: dict[str, _Section] = {}
    current = ""

    def section_named(name: str) -> _Section:
        return sections.setdefault(_fold(name), _Section(name))

    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_BLANK)
        if not line or line[0] in ";#":
            continue
        if line[0] == "[":
            close = line.find("]")
            if close < 0:
                continue
            current = line[1:close].strip(_BLANK)
            section_named(current)
            continue
        eq = line.find("=")
        if eq <= 0:
            continue
        key = line[:eq].rstrip(_BLANK)
        value = line[eq + 1:].strip(_BLANK)
        entry = section_named(current).keys.setdefault(_fold(key), _Key(key))
        entry.values.append(value)

    return list(sections.values())


class IniParser(FormatParser):
    """Parser for INI, CFG and CONF files."""

    format_name = "INI"
    library_credit = "built-in"

    def parse(self, data: str | bytes) -> ParseResult:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")
        text = data.removeprefix("\ufeff")

        try:
            scan = _scan(text)
        except _MalformedIni as exc:
            return ParseResult(
                root=create_error_node(exc.message, exc.line),
                ok=True,
                has_parse_error=True,
                error=exc.message,
                err_line=exc.line,
            )

        root = ConfigNode(type=NodeType.OBJECT)
        for section in _load(text):
            section_node = ConfigNode(key=section.name, type=NodeType.OBJECT)
            section_meta = scan.sections.get(section.name)
            if section_meta is not None:
                section_node.comment = section_meta.comment
                section_node.source_line = section_meta.line

            for key in section.keys.values():
                metas = scan.keys.get((section.name, key.name))
                for value in key.values:
                    node = ConfigNode(key=key.name, type=NodeType.STRING, scalar=value)
                    if metas:
                        meta = metas.popleft()
                        node.comment = meta.comment
                        node.source_line = meta.line
                        if meta.override is not None:
                            node.scalar = meta.override
                    section_node.children.append(node)

            root.children.append(section_node)

        return ParseResult(root=root, ok=True)