"""Dotenv files: ``KEY=value`` lines with ``#`` comments."""

from __future__ import annotations

import re

from configtree.helpers import create_error_node
from configtree.node import ConfigNode, FormatParser, NodeType, ParseResult

NOT_TEXT = "File is not valid UTF-8 text"

_WS = " \t\n\r\f\v"
_KEY = re.compile(r"[A-Za-z0-9_]+")
_INLINE_COMMENT = re.compile(r"(?<=[ \t\n\r\f\v])#")
_ESCAPE = re.compile(r"\\(.)", re.DOTALL)
_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "\\": "\\", '"': '"'}


def _unescape(text: str) -> str:
    return _ESCAPE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), text)


def _join(target: str, comment: str) -> str:
    if not comment:
        return target
    return f"{target}\n{comment}" if target else comment


def _value_node(node: ConfigNode, value: str) -> None:
    """Fill type, scalar and any trailing comment of ``node`` from a raw value."""
    if not value:
        node.type = NodeType.NULL
        node.scalar = ""
        return
    if len(value) >= 2 and value[0] == value[-1] == '"':
        node.type = NodeType.STRING
        node.scalar = _unescape(value[1:-1])
        return
    if len(value) >= 2 and value[0] == value[-1] == "'":
        node.type = NodeType.STRING
        node.scalar = value[1:-1]
        return

    match = _INLINE_COMMENT.search(value)
    if match is not None:
        pos = match.start()
        node.comment = _join(node.comment, value[pos + 1:].strip(_WS))
        value = value[:pos].strip(_WS)

    if value:
        node.type = NodeType.STRING
        node.scalar = value
    else:
        node.type = NodeType.NULL
        node.scalar = ""


class EnvParser(FormatParser):
    """Parser for ``.env`` files; every variable becomes a child of the root object."""

    format_name = "Env"
    library_credit = ""

    def parse(self, data: str | bytes) -> ParseResult:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")
        if "\0" in data:
            return ParseResult(
                root=create_error_node(NOT_TEXT, -1),
                ok=True,
                has_parse_error=True,
                error=NOT_TEXT,
            )

        root = ConfigNode(type=NodeType.OBJECT)
        pending = ""

        for line_no, raw in enumerate(data.split("\n"), start=1):
            trimmed = raw.removesuffix("\r").strip(_WS)
            if not trimmed:
                pending = ""
                continue
            if trimmed.startswith("#"):
                pending = _join(pending, trimmed[1:].strip(_WS))
                continue

            key, sep, value = trimmed.partition("=")
            if not sep:
                continue
            key = key.strip(_WS)
            if not _KEY.fullmatch(key):
                continue

            node = ConfigNode(key=key, source_line=line_no, comment=pending)
            pending = ""
            _value_node(node, value.strip(_WS))
            root.children.append(node)

        return ParseResult(root=root, ok=True)