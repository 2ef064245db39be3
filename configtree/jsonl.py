"""JSON Lines: one JSON document per line, shown as an array."""

from __future__ import annotations

import json
from typing import Any

from configtree.convert import convert_value
from configtree.helpers import create_error_node
from configtree.jsonc import _strip_comments
from configtree.node import ConfigNode, FormatParser, NodeType, ParseResult

MAX_LINES = 10000

_WS = " \t\n\r\f\v"


def _reject_constant(name: str) -> None:
    raise ValueError(f"invalid literal {name}")


def _sort_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _sort_keys(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [_sort_keys(item) for item in value]
    return value


def _parse_line(text: str) -> ConfigNode:
    clean = _strip_comments(text, hash_comments=False)
    return convert_value(_sort_keys(json.loads(clean, parse_constant=_reject_constant)))


class JsonlParser(FormatParser):
    """Parser for newline-delimited JSON; at most ``MAX_LINES`` records are kept."""

    format_name = "JSON Lines"
    library_credit = "Python json"

    def parse(self, data: str | bytes) -> ParseResult:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")

        result = ParseResult(root=ConfigNode(type=NodeType.ARRAY), ok=True)
        non_empty = 0

        for line_no, raw in enumerate(data.split("\n"), start=1):
            trimmed = raw.removesuffix("\r").strip(_WS)
            if not trimmed or trimmed.startswith("#"):
                continue
            non_empty += 1
            index = len(result.root.children)
            if index >= MAX_LINES:
                continue

            try:
                child = _parse_line(trimmed)
            except (ValueError, RecursionError):
                message = f"Line {line_no}: invalid JSON"
                child = create_error_node(message, line_no)
                result.has_parse_error = True
                result.error_count += 1
                if result.err_line < 0:
                    result.err_line = line_no
                if not result.error:
                    result.error = message

            child.key = f"[{index}]"
            child.source_line = line_no
            result.root.children.append(child)

        if non_empty > MAX_LINES:
            result.warning = f"Showing first 10,000 of {non_empty} lines"
        return result