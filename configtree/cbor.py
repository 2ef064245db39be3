"""CBOR documents, shown as a tree."""

from __future__ import annotations

import io
from typing import Any

import cbor2

from configtree.convert import convert_value
from configtree.helpers import create_error_node
from configtree.node import FormatParser, ParseResult

INVALID_CBOR = "Invalid CBOR data"


class _InvalidCbor(Exception):
    pass


def _reject_tag(decoder: Any, tag: Any) -> Any:
    raise _InvalidCbor(f"unsupported tag {tag.tag}")


def _checked(value: Any) -> Any:
    """Validate that only plain data appears and sort map keys."""
    if value is None or isinstance(value, (bool, int, float, str, bytes)):
        return value
    if isinstance(value, list):
        return [_checked(item) for item in value]
    if isinstance(value, dict):
        if not all(isinstance(key, str) for key in value):
            raise _InvalidCbor("map keys must be text strings")
        return {key: _checked(value[key]) for key in sorted(value)}
    raise _InvalidCbor(f"unsupported value {type(value).__name__}")


def _decode(data: bytes) -> Any:
    decoder = cbor2.CBORDecoder(io.BytesIO(data), tag_hook=_reject_tag)
    value = decoder.decode()
    try:
        decoder.decode()
    except cbor2.CBORDecodeEOF:
        return _checked(value)
    raise _InvalidCbor("trailing data after the first item")


class CborParser(FormatParser):
    """Parser for a single CBOR data item."""

    format_name = "CBOR"
    library_credit = "cbor2"

    def parse(self, data: str | bytes) -> ParseResult:
        raw = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        try:
            value = _decode(raw)
        except Exception:  # any decoder failure means the data is unusable
            return ParseResult(
                root=create_error_node(INVALID_CBOR, -1),
                ok=True,
                has_parse_error=True,
                error=INVALID_CBOR,
            )
        return ParseResult(root=convert_value(value), ok=True)