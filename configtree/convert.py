"""Conversion of decoded JSON/CBOR values into :class:`ConfigNode` trees."""

from __future__ import annotations

import math
from typing import Any

from configtree.node import ConfigNode, NodeType


def binary_to_hex(data: bytes) -> str:
    """Render raw bytes as a lower-case ``0x``-prefixed hex string."""
    return "0x" + bytes(data).hex()


def _format_float(value: float) -> str:
    if not math.isfinite(value):
        return "null"
    return repr(value)


def convert_value(value: Any) -> ConfigNode:
    """Turn a decoded document value into a node tree."""
    if isinstance(value, dict):
        children = []
        for key, item in value.items():
            child = convert_value(item)
            child.key = str(key)
            children.append(child)
        return ConfigNode(type=NodeType.OBJECT, children=children)
    if isinstance(value, (list, tuple)):
        return ConfigNode(type=NodeType.ARRAY, children=[convert_value(item) for item in value])
    if isinstance(value, str):
        return ConfigNode(type=NodeType.STRING, scalar=value)
    if isinstance(value, bool):
        return ConfigNode(type=NodeType.BOOL, scalar="true" if value else "false")
    if isinstance(value, int):
        return ConfigNode(type=NodeType.INTEGER, scalar=str(value))
    if isinstance(value, float):
        return ConfigNode(type=NodeType.FLOAT, scalar=_format_float(value))
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ConfigNode(type=NodeType.STRING, scalar=binary_to_hex(bytes(value)))
    return ConfigNode(type=NodeType.NULL, scalar="null")