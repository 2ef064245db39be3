"""Tree nodes, parse results and the parser interface shared by every format."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class NodeType(Enum):
    """Kind of value a :class:`ConfigNode` holds."""

    OBJECT = "object"
    ARRAY = "array"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    NULL = "null"


@dataclass
class ConfigNode:
    """One entry of a parsed configuration tree."""

    key: str = ""
    scalar: str = ""
    comment: str = ""
    source_line: int = -1
    type: NodeType = NodeType.NULL
    children: list[ConfigNode] = field(default_factory=list)

    def is_leaf(self) -> bool:
        """True when the node has no children."""
        return not self.children

    def is_container(self) -> bool:
        """True when the node has at least one child."""
        return bool(self.children)


@dataclass
class ParseResult:
    """Outcome of parsing one document."""

    root: ConfigNode = field(default_factory=ConfigNode)
    ok: bool = False
    has_parse_error: bool = False
    error: str = ""
    err_line: int = -1
    format_name: str = ""
    library_credit: str = ""
    file_bytes: int = 0
    total_nodes: int = 0
    error_count: int = 0
    warning: str = ""


class FormatParser(ABC):
    """Base class for a parser of one document format."""

    format_name: str = ""
    library_credit: str = ""

    @abstractmethod
    def parse(self, data: str | bytes) -> ParseResult:
        """Parse ``data`` into a :class:`ParseResult`."""