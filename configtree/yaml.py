"""YAML documents, shown as a tree with source lines and comments."""

from __future__ import annotations

import logging

import yaml

from configtree.helpers import apply_comments, create_error_node, extract_comments
from configtree.node import ConfigNode, FormatParser, NodeType, ParseResult

log = logging.getLogger(__name__)

_NULLS = frozenset({"null", "~", "NULL", "Null"})
_BOOLS = frozenset({"true", "True", "TRUE", "false", "False", "FALSE"})
_DIGITS = "0123456789"


def deduce_scalar_type(value: str) -> NodeType:
    """Guess the type of a plain (unquoted) YAML scalar from its text."""
    if not value:
        return NodeType.STRING
    if value in _NULLS:
        return NodeType.NULL
    if value in _BOOLS:
        return NodeType.BOOL

    body = value[1:] if value[0] in "+-" else value
    if body and all(ch in _DIGITS for ch in body):
        return NodeType.INTEGER

    dot = value.find(".")
    has_dot = dot >= 0 and (
        (dot > 0 and value[dot - 1] in _DIGITS)
        or (dot + 1 < len(value) and value[dot + 1] in _DIGITS)
    )
    exp = value.find("e")
    if exp < 0:
        exp = value.find("E")
    has_exp = (
        0 < exp < len(value) - 1
        and value[exp - 1] in _DIGITS
        and value[exp + 1] in _DIGITS + "+-"
    )
    if has_dot or has_exp:
        return NodeType.FLOAT
    return NodeType.STRING


def _line(node: yaml.Node) -> int:
    mark = node.start_mark
    return mark.line + 1 if mark is not None else -1


def _key_text(node: yaml.Node) -> str:
    if isinstance(node, yaml.ScalarNode):
        return node.value
    return yaml.serialize(node, default_flow_style=True).strip()


class _Walker:
    """Converts composed YAML nodes, cutting recursive aliases short."""

    def __init__(self) -> None:
        self._active: set[int] = set()

    def walk(self, node: yaml.Node) -> ConfigNode:
        out = ConfigNode(source_line=_line(node))
        if id(node) in self._active:
            out.type = NodeType.NULL
            return out

        if isinstance(node, yaml.MappingNode):
            self._active.add(id(node))
            try:
                out.type = NodeType.OBJECT
                for key_node, value_node in node.value:
                    child = self.walk(value_node)
                    child.key = _key_text(key_node)
                    child.source_line = _line(key_node)
                    out.children.append(child)
            finally:
                self._active.discard(id(node))
        elif isinstance(node, yaml.SequenceNode):
            self._active.add(id(node))
            try:
                out.type = NodeType.ARRAY
                out.children = [self.walk(item) for item in node.value]
            finally:
                self._active.discard(id(node))
        elif isinstance(node, yaml.ScalarNode):
            out.type = NodeType.STRING if node.style else deduce_scalar_type(node.value)
            out.scalar = node.value
        else:
            out.type = NodeType.NULL
        return out


def _error_result(message: str, line: int = -1) -> ParseResult:
    return ParseResult(
        root=create_error_node(message, line),
        ok=True,
        has_parse_error=True,
        error=message,
        err_line=line,
    )


def _describe(exc: yaml.MarkedYAMLError) -> str:
    parts = [part for part in (exc.context, exc.problem) if part]
    return ": ".join(parts) if parts else str(exc)


class YamlParser(FormatParser):
    """Parser for YAML documents; several documents in one stream become an array."""

    format_name = "YAML 1.2"
    library_credit = "PyYAML"

    def parse(self, data: str | bytes) -> ParseResult:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")
        text = data.removeprefix("\ufeff")
        log.debug("parse enter, chars=%d", len(text))

        try:
            documents = list(yaml.compose_all(text, Loader=yaml.SafeLoader))
            if not documents:
                return ParseResult(root=ConfigNode(type=NodeType.NULL), ok=True)

            walker = _Walker()
            if len(documents) == 1:
                root = walker.walk(documents[0])
            else:
                root = ConfigNode(
                    type=NodeType.ARRAY, children=[walker.walk(doc) for doc in documents]
                )
            log.debug("walk complete, children=%d", len(root.children))
        except yaml.MarkedYAMLError as exc:
            mark = exc.problem_mark or exc.context_mark
            line = mark.line + 1 if mark is not None else -1
            message = _describe(exc)
            log.debug("parse error: %s", message)
            return _error_result(message, line)
        except Exception as exc:  # deep nesting and other unexpected failures
            log.debug("exception: %s", exc)
            return _error_result(str(exc) or "Unknown fatal error")

        apply_comments(root, extract_comments(text))
        log.debug("parse leave ok")
        return ParseResult(root=root, ok=True)