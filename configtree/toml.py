"""TOML documents, shown as a tree with source lines and comments."""

from __future__ import annotations

import datetime as dt
import functools
import logging
import re
import string
import tomllib
from typing import Any

from configtree.helpers import apply_comments, create_error_node, extract_comments
from configtree.node import ConfigNode, FormatParser, NodeType, ParseResult

log = logging.getLogger(__name__)

_Path = tuple[str | int, ...]

_BARE_KEY = frozenset(string.ascii_letters + string.digits + "-_")
_POSITION = re.compile(r"\s*\(at (?:line (\d+), column \d+|end of document)\)\s*$")


class _Locator:
    """Finds the source line of every table, key and array element of a valid TOML text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0
        self.line = 1
        self.lines: dict[_Path, int] = {(): 1}
        self.array_tables: dict[_Path, int] = {}

    def _peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def _advance(self, count: int = 1) -> None:
        end = min(self.pos + count, len(self.text))
        self.line += self.text.count("\n", self.pos, end)
        self.pos = end

    def _expect(self, token: str) -> None:
        if not self.text.startswith(token, self.pos):
            raise ValueError(f"expected {token!r} at line {self.line}")
        self._advance(len(token))

    def _skip_blank(self) -> None:
        while self._peek() in (" ", "\t"):
            self._advance()

    def _skip_comment(self) -> None:
        end = self.text.find("\n", self.pos)
        if end < 0:
            end = len(self.text)
        self._advance(end - self.pos)

    def _skip_trivia(self) -> None:
        while True:
            ch = self._peek()
            if ch in (" ", "\t", "\r", "\n"):
                self._advance()
            elif ch == "#":
                self._skip_comment()
            else:
                return

    def _skip_string(self) -> None:
        quote = self._peek()
        basic = quote == '"'
        if self.text.startswith(quote * 3, self.pos):
            self._advance(3)
            while self.pos < len(self.text):
                ch = self._peek()
                if ch == quote:
                    run = 0
                    while self._peek(run) == quote:
                        run += 1
                    self._advance(run)
                    if run >= 3:
                        return
                elif basic and ch == "\\":
                    self._advance(2)
                else:
                    self._advance()
            raise ValueError("unterminated multi-line string")

        self._advance()
        while self.pos < len(self.text):
            ch = self._peek()
            if ch == quote:
                self._advance()
                return
            if ch == "\n":
                break
            self._advance(2 if basic and ch == "\\" else 1)
        raise ValueError(f"unterminated string at line {self.line}")

    def _read_key(self) -> list[str]:
        parts: list[str] = []
        while True:
            self._skip_blank()
            start = self.pos
            if self._peek() in ('"', "'"):
                self._skip_string()
                parts.append(tomllib.loads("k = " + self.text[start:self.pos])["k"])
            else:
                while self._peek() in _BARE_KEY:
                    self._advance()
                if self.pos == start:
                    raise ValueError(f"expected a key at line {self.line}")
                parts.append(self.text[start:self.pos])
            self._skip_blank()
            if self._peek() != ".":
                return parts
            self._advance()

    def _resolve(self, parts: list[str]) -> _Path:
        """Turn a header key into a path, stepping into the latest element of arrays of tables."""
        out: list[str | int] = []
        for part in parts:
            out.append(part)
            prefix = tuple(out)
            if prefix in self.array_tables:
                out.append(self.array_tables[prefix] - 1)
            else:
                self.lines.setdefault(prefix, self.line)
        return tuple(out)

    def _assign(self, base: _Path, parts: list[str]) -> None:
        for depth in range(1, len(parts)):
            self.lines.setdefault(base + tuple(parts[:depth]), self.line)
        self._read_value(base + tuple(parts))

    def _read_value(self, path: _Path) -> None:
        self.lines[path] = self.line
        ch = self._peek()
        if ch == "[":
            self._advance()
            index = 0
            while True:
                self._skip_trivia()
                ch = self._peek()
                if ch == "]":
                    self._advance()
                    return
                if not ch:
                    raise ValueError("unterminated array")
                before = self.pos
                self._read_value(path + (index,))
                if self.pos == before:
                    raise ValueError(f"unexpected character at line {self.line}")
                index += 1
                self._skip_trivia()
                if self._peek() == ",":
                    self._advance()
        elif ch == "{":
            self._advance()
            while True:
                self._skip_blank()
                ch = self._peek()
                if ch == "}":
                    self._advance()
                    return
                if not ch:
                    raise ValueError("unterminated inline table")
                parts = self._read_key()
                self._expect("=")
                self._skip_blank()
                self._assign(path, parts)
                self._skip_blank()
                if self._peek() == ",":
                    self._advance()
        elif ch in ('"', "'"):
            self._skip_string()
        else:
            while self._peek() and self._peek() not in ",]}#\r\n":
                self._advance()

    def run(self) -> dict[_Path, int]:
        current: _Path = ()
        while True:
            self._skip_trivia()
            ch = self._peek()
            if not ch:
                return self.lines
            if ch == "[":
                if self._peek(1) == "[":
                    self._advance(2)
                    parts = self._read_key()
                    self._expect("]]")
                    base = self._resolve(parts[:-1]) + (parts[-1],)
                    index = self.array_tables.get(base, 0)
                    self.array_tables[base] = index + 1
                    self.lines.setdefault(base, self.line)
                    current = base + (index,)
                else:
                    self._advance()
                    parts = self._read_key()
                    self._expect("]")
                    current = self._resolve(parts)
                self.lines[current] = self.line
            else:
                parts = self._read_key()
                self._expect("=")
                self._skip_blank()
                self._assign(current, parts)


def _locate(text: str) -> dict[_Path, int]:
    try:
        return _Locator(text).run()
    except (ValueError, tomllib.TOMLDecodeError, KeyError) as exc:
        log.debug("line lookup failed: %s", exc)
        return {(): 1}


def _format_offset(value: dt.datetime | dt.time) -> str:
    offset = value.utcoffset()
    if offset is None:
        return ""
    if not offset:
        return "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02}:{minutes:02}"


def _format_time(value: dt.time | dt.datetime) -> str:
    text = f"{value.hour:02}:{value.minute:02}:{value.second:02}"
    if value.microsecond:
        text += "." + f"{value.microsecond:06}".rstrip("0")
    return text


def _scalar(value: Any) -> tuple[NodeType, str]:
    if isinstance(value, bool):
        return NodeType.BOOL, "true" if value else "false"
    if isinstance(value, int):
        return NodeType.INTEGER, str(value)
    if isinstance(value, float):
        return NodeType.FLOAT, f"{value:f}"
    if isinstance(value, str):
        return NodeType.STRING, value
    if isinstance(value, dt.datetime):
        return NodeType.STRING, f"{value.date().isoformat()}T{_format_time(value)}{_format_offset(value)}"
    if isinstance(value, dt.date):
        return NodeType.STRING, value.isoformat()
    if isinstance(value, dt.time):
        return NodeType.STRING, _format_time(value)
    return NodeType.NULL, "null"


def _walk(value: Any, path: _Path, lines: dict[_Path, int], parent_line: int) -> ConfigNode:
    line = lines.get(path, -1)
    if line <= 0:
        line = parent_line if parent_line > 0 else -1
    node = ConfigNode(source_line=line)

    if isinstance(value, dict):
        node.type = NodeType.OBJECT
        for key, item in value.items():
            child = _walk(item, path + (key,), lines, line)
            child.key = key
            node.children.append(child)
    elif isinstance(value, list):
        node.type = NodeType.ARRAY
        node.children = [
            _walk(item, path + (index,), lines, line) for index, item in enumerate(value)
        ]
    else:
        node.type, node.scalar = _scalar(value)
    return node


def _compare_lines(a: ConfigNode, b: ConfigNode) -> int:
    if a.source_line <= 0 or b.source_line <= 0:
        return 0
    return (a.source_line > b.source_line) - (a.source_line < b.source_line)


def _sort_objects_by_line(node: ConfigNode) -> None:
    for child in node.children:
        _sort_objects_by_line(child)
    if node.type is NodeType.OBJECT:
        node.children.sort(key=functools.cmp_to_key(_compare_lines))


def _error_result(message: str, line: int = -1) -> ParseResult:
    return ParseResult(
        root=create_error_node(message, line),
        ok=True,
        has_parse_error=True,
        error=message,
        err_line=line,
    )


class TomlParser(FormatParser):
    """Parser for TOML documents; keys keep their document order and comments."""

    format_name = "TOML 1.0"
    library_credit = "Python tomllib"

    def parse(self, data: str | bytes) -> ParseResult:
        if isinstance(data, (bytes, bytearray)):
            try:
                text = bytes(data).decode("utf-8")
            except UnicodeDecodeError as exc:
                return _error_result(str(exc))
        else:
            text = data
        text = text.removeprefix("\ufeff")
        log.debug("parse enter, chars=%d", len(text))

        try:
            value = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            message = str(exc)
            line = -1
            match = _POSITION.search(message)
            if match is not None:
                line = int(match.group(1)) if match.group(1) else text.count("\n") + 1
                message = message[: match.start()]
            log.debug("parse error: %s", message)
            return _error_result(message, line)
        except Exception as exc:  # deep nesting and other unexpected failures
            return _error_result(str(exc) or "Unknown fatal error")

        root = _walk(value, (), _locate(text), -1)
        _sort_objects_by_line(root)
        log.debug("walk complete, children=%d", len(root.children))
        apply_comments(root, extract_comments(text))
        log.debug("parse leave ok")
        return ParseResult(root=root, ok=True)