"""JSON with comments: ``//``, ``/* */`` and ``#`` comments are allowed and kept."""

from __future__ import annotations

import json
import logging
from collections import deque

from configtree.convert import convert_value
from configtree.helpers import create_error_node
from configtree.node import ConfigNode, FormatParser, ParseResult

log = logging.getLogger(__name__)

_WS = " \t\n\r\f\v"
INVALID_SYNTAX = "Invalid JSONC syntax"

_CommentQueue = deque[tuple[str, str]]


def _find_comment_start(line: str, start: int = 0) -> int | None:
    in_string = False
    escaped = False
    size = len(line)
    for i in range(start, size):
        ch = line[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
            continue
        if ch == "#":
            return i
        if ch == "/" and i + 1 < size and line[i + 1] in "/*":
            return i
    return None


def _find_json_key(line: str) -> tuple[str, int] | None:
    """Return the first ``"key":`` on the line and the offset just past the colon."""
    escaped = False
    in_key = False
    key_start = 0
    size = len(line)
    for i, ch in enumerate(line):
        if in_key:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_key = False
                j = i + 1
                while j < size and line[j] in _WS:
                    j += 1
                if j < size and line[j] == ":":
                    return line[key_start:i], j + 1
            continue
        if ch == '"':
            in_key = True
            key_start = i + 1
        elif ch == "/" and i + 1 < size and line[i + 1] in "/*":
            return None
    return None


def _comment_text_from(line: str, start: int | None) -> str:
    if start is None:
        return ""
    text_start = start
    if line[start] == "#":
        text_start = start + 1
    elif start + 1 < len(line) and line[start + 1] in "/*":
        text_start = start + 2
    text = line[text_start:]
    block_end = text.find("*/")
    if block_end >= 0:
        text = text[:block_end]
    return text.strip(_WS)


def _collect_comments(data: str) -> _CommentQueue:
    """Pair each comment with the key of the line it belongs to, in document order."""
    comments: _CommentQueue = deque()
    pending = ""
    block = ""
    in_block = False

    for raw in data.split("\n"):
        line = raw.removesuffix("\r")

        if in_block:
            end = line.find("*/")
            if end < 0:
                block += "\n" + line
            else:
                block = (block + "\n" + line[:end]).strip(_WS)
                if block:
                    pending = block
                block = ""
                in_block = False
            continue

        content = line.lstrip(" \t")
        if not content:
            continue

        if content.startswith(("//", "#", "/*")):
            if content.startswith("/*") and content.find("*/", 2) < 0:
                block = content[2:]
                in_block = True
            else:
                text = _comment_text_from(content, 0)
                if text:
                    pending = text
            continue

        found = _find_json_key(line)
        if found is not None:
            key, value_start = found
            text = _comment_text_from(line, _find_comment_start(line, value_start))
        else:
            key = ""
            text = _comment_text_from(line, _find_comment_start(line))
        if text:
            comments.append((key, text))
        elif pending:
            comments.append((key, pending))
            pending = ""

    return comments


def estimate_error_line(data: str) -> int:
    """Guess the line of a syntax error: the first doubled or trailing comma, else the last line."""
    line = 1
    in_string = False
    escaped = False
    previous = ""
    for ch in data:
        if ch == "\n":
            line += 1
            continue
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
            previous = "x"
            continue
        if ch in _WS:
            continue
        if previous == "," and ch in ",}]":
            return line
        previous = ch
    return line


def _strip_comments(data: str, hash_comments: bool) -> str:
    out: list[str] = []
    in_str = in_block = in_line = False
    size = len(data)
    i = 0
    while i < size:
        ch = data[i]
        nxt = data[i + 1] if i + 1 < size else ""

        if in_block:
            if ch == "*" and nxt == "/":
                in_block = False
                out.append("  ")
                i += 2
            else:
                out.append("\n" if ch == "\n" else " ")
                i += 1
            continue

        if in_line:
            if ch == "\n":
                in_line = False
                out.append("\n")
            else:
                out.append(" ")
            i += 1
            continue

        if in_str:
            if ch == '"':
                escaped = False
                k = i
                while k > 0 and data[k - 1] == "\\":
                    escaped = not escaped
                    k -= 1
                if not escaped:
                    in_str = False
            out.append(ch)
            i += 1
            continue

        if ch == '"':
            in_str = True
            out.append(ch)
        elif ch == "/" and nxt == "/":
            in_line = True
            out.append("  ")
            i += 1
        elif ch == "/" and nxt == "*":
            in_block = True
            out.append("  ")
            i += 1
        elif ch == "#" and hash_comments:
            in_line = True
            out.append(" ")
        else:
            out.append(ch)
        i += 1

    return "".join(out)


def strip_comments(data: str) -> str:
    """Blank out every comment, keeping offsets and line breaks intact."""
    return _strip_comments(data, hash_comments=True)


def _reject_constant(name: str) -> None:
    raise ValueError(f"invalid literal {name}")


def _annotate(node: ConfigNode, comments: _CommentQueue) -> None:
    if not comments:
        return
    for child in node.children:
        if comments:
            key = comments[0][0]
            if (child.key and key == child.key) or (not child.key and not key):
                child.comment = comments.popleft()[1]
        _annotate(child, comments)


def _error_result(message: str, line: int = -1) -> ParseResult:
    return ParseResult(
        root=create_error_node(message, line),
        ok=True,
        has_parse_error=True,
        error=message,
        err_line=line,
    )


class JsoncParser(FormatParser):
    """Parser for JSON and JSON-with-comments documents."""

    format_name = "JSONC"
    library_credit = "Python json"

    def parse(self, data: str | bytes) -> ParseResult:
        valid_text = True
        if isinstance(data, (bytes, bytearray)):
            try:
                text = bytes(data).decode("utf-8")
            except UnicodeDecodeError:
                text = bytes(data).decode("utf-8", errors="replace")
                valid_text = False
        else:
            text = data
        text = text.removeprefix("\ufeff")
        log.debug("parse enter, chars=%d", len(text))

        try:
            comments = _collect_comments(text)
            clean = strip_comments(text)
            log.debug("comments stripped, pending comments=%d", len(comments))
            try:
                if not valid_text:
                    raise ValueError("input is not valid UTF-8")
                value = json.loads(clean, parse_constant=_reject_constant)
            except ValueError:
                line = estimate_error_line(clean)
                log.debug("parse failed, estimated line=%d", line)
                return _error_result(INVALID_SYNTAX, line)

            root = convert_value(value)
            _annotate(root, comments)
            log.debug("parse leave ok")
            return ParseResult(root=root, ok=True)
        except Exception as exc:  # deep nesting and other unexpected failures
            message = str(exc) or "Unknown fatal error"
            log.debug("exception: %s", message)
            return _error_result(message)