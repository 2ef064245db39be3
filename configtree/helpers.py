"""Comment extraction and error trees shared by the format parsers."""

from __future__ import annotations

from dataclasses import dataclass, field

from configtree.node import ConfigNode, NodeType

_WHITESPACE = " \t\n\r\f\v"
_INDENT = " \t\r"

ERROR_HINT = "The file contains syntax errors. Please check the structure and indentation."


@dataclass
class CommentMap:
    """Comments found in a document, keyed by 1-based line number."""

    # Comments on value/key lines are attached only to that exact line.
    inline_comments: dict[int, str] = field(default_factory=dict)
    # Standalone comments may describe the next nearby node.
    leading_comments: dict[int, str] = field(default_factory=dict)


def _store(target: dict[int, str], line: int, text: str) -> None:
    text = text.strip(_WHITESPACE)
    if text:
        target[line] = text


def _append(pending: str, text: str) -> str:
    text = text.strip(_WHITESPACE)
    if not text:
        return pending
    return f"{pending}\n{text}" if pending else text


class _CommentScanner:
    """Line-by-line state machine collecting ``#``, ``//`` and ``/* */`` comments."""

    def __init__(self) -> None:
        self.comments = CommentMap()
        self.in_block = False
        self.block_is_leading = False
        self.block = ""
        self.pending = ""
        self.separated = False

    def _add_pending(self, text: str) -> None:
        if self.separated:
            self.pending = ""
        self.pending = _append(self.pending, text)
        self.separated = False

    def _flush_pending(self, line_no: int) -> None:
        _store(self.comments.leading_comments, line_no, self.pending)
        self.pending = ""

    def _scan_inline(self, line_no: int, line: str) -> int | None:
        quote = ""
        size = len(line)
        for i, ch in enumerate(line):
            if quote:
                if ch == quote:
                    escaped = False
                    if quote == '"':
                        k = i
                        while k > 0 and line[k - 1] == "\\":
                            escaped = not escaped
                            k -= 1
                    if not escaped:
                        quote = ""
                continue
            if ch in "\"'":
                quote = ch
                continue
            nxt = line[i + 1] if i + 1 < size else ""
            if ch == "#":
                return i + 1
            if ch == "/" and nxt == "/":
                return i + 2
            if ch == "/" and nxt == "*":
                self.block_is_leading = False
                end = line.find("*/", i + 2)
                if end >= 0:
                    _store(self.comments.inline_comments, line_no, line[i + 2:end])
                else:
                    self.in_block = True
                    self.block = line[i + 2:]
                return None
        return None

    def feed(self, line_no: int, line: str) -> None:
        if self.in_block:
            end = line.find("*/")
            if end < 0:
                self.block += "\n" + line
                return
            self.block += "\n" + line[:end]
            if self.block_is_leading:
                self._add_pending(self.block)
            else:
                _store(self.comments.inline_comments, line_no, self.block)
            self.block = ""
            self.in_block = False
            line = line[end + 2:]

        if not line:
            if self.pending:
                self.separated = True
            return

        stripped = line.lstrip(_INDENT)
        if not stripped:
            return
        start = len(line) - len(stripped)
        content = stripped

        comment_start: int | None = None
        if content.startswith("/*"):
            self.block_is_leading = True
            end = content.find("*/", 2)
            if end >= 0:
                self._add_pending(content[2:end])
            else:
                self.in_block = True
                self.block = content[2:]
        elif content.startswith("#"):
            comment_start = start + 1
        elif content.startswith("//"):
            comment_start = start + 2
        else:
            comment_start = self._scan_inline(line_no, line)

        if comment_start is not None:
            text = line[comment_start:]
            if comment_start in (start + 1, start + 2):
                self._add_pending(text)
            else:
                if self.pending:
                    self._flush_pending(line_no)
                _store(self.comments.inline_comments, line_no, text)
        elif self.pending:
            self._flush_pending(line_no)
            self.separated = False


def extract_comments(data: str | bytes) -> CommentMap:
    """Collect inline and leading comments of a text document by line."""
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8", errors="replace")
    lines = data.split("\n")
    if lines[-1] == "":
        lines.pop()
    scanner = _CommentScanner()
    for line_no, line in enumerate(lines, start=1):
        scanner.feed(line_no, line)
    return scanner.comments


def apply_comments(node: ConfigNode, comment_map: CommentMap) -> None:
    """Attach comments to ``node`` and its descendants by source line."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.source_line > 0:
            text = comment_map.inline_comments.get(current.source_line)
            if text is None:
                text = comment_map.leading_comments.get(current.source_line)
            if text is not None:
                current.comment = text
        stack.extend(reversed(current.children))


def create_error_node(message: str, line: int = -1, title: str = "PARSE ERROR") -> ConfigNode:
    """Build the standard tree shown for a document that failed to parse."""
    children = [ConfigNode(key="Message", type=NodeType.STRING, scalar=message)]
    if line != -1:
        children.append(ConfigNode(key="Line/Byte", type=NodeType.INTEGER, scalar=str(line)))
    children.append(ConfigNode(key="Hint", type=NodeType.STRING, scalar=ERROR_HINT))
    error_node = ConfigNode(key=title, type=NodeType.OBJECT, children=children)
    return ConfigNode(type=NodeType.OBJECT, children=[error_node])