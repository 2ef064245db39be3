"""XML documents: elements, attributes, text and comments shown as a tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from xml.parsers import expat

from configtree.helpers import create_error_node
from configtree.node import ConfigNode, FormatParser, NodeType, ParseResult

# Characters the XML grammar treats as white space.
_XML_WS = " \t\r\n"
_WS = " \t\n\r\f\v"


@dataclass
class _Text:
    value: str


@dataclass
class _Comment:
    value: str


@dataclass
class _Element:
    name: str
    line: int
    attributes: dict[str, str] = field(default_factory=dict)
    children: list[_Element | _Text | _Comment] = field(default_factory=list)

    def elements(self) -> list[_Element]:
        """Child elements in document order."""
        return [child for child in self.children if isinstance(child, _Element)]

    def child_value(self) -> str:
        """Text of the first text child, or an empty string."""
        return next((child.value for child in self.children if isinstance(child, _Text)), "")


class _XmlError(Exception):
    def __init__(self, message: str, line: int) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class _TreeBuilder:
    """Collects expat events into a small element tree with line numbers."""

    def __init__(self, parser: expat.XMLParserType, keep_comments: bool) -> None:
        self.top: list[_Element | _Comment] = []
        self._parser = parser
        self._keep_comments = keep_comments
        self._stack: list[_Element] = []
        self._text: list[str] = []
        self._in_cdata = False

        parser.StartElementHandler = self._start
        parser.EndElementHandler = self._end
        parser.CharacterDataHandler = self._text.append
        parser.CommentHandler = self._comment
        parser.StartCdataSectionHandler = self._start_cdata
        parser.EndCdataSectionHandler = self._end_cdata
        parser.ProcessingInstructionHandler = self._instruction

    def _container(self) -> list:
        return self._stack[-1].children if self._stack else self.top

    def _flush(self) -> None:
        if not self._text:
            return
        text = "".join(self._text)
        self._text.clear()
        if not self._stack:
            return
        # Plain text made only of white space is dropped; CDATA is always kept.
        if not self._in_cdata and not text.strip(_XML_WS):
            return
        self._stack[-1].children.append(_Text(text))

    def _start(self, name: str, attributes: dict[str, str]) -> None:
        self._flush()
        element = _Element(name, self._parser.CurrentLineNumber, dict(attributes))
        self._container().append(element)
        self._stack.append(element)

    def _end(self, name: str) -> None:
        self._flush()
        self._stack.pop()

    def _comment(self, text: str) -> None:
        self._flush()
        if self._keep_comments:
            self._container().append(_Comment(text))

    def _start_cdata(self) -> None:
        self._flush()
        self._in_cdata = True

    def _end_cdata(self) -> None:
        self._flush()
        self._in_cdata = False

    def _instruction(self, target: str, data: str) -> None:
        self._flush()


def _parse_document(data: str | bytes, keep_comments: bool) -> list[_Element | _Comment]:
    """Parse XML text into top-level elements and comments; raise ``_XmlError`` on bad input."""
    if isinstance(data, str):
        parser = expat.ParserCreate(encoding="utf-8")
        payload = data.encode("utf-8", errors="replace")
    else:
        parser = expat.ParserCreate()
        payload = bytes(data)
    builder = _TreeBuilder(parser, keep_comments)
    try:
        parser.Parse(payload, True)
    except expat.ExpatError as exc:
        raise _XmlError(expat.ErrorString(exc.code), exc.lineno) from exc
    return builder.top


def _join_comment(existing: str, text: str) -> str:
    text = text.strip(_WS)
    if not text:
        return existing
    return f"{existing}\n{text}" if existing else text


def _append_container_children(out: ConfigNode, element: _Element) -> None:
    for name, value in element.attributes.items():
        out.children.append(
            ConfigNode(key="@" + name, type=NodeType.STRING, scalar=value, source_line=out.source_line)
        )

    pending = ""
    for child in element.children:
        if isinstance(child, _Comment):
            pending = _join_comment(pending, child.value)
        elif isinstance(child, _Element):
            node = _convert_element(child)
            if pending:
                node.comment = pending
                pending = ""
            out.children.append(node)
        elif child.value.strip(_WS):
            out.children.append(
                ConfigNode(key="#text", type=NodeType.STRING, scalar=child.value, source_line=out.source_line)
            )

    if pending and not out.comment:
        out.comment = pending


def _convert_element(element: _Element) -> ConfigNode:
    out = ConfigNode(key=element.name, source_line=element.line)
    texts = [child.value for child in element.children if isinstance(child, _Text)]
    has_elements = any(isinstance(child, _Element) for child in element.children)

    if not element.attributes and not has_elements:
        if any(text.strip(_WS) for text in texts):
            out.type = NodeType.STRING
            out.scalar = "".join(texts)
        else:
            out.type = NodeType.NULL
            out.scalar = ""
        return out

    out.type = NodeType.OBJECT
    _append_container_children(out, element)
    return out


class XmlParser(FormatParser):
    """Parser for XML, SVG and XHTML documents."""

    format_name = "XML"
    library_credit = "Python expat"

    def parse(self, data: str | bytes) -> ParseResult:
        try:
            top = _parse_document(data, keep_comments=True)
        except _XmlError as exc:
            return ParseResult(
                root=create_error_node(exc.message, exc.line),
                ok=True,
                has_parse_error=True,
                error=exc.message,
                err_line=exc.line,
            )

        root = ConfigNode(type=NodeType.OBJECT)
        pending = ""
        for item in top:
            if isinstance(item, _Comment):
                pending = _join_comment(pending, item.value)
                continue
            node = _convert_element(item)
            if pending:
                node.comment = pending
                pending = ""
            root.children.append(node)

        return ParseResult(root=root, ok=True)