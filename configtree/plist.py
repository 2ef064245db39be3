"""Property lists in XML form, shown as a tree."""

from __future__ import annotations

from configtree.helpers import create_error_node
from configtree.node import ConfigNode, FormatParser, NodeType, ParseResult
from configtree.xml import _Element, _parse_document, _XmlError

BINARY_UNSUPPORTED = "Binary plist is not supported"
_BINARY_MESSAGE = (
    "Binary plist is not supported. Convert with: plutil -convert xml1 file.plist"
)
EMPTY_PLIST = "Empty plist"


class _Converter:
    """Turns plist elements into nodes, recording schema errors on the result."""

    def __init__(self) -> None:
        self.result = ParseResult(ok=True)

    def _note_error(self, message: str) -> None:
        self.result.has_parse_error = True
        self.result.error_count += 1
        if not self.result.error:
            self.result.error = message

    def _schema_error(self, message: str, line: int, key: str) -> ConfigNode:
        node = create_error_node(message, line)
        node.key = key
        self._note_error(message)
        if self.result.err_line < 0:
            self.result.err_line = line
        return node

    def convert_dict(self, element: _Element) -> ConfigNode:
        out = ConfigNode(type=NodeType.OBJECT)
        children = iter(element.elements())
        for child in children:
            if child.name != "key":
                out.children.append(
                    self._schema_error(
                        "Value element without preceding <key>", child.line, "<unpaired>"
                    )
                )
                continue
            key = child.child_value()
            value_element = next(children, None)
            if value_element is None:
                out.children.append(
                    self._schema_error(f'Missing value for key "{key}"', child.line, key)
                )
                continue
            value = self.convert_value(value_element)
            value.key = key
            out.children.append(value)
        return out

    def convert_value(self, element: _Element) -> ConfigNode:
        tag = element.name
        if tag in ("string", "date", "data"):
            return ConfigNode(type=NodeType.STRING, scalar=element.child_value())
        if tag == "integer":
            return ConfigNode(type=NodeType.INTEGER, scalar=element.child_value())
        if tag == "real":
            return ConfigNode(type=NodeType.FLOAT, scalar=element.child_value())
        if tag in ("true", "false"):
            return ConfigNode(type=NodeType.BOOL, scalar=tag)
        if tag == "dict":
            return self.convert_dict(element)
        if tag == "array":
            return ConfigNode(
                type=NodeType.ARRAY,
                children=[self.convert_value(child) for child in element.elements()],
            )
        self._note_error(f"Unsupported plist element: {tag}")
        return ConfigNode(type=NodeType.STRING, scalar=f"{tag} (unsupported)")


def _error_result(message: str, shown: str | None = None, line: int = -1) -> ParseResult:
    return ParseResult(
        root=create_error_node(shown or message, line),
        ok=True,
        has_parse_error=True,
        error=message,
        err_line=line,
    )


def _is_binary(data: str | bytes) -> bool:
    if isinstance(data, str):
        return data.startswith("bplist00")
    return bytes(data[:8]) == b"bplist00"


class PlistParser(FormatParser):
    """Parser for XML property lists; binary property lists are reported, not read."""

    format_name = "Plist"
    library_credit = "Python expat"

    def parse(self, data: str | bytes) -> ParseResult:
        if _is_binary(data):
            return _error_result(BINARY_UNSUPPORTED, _BINARY_MESSAGE)

        try:
            top = _parse_document(data, keep_comments=False)
        except _XmlError as exc:
            return _error_result(exc.message, line=exc.line)

        plist = next(
            (item for item in top if isinstance(item, _Element) and item.name == "plist"), None
        )
        if plist is None:
            return _error_result(EMPTY_PLIST)
        values = plist.elements()
        if not values:
            return _error_result(EMPTY_PLIST)

        converter = _Converter()
        result = converter.result
        result.root = converter.convert_value(values[0])
        version = plist.attributes.get("version", "")
        result.root.comment = f'plist version="{version}"'
        return result