# configtree

`configtree` reads configuration and data files in many formats and turns
them into one uniform tree of `ConfigNode` objects, suited for display in a
tree view, for search, or for inspection. Where a format carries comments,
they are attached to the nodes they describe, and most nodes remember the
line they came from.

Supported formats, their parser classes and the extensions they are
registered under:

| Format       | Parser                              | Extensions            |
|--------------|-------------------------------------|-----------------------|
| JSON / JSONC | `configtree.jsonc.JsoncParser`      | `json`, `jsonc`       |
| JSON Lines   | `configtree.jsonl.JsonlParser`      | `jsonl`, `ndjson`     |
| CBOR         | `configtree.cbor.CborParser`        | `cbor`                |
| Env          | `configtree.env.EnvParser`          | `env`                 |
| INI          | `configtree.ini.IniParser`          | `ini`, `cfg`, `conf`  |
| TOML         | `configtree.toml.TomlParser`        | `toml`, `tml`         |
| YAML         | `configtree.yaml.YamlParser`        | `yaml`, `yml`         |
| XML          | `configtree.xml.XmlParser`          | `xml`, `svg`, `xhtml` |
| Plist (XML)  | `configtree.plist.PlistParser`      | `plist`               |

## Installation

```
pip install configtree
```

## Usage

Pick a parser by file extension from the registry and parse the file's
contents (text or bytes):

```python
from pathlib import Path

from configtree.registry import default_registry

path = Path("settings.toml")
parser = default_registry().parser_for(path.suffix.lstrip("."))
result = parser.parse(path.read_bytes())

if result.has_parse_error:
    print("error:", result.error, "at line", result.err_line)

def show(node, depth=0):
    label = node.key or "(root)"
    value = f" = {node.scalar}" if node.is_leaf() else ""
    note = f"  # {node.comment}" if node.comment else ""
    print("  " * depth + f"{label} [{node.type.name}]{value}{note}")
    for child in node.children:
        show(child, depth + 1)

show(result.root)
```

`parser_for` looks extensions up case-insensitively and returns `None` for an
unknown one; `supported_extensions()` lists everything registered, in
registration order. Each parser can also be used directly, for example
`JsoncParser().parse(text)`. Every parser has `format_name` and
`library_credit` attributes.

### Parse results

Malformed input does not raise. The returned `ParseResult` then has
`has_parse_error` set, `error` holding the message, `err_line` the line where
known, and `root` holding a `PARSE ERROR` node with `Message`, `Line/Byte`
(when known) and `Hint` children; `configtree.helpers.create_error_node`
builds that tree. JSON Lines and plist keep the good parts of a partly broken
document and count the failures in `error_count`. `warning` carries notes such
as the 10,000-record limit for JSON Lines.

### Nodes

A `ConfigNode` (in `configtree.node`) has a `key`, a `type` (`NodeType.OBJECT`,
`ARRAY`, `STRING`, `INTEGER`, `FLOAT`, `BOOL`, `NULL`), a textual `scalar`, a
`comment`, a `source_line` (or -1) and a list of `children`; `is_leaf()` and
`is_container()` tell whether it has children.

### Format notes

- JSONC accepts `//`, `/* */` and `#` comments and attaches them to keys.
- YAML scalars that are not quoted are typed by their text
  (`configtree.yaml.deduce_scalar_type`); a stream of several documents
  becomes an array.
- TOML tables keep document order and pick up comments by line.
- XML attributes appear as `@name` children and mixed text as `#text`.
- CBOR byte strings are shown as `0x…` hex.

### Comment helpers

`configtree.helpers.extract_comments(text)` returns a `CommentMap` of inline
and leading `#`, `//` and `/* */` comments by line, and
`apply_comments(node, comment_map)` attaches them to a tree by
`source_line`.

### Extending

Register a factory (any callable returning an object with a `parse(data)`
method that returns a `ParseResult`, such as a `FormatParser` subclass):

```python
from configtree.registry import default_registry

default_registry().register_parser("myext", MyParser)
```

## What it does not do

`configtree` is a library only: it has no command-line program and no viewer
or other user interface for the trees it builds. Binary property lists
(`bplist00`) are reported as unsupported rather than read.