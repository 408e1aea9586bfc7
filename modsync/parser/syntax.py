"""tree-sitter helpers for TypeScript/TSX route artifacts.

Wraps the TSX grammar from ``tree-sitter-typescript`` and exposes the handful
of node queries the link injector and the route tree reconstructor need:
locating ``createAppRoutes(...)`` calls, reading object-literal properties and
turning literal nodes into Python values.

All byte offsets refer to the UTF-8 encoded source held by ``SourceTree``.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())
TS_LANGUAGE = Language(tree_sitter_typescript.language_typescript())

ROUTES_CONSTRUCTOR = "createAppRoutes"


class SourceTree:
    """A parsed source file: original text, UTF-8 bytes and syntax tree."""

    def __init__(self, text: str, *, tsx: bool = True, path: Path | None = None) -> None:
        self.text = text
        self.path = path
        self.data = text.encode("utf-8")
        parser = Parser(TSX_LANGUAGE if tsx else TS_LANGUAGE)
        self.tree: Tree = parser.parse(self.data)

    @classmethod
    def from_file(cls, path: Path) -> SourceTree:
        return cls(path.read_text(encoding="utf-8"), tsx=path.suffix == ".tsx", path=path)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def is_clean(self) -> bool:
        """``True`` when the parser recovered no syntax errors."""
        return not self.root.has_error

    def line_indent(self, node: Node) -> str:
        """Leading whitespace of the line *node* starts on."""
        line_start = self.data.rfind(b"\n", 0, node.start_byte) + 1
        prefix = self.data[line_start : node.start_byte]
        stripped = prefix.lstrip(b" \t")
        return prefix[: len(prefix) - len(stripped)].decode("utf-8")

    def starts_line(self, node: Node) -> bool:
        """``True`` when only whitespace precedes *node* on its line."""
        line_start = self.data.rfind(b"\n", 0, node.start_byte) + 1
        return not self.data[line_start : node.start_byte].strip()

    def splice(self, edits: list[tuple[int, str]]) -> str:
        """Apply ``(byte_offset, text)`` insertions and return the new source.

        Insertions sharing an offset keep their list order in the output.
        """
        data = self.data
        ordered = sorted(enumerate(edits), key=lambda item: (item[1][0], item[0]), reverse=True)
        for _, (offset, insertion) in ordered:
            data = data[:offset] + insertion.encode("utf-8") + data[offset:]
        return data.decode("utf-8")

    def cut(self, spans: list[tuple[int, int]]) -> str:
        """Remove the non-overlapping ``(start, end)`` byte ranges."""
        data = self.data
        for start, end in sorted(spans, reverse=True):
            data = data[:start] + data[end:]
        return data.decode("utf-8")


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


def walk(node: Node) -> Iterator[Node]:
    """Depth-first, pre-order iteration over *node* and its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8")


def location(node: Node) -> tuple[int, int]:
    """One-based ``(line, column)`` of *node*."""
    row, column = node.start_point
    return row + 1, column + 1


def find_calls(root: Node, name: str) -> list[Node]:
    """Every ``call_expression`` whose callee is the bare identifier *name*."""
    calls = []
    for node in walk(root):
        if node.type != "call_expression":
            continue
        callee = node.child_by_field_name("function")
        if callee is not None and callee.type == "identifier" and node_text(callee) == name:
            calls.append(node)
    return calls


def call_arguments(call: Node) -> list[Node]:
    arguments = call.child_by_field_name("arguments")
    if arguments is None:
        return []
    return [child for child in arguments.named_children if child.type != "comment"]


def array_elements(array: Node) -> list[Node]:
    """Named, non-comment elements of an ``array`` node."""
    return [child for child in array.named_children if child.type != "comment"]


def has_trailing_comma(element: Node) -> bool:
    sibling = element.next_sibling
    while sibling is not None and sibling.type == "comment":
        sibling = sibling.next_sibling
    return sibling is not None and sibling.type == ","


# ---------------------------------------------------------------------------
# Object literals
# ---------------------------------------------------------------------------


def property_name(key: Node) -> str | None:
    if key.type in ("property_identifier", "identifier", "private_property_identifier"):
        return node_text(key)
    if key.type == "string":
        return string_value(key)
    if key.type == "number":
        return node_text(key)
    return None


def object_properties(obj: Node) -> dict[str, Node]:
    """Map of property name to value node for the ``pair`` entries of *obj*.

    Spreads, methods and computed keys are ignored.
    """
    result: dict[str, Node] = {}
    for child in obj.named_children:
        if child.type != "pair":
            continue
        key = child.child_by_field_name("key")
        value = child.child_by_field_name("value")
        if key is None or value is None:
            continue
        name = property_name(key)
        if name is not None and name not in result:
            result[name] = value
    return result


# ---------------------------------------------------------------------------
# Literal values
# ---------------------------------------------------------------------------


def string_value(node: Node) -> str | None:
    """Python value of a string-like literal.

    Template strings with substitutions are returned verbatim (backticks
    included) because they cannot be evaluated statically.
    """
    if node.type == "string":
        return node_text(node)[1:-1]
    if node.type == "template_string":
        text = node_text(node)
        if any(child.type == "template_substitution" for child in node.named_children):
            return text
        return text[1:-1]
    return None


def boolean_value(node: Node) -> bool | None:
    if node.type == "true":
        return True
    if node.type == "false":
        return False
    return None


def string_list(node: Node) -> list[str] | None:
    """Values of an array literal; non-string entries keep their source text."""
    if node.type != "array":
        return None
    values = []
    for element in array_elements(node):
        value = string_value(element)
        values.append(value if value is not None else node_text(element))
    return values


def spread_argument(node: Node) -> str | None:
    """Source text of the expression spread by a ``spread_element``."""
    if node.type != "spread_element":
        return None
    inner = [child for child in node.named_children if child.type != "comment"]
    return node_text(inner[0]) if inner else None
