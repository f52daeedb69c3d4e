"""tree-sitter parsing primitives for TypeScript/JavaScript sources."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

TYPESCRIPT_LANGUAGE = Language(tree_sitter_typescript.language_typescript())
TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())

TYPESCRIPT_SUFFIXES = frozenset({".ts", ".mts", ".cts"})
TSX_SUFFIXES = frozenset({".tsx", ".js", ".jsx", ".mjs", ".cjs"})
SUPPORTED_SUFFIXES = TYPESCRIPT_SUFFIXES | TSX_SUFFIXES


class SourceParseError(ValueError):
    """Raised when a source file cannot be parsed into a clean syntax tree."""


@dataclass(frozen=True, slots=True)
class SourceFile:
    """A parsed source file: raw bytes, decoded text and the tree root."""

    path: str
    source: bytes
    text: str
    root: Node

    def node_text(self, node: Node) -> str:
        return node_text(self, node)

    def position_of(self, node: Node) -> tuple[int, int]:
        return position_of(self, node)


def is_supported_path(path: str) -> bool:
    """Return True when the file extension maps to a known grammar."""
    return PurePath(path).suffix.lower() in SUPPORTED_SUFFIXES


def language_for_path(path: str) -> Language:
    suffix = PurePath(path).suffix.lower()
    if suffix in TYPESCRIPT_SUFFIXES:
        return TYPESCRIPT_LANGUAGE
    if suffix in TSX_SUFFIXES:
        return TSX_LANGUAGE
    raise SourceParseError(f"Unsupported file type: {path}")


def parse_source(text: str, path: str = "input.tsx") -> SourceFile:
    """Parse source text with the grammar matching ``path``.

    Raises ``SourceParseError`` if the resulting tree contains error or
    missing nodes; rules only ever see well-formed trees.
    """
    parser = Parser(language_for_path(path))
    source = text.encode("utf-8")
    tree = parser.parse(source)
    root = tree.root_node
    if root.has_error:
        line, column = _first_error_point(root)
        raise SourceParseError(f"Syntax error in {path} near line {line}, column {column}")
    return SourceFile(path=path, source=source, text=text, root=root)


def node_text(source_file: SourceFile, node: Node) -> str:
    """Decoded source text covered by ``node``."""
    return source_file.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def position_of(source_file: SourceFile, node: Node) -> tuple[int, int]:
    """Return the 1-based (line, column) of a node's start, column in characters."""
    row, _ = node.start_point
    line_start = source_file.source.rfind(b"\n", 0, node.start_byte) + 1
    prefix = source_file.source[line_start : node.start_byte]
    return (row + 1, len(prefix.decode("utf-8", errors="replace")) + 1)


def node_key(node: Node) -> tuple[int, int, str]:
    """Stable identity for a node within one tree."""
    return (node.start_byte, node.end_byte, node.type)


def _first_error_point(root: Node) -> tuple[int, int]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            row, column = node.start_point
            return (row + 1, column + 1)
        stack.extend(reversed(node.children))
    row, column = root.start_point
    return (row + 1, column + 1)


LOOP_TYPES = frozenset(
    {"for_statement", "for_in_statement", "while_statement", "do_statement"}
)
FUNCTION_TYPES = frozenset(
    {
        "arrow_function",
        "function",
        "function_expression",
        "function_declaration",
        "generator_function",
        "generator_function_declaration",
        "method_definition",
    }
)
JSX_ELEMENT_TYPES = frozenset({"jsx_element", "jsx_self_closing_element"})


def is_loop(node: Node) -> bool:
    """True for counted for, for-of/for-in, while and do-while statements.

    tree-sitter folds for-of and for-in into ``for_in_statement``.
    """
    return node.type in LOOP_TYPES


def is_function_like(node: Node) -> bool:
    return node.type in FUNCTION_TYPES


def call_name(source_file: SourceFile, node: Node) -> str | None:
    """Invoked name of a call: ``foo()`` -> ``foo``, ``a.b.c()`` -> ``c``.

    Returns None for non-calls and computed member calls (``a[b]()``).
    """
    if node.type != "call_expression":
        return None
    function = node.child_by_field_name("function")
    if function is None:
        return None
    if function.type == "identifier":
        return node_text(source_file, function)
    if function.type == "member_expression":
        prop = function.child_by_field_name("property")
        if prop is not None and prop.type in {"property_identifier", "private_property_identifier"}:
            return node_text(source_file, prop)
    return None


def callee_path(source_file: SourceFile, node: Node) -> str | None:
    """Dotted callee path of a call (``scheduler.yield``), None when not a plain chain."""
    if node.type != "call_expression":
        return None
    function = node.child_by_field_name("function")
    if function is None:
        return None
    return _dotted_path(source_file, function)


def _dotted_path(source_file: SourceFile, node: Node) -> str | None:
    if node.type in {"identifier", "this", "property_identifier"}:
        return node_text(source_file, node)
    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if obj is None or prop is None:
            return None
        head = _dotted_path(source_file, obj)
        if head is None:
            return None
        return f"{head}.{node_text(source_file, prop)}"
    if node.type == "non_null_expression" and node.named_child_count:
        return _dotted_path(source_file, node.named_children[0])
    return None
