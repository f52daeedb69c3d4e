"""Depth-first, pre-order tree walks over tree-sitter nodes."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TypeVar

from tree_sitter import Node

from inp_audit.syntax import SourceFile, call_name, is_function_like, is_loop, node_key, node_text

T = TypeVar("T")

Predicate = Callable[[Node], bool]


def walk(root: Node, *, prune: Predicate | None = None) -> Iterator[Node]:
    """Yield ``root`` and its named descendants in pre-order.

    Children of a node for which ``prune`` returns True are not visited;
    the root is always expanded.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if node is not root and prune is not None and prune(node):
            continue
        stack.extend(reversed(node.named_children))


def visit(root: Node, callback: Callable[[Node], None], *, prune: Predicate | None = None) -> None:
    """Exhaustive visit: call ``callback`` on every node of the subtree."""
    for node in walk(root, prune=prune):
        callback(node)


def early_exit_visit(
    root: Node,
    callback: Callable[[Node], T | None],
    *,
    prune: Predicate | None = None,
) -> T | None:
    """Return the first non-None callback result, stopping the walk there.

    The root itself is offered to the callback before its children.
    """
    for node in walk(root, prune=prune):
        result = callback(node)
        if result is not None:
            return result
    return None


def find_first(root: Node, predicate: Predicate, *, prune: Predicate | None = None) -> Node | None:
    return early_exit_visit(root, lambda node: node if predicate(node) else None, prune=prune)


def contains(root: Node, predicate: Predicate, *, prune: Predicate | None = None) -> bool:
    return find_first(root, predicate, prune=prune) is not None


def collect_matching(
    root: Node, predicate: Predicate, *, prune: Predicate | None = None
) -> list[Node]:
    return [node for node in walk(root, prune=prune) if predicate(node)]


def visit_call_expressions(
    root: Node,
    source_file: SourceFile,
    visitor: Callable[[str, Node], None],
) -> None:
    """Call ``visitor(name, call)`` for every call with a resolvable name."""

    def on_node(node: Node) -> None:
        name = call_name(source_file, node)
        if name:
            visitor(name, node)

    visit(root, on_node)


def visit_property_access(
    root: Node,
    source_file: SourceFile,
    visitor: Callable[[str, Node], None],
) -> None:
    """Call ``visitor(property_name, member)`` for every ``a.b`` access."""

    def on_node(node: Node) -> None:
        if node.type != "member_expression":
            return
        prop = node.child_by_field_name("property")
        if prop is not None:
            visitor(node_text(source_file, prop), node)

    visit(root, on_node)


def visit_loops(root: Node, visitor: Callable[[Node], None]) -> None:
    for node in collect_matching(root, is_loop):
        visitor(node)


def visit_function_nodes(root: Node, visitor: Callable[[Node], None]) -> None:
    for node in collect_matching(root, is_function_like):
        visitor(node)


def ancestors(node: Node, *, stop_at: Node | None = None) -> Iterator[Node]:
    """Yield parents of ``node`` up to (and excluding) ``stop_at`` or the root."""
    parent = node.parent
    while parent is not None:
        if stop_at is not None and node_key(parent) == node_key(stop_at):
            return
        yield parent
        parent = parent.parent
