"""Composable skip conditions shared by rules."""

from __future__ import annotations

import operator
from collections.abc import Callable, Collection
from dataclasses import dataclass

from tree_sitter import Node

from inp_audit.classifiers import (
    get_function_body,
    has_yielding_mechanism,
    is_yielded_callback,
)
from inp_audit.syntax import SourceFile, is_function_like, is_loop, node_key
from inp_audit.traversal import ancestors, contains


@dataclass(frozen=True, slots=True)
class FilterResult:
    """Whether a rule should skip a node, and why."""

    should_skip: bool
    reason: str | None = None


KEEP = FilterResult(should_skip=False)


def skip_if_has_yielding(body: Node, source_file: SourceFile) -> FilterResult:
    if has_yielding_mechanism(body, source_file, include_nested=True):
        return FilterResult(True, "Function already has yielding mechanism")
    return KEEP


def skip_if_event_handler(
    func: Node, handler_keys: Collection[tuple[int, int, str]]
) -> FilterResult:
    if node_key(func) in handler_keys:
        return FilterResult(True, "Function is an event handler")
    return KEEP


def skip_if_loop_exists(body: Node) -> FilterResult:
    if contains(body, is_loop):
        return FilterResult(True, "Function contains loops")
    return KEEP


def skip_if_below_threshold(
    value: int | None,
    threshold: int,
    comparator: Callable[[int, int], bool] = operator.lt,
) -> FilterResult:
    if value is not None and comparator(value, threshold):
        return FilterResult(True, f"Value below threshold: {value} < {threshold}")
    return KEEP


def skip_if_above_threshold(
    value: int,
    threshold: int,
    comparator: Callable[[int, int], bool] = operator.gt,
) -> FilterResult:
    if comparator(value, threshold):
        return FilterResult(True, f"Value above threshold: {value} > {threshold}")
    return KEEP


def chain_filters(*filters: Callable[[], FilterResult]) -> FilterResult:
    """Evaluate filters lazily in order; the first skip wins."""
    for check in filters:
        result = check()
        if result.should_skip:
            return result
    return KEEP


def skip_if_enclosing_function_yields(node: Node, source_file: SourceFile) -> FilterResult:
    """Skip nodes running inside a yielded callback or a function that itself yields.

    Each enclosing function is checked on its own statements only: a yield in
    an unrelated sibling callback does not count.
    """
    for parent in ancestors(node):
        if not is_function_like(parent):
            continue
        if is_yielded_callback(source_file, parent):
            return FilterResult(True, "Runs inside a yielded callback")
        body = get_function_body(parent)
        if body is not None and has_yielding_mechanism(body, source_file, include_nested=False):
            return FilterResult(True, "Enclosing function already yields")
    return KEEP
