"""Stateless predicates and extractors over syntax nodes.

Everything here is heuristic and name based: a "state update" is any call
whose name starts with ``set``, an "API call" any call whose name or dotted
callee contains one of the API patterns. Extractors return ``None`` (or
``0``/``False``) when a node does not have the expected shape.
"""

from __future__ import annotations

from tree_sitter import Node

from inp_audit.patterns import (
    API_CALL_PATTERNS,
    DOM_MANIPULATION_PATTERNS,
    EVENT_HANDLER_PREFIXES,
    HEAVY_ARRAY_OPERATIONS,
    NON_STATE_SETTERS,
    STATE_UPDATE_NAMES,
    STATE_UPDATE_PREFIX,
    YIELDING_MECHANISMS,
)
from inp_audit.syntax import (
    SourceFile,
    call_name,
    callee_path,
    is_function_like,
    is_loop,
    node_key,
    node_text,
)
from inp_audit.traversal import (
    ancestors,
    contains,
    early_exit_visit,
    visit_call_expressions,
    visit_function_nodes,
    walk,
)


def matches_pattern(name: str, patterns: tuple[str, ...] | frozenset[str]) -> bool:
    """True when ``name`` contains any of ``patterns``."""
    return any(pattern in name for pattern in patterns)


def call_matches(
    source_file: SourceFile, node: Node, patterns: tuple[str, ...] | frozenset[str]
) -> bool:
    """Match a call's final name or its dotted callee path against ``patterns``."""
    name = call_name(source_file, node)
    if name is None:
        return False
    if matches_pattern(name, patterns):
        return True
    path = callee_path(source_file, node)
    return path is not None and matches_pattern(path, patterns)


def is_yielding_call(source_file: SourceFile, node: Node) -> bool:
    if call_matches(source_file, node, YIELDING_MECHANISMS):
        return True
    return call_name(source_file, node) == "yield"


def yielded_callback(source_file: SourceFile, node: Node) -> Node | None:
    """Function passed as the first argument of a yielding call, if any."""
    if not is_yielding_call(source_file, node):
        return None
    arguments = node.child_by_field_name("arguments")
    if arguments is None or not arguments.named_child_count:
        return None
    first = _unwrap_parens(arguments.named_children[0])
    return first if is_function_like(first) else None


def is_yielded_callback(source_file: SourceFile, func: Node) -> bool:
    """Whether ``func`` is the callback handed to a yielding call."""
    arguments = func.parent
    while arguments is not None and arguments.type == "parenthesized_expression":
        arguments = arguments.parent
    if arguments is None or arguments.type != "arguments" or arguments.parent is None:
        return False
    callback = yielded_callback(source_file, arguments.parent)
    return callback is not None and node_key(callback) == node_key(func)


def has_yielding_mechanism(
    body: Node, source_file: SourceFile, include_nested: bool = True
) -> bool:
    """Whether any call under ``body`` yields to the main thread.

    With ``include_nested=False`` nested function bodies (callbacks handed to
    other calls) are not scanned.
    """
    prune = None if include_nested else is_function_like
    found = early_exit_visit(
        body,
        lambda node: True if is_yielding_call(source_file, node) else None,
        prune=prune,
    )
    return bool(found)


def is_api_call(source_file: SourceFile, node: Node) -> bool:
    return call_matches(source_file, node, API_CALL_PATTERNS)


def is_dom_manipulation(property_name: str) -> bool:
    return matches_pattern(property_name, DOM_MANIPULATION_PATTERNS)


def is_state_update_name(name: str) -> bool:
    if name in NON_STATE_SETTERS:
        return False
    return name.startswith(STATE_UPDATE_PREFIX) or name in STATE_UPDATE_NAMES


def is_state_update_call(source_file: SourceFile, node: Node) -> bool:
    name = call_name(source_file, node)
    return name is not None and is_state_update_name(name)


def is_heavy_array_operation(name: str) -> bool:
    return name in HEAVY_ARRAY_OPERATIONS


def count_state_updates(body: Node, source_file: SourceFile) -> int:
    updates: list[str] = []

    def on_call(name: str, _call: Node) -> None:
        if is_state_update_name(name):
            updates.append(name)

    visit_call_expressions(body, source_file, on_call)
    return len(updates)


def count_operations(body: Node, source_file: SourceFile, array_weight: int = 1) -> int:
    """Weighted count of non-yielding calls under ``body``.

    Plain calls weigh 1; heavy array iteration calls weigh ``array_weight``.
    """
    weights: list[int] = []

    def on_call(name: str, call: Node) -> None:
        if not is_yielding_call(source_file, call):
            weights.append(array_weight if is_heavy_array_operation(name) else 1)

    visit_call_expressions(body, source_file, on_call)
    return sum(weights)


def get_function_body(node: Node | None) -> Node | None:
    """Body of a function-like node; an arrow's expression body is returned as is."""
    if node is None or not is_function_like(node):
        return None
    return node.child_by_field_name("body")


def function_name(source_file: SourceFile, node: Node) -> str | None:
    """Declared or bound name of a function (``const x = () => {}`` -> ``x``)."""
    name_node = node.child_by_field_name("name")
    if name_node is not None:
        return node_text(source_file, name_node)
    parent = node.parent
    if parent is None:
        return None
    if parent.type == "variable_declarator":
        bound = parent.child_by_field_name("name")
        if bound is not None and bound.type == "identifier":
            return node_text(source_file, bound)
    field = {"pair": "key", "assignment_expression": "left"}.get(parent.type)
    if field is not None:
        target = parent.child_by_field_name(field)
        if target is not None:
            return node_text(source_file, target)
    return None


def find_functions(source_file: SourceFile) -> list[Node]:
    functions: list[Node] = []
    visit_function_nodes(source_file.root, functions.append)
    return functions


def is_event_handler_name(name: str) -> bool:
    return any(name.startswith(prefix) for prefix in EVENT_HANDLER_PREFIXES)


def find_function_definition(source_file: SourceFile, name: str) -> Node | None:
    """First same-file function bound to ``name``, by declarator or declaration."""
    for node in walk(source_file.root):
        if node.type == "function_declaration":
            declared = node.child_by_field_name("name")
            if declared is not None and node_text(source_file, declared) == name:
                return node
        elif node.type == "variable_declarator":
            bound = node.child_by_field_name("name")
            value = node.child_by_field_name("value")
            if bound is None or value is None or node_text(source_file, bound) != name:
                continue
            resolved = _unwrap_callback_hook(source_file, _unwrap_parens(value))
            if is_function_like(resolved):
                return resolved
    return None


def find_event_handlers(source_file: SourceFile) -> list[Node]:
    """Handler value expressions attached under a recognised handler name.

    Covers JSX attributes (``onClick={...}``) and object-literal members
    (``{ onClick: ... }``, ``{ onClick() {} }``, ``{ onClick }``). Identifier
    values are resolved to their same-file function definition. Results are
    unique and in document order.
    """
    handlers: dict[tuple[int, int, str], Node] = {}
    for node in walk(source_file.root):
        value = _handler_value(source_file, node)
        if value is None:
            continue
        resolved = _resolve_handler(source_file, value)
        handlers.setdefault(node_key(resolved), resolved)
    return sorted(handlers.values(), key=lambda item: (item.start_byte, -item.end_byte))


def is_inside_loop(node: Node, stop_at: Node | None = None) -> bool:
    return any(is_loop(parent) for parent in ancestors(node, stop_at=stop_at))


def has_nested_loop(loop: Node) -> bool:
    """Whether a loop statement contains another loop anywhere in its body."""
    body = loop.child_by_field_name("body")
    if body is None:
        return False
    return contains(body, is_loop)


def estimate_loop_iterations(source_file: SourceFile, loop: Node) -> int:
    """Upper bound of a counted ``for`` loop, or 0 when not statically known.

    Only ``i < N`` (N iterations) and ``i <= N`` (N + 1) with a numeric
    literal N are understood.
    """
    if loop.type != "for_statement":
        return 0
    condition = loop.child_by_field_name("condition")
    if condition is None:
        return 0
    if condition.type == "expression_statement" and condition.named_child_count:
        condition = condition.named_children[0]
    condition = _unwrap_parens(condition)
    if condition.type != "binary_expression":
        return 0

    left = condition.child_by_field_name("left")
    right = condition.child_by_field_name("right")
    operator = condition.child_by_field_name("operator")
    if left is None or right is None or operator is None:
        return 0
    if left.type != "identifier" or right.type != "number":
        return 0

    bound = _parse_integer(node_text(source_file, right))
    if operator.type == "<":
        return bound
    if operator.type == "<=":
        return bound + 1
    return 0


def _handler_value(source_file: SourceFile, node: Node) -> Node | None:
    if node.type == "jsx_attribute":
        children = node.named_children
        if len(children) < 2 or not is_event_handler_name(node_text(source_file, children[0])):
            return None
        value = children[-1]
        if value.type == "jsx_expression":
            inner = [child for child in value.named_children if child.type != "comment"]
            return inner[0] if inner else None
        return value

    if node.type == "pair":
        key = node.child_by_field_name("key")
        if key is None or not is_event_handler_name(_property_key_name(source_file, key)):
            return None
        return node.child_by_field_name("value")

    if node.type == "method_definition":
        name = node.child_by_field_name("name")
        if name is not None and is_event_handler_name(node_text(source_file, name)):
            return node
        return None

    if node.type == "shorthand_property_identifier":
        if is_event_handler_name(node_text(source_file, node)):
            return node
    return None


def _resolve_handler(source_file: SourceFile, value: Node) -> Node:
    value = _unwrap_callback_hook(source_file, _unwrap_parens(value))
    if value.type in {"identifier", "shorthand_property_identifier"}:
        definition = find_function_definition(source_file, node_text(source_file, value))
        if definition is not None:
            return definition
    return value


def _unwrap_callback_hook(source_file: SourceFile, node: Node) -> Node:
    if call_name(source_file, node) != "useCallback":
        return node
    arguments = node.child_by_field_name("arguments")
    if arguments is None or not arguments.named_child_count:
        return node
    first = _unwrap_parens(arguments.named_children[0])
    return first if is_function_like(first) else node


def _unwrap_parens(node: Node) -> Node:
    while node.type == "parenthesized_expression" and node.named_child_count:
        node = node.named_children[0]
    return node


def _property_key_name(source_file: SourceFile, key: Node) -> str:
    text = node_text(source_file, key)
    if key.type == "string":
        return text[1:-1]
    return text


def _parse_integer(text: str) -> int:
    cleaned = text.replace("_", "")
    try:
        return int(cleaned, 0)
    except ValueError:
        pass
    try:
        value = float(cleaned)
    except ValueError:
        return 0
    return int(value) if value.is_integer() else 0
