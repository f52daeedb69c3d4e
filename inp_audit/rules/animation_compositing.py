"""Animations driven through layout- or paint-triggering CSS properties."""

from __future__ import annotations

import re

from tree_sitter import Node

from inp_audit.classifiers import (
    find_event_handlers,
    find_functions,
    function_name,
    get_function_body,
)
from inp_audit.patterns import ANIMATION_CONTEXT_KEYWORDS, NON_COMPOSITED_PROPERTIES
from inp_audit.rules.base import Finding, Metric, RuleBase, RuleDescriptor, Severity
from inp_audit.rules.factory import create_finding
from inp_audit.syntax import SourceFile, call_name, is_function_like, node_key, node_text
from inp_audit.traversal import walk

CSS_DECLARATION_RE = re.compile(r"(?<![\w-])([a-zA-Z][a-zA-Z-]*)\s*:\s*(?=[^\s;:])")
CAMEL_HUMP_RE = re.compile(r"[A-Z]")

FIX = (
    "Animate composited properties instead: use transform (translate, scale) in place of "
    "width/height/top/left changes, and opacity in place of visibility or color changes. "
    "Add will-change: transform for elements that animate often."
)


class AnimationCompositingRule(RuleBase):
    """Detects animation code that changes non-composited CSS properties."""

    descriptor = RuleDescriptor(
        rule_id="inp-animation-compositing",
        description=(
            "Detects animations using non-composited CSS properties that trigger layout "
            "or paint work"
        ),
        metric=Metric.INP,
        default_severity=Severity.HIGH,
    )

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        findings: list[Finding] = []
        for context in animation_contexts(source_file):
            body = get_function_body(context)
            if body is None:
                continue
            properties = sorted(
                name
                for name in collect_style_properties(body, source_file)
                if name in NON_COMPOSITED_PROPERTIES
            )
            if not properties:
                continue
            findings.append(
                create_finding(
                    source_file,
                    file_path,
                    context,
                    rule_id=self.rule_id,
                    explanation=(
                        f"Non-composited CSS properties ({', '.join(properties)}) detected in "
                        "animations. Changing them forces layout or paint on every frame, "
                        "which causes layout thrashing and poor INP (Interaction to Next Paint)."
                    ),
                    fix=FIX,
                    severity=Severity.HIGH,
                )
            )
        return findings


def animation_contexts(source_file: SourceFile) -> list[Node]:
    """Outermost functions that look like animation code or are event handlers."""
    candidates: dict[tuple[int, int, str], Node] = {}
    for handler in find_event_handlers(source_file):
        if is_function_like(handler):
            candidates.setdefault(node_key(handler), handler)
    for node in find_functions(source_file):
        name = function_name(source_file, node)
        if name and is_animation_name(name):
            candidates.setdefault(node_key(node), node)

    outermost: list[Node] = []
    for node in sorted(candidates.values(), key=lambda item: (item.start_byte, -item.end_byte)):
        if outermost and node.end_byte <= outermost[-1].end_byte:
            continue
        outermost.append(node)
    return outermost


def is_animation_name(name: str) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in ANIMATION_CONTEXT_KEYWORDS)


def collect_style_properties(body: Node, source_file: SourceFile) -> set[str]:
    """CSS property names set under ``body``, normalised to kebab-case.

    Only property positions are considered: object-literal keys,
    ``el.style.<prop> = ...`` targets, ``style.setProperty('<prop>', ...)``
    arguments and ``prop: value`` declarations inside string literals. A
    declaration needs a value after the colon; template substitutions count
    as an opaque value and are never read as CSS. Identifiers and comments
    are never inspected.
    """
    found: set[str] = set()
    for node in walk(body):
        if node.type == "pair":
            key = node.child_by_field_name("key")
            if key is not None and key.type in {"property_identifier", "string"}:
                found.add(to_kebab_case(_strip_quotes(node_text(source_file, key))))
        elif node.type == "assignment_expression":
            name = _style_assignment_target(source_file, node.child_by_field_name("left"))
            if name is not None:
                found.add(to_kebab_case(name))
        elif node.type == "call_expression" and call_name(source_file, node) == "setProperty":
            name = _first_string_argument(source_file, node)
            if name is not None:
                found.add(name.lower())
        elif node.type in {"string", "template_string"} and not _is_object_key(node):
            literal = _literal_text(source_file, node)
            found.update(
                match.group(1).lower() for match in CSS_DECLARATION_RE.finditer(literal)
            )
    return found


def to_kebab_case(name: str) -> str:
    """``backgroundColor`` -> ``background-color``; kebab-case input is unchanged."""
    return CAMEL_HUMP_RE.sub(lambda match: "-" + match.group(0).lower(), name)


def _style_assignment_target(source_file: SourceFile, left: Node | None) -> str | None:
    if left is None or left.type != "member_expression":
        return None
    obj = left.child_by_field_name("object")
    prop = left.child_by_field_name("property")
    if obj is None or prop is None or obj.type != "member_expression":
        return None
    style = obj.child_by_field_name("property")
    if style is None or node_text(source_file, style) != "style":
        return None
    return node_text(source_file, prop)


def _first_string_argument(source_file: SourceFile, call: Node) -> str | None:
    arguments = call.child_by_field_name("arguments")
    if arguments is None or not arguments.named_child_count:
        return None
    first = arguments.named_children[0]
    if first.type != "string":
        return None
    return _strip_quotes(node_text(source_file, first))


def _is_object_key(node: Node) -> bool:
    parent = node.parent
    if parent is None or parent.type != "pair":
        return False
    key = parent.child_by_field_name("key")
    return key is not None and node_key(key) == node_key(node)


def _strip_quotes(text: str) -> str:
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _literal_text(source_file: SourceFile, node: Node) -> str:
    """Literal contents with each ``${...}`` replaced by a placeholder value."""
    if node.type != "template_string":
        return _strip_quotes(node_text(source_file, node))
    parts: list[str] = []
    cursor = node.start_byte + 1
    for child in node.named_children:
        if child.type != "template_substitution":
            continue
        parts.append(source_file.source[cursor : child.start_byte].decode("utf-8", "replace"))
        parts.append("0")
        cursor = child.end_byte
    parts.append(source_file.source[cursor : node.end_byte - 1].decode("utf-8", "replace"))
    return "".join(parts)
