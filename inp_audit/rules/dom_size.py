"""Deeply nested JSX markup."""

from __future__ import annotations

from tree_sitter import Node

from inp_audit.rules.base import Finding, Metric, RuleBase, RuleDescriptor, Severity
from inp_audit.rules.factory import create_finding
from inp_audit.syntax import JSX_ELEMENT_TYPES, SourceFile
from inp_audit.traversal import walk


class DomSizeRule(RuleBase):
    """Detects JSX trees nested deeper than the configured maximum depth.

    Each JSX tree is reported once, at its outermost element.
    """

    descriptor = RuleDescriptor(
        rule_id="inp-dom-size",
        description="Detects excessive DOM nesting depth that slows style and layout work",
        metric=Metric.INP,
        default_severity=Severity.MEDIUM,
    )

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        limit = self.thresholds.max_dom_depth
        findings: list[Finding] = []
        for node in walk(source_file.root):
            if not is_jsx_tree_root(node):
                continue
            depth = jsx_depth(node)
            if depth <= limit:
                continue
            findings.append(
                create_finding(
                    source_file,
                    file_path,
                    node,
                    rule_id=self.rule_id,
                    explanation=(
                        f"DOM nesting depth of {depth} exceeds the maximum of {limit}. Deep DOM "
                        "trees make style recalculation and layout more expensive on every "
                        "interaction, causing poor INP (Interaction to Next Paint)."
                    ),
                    fix=(
                        "Flatten the markup by removing wrapper elements, use CSS grid or flexbox "
                        "instead of nested containers, and virtualize long lists."
                    ),
                    severity=Severity.MEDIUM,
                )
            )
        return findings


def is_jsx_tree_root(node: Node) -> bool:
    if node.type not in JSX_ELEMENT_TYPES:
        return False
    return node.parent is None or node.parent.type != "jsx_element"


def jsx_depth(element: Node) -> int:
    """Levels of directly nested JSX elements below ``element`` (0 for a leaf)."""
    depths: dict[tuple[int, int], int] = {}
    stack: list[tuple[Node, bool]] = [(element, False)]
    while stack:
        node, expanded = stack.pop()
        children = _element_children(node)
        if not expanded:
            stack.append((node, True))
            stack.extend((child, False) for child in children)
            continue
        key = (node.start_byte, node.end_byte)
        depths[key] = 1 + max(
            (depths[(child.start_byte, child.end_byte)] for child in children), default=-1
        )
    return depths[(element.start_byte, element.end_byte)]


def _element_children(node: Node) -> list[Node]:
    if node.type != "jsx_element":
        return []
    return [child for child in node.named_children if child.type in JSX_ELEMENT_TYPES]
