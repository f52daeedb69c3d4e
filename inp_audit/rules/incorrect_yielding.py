"""Handlers that yield, but defer the UI update instead of the non-UI work."""

from __future__ import annotations

from tree_sitter import Node

from inp_audit.classifiers import (
    find_event_handlers,
    get_function_body,
    has_yielding_mechanism,
    is_state_update_call,
    yielded_callback,
)
from inp_audit.rules.base import Finding, Metric, RuleBase, RuleDescriptor, Severity
from inp_audit.rules.factory import create_finding
from inp_audit.rules.filters import (
    chain_filters,
    skip_if_above_threshold,
    skip_if_below_threshold,
)
from inp_audit.syntax import SourceFile, node_key


class IncorrectYieldingRule(RuleBase):
    """Detects handlers whose yielded callback holds as many state updates as the sync path."""

    descriptor = RuleDescriptor(
        rule_id="inp-incorrect-yielding",
        description=(
            "Detects event handlers that incorrectly defer UI updates instead of non-UI "
            "work when using yielding mechanisms"
        ),
        metric=Metric.INP,
        default_severity=Severity.MEDIUM,
    )

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        findings: list[Finding] = []
        for handler in find_event_handlers(source_file):
            body = get_function_body(handler)
            if body is None or not has_yielding_mechanism(body, source_file, include_nested=True):
                continue

            immediate, deferred = split_state_updates(body, source_file)
            skip = chain_filters(
                lambda: skip_if_below_threshold(deferred, 1),
                lambda: skip_if_above_threshold(immediate, deferred),
            )
            if skip.should_skip:
                continue
            findings.append(
                create_finding(
                    source_file,
                    file_path,
                    handler,
                    rule_id=self.rule_id,
                    explanation=(
                        "Event handler uses yielding but defers UI updates instead of non-UI "
                        f"work ({deferred} deferred vs {immediate} immediate state updates). "
                        "UI updates should happen immediately, then non-critical work should "
                        "be deferred."
                    ),
                    fix=(
                        "Update UI synchronously first, then defer non-critical work: "
                        "updateUI(); requestAnimationFrame(() => { setTimeout(() => "
                        "{ /* non-UI work */ }, 0); });"
                    ),
                    severity=Severity.MEDIUM,
                )
            )
        return findings


def split_state_updates(body: Node, source_file: SourceFile) -> tuple[int, int]:
    """Return ``(immediate, deferred)`` state-update counts for a handler body.

    An update is deferred when it sits inside a function passed as the first
    argument of a yielding call.
    """
    immediate = 0
    deferred = 0
    deferred_roots: set[tuple[int, int, str]] = set()
    stack: list[tuple[Node, bool]] = [(body, False)]
    while stack:
        node, in_yield = stack.pop()
        in_yield = in_yield or node_key(node) in deferred_roots

        if is_state_update_call(source_file, node):
            if in_yield:
                deferred += 1
            else:
                immediate += 1

        callback = yielded_callback(source_file, node)
        if callback is not None:
            deferred_roots.add(node_key(callback))

        stack.extend((child, in_yield) for child in reversed(node.named_children))
    return (immediate, deferred)

