"""Event handlers doing blocking work without yielding to the main thread."""

from __future__ import annotations

from dataclasses import dataclass

from tree_sitter import Node

from inp_audit.classifiers import (
    find_event_handlers,
    get_function_body,
    has_yielding_mechanism,
    is_api_call,
    is_dom_manipulation,
    is_heavy_array_operation,
    is_inside_loop,
    is_state_update_name,
)
from inp_audit.rules.base import Finding, Metric, RuleBase, RuleDescriptor, Severity
from inp_audit.rules.factory import create_finding
from inp_audit.syntax import SourceFile
from inp_audit.traversal import visit_call_expressions, visit_property_access

FIX = (
    "Break up the work using setTimeout, requestAnimationFrame, or requestIdleCallback. "
    "For UI updates, update immediately, then defer non-critical work using "
    "requestAnimationFrame(() => { setTimeout(() => { /* non-UI work */ }, 0); })."
)


@dataclass(slots=True)
class HandlerWork:
    """Blocking work found in one handler body."""

    has_api_call: bool = False
    has_dom_manipulation: bool = False
    state_update_count: int = 0
    has_heavy_computation: bool = False


class CallbackYieldRule(RuleBase):
    """Detects event handlers that do blocking work and never yield to the main thread."""

    descriptor = RuleDescriptor(
        rule_id="inp-callback-yield",
        description=(
            "Detects event handlers that perform API calls, DOM manipulation, many state "
            "updates or heavy array work without yielding to the main thread"
        ),
        metric=Metric.INP,
        default_severity=Severity.HIGH,
    )

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        findings: list[Finding] = []
        for handler in find_event_handlers(source_file):
            body = get_function_body(handler)
            if body is None:
                continue
            if has_yielding_mechanism(body, source_file, include_nested=True):
                continue

            reasons = self._reasons(collect_handler_work(body, source_file))
            if not reasons:
                continue
            findings.append(
                create_finding(
                    source_file,
                    file_path,
                    handler,
                    rule_id=self.rule_id,
                    explanation=(
                        f"Event handler performs {', '.join(reasons)} without yielding to the "
                        "main thread. This can block rendering and cause poor INP "
                        "(Interaction to Next Paint)."
                    ),
                    fix=FIX,
                    severity=Severity.HIGH,
                )
            )
        return findings

    def _reasons(self, work: HandlerWork) -> list[str]:
        reasons: list[str] = []
        if work.has_api_call:
            reasons.append("API calls")
        if work.has_dom_manipulation:
            reasons.append("DOM manipulations")
        if work.state_update_count > self.thresholds.handler_state_updates:
            reasons.append(f"{work.state_update_count} state updates")
        if work.has_heavy_computation:
            reasons.append("heavy computations")
        return reasons


def collect_handler_work(body: Node, source_file: SourceFile) -> HandlerWork:
    """Scan a handler body for every kind of blocking work.

    Heavy array calls inside a loop are left to the loop rules.
    """
    work = HandlerWork()

    def on_property(name: str, _member: Node) -> None:
        if is_dom_manipulation(name):
            work.has_dom_manipulation = True

    def on_call(name: str, call: Node) -> None:
        if is_api_call(source_file, call):
            work.has_api_call = True
        if is_state_update_name(name):
            work.state_update_count += 1
        if is_heavy_array_operation(name) and not is_inside_loop(call, stop_at=body):
            work.has_heavy_computation = True

    visit_property_access(body, source_file, on_property)
    visit_call_expressions(body, source_file, on_call)
    return work
