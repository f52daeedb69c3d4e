"""Heavy loops inside event handlers."""

from __future__ import annotations

from inp_audit.classifiers import (
    estimate_loop_iterations,
    find_event_handlers,
    get_function_body,
    has_nested_loop,
)
from inp_audit.rules.base import Finding, Metric, RuleBase, RuleDescriptor, Severity
from inp_audit.rules.factory import create_finding
from inp_audit.syntax import SourceFile, is_loop, node_key
from inp_audit.traversal import collect_matching


class HeavyLoopRule(RuleBase):
    """Detects heavy loops inside event handlers that can cause INP issues."""

    descriptor = RuleDescriptor(
        rule_id="inp-heavy-loops",
        description="Detects heavy loops inside event handlers that can cause INP issues",
        metric=Metric.INP,
        default_severity=Severity.HIGH,
    )

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        findings: list[Finding] = []
        seen: set[tuple[int, int, str]] = set()
        limit = self.thresholds.heavy_loop_iterations

        for handler in find_event_handlers(source_file):
            body = get_function_body(handler)
            if body is None:
                continue
            for loop in collect_matching(body, is_loop):
                key = node_key(loop)
                if key in seen:
                    continue
                seen.add(key)

                iterations = estimate_loop_iterations(source_file, loop)
                nested = has_nested_loop(loop)
                if iterations <= limit and not nested:
                    continue

                details = ""
                if iterations > limit:
                    details += f"Loop iterates {iterations} times. "
                if nested:
                    details += "Nested loops detected. "
                findings.append(
                    create_finding(
                        source_file,
                        file_path,
                        loop,
                        rule_id=self.rule_id,
                        explanation=(
                            f"Heavy loop detected in event handler. {details}This can block the "
                            "main thread and cause poor INP (Interaction to Next Paint)."
                        ),
                        fix=(
                            "Move heavy computation outside the event handler. Use "
                            "requestIdleCallback, Web Workers, or debounce/throttle the handler."
                        ),
                        severity=Severity.HIGH,
                    )
                )
        findings.sort(key=lambda item: (item.line, item.column))
        return findings
