"""Non-handler functions with long runs of synchronous work."""

from __future__ import annotations

from inp_audit.classifiers import (
    count_operations,
    find_event_handlers,
    find_functions,
    get_function_body,
)
from inp_audit.rules.base import Finding, Metric, RuleBase, RuleDescriptor, Severity
from inp_audit.rules.factory import create_finding
from inp_audit.rules.filters import (
    chain_filters,
    skip_if_below_threshold,
    skip_if_event_handler,
    skip_if_has_yielding,
    skip_if_loop_exists,
)
from inp_audit.syntax import SourceFile, node_key


class HeavyComputationRule(RuleBase):
    """Detects functions with many sequential operations that may form a long task.

    Event handlers, functions containing loops and functions that already
    yield are left to the other rules.
    """

    descriptor = RuleDescriptor(
        rule_id="inp-heavy-computation",
        description="Detects heavy synchronous computations that can create long tasks",
        metric=Metric.INP,
        default_severity=Severity.MEDIUM,
    )

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        handler_keys = {node_key(handler) for handler in find_event_handlers(source_file)}
        findings: list[Finding] = []
        for func in find_functions(source_file):
            body = get_function_body(func)
            # Expression-bodied arrows are treated as trivially short.
            if body is None or body.type != "statement_block":
                continue

            operations = count_operations(body, source_file)
            skip = chain_filters(
                lambda: skip_if_event_handler(func, handler_keys),
                lambda: skip_if_loop_exists(body),
                lambda: skip_if_below_threshold(
                    operations, self.thresholds.heavy_computation_operations
                ),
                lambda: skip_if_has_yielding(body, source_file),
            )
            if skip.should_skip:
                continue

            severity = (
                Severity.HIGH
                if operations > self.thresholds.heavy_computation_high
                else Severity.MEDIUM
            )
            findings.append(
                create_finding(
                    source_file,
                    file_path,
                    func,
                    rule_id=self.rule_id,
                    explanation=(
                        f"Function performs {operations} sequential operations which could "
                        "exceed 50ms and create a long task, blocking the main thread and "
                        "causing poor INP (Interaction to Next Paint)."
                    ),
                    fix=(
                        "Break up the work into smaller chunks using "
                        "scheduler.yield() or setTimeout."
                    ),
                    severity=severity,
                )
            )
        return findings
