"""Loops doing too much work per pass without ever yielding."""

from __future__ import annotations

from tree_sitter import Node

from inp_audit.classifiers import count_operations
from inp_audit.rules.base import Finding, Metric, RuleBase, RuleDescriptor, Severity
from inp_audit.rules.factory import create_finding
from inp_audit.rules.filters import (
    chain_filters,
    skip_if_below_threshold,
    skip_if_enclosing_function_yields,
    skip_if_has_yielding,
)
from inp_audit.syntax import SourceFile
from inp_audit.traversal import visit_loops

FIX = (
    "Break the loop into chunks and yield to the main thread between them, for example "
    "with `await scheduler.yield()` every few iterations, or move the work to a Web Worker."
)


class LongLoopRule(RuleBase):
    """Detects loops with many operations and no yielding, anywhere in the file."""

    descriptor = RuleDescriptor(
        rule_id="inp-long-loop",
        description="Detects long-running loops without yielding that can block the main thread",
        metric=Metric.INP,
        default_severity=Severity.HIGH,
    )

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        findings: list[Finding] = []
        loops: list[Node] = []
        visit_loops(source_file.root, loops.append)
        for loop in loops:
            body = loop.child_by_field_name("body")
            if body is None:
                continue

            operations = count_operations(
                body, source_file, array_weight=self.thresholds.array_operation_weight
            )
            skip = chain_filters(
                lambda: skip_if_below_threshold(operations, self.thresholds.loop_operations),
                lambda: skip_if_has_yielding(body, source_file),
                lambda: skip_if_enclosing_function_yields(loop, source_file),
            )
            if skip.should_skip:
                continue
            findings.append(
                create_finding(
                    source_file,
                    file_path,
                    loop,
                    rule_id=self.rule_id,
                    explanation=(
                        f"Loop performs {operations} operations without yielding to the main "
                        "thread. Long-running loops can exceed 50ms and create long tasks that "
                        "delay the next paint, causing poor INP (Interaction to Next Paint)."
                    ),
                    fix=FIX,
                    severity=Severity.HIGH,
                )
            )
        return findings
