"""Handlers issuing many synchronous state updates."""

from __future__ import annotations

from inp_audit.classifiers import count_state_updates, find_event_handlers, get_function_body
from inp_audit.rules.base import Finding, Metric, RuleBase, RuleDescriptor, Severity
from inp_audit.rules.factory import create_finding
from inp_audit.rules.filters import chain_filters, skip_if_below_threshold, skip_if_has_yielding
from inp_audit.syntax import SourceFile


class EventHandlerStateUpdatesRule(RuleBase):
    """Detects event handlers with excessive state updates and no yielding between them."""

    descriptor = RuleDescriptor(
        rule_id="inp-event-handler-state-updates",
        description=(
            "Detects event handlers with excessive state updates that don't yield between updates"
        ),
        metric=Metric.INP,
        default_severity=Severity.MEDIUM,
    )

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        findings: list[Finding] = []
        for handler in find_event_handlers(source_file):
            body = get_function_body(handler)
            if body is None:
                continue

            update_count = count_state_updates(body, source_file)
            skip = chain_filters(
                lambda: skip_if_below_threshold(update_count, self.thresholds.state_updates),
                lambda: skip_if_has_yielding(body, source_file),
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
                        f"Event handler performs {update_count} state updates without yielding "
                        "between them. Multiple synchronous state updates can cause multiple "
                        "re-renders and block the main thread, leading to poor INP "
                        "(Interaction to Next Paint)."
                    ),
                    fix=(
                        "Batch state updates or yield between them using requestAnimationFrame "
                        "or setTimeout."
                    ),
                    severity=Severity.MEDIUM,
                )
            )
        return findings
