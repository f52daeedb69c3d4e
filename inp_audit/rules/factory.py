"""Uniform construction of findings from syntax nodes."""

from __future__ import annotations

from tree_sitter import Node

from inp_audit.rules.base import Finding, Metric, Severity
from inp_audit.syntax import SourceFile

MAX_SNIPPET_LENGTH = 200


def create_finding(
    source_file: SourceFile,
    file_path: str,
    node: Node,
    *,
    rule_id: str,
    explanation: str,
    fix: str,
    severity: Severity = Severity.MEDIUM,
    metric: Metric = Metric.INP,
) -> Finding:
    """Build a finding positioned at ``node`` with a bounded source snippet."""
    line, column = source_file.position_of(node)
    return Finding(
        metric=metric,
        severity=severity,
        file_path=file_path,
        line=line,
        column=column,
        explanation=explanation,
        fix=fix,
        rule_id=rule_id,
        code_snippet=clip_snippet(source_file.node_text(node)),
    )


def clip_snippet(text: str, max_len: int = MAX_SNIPPET_LENGTH) -> str:
    return text[:max_len]
