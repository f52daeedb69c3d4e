"""Output rendering."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import click

from inp_audit import __version__
from inp_audit.analyzer import AnalysisResult
from inp_audit.rules.base import Finding, Metric, Severity

_SEVERITY_COLORS = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "green",
}

_SEVERITY_BADGES = {
    Severity.HIGH: "🔴 **HIGH**",
    Severity.MEDIUM: "🟡 **MEDIUM**",
    Severity.LOW: "🟢 **LOW**",
}

_METRIC_BADGES = {
    Metric.INP: "⚡ INP",
}


def render_human(result: AnalysisResult) -> str:
    """Render a compact colorized summary."""
    summary = result.summary
    by_severity = summary["by_severity"]
    headline_color = "red" if by_severity["high"] else ("yellow" if summary["total"] else "green")
    lines: list[str] = [
        click.style(
            f"{summary['total']} INP issues in {summary['files_analyzed']} files "
            f"(high: {by_severity['high']}, medium: {by_severity['medium']}, "
            f"low: {by_severity['low']})",
            fg=headline_color,
            bold=True,
        )
    ]

    for index, finding in enumerate(result.findings, start=1):
        severity = click.style(
            str(finding.severity).upper(), fg=_SEVERITY_COLORS[finding.severity], bold=True
        )
        lines.append(f"{index}. {severity} [{finding.rule_id}] {_location(finding)}")
        lines.append(f"   {finding.explanation}")
        lines.append(f"   fix: {finding.fix}")

    if result.errors:
        lines.append(click.style("Skipped files:", bold=True))
        for error in result.errors:
            lines.append(f"- {error.path}: {error.message}")
    return "\n".join(lines)


def render_json(result: AnalysisResult, *, input_source: str) -> str:
    """Render stable JSON output for CI and automation."""
    return json.dumps(build_json_payload(result, input_source=input_source), sort_keys=True)


def build_json_payload(result: AnalysisResult, *, input_source: str) -> dict[str, Any]:
    """Build stable JSON payload for CI and automation."""
    meta: dict[str, Any] = {
        "generated_at": datetime.now(tz=UTC)
        .replace(microsecond=0)
        .isoformat()
        .replace("+00:00", "Z"),
        "input_source": input_source,
        "version": __version__,
    }
    return {
        "findings": [finding.to_dict() for finding in result.findings],
        "summary": result.summary,
        "errors": [error.to_dict() for error in result.errors],
        "meta": meta,
    }


def render_markdown(result: AnalysisResult) -> str:
    """Render the audit report as a markdown document."""
    summary = result.summary
    by_severity = summary["by_severity"]
    by_metric = summary["by_metric"]
    parts: list[str] = [
        "# Frontend Performance Audit Report\n\n",
        "## Summary\n\n",
        f"- **Total Issues:** {summary['total']}\n",
        f"- **Files Analyzed:** {summary['files_analyzed']}\n\n",
        "### By Severity\n\n",
        f"- 🔴 High: {by_severity['high']}\n",
        f"- 🟡 Medium: {by_severity['medium']}\n",
        f"- 🟢 Low: {by_severity['low']}\n\n",
        "### By Metric\n\n",
        *(f"- {_METRIC_BADGES[metric]}: {by_metric.get(str(metric), 0)}\n" for metric in Metric),
        "\n",
    ]

    if result.errors:
        parts.append("### Skipped Files\n\n")
        parts.extend(f"- `{error.path}`: {error.message}\n" for error in result.errors)
        parts.append("\n")

    if not result.findings:
        parts.append("✅ **No performance issues found!**\n")
        return "".join(parts)

    parts.append("---\n\n## Issues\n\n")
    for index, finding in enumerate(result.findings, start=1):
        parts.append(_format_markdown_finding(finding, index))
        parts.append("---\n\n")
    return "".join(parts)


def _format_markdown_finding(finding: Finding, index: int) -> str:
    text = (
        f"### {index}. {_SEVERITY_BADGES[finding.severity]} "
        f"{_METRIC_BADGES[finding.metric]} - {finding.rule_id}\n\n"
        f"**Location:** `{_location(finding)}`\n\n"
        f"**Explanation:** {finding.explanation}\n\n"
        f"**Fix:** {finding.fix}\n\n"
    )
    if finding.code_snippet:
        text += f"**Code:**\n\n```typescript\n{finding.code_snippet}\n```\n\n"
    return text


def _location(finding: Finding) -> str:
    return f"{finding.file_path}:{finding.line}:{finding.column}"
