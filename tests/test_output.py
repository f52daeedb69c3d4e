"""Output rendering tests."""

from __future__ import annotations

import json

import click

from inp_audit.analyzer import AnalysisResult, FileError
from inp_audit.output import build_json_payload, render_human, render_json, render_markdown
from inp_audit.rules.base import Finding, Metric, Severity


def _finding(severity: Severity, rule_id: str, line: int = 3) -> Finding:
    return Finding(
        metric=Metric.INP,
        severity=severity,
        file_path="src/App.tsx",
        line=line,
        column=5,
        explanation=f"{rule_id} explanation",
        fix=f"{rule_id} fix",
        rule_id=rule_id,
        code_snippet="for (const item of items) {",
    )


def _result() -> AnalysisResult:
    return AnalysisResult(
        findings=[
            _finding(Severity.HIGH, "inp-long-loop"),
            _finding(Severity.MEDIUM, "inp-dom-size", line=9),
        ],
        files=["src/App.tsx", "src/Label.tsx"],
        errors=[FileError(path="src/Broken.tsx", message="Syntax error")],
    )


def test_render_human_lists_each_finding() -> None:
    output = click.unstyle(render_human(_result()))
    assert output.splitlines()[0] == "2 INP issues in 2 files (high: 1, medium: 1, low: 0)"
    assert "1. HIGH [inp-long-loop] src/App.tsx:3:5" in output
    assert "2. MEDIUM [inp-dom-size] src/App.tsx:9:5" in output
    assert "   fix: inp-dom-size fix" in output
    assert "- src/Broken.tsx: Syntax error" in output


def test_render_json_has_stable_schema_keys() -> None:
    payload = json.loads(render_json(_result(), input_source="files"))
    assert set(payload.keys()) == {"findings", "summary", "errors", "meta"}
    assert payload["summary"]["by_severity"] == {"high": 1, "medium": 1, "low": 0}
    assert payload["findings"][0] == {
        "metric": "INP",
        "severity": "high",
        "file_path": "src/App.tsx",
        "line": 3,
        "column": 5,
        "explanation": "inp-long-loop explanation",
        "fix": "inp-long-loop fix",
        "rule_id": "inp-long-loop",
        "code_snippet": "for (const item of items) {",
    }
    assert payload["errors"] == [{"path": "src/Broken.tsx", "message": "Syntax error"}]
    assert payload["meta"]["input_source"] == "files"
    assert payload["meta"]["generated_at"].endswith("Z")


def test_build_json_payload_for_empty_result() -> None:
    payload = build_json_payload(AnalysisResult(), input_source="git_diff:HEAD~1")
    assert payload["findings"] == []
    assert payload["summary"]["total"] == 0
    assert payload["summary"]["files_analyzed"] == 0


def test_render_markdown_report_sections() -> None:
    report = render_markdown(_result())
    assert report.startswith("# Frontend Performance Audit Report\n\n## Summary\n")
    assert "- **Total Issues:** 2\n" in report
    assert "- **Files Analyzed:** 2\n" in report
    assert "- 🔴 High: 1\n" in report
    assert "- ⚡ INP: 2\n" in report
    assert "### 1. 🔴 **HIGH** ⚡ INP - inp-long-loop" in report
    assert "**Location:** `src/App.tsx:3:5`" in report
    assert "**Fix:** inp-dom-size fix" in report
    assert "```typescript\nfor (const item of items) {\n```" in report
    assert "- `src/Broken.tsx`: Syntax error" in report


def test_render_markdown_without_findings() -> None:
    report = render_markdown(AnalysisResult(files=["src/Label.tsx"]))
    assert "- **Total Issues:** 0\n" in report
    assert "- ⚡ INP: 0\n" in report
    assert report.endswith("✅ **No performance issues found!**\n")
    assert "## Issues" not in report
