"""Analysis orchestration: resolve files, parse once, run every rule."""

from __future__ import annotations

import fnmatch
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from inp_audit.git import get_changed_files
from inp_audit.rules import default_rules
from inp_audit.rules.base import Finding, Rule, Severity
from inp_audit.syntax import SourceFile, SourceParseError, is_supported_path, parse_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FileError:
    """A file that could not be read or parsed."""

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass(slots=True)
class AnalysisResult:
    """Ordered findings of one run plus the files it covered."""

    findings: list[Finding] = field(default_factory=list)
    files: list[str] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)

    @property
    def summary(self) -> dict[str, Any]:
        """Aggregate counts, recomputed from ``findings`` on every access."""
        by_severity = {str(severity): 0 for severity in Severity}
        by_severity.update(Counter(str(item.severity) for item in self.findings))
        return {
            "total": len(self.findings),
            "by_severity": by_severity,
            "by_metric": dict(Counter(str(item.metric) for item in self.findings)),
            "by_rule": dict(Counter(item.rule_id for item in self.findings)),
            "files_analyzed": len(self.files),
            "files_with_findings": len({item.file_path for item in self.findings}),
        }

    def has_high_severity(self) -> bool:
        return any(item.severity == Severity.HIGH for item in self.findings)


def analyze(
    files: list[str] | None = None,
    diff: str | None = None,
    repo: Path = Path("."),
    rules: list[Rule] | None = None,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> AnalysisResult:
    """Analyze an explicit file list, or the files changed by a git diff.

    ``files`` takes precedence over ``diff``; at least one is required.
    Files that cannot be read or parsed are recorded in ``errors`` and the
    run continues.
    """
    active_rules = rules if rules is not None else default_rules()
    result = AnalysisResult()

    for path in resolve_target_files(
        files=files, diff=diff, repo=repo, include=include, exclude=exclude, errors=result.errors
    ):
        try:
            source_file = _load_source(repo, path)
        except (OSError, UnicodeDecodeError, SourceParseError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            result.errors.append(FileError(path=path, message=str(exc)))
            continue

        result.files.append(path)
        result.findings.extend(run_rules(path, source_file, active_rules))
    return result


def analyze_source(
    text: str, path: str = "input.tsx", rules: list[Rule] | None = None
) -> list[Finding]:
    """Parse in-memory source and run the rules over it."""
    active_rules = rules if rules is not None else default_rules()
    return run_rules(path, parse_source(text, path), active_rules)


def run_rules(file_path: str, source_file: SourceFile, rules: list[Rule]) -> list[Finding]:
    """Concatenate findings rule by rule, in the order the rules are given."""
    findings: list[Finding] = []
    for rule in rules:
        found = rule.detect(file_path, source_file)
        if found:
            logger.debug("%s: %s reported %d findings", file_path, rule.rule_id, len(found))
        findings.extend(found)
    return findings


def resolve_target_files(
    *,
    files: list[str] | None,
    diff: str | None,
    repo: Path,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
    errors: list[FileError] | None = None,
) -> list[str]:
    """Return the repository-relative paths a run should analyze."""
    if files:
        candidates = _dedupe(files)
        unsupported = [path for path in candidates if not is_supported_path(path)]
        for path in unsupported:
            logger.warning("Skipping %s: unsupported file type", path)
            if errors is not None:
                errors.append(FileError(path=path, message="Unsupported file type"))
        candidates = [path for path in candidates if is_supported_path(path)]
    elif diff:
        changed = get_changed_files(repo, diff)
        candidates = [
            item.path
            for item in changed
            if item.status != "deleted" and is_supported_path(item.path)
        ]
        logger.debug("Resolved %d analyzable files from diff %s", len(candidates), diff)
    else:
        raise ValueError("Either files or diff must be provided.")

    return [path for path in candidates if _is_selected(path, include or [], exclude or [])]


def _load_source(repo: Path, path: str) -> SourceFile:
    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = repo / resolved
    text = resolved.read_text(encoding="utf-8")
    return parse_source(text, path)


def _is_selected(path: str, include: list[str], exclude: list[str]) -> bool:
    if include and not any(fnmatch.fnmatch(path, pattern) for pattern in include):
        return False
    return not any(fnmatch.fnmatch(path, pattern) for pattern in exclude)


def _dedupe(items: list[str]) -> list[str]:
    seen: set[str] = set()
    output: list[str] = []
    for item in items:
        if item in seen:
            continue
        seen.add(item)
        output.append(item)
    return output
