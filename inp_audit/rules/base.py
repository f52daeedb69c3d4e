"""Base rule protocol and finding model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Protocol

from inp_audit.config import Thresholds
from inp_audit.syntax import SourceFile


class Metric(StrEnum):
    """Performance metric a finding affects."""

    INP = "INP"


class Severity(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True, slots=True)
class Finding:
    """A single detected anti-pattern with its location and suggested fix."""

    metric: Metric
    severity: Severity
    file_path: str
    line: int
    column: int
    explanation: str
    fix: str
    rule_id: str
    code_snippet: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": str(self.metric),
            "severity": str(self.severity),
            "file_path": self.file_path,
            "line": self.line,
            "column": self.column,
            "explanation": self.explanation,
            "fix": self.fix,
            "rule_id": self.rule_id,
            "code_snippet": self.code_snippet,
        }


@dataclass(frozen=True, slots=True)
class RuleDescriptor:
    """Static rule metadata."""

    rule_id: str
    description: str
    metric: Metric
    default_severity: Severity


class Rule(Protocol):
    """Protocol for detector rules: one source file in, ordered findings out."""

    descriptor: RuleDescriptor

    @property
    def rule_id(self) -> str:
        """Identifier reported on every finding."""

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        """Inspect a parsed file and return findings in document order."""


class RuleBase:
    """Shared plumbing for built-in rules."""

    descriptor: RuleDescriptor

    def __init__(self, thresholds: Thresholds | None = None) -> None:
        self.thresholds = thresholds or Thresholds()

    @property
    def rule_id(self) -> str:
        return self.descriptor.rule_id

    def detect(self, file_path: str, source_file: SourceFile) -> list[Finding]:
        raise NotImplementedError
