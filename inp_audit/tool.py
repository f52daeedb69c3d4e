"""Remote tool-call adapter exposing the analysis as ``analyze-inp-issues``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from inp_audit.analyzer import analyze
from inp_audit.config import load_app_config
from inp_audit.git import GitError
from inp_audit.output import render_markdown
from inp_audit.rules import build_rules

logger = logging.getLogger(__name__)


class AnalyzeRequest(BaseModel):
    """Arguments accepted by ``analyze-inp-issues``."""

    model_config = ConfigDict(extra="forbid")

    diff: str | None = Field(
        default=None,
        description=(
            'Git diff specification (e.g., "main..HEAD", "HEAD~1..HEAD"). Analyzes '
            "only changed .ts/.tsx files between the specified refs."
        ),
    )
    files: list[str] | None = Field(
        default=None,
        description='Specific file paths to analyze (e.g., ["src/App.tsx"])',
    )
    repo_path: str = Field(
        default=".",
        description="Path to the repository root (defaults to the current directory)",
    )

    @model_validator(mode="after")
    def require_selector(self) -> AnalyzeRequest:
        if not self.diff and not self.files:
            raise ValueError("Either 'diff' or 'files' must be provided")
        return self


ANALYZE_TOOL: dict[str, Any] = {
    "name": "analyze-inp-issues",
    "description": (
        "Analyze frontend TypeScript/React code for INP (Interaction to Next Paint) performance "
        "issues. Analyzes changed files via Git diff or specific file paths."
    ),
    "inputSchema": AnalyzeRequest.model_json_schema(),
}


def handle_analyze_request(arguments: dict[str, Any] | None) -> dict[str, Any]:
    """Validate tool arguments, run the analysis and return a markdown text response.

    Failures never raise: they come back as a text response flagged ``isError``.
    """
    try:
        request = AnalyzeRequest.model_validate(arguments or {})
    except ValidationError as exc:
        message = format_validation_error(exc)
        logger.warning("analyze-inp-issues rejected arguments: %s", message)
        return _text_response(f"Error analyzing code: {message}", is_error=True)

    repo = Path(request.repo_path)
    try:
        config = load_app_config(repo)
        rules = build_rules(
            enabled_rule_ids=config.rule_enable,
            disabled_rule_ids=config.rule_disable,
            thresholds=config.thresholds,
        )
        result = analyze(
            files=request.files or None,
            diff=request.diff or None,
            repo=repo,
            rules=rules,
            include=config.include,
            exclude=config.exclude,
        )
    except (ValueError, GitError, OSError) as exc:
        logger.warning("analyze-inp-issues failed: %s", exc)
        return _text_response(f"Error analyzing code: {exc}", is_error=True)
    return _text_response(render_markdown(result))


def format_validation_error(exc: ValidationError) -> str:
    """One ``field: message`` clause per validation error."""
    clauses = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "arguments"
        clauses.append(f"{location}: {error['msg']}")
    return "; ".join(clauses)


def _text_response(text: str, *, is_error: bool = False) -> dict[str, Any]:
    response: dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if is_error:
        response["isError"] = True
    return response
