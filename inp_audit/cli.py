"""CLI entrypoint for inp-audit."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from inp_audit import __version__
from inp_audit.analyzer import AnalysisResult, analyze
from inp_audit.config import OUTPUT_FORMATS, AppConfig, default_config_template, load_app_config
from inp_audit.git import GitError
from inp_audit.output import render_human, render_json, render_markdown
from inp_audit.rules import build_rules, list_rule_info
from inp_audit.rules.base import Rule

app = typer.Typer(
    name="inp-audit",
    no_args_is_help=True,
    help="Statically analyze TypeScript/React code for INP responsiveness issues.",
)


def version_callback(value: bool) -> None:
    """Print version and exit when --version is provided."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Annotated[
        bool,
        typer.Option("--version", help="Show version and exit.", callback=version_callback),
    ] = False,
) -> None:
    """Root command callback."""
    _ = version


@app.command("analyze")
def analyze_command(
    diff: Annotated[
        str | None, typer.Option(help="Git diff specification, e.g. main..HEAD or HEAD~1.")
    ] = None,
    files: Annotated[
        list[str] | None,
        typer.Option(help="File to analyze; repeatable and comma-separated values accepted."),
    ] = None,
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[
        str | None,
        typer.Option(help="Output format: human|json|markdown.", show_default="human"),
    ] = None,
    out: Annotated[
        Path | None, typer.Option(help="Write the report to this file instead of stdout.")
    ] = None,
    fail_on_high: Annotated[
        bool | None,
        typer.Option("--fail-on-high/--no-fail-on-high", help="Exit 1 on any high finding."),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
) -> None:
    """Analyze changed or explicitly listed files and report INP issues."""
    _configure_logging(verbose)
    file_list = _split_file_options(files)
    if not file_list and not diff:
        raise typer.BadParameter("Provide --diff or --files.", param_hint="--diff/--files")

    app_config = _load_config_or_raise(repo, config_file)
    output_format = (format or app_config.format).lower()
    if output_format not in OUTPUT_FORMATS:
        choices = ", ".join(sorted(OUTPUT_FORMATS))
        raise typer.BadParameter(f"format must be one of: {choices}", param_hint="--format")

    rules = _build_configured_rules_or_raise(app_config)
    try:
        result = analyze(
            files=file_list or None,
            diff=diff,
            repo=repo,
            rules=rules,
            include=app_config.include,
            exclude=app_config.exclude,
        )
    except GitError as exc:
        raise typer.BadParameter(str(exc), param_hint="--diff") from exc

    input_source = "files" if file_list else f"git_diff:{diff}"
    report = _render(result, output_format=output_format, input_source=input_source)
    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(report if report.endswith("\n") else report + "\n", encoding="utf-8")
        typer.echo(f"Report written to: {out}")
    else:
        typer.echo(report)

    should_fail = fail_on_high if fail_on_high is not None else app_config.fail_on_high
    if should_fail and result.has_high_severity():
        raise typer.Exit(code=1)


@app.command("rules")
def rules_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """List available detector rules."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(repo, config_file)
    active_rules = _build_configured_rules_or_raise(app_config)
    active_ids = {rule.rule_id for rule in active_rules}
    rule_info = list_rule_info()

    if output_format == "json":
        payload = {
            "rules": [
                {
                    "rule_id": item.rule_id,
                    "name": item.name,
                    "description": item.description,
                    "category": item.category,
                    "metric": item.metric,
                    "default_severity": item.default_severity,
                    "default_enabled": item.default_enabled,
                    "enabled": item.rule_id in active_ids,
                }
                for item in rule_info
            ],
            "meta": {"config_source": app_config.source},
        }
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = ["Available rules:"]
    for item in rule_info:
        status = "enabled" if item.rule_id in active_ids else "disabled"
        lines.append(
            f"- {item.rule_id} [{status}] ({item.category}, {item.default_severity}) "
            f"- {item.description}"
        )
    typer.echo("\n".join(lines))


@app.command("config")
def config_command(
    repo: Annotated[Path, typer.Option(help="Repository path.")] = Path("."),
    format: Annotated[str, typer.Option(help="Output format: human|json.")] = "human",
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config TOML file."),
    ] = None,
) -> None:
    """Show resolved configuration."""
    output_format = format.lower()
    if output_format not in {"human", "json"}:
        raise typer.BadParameter("format must be one of: human, json", param_hint="--format")

    app_config = _load_config_or_raise(repo, config_file)
    active_rules = _build_configured_rules_or_raise(app_config)
    payload = app_config.to_dict()
    payload["active_rule_ids"] = [rule.rule_id for rule in active_rules]

    if output_format == "json":
        typer.echo(json.dumps(payload, sort_keys=True))
        return

    lines = [
        "Resolved configuration:",
        f"- source: {payload['source'] or 'defaults'}",
        f"- format: {payload['format']}",
        f"- fail_on_high: {payload['fail_on_high']}",
        f"- include: {payload['include']}",
        f"- exclude: {payload['exclude']}",
        f"- rules.enable: {payload['rules']['enable']}",
        f"- rules.disable: {payload['rules']['disable']}",
        f"- thresholds: {payload['thresholds']}",
        f"- active_rule_ids: {payload['active_rule_ids']}",
    ]
    typer.echo("\n".join(lines))


@app.command("config-init")
def config_init_command(
    out: Annotated[Path, typer.Option(help="Output path for starter config TOML.")] = Path(
        ".inp-audit.toml"
    ),
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite if file already exists."),
    ] = False,
) -> None:
    """Create a starter repository config file."""
    out_path = out.resolve()
    if out_path.exists() and not force:
        raise typer.BadParameter(
            f"Refusing to overwrite existing file: {out_path}. Use --force to overwrite."
        )
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(default_config_template(), encoding="utf-8")
    typer.echo(f"Wrote starter config: {out_path}")


def main() -> None:
    """Console script entrypoint."""
    app()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _split_file_options(files: list[str] | None) -> list[str]:
    paths: list[str] = []
    for value in files or []:
        paths.extend(item.strip() for item in value.split(",") if item.strip())
    return paths


def _render(result: AnalysisResult, *, output_format: str, input_source: str) -> str:
    if output_format == "json":
        return render_json(result, input_source=input_source)
    if output_format == "markdown":
        return render_markdown(result)
    return render_human(result)


def _load_config_or_raise(repo: Path, config_file: Path | None = None) -> AppConfig:
    try:
        return load_app_config(repo, config_path=config_file)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config") from exc


def _build_configured_rules_or_raise(app_config: AppConfig) -> list[Rule]:
    try:
        return build_rules(
            enabled_rule_ids=app_config.rule_enable,
            disabled_rule_ids=app_config.rule_disable,
            thresholds=app_config.thresholds,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="config.rules") from exc
