"""Configuration loading for inp-audit."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

CONFIG_FILENAMES = (".inp-audit.toml", "inp-audit.toml")
PYPROJECT_FILENAME = "pyproject.toml"
PYPROJECT_TOOL_KEYS = ("inp_audit", "inp-audit")
OUTPUT_FORMATS = frozenset({"human", "json", "markdown"})


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Tunable rule thresholds."""

    heavy_loop_iterations: int = 10
    loop_operations: int = 5
    array_operation_weight: int = 2
    handler_state_updates: int = 2
    state_updates: int = 3
    heavy_computation_operations: int = 20
    heavy_computation_high: int = 30
    max_dom_depth: int = 10

    def to_dict(self) -> dict[str, int]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(slots=True)
class AppConfig:
    """Runtime configuration values resolved from project files."""

    format: str = "human"
    fail_on_high: bool = False
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    rule_enable: list[str] | None = None
    rule_disable: list[str] = field(default_factory=list)
    thresholds: Thresholds = field(default_factory=Thresholds)
    source: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "format": self.format,
            "fail_on_high": self.fail_on_high,
            "include": list(self.include),
            "exclude": list(self.exclude),
            "rules": {
                "enable": list(self.rule_enable) if self.rule_enable is not None else None,
                "disable": list(self.rule_disable),
            },
            "thresholds": self.thresholds.to_dict(),
            "source": self.source,
        }


def load_app_config(repo: Path, config_path: Path | None = None) -> AppConfig:
    """Load config from explicit path or repository-local files with precedence."""
    repo = repo.resolve()
    if config_path is not None:
        resolved = config_path if config_path.is_absolute() else (repo / config_path)
        if not resolved.exists():
            raise ValueError(f"Config file does not exist: {resolved}")
        mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
        return _from_mapping(mapping, source=str(resolved))

    for filename in CONFIG_FILENAMES:
        resolved = repo / filename
        if resolved.exists():
            mapping = _extract_config_mapping(_load_toml(resolved), source_path=resolved)
            return _from_mapping(mapping, source=str(resolved))

    pyproject_path = repo / PYPROJECT_FILENAME
    if pyproject_path.exists():
        mapping = _extract_config_mapping(_load_toml(pyproject_path), source_path=pyproject_path)
        if mapping:
            return _from_mapping(mapping, source=str(pyproject_path))

    return AppConfig()


def default_config_template() -> str:
    """Return a starter config template."""
    defaults = Thresholds()
    return "\n".join(
        [
            'format = "markdown"',
            "fail_on_high = true",
            'include = ["src/**"]',
            'exclude = ["**/*.test.tsx", "**/*.stories.tsx"]',
            "",
            "[rules]",
            "# enable = [",
            '#   "inp-callback-yield",',
            '#   "inp-incorrect-yielding",',
            '#   "inp-event-handler-state-updates",',
            '#   "inp-heavy-loops",',
            '#   "inp-long-loop",',
            '#   "inp-heavy-computation",',
            '#   "inp-animation-compositing",',
            '#   "inp-dom-size",',
            "# ]",
            "disable = []",
            "",
            "[thresholds]",
            *(f"{name} = {value}" for name, value in defaults.to_dict().items()),
            "",
        ]
    )


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as file_obj:
            loaded = tomllib.load(file_obj)
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc
    if not isinstance(loaded, dict):
        return {}
    return loaded


def _extract_config_mapping(loaded: dict[str, Any], *, source_path: Path) -> dict[str, Any]:
    if source_path.name == PYPROJECT_FILENAME:
        section = _find_pyproject_tool_section(loaded)
        return section if section is not None else {}

    tool_section = _find_pyproject_tool_section(loaded)
    if tool_section is not None:
        return tool_section
    return loaded


def _find_pyproject_tool_section(loaded: dict[str, Any]) -> dict[str, Any] | None:
    tool = loaded.get("tool")
    if not isinstance(tool, dict):
        return None
    for key in PYPROJECT_TOOL_KEYS:
        section = tool.get(key)
        if isinstance(section, dict):
            return section
    return None


def _from_mapping(mapping: dict[str, Any], *, source: str) -> AppConfig:
    rules_mapping = _as_table(mapping.get("rules"), "rules")
    thresholds_mapping = _as_table(mapping.get("thresholds"), "thresholds")

    return AppConfig(
        format=_as_choice(mapping.get("format", "human"), OUTPUT_FORMATS, "format"),
        fail_on_high=_as_bool(mapping.get("fail_on_high", False), "fail_on_high"),
        include=_as_str_list(mapping.get("include"), "include"),
        exclude=_as_str_list(mapping.get("exclude"), "exclude"),
        rule_enable=_as_str_list_or_none(rules_mapping.get("enable"), "rules.enable"),
        rule_disable=_as_str_list(rules_mapping.get("disable"), "rules.disable"),
        thresholds=_parse_thresholds(thresholds_mapping),
        source=source,
    )


def _parse_thresholds(value: dict[str, Any]) -> Thresholds:
    known = {item.name for item in fields(Thresholds)}
    unknown = sorted(key for key in value if key not in known)
    if unknown:
        raise ValueError(f"Unknown thresholds: {', '.join(unknown)}")

    parsed: dict[str, int] = {}
    for key, raw in value.items():
        number = _as_int(raw, f"thresholds.{key}")
        if number < 0:
            raise ValueError(f"thresholds.{key} must be >= 0")
        parsed[key] = number
    return Thresholds(**parsed)


def _as_table(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a table/object")
    return value


def _as_str_list(value: Any, field_name: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{field_name} must be a list of strings")
    return list(value)


def _as_str_list_or_none(value: Any, field_name: str) -> list[str] | None:
    if value is None:
        return None
    return _as_str_list(value, field_name)


def _as_choice(raw: Any, allowed: frozenset[str], field_name: str) -> str:
    value = str(raw).lower()
    if value not in allowed:
        choices = ", ".join(sorted(allowed))
        raise ValueError(f"{field_name} must be one of: {choices}")
    return value


def _as_int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"{field_name} must be an integer")
    return raw


def _as_bool(raw: Any, field_name: str) -> bool:
    if not isinstance(raw, bool):
        raise ValueError(f"{field_name} must be a boolean")
    return raw
