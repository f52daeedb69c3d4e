"""Rules package."""

from collections.abc import Callable
from dataclasses import dataclass

from inp_audit.config import Thresholds
from inp_audit.rules.animation_compositing import AnimationCompositingRule
from inp_audit.rules.base import Finding, Metric, Rule, RuleBase, Severity
from inp_audit.rules.callback_yield import CallbackYieldRule
from inp_audit.rules.dom_size import DomSizeRule
from inp_audit.rules.heavy_computation import HeavyComputationRule
from inp_audit.rules.heavy_loop import HeavyLoopRule
from inp_audit.rules.incorrect_yielding import IncorrectYieldingRule
from inp_audit.rules.long_loop import LongLoopRule
from inp_audit.rules.state_updates import EventHandlerStateUpdatesRule

__all__ = [
    "Finding",
    "KNOWN_CATEGORIES",
    "Metric",
    "Rule",
    "RuleInfo",
    "Severity",
    "build_rules",
    "default_rules",
    "list_rule_info",
]

KNOWN_CATEGORIES = {
    "event_handler",
    "long_task",
    "animation",
    "dom",
}


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing and selection."""

    rule_id: str
    name: str
    description: str
    category: str
    metric: str
    default_severity: str
    default_enabled: bool


@dataclass(frozen=True, slots=True)
class _RuleSpec:
    rule_id: str
    factory: Callable[[Thresholds], Rule]
    name: str
    description: str
    category: str
    metric: str
    default_severity: str


def default_rules() -> list[Rule]:
    """Return every built-in rule with default thresholds."""
    return build_rules()


def build_rules(
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
    thresholds: Thresholds | None = None,
) -> list[Rule]:
    """Build rule instances in registration order applying enable/disable filters."""
    effective_thresholds = thresholds or Thresholds()
    specs = _ordered_rule_specs()
    registry = {spec.rule_id: spec for spec in specs}
    disabled_set = set(disabled_rule_ids or [])
    requested_ids = set(enabled_rule_ids or []) | disabled_set

    unknown = [rule_id for rule_id in requested_ids if rule_id not in registry]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    enabled_set = set(enabled_rule_ids) if enabled_rule_ids is not None else set(registry)
    return [
        spec.factory(effective_thresholds)
        for spec in specs
        if spec.rule_id in enabled_set and spec.rule_id not in disabled_set
    ]


def list_rule_info() -> list[RuleInfo]:
    """Return metadata for all known rules."""
    return [
        RuleInfo(
            rule_id=spec.rule_id,
            name=spec.name,
            description=spec.description,
            category=spec.category,
            metric=spec.metric,
            default_severity=spec.default_severity,
            default_enabled=True,
        )
        for spec in _ordered_rule_specs()
    ]


def _ordered_rule_specs() -> list[_RuleSpec]:
    return [
        _spec(CallbackYieldRule, category="event_handler"),
        _spec(IncorrectYieldingRule, category="event_handler"),
        _spec(EventHandlerStateUpdatesRule, category="event_handler"),
        _spec(HeavyLoopRule, category="event_handler"),
        _spec(LongLoopRule, category="long_task"),
        _spec(HeavyComputationRule, category="long_task"),
        _spec(AnimationCompositingRule, category="animation"),
        _spec(DomSizeRule, category="dom"),
    ]


def _spec(rule_cls: type[RuleBase], *, category: str) -> _RuleSpec:
    descriptor = rule_cls.descriptor
    return _RuleSpec(
        rule_id=descriptor.rule_id,
        factory=rule_cls,
        name=rule_cls.__name__,
        description=descriptor.description,
        category=category,
        metric=str(descriptor.metric),
        default_severity=str(descriptor.default_severity),
    )
