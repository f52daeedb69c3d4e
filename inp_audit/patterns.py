"""Name-pattern lookup tables used by the classifiers.

Each category is a tuple of substrings; a name belongs to a category when it
contains any of them. Keep entries whole and meaningful: short fragments such
as ``"put"`` or ``"request"`` would match unrelated names (``input``,
``requestAnimationFrame``).
"""

from __future__ import annotations

EVENT_HANDLER_PREFIXES = (
    "onClick",
    "onChange",
    "onSubmit",
    "onFocus",
    "onBlur",
    "onMouseEnter",
    "onMouseLeave",
    "onKeyDown",
    "onKeyUp",
    "onInput",
)

YIELDING_MECHANISMS = (
    "setTimeout",
    "setImmediate",
    "requestIdleCallback",
    "requestAnimationFrame",
    "scheduler.yield",
    "scheduler.postTask",
    "yieldToMain",
)

API_CALL_PATTERNS = (
    "fetch",
    "axios",
    "ajax",
    "sendBeacon",
    "XMLHttpRequest",
    "graphql",
)

DOM_MANIPULATION_PATTERNS = (
    "innerHTML",
    "outerHTML",
    "innerText",
    "textContent",
    "appendChild",
    "removeChild",
    "replaceChild",
    "insertBefore",
    "insertAdjacentHTML",
    "cssText",
    "classList",
    "setAttribute",
    "removeAttribute",
)

# Matched exactly, not by substring: ``mapper()`` is not ``map()``.
HEAVY_ARRAY_OPERATIONS = frozenset(
    {
        "map",
        "filter",
        "reduce",
        "reduceRight",
        "forEach",
        "some",
        "every",
        "find",
        "findIndex",
        "flatMap",
        "sort",
    }
)

STATE_UPDATE_NAMES = frozenset({"dispatch", "setState"})
STATE_UPDATE_PREFIX = "set"

# Start with "set" but schedule work or touch the DOM rather than state.
NON_STATE_SETTERS = frozenset(
    {
        "setTimeout",
        "setInterval",
        "setImmediate",
        "setAttribute",
        "setAttributeNS",
        "setProperty",
        "setPointerCapture",
        "setSelectionRange",
        "setCustomValidity",
    }
)

ANIMATION_CONTEXT_KEYWORDS = ("animat", "transition", "style", "keyframe")

# Layout- or paint-triggering properties reported by the compositing rule.
# Compositor-only properties such as transform and opacity are not listed.
NON_COMPOSITED_PROPERTIES = frozenset(
    {
        "width",
        "height",
        "min-width",
        "min-height",
        "max-width",
        "max-height",
        "top",
        "left",
        "right",
        "bottom",
        "inset",
        "position",
        "display",
        "float",
        "margin",
        "margin-top",
        "margin-right",
        "margin-bottom",
        "margin-left",
        "padding",
        "padding-top",
        "padding-right",
        "padding-bottom",
        "padding-left",
        "border",
        "border-width",
        "border-radius",
        "font-size",
        "font-weight",
        "line-height",
        "letter-spacing",
        "flex",
        "flex-basis",
        "flex-grow",
        "flex-shrink",
        "gap",
        "grid-template-columns",
        "grid-template-rows",
        "background-position",
        "background-size",
        "background-color",
        "background",
        "color",
        "box-shadow",
        "outline",
        "clip-path",
        "z-index",
        "vertical-align",
        "text-indent",
    }
)
