"""Tests for the DOM nesting and animation compositing rules."""

from __future__ import annotations

from inp_audit.classifiers import get_function_body
from inp_audit.config import Thresholds
from inp_audit.rules.animation_compositing import (
    AnimationCompositingRule,
    collect_style_properties,
    to_kebab_case,
)
from inp_audit.rules.base import Severity
from inp_audit.rules.dom_size import DomSizeRule, jsx_depth
from inp_audit.syntax import JSX_ELEMENT_TYPES
from inp_audit.traversal import find_first
from tests.helpers_source import nested_divs, parse_snippet, run_rule


def test_jsx_depth_counts_levels_below_element() -> None:
    source = parse_snippet(
        "const view = <ul><li><span /></li><li>plain</li></ul>;\n"
    )
    root = find_first(source.root, lambda node: node.type in JSX_ELEMENT_TYPES)
    assert root is not None
    assert jsx_depth(root) == 2

    leaf = parse_snippet("const view = <img />;\n")
    assert jsx_depth(find_first(leaf.root, lambda node: node.type in JSX_ELEMENT_TYPES)) == 0


def test_dom_size_depth_boundary() -> None:
    rule = DomSizeRule()
    assert run_rule(rule, f"const view = {nested_divs(11)};\n") == []

    findings = run_rule(rule, f"const view = {nested_divs(12)};\n")
    assert len(findings) == 1
    assert findings[0].rule_id == "inp-dom-size"
    assert findings[0].severity == Severity.MEDIUM
    assert "depth of 11" in findings[0].explanation
    assert (findings[0].line, findings[0].column) == (1, 14)


def test_dom_size_reports_deep_tree_once() -> None:
    findings = run_rule(DomSizeRule(), f"const view = {nested_divs(25)};\n")
    assert len(findings) == 1
    assert "depth of 24" in findings[0].explanation


def test_dom_size_treats_each_tree_separately() -> None:
    code = (
        "export function Page() {\n"
        "  return (\n"
        f"    <main>{nested_divs(3)}</main>\n"
        "  );\n"
        "}\n"
        f"export const Deep = () => {nested_divs(14)};\n"
    )
    findings = run_rule(DomSizeRule(Thresholds(max_dom_depth=10)), code)
    assert [finding.line for finding in findings] == [6]

    strict = run_rule(DomSizeRule(Thresholds(max_dom_depth=2)), code)
    assert [finding.line for finding in strict] == [3, 6]


def test_animation_compositing_flags_layout_properties() -> None:
    findings = run_rule(
        AnimationCompositingRule(),
        """
        function animateBox(el: HTMLElement) {
          el.style.width = "100px";
          el.style.height = "50px";
        }
        """,
    )
    assert len(findings) == 1
    finding = findings[0]
    assert finding.rule_id == "inp-animation-compositing"
    assert finding.severity == Severity.HIGH
    assert "Non-composited CSS properties" in finding.explanation
    assert "width" in finding.explanation
    assert "height" in finding.explanation
    assert "layout thrashing" in finding.explanation
    assert "INP" in finding.explanation
    assert "transform" in finding.fix
    assert "scale" in finding.fix
    assert "translate" in finding.fix


def test_animation_compositing_allows_composited_properties() -> None:
    findings = run_rule(
        AnimationCompositingRule(),
        """
        function animateBox(el: HTMLElement) {
          // width: 100px would relayout, so only transform is animated
          const elementWidth = el.offsetWidth;
          el.style.transform = `translateX(${elementWidth}px)`;
          el.style.opacity = "0.5";
          el.animate([{ transform: "scale(1)" }, { transform: "scale(1.2)", filter: "blur(2px)" }], 200);
        }
        """,
    )
    assert findings == []


def test_animation_compositing_reads_handler_objects_and_css_strings() -> None:
    findings = run_rule(
        AnimationCompositingRule(),
        """
        function transitionPanel(panel) {
          panel.style.cssText = "left: 10px; opacity: 1";
        }
        const Card = () => (
          <div onMouseEnter={() => setStyle({ marginTop: 10, opacity: 1 })} />
        );
        function updateStyles(node) {
          node.style.setProperty("padding-left", "4px");
        }
        """,
    )
    assert [finding.line for finding in findings] == [2, 6, 8]
    assert "(left)" in findings[0].explanation
    assert "(margin-top)" in findings[1].explanation
    assert "(padding-left)" in findings[2].explanation


def test_animation_compositing_ignores_non_animation_functions() -> None:
    findings = run_rule(
        AnimationCompositingRule(),
        """
        function computeLayout(el) {
          el.style.width = "100px";
          return { width: 10, height: 20 };
        }
        """,
    )
    assert findings == []


def test_animation_compositing_reports_outermost_context_once() -> None:
    findings = run_rule(
        AnimationCompositingRule(),
        """
        function animateList(items) {
          const styleFor = (item) => ({ top: item.y });
          return items.map(styleFor);
        }
        """,
    )
    assert len(findings) == 1
    assert findings[0].line == 2


def test_collect_style_properties_normalises_names() -> None:
    source = parse_snippet(
        """
        function animateIn(el) {
          el.style.backgroundColor = "red";
          const frames = { "border-width": "2px", fontSize: 12 };
          const css = `min-height: ${h}px;`;
        }
        """
    )
    func = find_first(source.root, lambda node: node.type == "function_declaration")
    assert collect_style_properties(get_function_body(func), source) == {
        "background-color",
        "border-width",
        "font-size",
        "min-height",
    }
    assert to_kebab_case("borderTopWidth") == "border-top-width"
    assert to_kebab_case("opacity") == "opacity"


def test_animation_compositing_ignores_code_inside_template_substitutions() -> None:
    findings = run_rule(
        AnimationCompositingRule(),
        """
        function animateDrawer(el: HTMLElement, open: boolean, width: number) {
          el.style.transform = `translateX(${open ? width : 0}px)`;
          el.style.opacity = `${open ? 1 : 0}`;
        }
        """,
    )
    assert findings == []


def test_animation_compositing_needs_a_declaration_value() -> None:
    findings = run_rule(
        AnimationCompositingRule(),
        """
        function animateCard(el: HTMLElement) {
          console.log("height:", el.offsetHeight);
          el.style.transform = "scale(1.05)";
        }
        """,
    )
    assert findings == []

    templated = run_rule(
        AnimationCompositingRule(),
        """
        function animateCard(el: HTMLElement, size: number) {
          el.style.cssText = `height: ${size}px; transform: none`;
        }
        """,
    )
    assert len(templated) == 1
    assert "(height)" in templated[0].explanation
