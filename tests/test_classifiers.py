"""Tests for pattern classifiers, rule filters and the finding factory."""

from __future__ import annotations

from inp_audit.classifiers import (
    count_operations,
    count_state_updates,
    estimate_loop_iterations,
    find_event_handlers,
    function_name,
    get_function_body,
    has_nested_loop,
    has_yielding_mechanism,
    is_api_call,
    is_dom_manipulation,
    is_event_handler_name,
    is_inside_loop,
    is_state_update_name,
    is_yielded_callback,
    matches_pattern,
    yielded_callback,
)
from inp_audit.rules.base import Severity
from inp_audit.rules.factory import MAX_SNIPPET_LENGTH, create_finding
from inp_audit.rules.filters import (
    FilterResult,
    chain_filters,
    skip_if_above_threshold,
    skip_if_below_threshold,
    skip_if_enclosing_function_yields,
    skip_if_event_handler,
    skip_if_has_yielding,
    skip_if_loop_exists,
)
from inp_audit.syntax import is_function_like, is_loop, node_key, parse_source
from inp_audit.traversal import collect_matching, find_first
from tests.helpers_source import parse_snippet

HANDLERS_SNIPPET = """
const handleSave = () => { save(); };
function handleReset() { reset(); }
const Panel = () => (
  <div>
    <button onClick={handleSave}>Save</button>
    <button onClickCapture={() => track()}>Track</button>
    <input onChange={useCallback((e) => setValue(e.target.value), [])} />
    <form onSubmit={handleReset} />
    <button onBlur={handleSave}>Again</button>
  </div>
);
const listeners = { onFocus: () => focus(), onKeyDown(event) { press(event); } };
"""


def _first(source, node_type):
    node = find_first(source.root, lambda item: item.type == node_type)
    assert node is not None
    return node


def test_matches_pattern_uses_substring_containment() -> None:
    assert matches_pattern("fetchUserData", ("fetch", "axios"))
    assert not matches_pattern("elementWidth", ("fetch", "axios"))


def test_handler_names_match_by_prefix() -> None:
    assert is_event_handler_name("onClick")
    assert is_event_handler_name("onClickCapture")
    assert is_event_handler_name("onKeyDownCapture")
    assert not is_event_handler_name("onScroll")
    assert not is_event_handler_name("handleClick")


def test_find_event_handlers_covers_jsx_and_object_literals() -> None:
    source = parse_snippet(HANDLERS_SNIPPET)
    handlers = find_event_handlers(source)

    assert [node.type for node in handlers] == [
        "arrow_function",
        "function_declaration",
        "arrow_function",
        "arrow_function",
        "arrow_function",
        "method_definition",
    ]
    assert source.node_text(handlers[0]).startswith("() => { save(); }")
    assert source.node_text(handlers[2]) == "() => track()"
    assert source.node_text(handlers[3]).startswith("(e) => setValue")
    assert len({node_key(node) for node in handlers}) == len(handlers)


def test_find_event_handlers_returns_nothing_without_handlers() -> None:
    source = parse_snippet("const view = <div className='plain'>text</div>;\n")
    assert find_event_handlers(source) == []


def test_get_function_body_shapes() -> None:
    source = parse_snippet(HANDLERS_SNIPPET)
    handlers = find_event_handlers(source)

    assert get_function_body(handlers[0]).type == "statement_block"
    assert get_function_body(handlers[2]).type == "call_expression"
    assert get_function_body(handlers[5]).type == "statement_block"
    assert get_function_body(_first(source, "identifier")) is None
    assert get_function_body(None) is None


def test_has_yielding_mechanism_respects_nested_flag() -> None:
    source = parse_snippet(
        """
        function run(items) {
          items.forEach((item) => {
            setTimeout(() => process(item), 0);
          });
        }
        """,
        path="run.ts",
    )
    body = get_function_body(_first(source, "function_declaration"))
    assert has_yielding_mechanism(body, source, include_nested=True)
    assert not has_yielding_mechanism(body, source, include_nested=False)


def test_yielding_recognises_dotted_and_cooperative_calls() -> None:
    source = parse_snippet(
        """
        async function work() { await scheduler.yield(); }
        function post() { scheduler.postTask(step); }
        function rest() { window.requestIdleCallback(step); }
        function plain() { step(); }
        """,
        path="yield.ts",
    )
    functions = collect_matching(source.root, lambda node: node.type == "function_declaration")
    flags = [
        has_yielding_mechanism(get_function_body(func), source) for func in functions
    ]
    assert flags == [True, True, True, False]


def test_api_dom_and_state_update_classification() -> None:
    source = parse_snippet(
        """
        apiClient.fetchUsers();
        axios.post("/save");
        compute();
        """,
        path="api.ts",
    )
    calls = collect_matching(source.root, lambda node: node.type == "call_expression")
    assert [is_api_call(source, call) for call in calls] == [True, True, False]

    assert is_dom_manipulation("innerHTML")
    assert is_dom_manipulation("classList")
    assert not is_dom_manipulation("value")

    assert is_state_update_name("setCount")
    assert is_state_update_name("dispatch")
    assert not is_state_update_name("setTimeout")
    assert not is_state_update_name("setAttribute")
    assert not is_state_update_name("update")


def test_count_state_updates_ignores_timers_and_dom_setters() -> None:
    source = parse_snippet(
        """
        function apply(el) {
          setA(1);
          setB(2);
          dispatch({ type: "x" });
          this.setState({});
          setTimeout(flush, 0);
          el.setAttribute("data-x", "1");
        }
        """,
        path="state.ts",
    )
    body = get_function_body(_first(source, "function_declaration"))
    assert count_state_updates(body, source) == 4


def test_count_operations_weights_array_calls_and_skips_yielding() -> None:
    source = parse_snippet(
        """
        function step(items) {
          prepare();
          items.map(toRow);
          setTimeout(flush, 0);
        }
        """,
        path="ops.ts",
    )
    body = get_function_body(_first(source, "function_declaration"))
    assert count_operations(body, source) == 2
    assert count_operations(body, source, array_weight=2) == 3


def test_estimate_loop_iterations_only_handles_literal_bounds() -> None:
    source = parse_snippet(
        """
        for (let i = 0; i < 100; i++) {}
        for (let i = 0; i <= 10; i++) {}
        for (let i = 0; i <= 0; i++) {}
        for (let i = 0; i < n; i++) {}
        for (let i = 10; i > 0; i--) {}
        for (const item of items) {}
        while (i < 50) {}
        """,
        path="bounds.ts",
    )
    loops = collect_matching(source.root, is_loop)
    assert [estimate_loop_iterations(source, loop) for loop in loops] == [100, 11, 1, 0, 0, 0, 0]


def test_nested_loop_detection_and_inside_loop() -> None:
    source = parse_snippet(
        """
        for (const row of rows) {
          if (row.ok) {
            while (more()) { row.cells.filter(Boolean); }
          }
        }
        for (const col of cols) { use(col); }
        """,
        path="nested.ts",
    )
    outer, inner, flat = collect_matching(source.root, is_loop)
    assert has_nested_loop(outer)
    assert not has_nested_loop(inner)
    assert not has_nested_loop(flat)

    array_call = find_first(
        source.root,
        lambda node: node.type == "call_expression" and "filter" in source.node_text(node),
    )
    assert is_inside_loop(array_call)
    assert not is_inside_loop(array_call, stop_at=inner.child_by_field_name("body"))


def test_function_name_for_common_bindings() -> None:
    source = parse_snippet(
        """
        const animateIn = () => {};
        function fadeOut() {}
        const styles = { slideStyle: function () {} };
        class Panel { transitionTo() {} }
        """,
        path="names.ts",
    )
    functions = collect_matching(source.root, is_function_like)
    assert [function_name(source, func) for func in functions] == [
        "animateIn",
        "fadeOut",
        "slideStyle",
        "transitionTo",
    ]


def test_threshold_filters_use_comparators() -> None:
    assert skip_if_below_threshold(4, 5).should_skip
    assert not skip_if_below_threshold(5, 5).should_skip
    assert not skip_if_below_threshold(None, 5).should_skip
    assert skip_if_above_threshold(31, 30).should_skip
    assert not skip_if_above_threshold(30, 30).should_skip


def test_structural_filters() -> None:
    source = parse_snippet(HANDLERS_SNIPPET)
    handlers = find_event_handlers(source)
    keys = {node_key(node) for node in handlers}

    assert skip_if_event_handler(handlers[0], keys).should_skip
    panel = find_first(
        source.root,
        lambda node: node.type == "arrow_function" and node_key(node) not in keys,
    )
    assert not skip_if_event_handler(panel, keys).should_skip

    assert not skip_if_has_yielding(get_function_body(handlers[0]), source).should_skip
    assert not skip_if_loop_exists(get_function_body(handlers[0])).should_skip

    loop_source = parse_snippet("function f() { for (;;) { break; } }\n", path="loop.ts")
    body = get_function_body(_first(loop_source, "function_declaration"))
    result = skip_if_loop_exists(body)
    assert result.should_skip
    assert result.reason == "Function contains loops"


def test_chain_filters_short_circuits() -> None:
    calls: list[str] = []

    def skip() -> FilterResult:
        calls.append("skip")
        return FilterResult(True, "first")

    def never() -> FilterResult:
        calls.append("never")
        return FilterResult(False)

    assert chain_filters(skip, never).reason == "first"
    assert calls == ["skip"]
    assert not chain_filters(never).should_skip


def test_create_finding_positions_and_clips_snippet() -> None:
    long_call = "render(" + ", ".join(f"arg{idx}" for idx in range(80)) + ");\n"
    source = parse_source("const ready = true;\n  " + long_call, "long.ts")
    call = _first(source, "call_expression")

    finding = create_finding(
        source,
        "src/long.ts",
        call,
        rule_id="inp-test",
        explanation="explanation",
        fix="fix",
    )
    assert (finding.line, finding.column) == (2, 3)
    assert finding.severity == Severity.MEDIUM
    assert len(finding.code_snippet) == MAX_SNIPPET_LENGTH
    assert finding.code_snippet.startswith("render(arg0, arg1")
    assert finding.to_dict()["metric"] == "INP"


def test_yielded_callback_matches_first_function_argument() -> None:
    source = parse_snippet(
        """
        setTimeout(() => flush(), 0);
        useEffect(() => { requestAnimationFrame(tick); }, []);
        """
    )
    calls = collect_matching(source.root, lambda node: node.type == "call_expression")
    timer, effect, frame = calls[0], calls[2], calls[3]
    callback = yielded_callback(source, timer)
    assert callback is not None and callback.type == "arrow_function"
    assert is_yielded_callback(source, callback)
    assert yielded_callback(source, effect) is None
    assert yielded_callback(source, frame) is None

    effect_callback = effect.child_by_field_name("arguments").named_children[0]
    assert not is_yielded_callback(source, effect_callback)


def test_enclosing_yield_filter_checks_each_function_on_its_own() -> None:
    source = parse_snippet(
        """
        function Panel(items) {
          useEffect(() => { requestAnimationFrame(tick); }, []);
          for (const item of items) { draw(item); }
        }
        function later(items) {
          setTimeout(() => { for (const item of items) { draw(item); } }, 0);
        }
        """
    )
    sibling_loop, deferred_loop = collect_matching(source.root, is_loop)
    assert not skip_if_enclosing_function_yields(sibling_loop, source).should_skip
    result = skip_if_enclosing_function_yields(deferred_loop, source)
    assert result.should_skip
    assert result.reason == "Runs inside a yielded callback"
