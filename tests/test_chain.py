from pathlib import Path

import pytest

from folio.chain import select_filters
from folio.context import BuildContext
from folio.errors import FilterExecutionFailure, RecursionDetected
from folio.filters import FilterRegistry
from folio.page import Phase, ResolutionState


def make_context(**filters):
    registry = FilterRegistry()
    for name, filter_fn in filters.items():
        registry.register(name, filter_fn)
    return BuildContext(filters=registry)


def upcase(page, pages, config):
    return page.content.upper()


def read_other(page, pages, config):
    other = pages.where("name", page.other)[0]
    return f"{page.content}+{other.content}"


def test_select_filters_pre_prefers_filters_pre():
    attrs = {"filters_pre": ["f1"], "filters": ["f2"]}
    assert select_filters(attrs, Phase.PRE) == ["f1"]


def test_select_filters_pre_falls_back_to_filters():
    assert select_filters({"filters": ["f2"]}, Phase.PRE) == ["f2"]
    assert select_filters({}, Phase.PRE) == []


def test_select_filters_post_only_uses_filters_post():
    assert select_filters({"filters": ["f2"]}, Phase.POST) == []
    assert select_filters({"filters_post": ["f3"], "filters": ["f2"]}, Phase.POST) == [
        "f3"
    ]


def test_select_filters_does_not_merge_lists():
    attrs = {"filters_pre": [], "filters": ["f2"]}
    assert select_filters(attrs, Phase.PRE) == []


def test_select_filters_without_phase():
    assert select_filters({"filters": ["f2"]}, None) == []


def test_phase_selection_runs_only_selected_filters():
    ran = []

    def recorder(name):
        def run(page, pages, config):
            ran.append(name)
            return page.content

        return run

    context = make_context(f1=recorder("f1"), f2=recorder("f2"))
    both = context.add_page({"content": "x", "filters_pre": ["f1"], "filters": ["f2"]})
    only = context.add_page({"content": "y", "filters": ["f2"]})

    context.begin_phase(Phase.PRE)
    both.content
    assert ran == ["f1"]
    only.content
    assert ran == ["f1", "f2"]

    context.begin_phase(Phase.POST)
    both.content
    only.content
    assert ran == ["f1", "f2"]
    assert not both.filtered
    assert both.state is ResolutionState.RESOLVED


def test_content_is_filtered_at_most_once():
    calls = []

    def count(page, pages, config):
        calls.append(page.content)
        return page.content + "!"

    context = make_context(count=count)
    page = context.add_page({"content": "hi", "filters": ["count"]})
    context.begin_phase(Phase.PRE)
    first = context.resolver.resolve_content(page)
    second = context.resolver.resolve_content(page)
    assert first == second == "hi!"
    assert calls == ["hi"]
    assert page.filtered


def test_filters_chain_in_order():
    def exclaim(page, pages, config):
        return page.content + "!"

    context = make_context(upcase=upcase, exclaim=exclaim)
    page = context.add_page({"content": "ab", "filters": ["exclaim", "upcase"]})
    context.begin_phase(Phase.PRE)
    assert page.content == "AB!"


def test_unknown_filter_is_skipped_with_warning(caplog):
    context = make_context(upcase=upcase)
    page = context.add_page({"content": "ab", "filters": ["missing", "upcase"]})
    context.begin_phase(Phase.PRE)
    with caplog.at_level("WARNING"):
        assert page.content == "AB"
    assert context.warnings == ["Unknown filter: missing"]
    assert "Unknown filter: missing" in caplog.text


def test_quiet_context_records_but_does_not_log(caplog):
    context = BuildContext(filters=FilterRegistry(), quiet=True)
    page = context.add_page({"content": "ab", "filters": ["missing"]})
    context.begin_phase(Phase.PRE)
    with caplog.at_level("WARNING"):
        assert page.content == "ab"
    assert context.warnings == ["Unknown filter: missing"]
    assert "Unknown filter" not in caplog.text
    assert not page.filtered


def test_content_read_lazily_from_source_file(tmp_path):
    source = tmp_path / "page.txt"
    source.write_text("hello", encoding="utf-8")
    context = make_context(upcase=upcase)
    page = context.add_page({"filters": ["upcase"]}, content_filename=source)
    assert "content" not in page.attributes

    context.begin_phase(Phase.PRE)
    assert page.content == "HELLO"
    assert page.attributes["content"] == "HELLO"


def test_filter_sees_current_content_of_its_own_page():
    def double(page, pages, config):
        return page.content * 2

    context = make_context(upcase=upcase, double=double)
    page = context.add_page({"content": "ab", "filters": ["upcase", "double"]})
    context.begin_phase(Phase.PRE)
    assert page.content == "ABAB"


def test_filter_reading_another_page_resolves_it_first():
    context = make_context(upcase=upcase, read_other=read_other)
    a = context.add_page(
        {"name": "a", "other": "b", "content": "a", "filters": ["read_other"]}
    )
    b = context.add_page({"name": "b", "content": "b", "filters": ["upcase"]})
    context.begin_phase(Phase.PRE)
    assert a.content == "a+B"
    assert b.state is ResolutionState.RESOLVED
    assert b.filtered


def test_mutual_reads_raise_recursion_detected():
    context = make_context(read_other=read_other)
    a = context.add_page(
        {"name": "a", "other": "b", "content": "a", "filters": ["read_other"]},
        content_filename=Path("a.txt"),
    )
    b = context.add_page(
        {"name": "b", "other": "a", "content": "b", "filters": ["read_other"]},
        content_filename=Path("b.txt"),
    )
    context.begin_phase(Phase.PRE)
    with pytest.raises(RecursionDetected) as excinfo:
        a.content
    assert excinfo.value.trace == ["a.txt", "b.txt"]
    assert len(context.stack) == 0
    assert a.state is ResolutionState.UNRESOLVED
    assert b.state is ResolutionState.UNRESOLVED


def test_page_reading_itself_through_pages_is_recursion():
    def read_self(page, pages, config):
        return pages[0].content

    context = make_context(read_self=read_self)
    page = context.add_page(
        {"content": "x", "filters": ["read_self"]}, content_filename=Path("self.txt")
    )
    context.begin_phase(Phase.PRE)
    with pytest.raises(RecursionDetected) as excinfo:
        page.content
    assert excinfo.value.trace == ["self.txt"]


def test_filter_exception_is_fatal_with_page_context():
    def broken(page, pages, config):
        raise ValueError("bad input")

    context = make_context(broken=broken, upcase=upcase)
    page = context.add_page(
        {"content": "x", "filters": ["broken", "upcase"]},
        content_filename=Path("broken.txt"),
    )
    context.begin_phase(Phase.PRE)
    with pytest.raises(FilterExecutionFailure) as excinfo:
        page.content
    error = excinfo.value
    assert error.source == "broken.txt"
    assert "failed to filter page 'broken.txt'" in str(error)
    assert isinstance(error.original_error, ValueError)
    assert error.__cause__ is error.original_error
    assert len(context.stack) == 0


def test_nested_failure_keeps_innermost_page_context():
    def broken(page, pages, config):
        raise KeyError("nope")

    context = make_context(read_other=read_other, broken=broken)
    a = context.add_page(
        {"name": "a", "other": "b", "content": "a", "filters": ["read_other"]},
        content_filename=Path("a.txt"),
    )
    context.add_page(
        {"name": "b", "content": "b", "filters": ["broken"]},
        content_filename=Path("b.txt"),
    )
    context.begin_phase(Phase.PRE)
    with pytest.raises(FilterExecutionFailure) as excinfo:
        a.content
    assert excinfo.value.source == "b.txt"


def test_filters_receive_config():
    def from_config(page, pages, config):
        return f"{page.content}@{config['site_name']}"

    registry = FilterRegistry()
    registry.register("from_config", from_config)
    context = BuildContext({"site_name": "Example"}, filters=registry)
    page = context.add_page({"content": "x", "filters": ["from_config"]})
    context.begin_phase(Phase.PRE)
    assert page.content == "x@Example"


def test_page_without_content_or_source_is_empty():
    context = make_context(upcase=upcase)
    page = context.add_page({"filters": ["upcase"]})
    context.begin_phase(Phase.PRE)
    assert page.content == ""
