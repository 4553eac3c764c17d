"""Tests for the derived fenced-div state."""

from dataclasses import replace

from fencediv.core.model import Range
from fencediv.core.parser import split_lines
from fencediv.core.state import (
    DocumentChange,
    NoChange,
    SelectionChange,
    classify_change,
    derive,
    filter_visible,
    filtered_changed,
    parse_document,
    update,
)

DOC = """Intro

::: note
First
:::

Between

::: {#two .box}
Second
:::
"""
# "::: note" spans 7..25, "::: {#two .box}" spans 36..62


def test_derive_parses_and_filters():
    """Test initial state with the caret in the first div."""
    state = derive(split_lines(DOC), [Range.caret(10)])
    assert [d.name for d in state.parsed] == ["note", None]
    assert [d.id for d in state.filtered] == ["two"]


def test_spans_of_sample_document():
    """Test the offsets used throughout these tests."""
    first, second = parse_document(split_lines(DOC))
    assert (first.from_, first.to) == (7, 25)
    assert (second.from_, second.to) == (36, 62)
    assert DOC[second.from_:second.to].endswith("Second\n:::")


def test_no_change_returns_same_state():
    """Test identity, not recomputation."""
    state = derive(split_lines(DOC), [Range.caret(0)])
    assert update(state, NoChange()) is state


def test_selection_change_reuses_parsed():
    """Test only the filtered list is recomputed."""
    state = derive(split_lines(DOC), [Range.caret(0)])
    assert len(state.filtered) == 2

    new_state = update(state, SelectionChange((Range.caret(40),)))
    assert new_state.parsed is state.parsed
    assert [d.name for d in new_state.filtered] == ["note"]


def test_document_change_reparses():
    """Test a document change replaces parsed wholesale."""
    state = derive(split_lines(DOC), [Range.caret(0)])
    new_doc = DOC.replace("::: note", "::: tip")
    new_state = update(state, DocumentChange(tuple(split_lines(new_doc)), (Range.caret(0),)))
    assert new_state.parsed is not state.parsed
    assert [d.name for d in new_state.parsed] == ["tip", None]


def test_document_change_filters_against_new_selection():
    """Test filtering uses the selection carried by the change."""
    state = derive(split_lines(DOC), [Range.caret(0)])
    new_state = update(state, DocumentChange(tuple(split_lines(DOC)), (Range(20, 40),)))
    assert new_state.filtered == ()


def test_classify_change():
    """Test each flag combination maps to one variant."""
    lines = ["a"]
    sel = [Range.caret(0)]
    assert isinstance(classify_change(False, False, lines, sel), NoChange)
    assert isinstance(classify_change(False, True, lines, sel), SelectionChange)
    assert isinstance(classify_change(True, False, lines, sel), DocumentChange)
    assert isinstance(classify_change(True, True, lines, sel), DocumentChange)
    assert isinstance(classify_change(False, False, lines, sel, clicked=[3]), SelectionChange)


def test_clicked_div_is_hidden():
    """Test a click on a nested div hides its top-level ancestor."""
    parsed = parse_document(["::: outer", "::: inner", "x", ":::", ":::", "::: other", ":::"])
    inner_from = parsed[0].content[0].from_
    visible = filter_visible(parsed, [Range.caret(1000)], clicked=[inner_from])
    assert [d.name for d in visible] == ["other"]


def test_filtered_changed_equal_lists():
    """Test structurally equal lists from separate parses compare equal."""
    a = parse_document(split_lines(DOC))
    b = parse_document(split_lines(DOC))
    assert a is not b
    assert filtered_changed(a, b) is False


def test_filtered_changed_detects_differences():
    """Test length, order and deep content differences."""
    a = parse_document(split_lines(DOC))
    assert filtered_changed(a, a[:1]) is True
    assert filtered_changed(a, tuple(reversed(a))) is True
    edited = parse_document(split_lines(DOC.replace("Second", "Changed")))
    assert filtered_changed(a, edited) is True
    assert filtered_changed(a, (a[0], replace(a[1], class_list=["other"]))) is True
    assert filtered_changed(a, (a[0], replace(a[1], id="three"))) is True
    assert filtered_changed((), ()) is False


def test_nested_content_difference_is_detected():
    """Test comparison recurses into nested divs."""
    a = parse_document(["::: a", "::: b", "x", ":::", ":::"])
    b = parse_document(["::: a", "::: b", "y", ":::", ":::"])
    assert filtered_changed(a, b) is True


def test_deeply_nested_document():
    """Test thousands of nesting levels derive, filter and compare."""
    depth = 2000
    lines = ["::: a"] * depth + ["x"] + [":::"] * depth

    state = derive(lines, [Range(0, 0)])
    [top] = state.parsed
    assert state.filtered == ()
    assert sum(1 for _ in top.walk()) == depth

    assert filtered_changed(state.parsed, parse_document(lines)) is False
    other = ["::: a"] * depth + ["y"] + [":::"] * depth
    assert filtered_changed(state.parsed, parse_document(other)) is True

    innermost = (depth - 1) * len("::: a\n")
    clicked = update(state, SelectionChange((), clicked=(innermost,)))
    assert clicked.filtered == ()
    moved = update(state, DocumentChange(tuple(other), ()))
    assert [d.from_ for d in moved.filtered] == [0]
