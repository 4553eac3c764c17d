"""Tests for the editor session and its decoration field."""

from fencediv.adapters.html_renderer import HtmlRenderer
from fencediv.core.model import Range
from fencediv.core.state import NoChange, SelectionChange
from fencediv.editor import ClickEffect, EditorSession, EditorState, Transaction
from fencediv.settings import FencedDivSettings, StylingRule

DOC = "Intro\n\n::: note\nFirst\n:::\n\n::: {#two .box}\nSecond\n:::\n"
# "::: note" spans 7..25, "::: {#two .box}" spans 27..53


def _session(**kwargs) -> EditorSession:
    renderer = HtmlRenderer(FencedDivSettings())
    return EditorSession(DOC, renderer, **kwargs)


def test_transaction_flags():
    """Test doc/selection change detection and click positions."""
    a = EditorState("x", (Range.caret(0),))
    b = EditorState("x", (Range.caret(1),))
    c = EditorState("y", (Range.caret(1),))
    assert Transaction(a, a).doc_changed is False
    assert isinstance(Transaction(a, a).change(), NoChange)
    assert Transaction(a, b).selection_changed is True
    assert isinstance(Transaction(a, b).change(), SelectionChange)
    assert Transaction(b, c).doc_changed is True
    assert Transaction(a, a, (ClickEffect(4),)).clicked == (4,)


def test_initial_decorations_cover_visible_divs():
    """Test one block decoration per visible div."""
    session = _session()
    assert [(d.from_, d.to) for d in session.decorations] == [(7, 25), (27, 53)]
    assert session.decoration_field.rebuilds == 1


def test_caret_move_inside_div_hides_it():
    """Test moving the caret into a div removes its decoration."""
    session = _session()
    session.dispatch(selection=[Range.caret(30)])
    assert [d.div.name for d in session.decorations] == ["note"]


def test_selection_move_without_filter_change_skips_rebuild():
    """Test decorations are reused when the filtered set is equal."""
    session = _session()
    before = session.decorations
    session.dispatch(selection=[Range.caret(2)])
    assert session.decorations is before
    assert session.decoration_field.rebuilds == 1


def test_edit_outside_divs_with_same_structure_still_rebuilds_on_shift():
    """Test an edit that shifts offsets changes the filtered set."""
    session = _session()
    session.dispatch(text="Intro!\n" + DOC[6:])
    assert session.decoration_field.rebuilds == 2
    assert session.decorations[0].from_ == 8


def test_noop_dispatch_keeps_state():
    """Test a transaction touching nothing keeps the derived state object."""
    session = _session()
    value = session.divs.value
    session.dispatch()
    assert session.divs.value is value


def test_click_moves_caret_and_reveals_source():
    """Test clicking a rendered div."""
    session = _session()
    div = session.filtered[1]
    tx = session.click(div)
    assert session.state.selection == (Range.caret(div.text_start_pos),)
    assert tx.clicked == (div.from_,)
    assert [d.div.name for d in session.decorations] == ["note"]


def test_live_preview_off_has_no_decorations():
    """Test decorations disappear and come back with live preview."""
    session = _session(live_preview=False)
    assert session.decorations == ()
    session.dispatch(live_preview=True)
    assert len(session.decorations) == 2


def test_refresh_styles_rebuilds():
    """Test changed style settings are picked up."""
    settings = FencedDivSettings()
    session = EditorSession(DOC, HtmlRenderer(settings))
    settings.set_rule("r1", StylingRule("class", "box", "color: red;"))
    session.refresh_styles()
    assert session.decoration_field.rebuilds == 2
    assert "color: red;" in session.decorations[1].html


def test_div_at_finds_innermost():
    """Test mapping a position back to the parsed tree."""
    renderer = HtmlRenderer(FencedDivSettings())
    session = EditorSession("::: a\n::: b\nx\n:::\n:::\nafter", renderer)
    assert session.div_at(13).name == "b"
    assert session.div_at(1).name == "a"
    assert session.div_at(25) is None


def test_decorations_are_hashable():
    session = _session(selection=[])
    decorations = set(session.decorations)
    assert len(decorations) == 2
    assert session.decorations[0] in decorations
