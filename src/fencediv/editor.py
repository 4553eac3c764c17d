"""Editor host: document state, transactions and the fenced-div fields.

The editor owns two fields. ``FencedDivField`` keeps the derived parse and
filter state; ``DecorationField`` turns the filtered divs into block
replacements, rebuilding them only when the filtered set actually changed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Sequence

from .core.model import FencedDiv, Range
from .core.parser import split_lines
from .core.ports import DivRenderer
from .core.state import Change, DerivedState, classify_change, derive, filtered_changed, update

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditorState:
    text: str
    selection: tuple[Range, ...] = (Range(0, 0),)
    live_preview: bool = True

    def lines(self) -> list[str]:
        return split_lines(self.text)


@dataclass(frozen=True)
class ClickEffect:
    """Emitted when a rendered div is clicked; ``pos`` is the div's start."""
    pos: int


@dataclass(frozen=True)
class Transaction:
    start: EditorState
    state: EditorState
    effects: tuple[ClickEffect, ...] = ()

    @property
    def doc_changed(self) -> bool:
        return self.start.text != self.state.text

    @property
    def selection_changed(self) -> bool:
        return self.start.selection != self.state.selection

    @property
    def clicked(self) -> tuple[int, ...]:
        return tuple(e.pos for e in self.effects if isinstance(e, ClickEffect))

    def change(self) -> Change:
        return classify_change(
            self.doc_changed,
            self.selection_changed,
            self.state.lines() if self.doc_changed else (),
            self.state.selection,
            self.clicked,
        )


class FencedDivField:
    """Slot holding the current DerivedState; replaced whole on each update."""

    def __init__(self, state: EditorState):
        self.value: DerivedState = derive(state.lines(), state.selection)

    def update(self, tx: Transaction) -> DerivedState:
        self.value = update(self.value, tx.change())
        return self.value


@dataclass(frozen=True)
class Decoration:
    """Block replacement of ``from_..to`` by the rendered ``div``."""
    from_: int
    to: int
    div: FencedDiv = field(hash=False)
    html: str


class DecorationField:
    def __init__(self, renderer: DivRenderer):
        self.renderer = renderer
        self.decorations: tuple[Decoration, ...] = ()
        self.rebuilds = 0
        self._filtered: tuple[FencedDiv, ...] = ()
        self._stale = True

    def invalidate(self) -> None:
        """Force a rebuild on the next update, e.g. after style settings changed."""
        self._stale = True

    def update(self, state: EditorState, derived: DerivedState) -> tuple[Decoration, ...]:
        if not state.live_preview:
            self._filtered = ()
            self._stale = True
            self.decorations = ()
            return self.decorations

        if self._stale or filtered_changed(self._filtered, derived.filtered):
            self.decorations = tuple(
                Decoration(div.from_, div.to, div, self.renderer.render(div))
                for div in derived.filtered
            )
            self.rebuilds += 1
            self._stale = False
            logger.debug("rebuilt %d decorations", len(self.decorations))
        self._filtered = derived.filtered
        return self.decorations


class EditorSession:
    """A single document with its selection and fenced-div fields."""

    def __init__(
        self,
        text: str,
        renderer: DivRenderer,
        selection: Sequence[Range] = (Range(0, 0),),
        live_preview: bool = True,
    ):
        self.state = EditorState(text, tuple(selection), live_preview)
        self.divs = FencedDivField(self.state)
        self.decoration_field = DecorationField(renderer)
        self.decoration_field.update(self.state, self.divs.value)

    @property
    def parsed(self) -> tuple[FencedDiv, ...]:
        return self.divs.value.parsed

    @property
    def filtered(self) -> tuple[FencedDiv, ...]:
        return self.divs.value.filtered

    @property
    def decorations(self) -> tuple[Decoration, ...]:
        return self.decoration_field.decorations

    def dispatch(
        self,
        text: str | None = None,
        selection: Iterable[Range] | None = None,
        effects: Iterable[ClickEffect] = (),
        live_preview: bool | None = None,
    ) -> Transaction:
        """Apply one transaction; both fields see it before it returns."""
        new_state = self.state
        if text is not None:
            new_state = replace(new_state, text=text)
        if selection is not None:
            new_state = replace(new_state, selection=tuple(selection))
        if live_preview is not None:
            new_state = replace(new_state, live_preview=live_preview)

        tx = Transaction(self.state, new_state, tuple(effects))
        self.state = new_state
        derived = self.divs.update(tx)
        self.decoration_field.update(self.state, derived)
        return tx

    def click(self, div: FencedDiv) -> Transaction:
        """Reveal the source of ``div`` and put the caret at its first text line."""
        return self.dispatch(
            selection=[Range.caret(div.text_start_pos)],
            effects=[ClickEffect(div.from_)],
        )

    def refresh_styles(self) -> None:
        self.decoration_field.invalidate()
        self.decoration_field.update(self.state, self.divs.value)

    def div_at(self, pos: int) -> FencedDiv | None:
        """Innermost parsed div whose span contains ``pos``."""
        found = None
        candidates: Sequence[FencedDiv] = self.parsed
        while True:
            for div in candidates:
                if div.from_ <= pos <= div.to:
                    found = div
                    candidates = [c for c in div.content if isinstance(c, FencedDiv)]
                    break
            else:
                return found
