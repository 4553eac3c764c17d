"""Derived fenced-div state kept in step with a document and its selection.

``parsed`` holds every top-level div of the document; ``filtered`` holds
the ones the selection does not touch, i.e. the ones a preview may replace
with rendered output. Each editor transaction maps to exactly one of three
changes, and ``update`` only redoes the work that change requires.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence, Union

from .materialize import materialize_all
from .model import FencedDiv, Range
from .parser import parse_fenced_divs
from .ranges import range_in_selection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedState:
    parsed: tuple[FencedDiv, ...]
    filtered: tuple[FencedDiv, ...]


@dataclass(frozen=True)
class NoChange:
    pass


@dataclass(frozen=True)
class SelectionChange:
    selection: tuple[Range, ...]
    clicked: tuple[int, ...] = ()


@dataclass(frozen=True)
class DocumentChange:
    lines: tuple[str, ...]
    selection: tuple[Range, ...]
    clicked: tuple[int, ...] = ()


Change = Union[NoChange, SelectionChange, DocumentChange]


def classify_change(
    doc_changed: bool,
    selection_changed: bool,
    lines: Iterable[str],
    selection: Iterable[Range],
    clicked: Iterable[int] = (),
) -> Change:
    """Map the two change flags of a transaction onto a Change variant."""
    clicked = tuple(clicked)
    if doc_changed:
        return DocumentChange(tuple(lines), tuple(selection), clicked)
    if selection_changed or clicked:
        return SelectionChange(tuple(selection), clicked)
    return NoChange()


def parse_document(lines: Iterable[str]) -> tuple[FencedDiv, ...]:
    return tuple(materialize_all(parse_fenced_divs(lines)))


def filter_visible(
    parsed: Sequence[FencedDiv],
    selection: Sequence[Range],
    clicked: Sequence[int] = (),
) -> tuple[FencedDiv, ...]:
    """
    Drop divs the selection intersects.

    A div is also dropped when it, or any div nested in it, starts at one of
    the ``clicked`` positions, so a click on a nested render reveals the
    whole top-level source.
    """
    visible = []
    for div in parsed:
        if range_in_selection(div, selection):
            continue
        if clicked and any(d.from_ in clicked for d in div.walk()):
            continue
        visible.append(div)
    return tuple(visible)


def derive(lines: Iterable[str], selection: Sequence[Range] = ()) -> DerivedState:
    """Build the state for a freshly loaded document."""
    parsed = parse_document(lines)
    return DerivedState(parsed=parsed, filtered=filter_visible(parsed, selection))


def update(state: DerivedState, change: Change) -> DerivedState:
    """Return the state after ``change``; ``state`` itself when nothing changed."""
    if isinstance(change, DocumentChange):
        parsed = parse_document(change.lines)
        logger.debug("document changed: reparsed %d top-level divs", len(parsed))
        return DerivedState(
            parsed=parsed,
            filtered=filter_visible(parsed, change.selection, change.clicked),
        )
    if isinstance(change, SelectionChange):
        logger.debug("selection changed: refiltering %d divs", len(state.parsed))
        return DerivedState(
            parsed=state.parsed,
            filtered=filter_visible(state.parsed, change.selection, change.clicked),
        )
    return state


def filtered_changed(previous: Sequence[FencedDiv], current: Sequence[FencedDiv]) -> bool:
    """
    Deep structural comparison of two filtered lists.

    Order matters; divs compare by spans, classes, id, name and content.
    """
    if len(previous) != len(current):
        return True
    return any(a != b for a, b in zip(previous, current))
