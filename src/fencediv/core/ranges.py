from typing import Iterable

from .model import Span


def normalize(sel: Span) -> tuple[int, int]:
    """Return ``(low, high)`` for a range that may be inverted."""
    return (sel.from_, sel.to) if sel.from_ < sel.to else (sel.to, sel.from_)


def range_in_selection(span: Span, selection: Iterable[Span]) -> bool:
    """True if ``span`` touches any selection range, ends inclusive."""
    for sel in selection:
        low, high = normalize(sel)
        if span.from_ <= high and span.to >= low:
            return True
    return False
