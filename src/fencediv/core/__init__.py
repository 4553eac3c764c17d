"""Fenced div parsing and derived state."""

from .materialize import materialize, parse_id_and_class
from .model import FencedDiv, FencedDivInfo, Range
from .parser import parse_fenced_divs
from .ranges import range_in_selection
from .state import DerivedState, derive, filtered_changed, update

__all__ = [
    "DerivedState",
    "FencedDiv",
    "FencedDivInfo",
    "Range",
    "derive",
    "filtered_changed",
    "materialize",
    "parse_fenced_divs",
    "parse_id_and_class",
    "range_in_selection",
    "update",
]
