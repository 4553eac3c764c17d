from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Protocol, Union


class Span(Protocol):
    from_: int
    to: int


@dataclass(frozen=True)
class Range:
    from_: int  # char offsets; selection ranges may arrive with from_ > to
    to: int

    @classmethod
    def caret(cls, pos: int) -> Range:
        return cls(pos, pos)


def _same_tree(a: Any, b: Any) -> bool:
    """Structural equality of two region trees, without recursion."""
    node_type = type(a)
    pending = [(a, b)]
    while pending:
        x, y = pending.pop()
        if x is y:
            continue
        if x._fields() != y._fields() or len(x.content) != len(y.content):
            return False
        for c, d in zip(x.content, y.content):
            if isinstance(c, node_type) and isinstance(d, node_type):
                pending.append((c, d))
            elif isinstance(c, node_type) or isinstance(d, node_type) or c != d:
                return False
    return True


# Nested content is a plain list, so these compare by value but do not hash.
@dataclass(frozen=True, eq=False)
class FencedDivInfo:
    from_: int
    to: int  # end of the closing fence line, terminator excluded
    text_start_pos: int
    content: list[FencedDivInfoContent] = field(default_factory=list)
    bare_class_name: str | None = None  # "::: name" form
    fenced_attrs: str | None = None  # "::: {#id .class}" form

    __hash__ = None  # type: ignore[assignment]

    def _fields(self) -> tuple:
        return (self.from_, self.to, self.text_start_pos, self.bare_class_name, self.fenced_attrs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FencedDivInfo):
            return NotImplemented
        return _same_tree(self, other)


FencedDivInfoContent = Union[str, FencedDivInfo]


@dataclass(frozen=True, eq=False)
class FencedDiv:
    from_: int
    to: int
    text_start_pos: int
    content: list[FencedDivContent] = field(default_factory=list)
    class_list: list[str] = field(default_factory=list)
    id: str | None = None
    name: str | None = None

    __hash__ = None  # type: ignore[assignment]

    def _fields(self) -> tuple:
        return (self.from_, self.to, self.text_start_pos, self.class_list, self.id, self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FencedDiv):
            return NotImplemented
        return _same_tree(self, other)

    def walk(self):
        """Yield this div and every nested div, depth first."""
        stack = [self]
        while stack:
            div = stack.pop()
            yield div
            stack.extend(reversed([c for c in div.content if isinstance(c, FencedDiv)]))


FencedDivContent = Union[str, FencedDiv]
