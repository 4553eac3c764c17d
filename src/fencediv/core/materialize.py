"""Turn parsed region descriptors into render-ready fenced divs."""

import re
from dataclasses import dataclass, field
from typing import Iterable

from .model import FencedDiv, FencedDivContent, FencedDivInfo, FencedDivInfoContent

ID_RE = re.compile(r"#[\w-]+", re.ASCII)
CLASS_RE = re.compile(r"\.[\w-]+", re.ASCII)
TOKEN_RE = re.compile(r"\S+")


@dataclass
class _Pending:
    """A descriptor whose children are still being materialized."""
    info: FencedDivInfo
    content: list[FencedDivContent] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)
    index: int = 0

    def flush_lines(self) -> None:
        if self.lines:
            self.content.append("\n".join(self.lines) + "\n")
            self.lines = []

    def build(self) -> FencedDiv:
        info = self.info
        class_list: list[str] = []
        div_id = None
        name = None

        if info.bare_class_name:
            name = info.bare_class_name
            m = TOKEN_RE.search(info.bare_class_name)
            class_list = [m.group(0)] if m else []
        elif info.fenced_attrs:
            div_id, class_list = parse_id_and_class(info.fenced_attrs)

        return FencedDiv(
            from_=info.from_,
            to=info.to,
            text_start_pos=info.text_start_pos,
            content=self.content,
            class_list=class_list,
            id=div_id,
            name=name,
        )


def materialize(info: FencedDivInfo) -> FencedDiv:
    """
    Build a FencedDiv from a region descriptor and everything nested in it.

    Spans are copied as-is. The bare class name, when present, becomes both
    the single class and the display name; otherwise ids and classes are
    pulled out of the attribute block. Nesting is walked with an explicit
    stack, children finishing before their parent.
    """
    stack = [_Pending(info)]
    while True:
        top = stack[-1]
        children = top.info.content
        while top.index < len(children) and isinstance(children[top.index], str):
            top.lines.append(children[top.index])
            top.index += 1
        top.flush_lines()

        if top.index < len(children):
            stack.append(_Pending(children[top.index]))
            top.index += 1
            continue

        div = stack.pop().build()
        if not stack:
            return div
        stack[-1].content.append(div)


def materialize_all(infos: Iterable[FencedDivInfo]) -> list[FencedDiv]:
    return [materialize(info) for info in infos]


def merge_contiguous_strings(content: list[FencedDivInfoContent]) -> list[FencedDivContent]:
    """Join runs of raw lines into newline-terminated text blocks."""
    result: list[FencedDivContent] = []
    buffer: list[str] = []
    for child in content:
        if isinstance(child, str):
            buffer.append(child)
            continue
        if buffer:
            result.append("\n".join(buffer) + "\n")
            buffer = []
        result.append(materialize(child))
    if buffer:
        result.append("\n".join(buffer) + "\n")
    return result


def parse_id_and_class(fenced_attrs: str) -> tuple[str | None, list[str]]:
    """
    Extract ``(id, class_list)`` from an attribute block.

    The last ``#id`` wins; every ``.class`` is kept in order, duplicates
    included.

    Examples:
        >>> parse_id_and_class("{.note #a .wide #b}")
        ('b', ['note', 'wide'])
    """
    div_id = None
    for m in ID_RE.finditer(fenced_attrs):
        div_id = m.group(0)[1:]
    class_list = [m.group(0)[1:] for m in CLASS_RE.finditer(fenced_attrs)]
    return div_id, class_list
