"""Line scanner for colon-fenced div regions.

A region opens with a line of three or more colons, optionally followed by
a single bare class name (``::: warning``) or an attribute block
(``::: {#intro .note .wide}``), and closes with a line made only of colons.
While a region is open a colon-only line always closes it. Regions nest;
closes pair with the most recent open.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .model import FencedDivInfo, FencedDivInfoContent

FENCE_END_RE = re.compile(r"^:{3,}\s*$")
FENCED_ATTRS_RE = re.compile(r"^:{3,}\s*(\{(?:\s*[#.][\w-]+)*\s*\})\s*:*$", re.ASCII)
BARE_CLASS_NAME_RE = re.compile(r"^:{3,}\s*(\S+?)\s*:*$")


@dataclass
class _OpenFence:
    """Region whose closing fence has not been seen yet."""
    from_: int
    text_start_pos: int
    content: list[FencedDivInfoContent] = field(default_factory=list)
    bare_class_name: str | None = None
    fenced_attrs: str | None = None

    def close(self, to: int) -> FencedDivInfo:
        return FencedDivInfo(
            from_=self.from_,
            to=to,
            text_start_pos=self.text_start_pos,
            content=self.content,
            bare_class_name=self.bare_class_name,
            fenced_attrs=self.fenced_attrs,
        )


def parse_fenced_divs(lines: Iterable[str]) -> Iterator[FencedDivInfo]:
    """
    Yield top-level fenced div regions found in ``lines``, in document order.

    Each line is taken without its terminator and counts ``len(line) + 1``
    towards offsets. Regions still open when the input ends are dropped
    together with everything nested inside them.
    """
    pos = 0
    stack: list[_OpenFence] = []

    for line in lines:
        if stack and FENCE_END_RE.match(line):
            info = stack.pop().close(pos + len(line))
            if stack:
                stack[-1].content.append(info)
            else:
                yield info
        elif FENCE_END_RE.match(line):
            # Colon-only line outside any region: an opener without attributes
            stack.append(_OpenFence(from_=pos, text_start_pos=pos + len(line) + 1))
        elif m := FENCED_ATTRS_RE.match(line):
            stack.append(
                _OpenFence(
                    from_=pos,
                    text_start_pos=pos + len(line) + 1,
                    fenced_attrs=m.group(1),
                )
            )
        elif m := BARE_CLASS_NAME_RE.match(line):
            stack.append(
                _OpenFence(
                    from_=pos,
                    text_start_pos=pos + len(line) + 1,
                    bare_class_name=m.group(1),
                )
            )
        elif stack:
            stack[-1].content.append(line)

        pos += len(line) + 1


def split_lines(text: str) -> list[str]:
    """Split document text into lines the way the editor counts them."""
    return text.split("\n")
