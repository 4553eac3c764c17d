"""JSON-friendly views of parsed regions and fenced divs."""

from typing import Any

from .core.model import FencedDiv, FencedDivInfo


def info_to_dict(info: FencedDivInfo) -> dict[str, Any]:
    return {
        "from": info.from_,
        "to": info.to,
        "textStartPos": info.text_start_pos,
        "bareClassName": info.bare_class_name,
        "fencedAttrs": info.fenced_attrs,
        "content": [c if isinstance(c, str) else info_to_dict(c) for c in info.content],
    }


def div_to_dict(div: FencedDiv) -> dict[str, Any]:
    return {
        "from": div.from_,
        "to": div.to,
        "textStartPos": div.text_start_pos,
        "classList": list(div.class_list),
        "id": div.id,
        "name": div.name,
        "content": [c if isinstance(c, str) else div_to_dict(c) for c in div.content],
    }


def describe(div: FencedDiv) -> str:
    """One-line human summary, e.g. ``19-48 .note #intro "Note"``."""
    parts = [f"{div.from_}-{div.to}"]
    parts.extend(f".{c}" for c in div.class_list)
    if div.id:
        parts.append(f"#{div.id}")
    if div.name:
        parts.append(f'"{div.name}"')
    nested = sum(1 for c in div.content if isinstance(c, FencedDiv))
    if nested:
        parts.append(f"({nested} nested)")
    return " ".join(parts)
