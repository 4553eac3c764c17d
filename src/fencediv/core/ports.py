from typing import Protocol
from .model import FencedDiv


class MarkdownRenderer(Protocol):
    """
    Turn one merged text block into HTML. Inline markdown belongs to the host.
    """

    def render_markdown(self, text: str) -> str:
        pass


class DivRenderer(Protocol):
    """
    Render a whole fenced div (nested divs included) for display.
    """

    def render(self, div: FencedDiv) -> str:
        pass


class IdGenerator(Protocol):
    def new_id(self) -> str:
        pass
