"""HTML rendering of fenced divs."""

import html

from ..core.model import FencedDiv
from ..core.ports import DivRenderer, MarkdownRenderer
from ..settings import FencedDivSettings

CONTAINER_CLASS = "fenced-div"
BANNER_CLASS = "fenced-div-banner"
CHUNK_CLASS = "fenced-div-chunk"


class EscapedMarkdown(MarkdownRenderer):
    """Fallback text renderer: escapes the block and keeps its line breaks."""

    def render_markdown(self, text: str) -> str:
        return "<p>" + html.escape(text.rstrip("\n")).replace("\n", "<br>\n") + "</p>"


class HtmlRenderer(DivRenderer):
    def __init__(self, settings: FencedDivSettings, markdown: MarkdownRenderer | None = None):
        self.settings = settings
        self.markdown = markdown or EscapedMarkdown()

    def render(self, div: FencedDiv) -> str:
        """
        Render ``div`` and its nested divs as one HTML element.

        ``data-text-start`` carries the offset a click should move the caret
        to; the host wires the actual handler.
        """
        classes = " ".join([CONTAINER_CLASS, *div.class_list])
        attrs = [f'class="{html.escape(classes)}"']
        if div.id:
            attrs.append(f'id="{html.escape(div.id)}"')
        style = self.settings.style_for(div.class_list, div.id)
        if style.strip():
            attrs.append(f'style="{html.escape(style)}"')
        attrs.append(f'data-text-start="{div.text_start_pos}"')

        parts = []
        if div.name:
            parts.append(f'<div class="{BANNER_CLASS}">{html.escape(div.name)}</div>')
        for child in div.content:
            if isinstance(child, str):
                parts.append(
                    f'<div class="{CHUNK_CLASS}">{self.markdown.render_markdown(child)}</div>'
                )
            else:
                parts.append(self.render(child))

        return f"<div {' '.join(attrs)}>" + "".join(parts) + "</div>"
