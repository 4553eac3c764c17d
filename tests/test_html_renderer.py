"""Tests for HTML rendering of fenced divs."""

from fencediv.adapters.html_renderer import EscapedMarkdown, HtmlRenderer
from fencediv.core.materialize import materialize
from fencediv.core.parser import parse_fenced_divs
from fencediv.settings import FencedDivSettings, StylingRule


def _div(lines):
    [info] = parse_fenced_divs(lines)
    return materialize(info)


class UpperMarkdown:
    def render_markdown(self, text: str) -> str:
        return text.upper()


def test_container_classes_and_id():
    html = HtmlRenderer(FencedDivSettings()).render(_div(["::: {#intro .a .b}", "text", ":::"]))
    assert html.startswith('<div class="fenced-div a b" id="intro" data-text-start="19">')
    assert html.endswith("</div>")


def test_banner_comes_first():
    """Test the bare name shows as a banner before the content."""
    html = HtmlRenderer(FencedDivSettings(), UpperMarkdown()).render(_div(["::: warning", "careful", ":::"]))
    banner = html.index('<div class="fenced-div-banner">warning</div>')
    chunk = html.index('<div class="fenced-div-chunk">CAREFUL\n</div>')
    assert banner < chunk


def test_nested_divs_render_recursively():
    html = HtmlRenderer(FencedDivSettings(), UpperMarkdown()).render(
        _div(["::: outer", "a", "::: {.inner}", "b", ":::", "c", ":::"])
    )
    assert html.count('class="fenced-div') == 2 + 1 + 3  # two containers, banner, three chunks
    assert '<div class="fenced-div inner" data-text-start=' in html
    assert html.index("A\n") < html.index("B\n") < html.index("C\n")


def test_style_attribute_from_settings():
    settings = FencedDivSettings(global_styling="margin: 0;")
    settings.set_rule("r", StylingRule("class", "note", "color: red;"))
    html = HtmlRenderer(settings).render(_div(["::: note", "x", ":::"]))
    assert 'style="margin: 0;\ncolor: red;"' in html


def test_no_style_attribute_when_empty():
    html = HtmlRenderer(FencedDivSettings()).render(_div([":::", "x", ":::"]))
    assert "style=" not in html


def test_escaped_markdown_escapes():
    assert EscapedMarkdown().render_markdown("<b>\nnext\n") == "<p>&lt;b&gt;<br>\nnext</p>"
