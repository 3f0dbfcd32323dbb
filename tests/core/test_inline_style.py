from labsite.core.inline_style import (
    BaselineOffset,
    InlineStyle,
    escape_attr,
    escape_html,
    render_html,
)


def test_bold_link_nests_strong_inside_anchor():
    style = InlineStyle.from_text_style({"bold": True, "link": {"url": "https://example.org/?a=1&b=2"}})
    assert render_html("Site", style) == (
        '<a href="https://example.org/?a=1&amp;b=2" target="_blank" rel="noopener">'
        "<strong>Site</strong></a>"
    )


def test_nesting_order_is_fixed_regardless_of_key_order():
    style = InlineStyle.from_text_style(
        {
            "baselineOffset": "SUPERSCRIPT",
            "strikethrough": True,
            "underline": True,
            "italic": True,
            "bold": True,
        }
    )
    assert render_html("x", style) == "<strong><em><u><s><sup>x</sup></s></u></em></strong>"


def test_subscript_and_unknown_baseline():
    assert render_html("2", InlineStyle.from_text_style({"baselineOffset": "SUBSCRIPT"})) == "<sub>2</sub>"
    style = InlineStyle.from_text_style({"baselineOffset": "SIDEWAYS"})
    assert style.baseline is BaselineOffset.NONE
    assert render_html("2", style) == "2"


def test_missing_or_invalid_text_style_is_plain():
    assert InlineStyle.from_text_style(None) == InlineStyle()
    assert InlineStyle.from_text_style({"link": {}}).link is None
    assert InlineStyle().wrappers() == []


def test_empty_text_renders_nothing():
    assert render_html("", InlineStyle(bold=True)) == ""


def test_escaping():
    assert escape_html("<b>&'\"") == "&lt;b&gt;&amp;&#x27;&quot;"
    assert escape_html(None) == ""
    assert escape_attr('a`"b') == "a&#96;&quot;b"
