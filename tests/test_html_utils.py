from app.platform.utils.html import outer_html, parse_html, parse_inline_style


class TestOuterHtml:

    def test_keeps_source_attribute_order(self):
        document = parse_html('<a title="t" href="/x" class="btn primary">Go</a>')

        assert outer_html(document.a) == '<a title="t" href="/x" class="btn primary">Go</a>'

    def test_escapes_text_and_attribute_values(self):
        document = parse_html('<p data-q="a&amp;b">1 &lt; 2</p>')

        assert outer_html(document.p) == '<p data-q="a&amp;b">1 &lt; 2</p>'

    def test_truncates_to_limit(self):
        document = parse_html('<input type="text" name="q">')

        assert outer_html(document.input, 12) == '<input type='

    def test_missing_node(self):
        assert outer_html(None) == ""


def test_parse_inline_style():
    assert parse_inline_style("Color: Red; outline:none;;bad") == {"color": "Red", "outline": "none"}
