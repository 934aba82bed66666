"""Tests for HTML entity decoding."""

from marksync.utils.entities import decode_html_entities


class TestDecodeHtmlEntities:
    def test_each_entity(self):
        assert decode_html_entities("&amp;") == "&"
        assert decode_html_entities("&quot;") == '"'
        assert decode_html_entities("&#39;") == "'"
        assert decode_html_entities("&lt;") == "<"
        assert decode_html_entities("&gt;") == ">"

    def test_mixed_text(self):
        assert decode_html_entities("Tom &amp; Jerry&#39;s &lt;b&gt;") == "Tom & Jerry's <b>"

    def test_plain_text_untouched(self):
        assert decode_html_entities("Nothing to see here") == "Nothing to see here"

    def test_partial_sequences_untouched(self):
        assert decode_html_entities("&amp &#39 &lt") == "&amp &#39 &lt"

    def test_other_entities_untouched(self):
        assert decode_html_entities("a&nbsp;b&#40;c") == "a&nbsp;b&#40;c"

    def test_single_pass(self):
        assert decode_html_entities("&amp;lt;") == "&lt;"

    def test_idempotent_once_no_escapes_remain(self):
        once = decode_html_entities("&quot;Q&quot; &gt; A")
        assert decode_html_entities(once) == once

    def test_empty(self):
        assert decode_html_entities("") == ""
