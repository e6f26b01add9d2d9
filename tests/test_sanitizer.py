"""Tests for title and content sanitization."""

from doceditor.domains.documents.sanitizer import TITLE_MAX_LENGTH, sanitize_content, sanitize_title


class TestSanitizeContent:
    """Tests for HTML content sanitization."""

    def test_removes_script_element(self):
        assert sanitize_content("<script>alert(1)</script><p>hi</p>") == "<p>hi</p>"

    def test_removes_script_case_insensitive_with_attributes(self):
        html = '<SCRIPT type="text/javascript">var a = 1 < 2;</SCRIPT><p>ok</p>'
        assert sanitize_content(html) == "<p>ok</p>"

    def test_removes_multiple_scripts(self):
        html = "<p>a</p><script>x()</script><p>b</p><script>y()</script>"
        assert sanitize_content(html) == "<p>a</p><p>b</p>"

    def test_removes_inline_event_handlers(self):
        html = '<img src="a.png" onerror="steal()"><p onclick=\'go()\'>text</p>'
        result = sanitize_content(html)
        assert "onerror" not in result
        assert "onclick" not in result
        assert 'src="a.png"' in result
        assert "text" in result

    def test_keeps_attributes_that_only_contain_on(self):
        html = '<meta content="x"><p data-role="main">hi</p>'
        assert sanitize_content(html) == html

    def test_trims_whitespace(self):
        assert sanitize_content("  <p>hi</p>\n ") == "<p>hi</p>"

    def test_plain_text_unchanged(self):
        assert sanitize_content("just text") == "just text"

    def test_empty_string(self):
        assert sanitize_content("") == ""


class TestSanitizeTitle:
    """Tests for title sanitization."""

    def test_strips_angle_brackets_only(self):
        assert sanitize_title("<b>Hi</b>") == "bHi/b"

    def test_trims_whitespace(self):
        assert sanitize_title("   Notes  ") == "Notes"

    def test_truncates_to_max_length(self):
        title = "x" * 250
        assert len(sanitize_title(title)) == TITLE_MAX_LENGTH

    def test_truncates_after_trimming(self):
        title = "  " + "a" * 100 + "b"
        assert sanitize_title(title) == "a" * 100

    def test_is_deterministic(self):
        assert sanitize_title("<i>Same</i>") == sanitize_title("<i>Same</i>")
