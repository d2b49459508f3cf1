"""Tests for newsletter body preparation."""

import unittest

from src.digest.text import html_to_text, prepare_body


class TestHtmlToText(unittest.TestCase):
    """Tests for html_to_text function."""

    def test_strips_tags_scripts_and_styles(self) -> None:
        """Test that only visible text remains."""
        html = (
            "<html><head><title>T</title><style>p{color:red}</style></head>"
            "<body><script>alert(1)</script><p>Hello</p>\n\n<p>world</p></body></html>"
        )

        self.assertEqual(html_to_text(html), "Hello world")


class TestPrepareBody(unittest.TestCase):
    """Tests for prepare_body function."""

    def test_prefers_plaintext(self) -> None:
        """Test that the plaintext part wins over HTML."""
        self.assertEqual(prepare_body("  plain  ", "<p>html</p>", 100), "plain")

    def test_falls_back_to_html(self) -> None:
        """Test that HTML is flattened when there is no plaintext."""
        self.assertEqual(prepare_body("   ", "<p>from html</p>", 100), "from html")

    def test_caps_length(self) -> None:
        """Test that the body is truncated to the character limit."""
        self.assertEqual(prepare_body("x" * 50, None, 10), "x" * 10)

    def test_empty_when_no_body(self) -> None:
        """Test that a newsletter with no body yields an empty string."""
        self.assertEqual(prepare_body(None, None, 100), "")


if __name__ == "__main__":
    unittest.main()
