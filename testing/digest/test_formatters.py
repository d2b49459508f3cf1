"""Tests for digest rendering."""

import unittest

from src.digest.formatters import FOOTER, format_digest_text, format_subject, render_digest
from src.digest.models import Digest, DigestEntry, Link


def _digest(**overrides: object) -> Digest:
    values: dict[str, object] = {
        "period_covered": "Jan 1 - Jan 7, 2025",
        "highlights": ["Models <cheaper>"],
        "newsletters": [
            DigestEntry(
                source="The Batch",
                headline="Prices fell",
                summary="Details & more",
                top_links=[
                    Link(title="Paper", url="https://example.com/?a=1&b=2"),
                    Link(title="Bare"),
                ],
            )
        ],
        "closing_note": "Bye",
    }
    values.update(overrides)
    return Digest(**values)


class TestFormatSubject(unittest.TestCase):
    """Tests for format_subject function."""

    def test_subject_includes_name_and_period(self) -> None:
        """Test that the subject joins schedule name and period."""
        self.assertEqual(format_subject("AI Weekly", _digest()), "AI Weekly - Jan 1 - Jan 7, 2025")


class TestRenderDigest(unittest.TestCase):
    """Tests for render_digest function."""

    def test_html_escapes_content(self) -> None:
        """Test that model output is escaped in HTML."""
        rendered = render_digest(_digest(), "AI <Weekly>")

        self.assertIn("AI &lt;Weekly&gt;", rendered.html)
        self.assertIn("Models &lt;cheaper&gt;", rendered.html)
        self.assertIn("Details &amp; more", rendered.html)
        self.assertIn('href="https://example.com/?a=1&amp;b=2"', rendered.html)
        self.assertIn('href="#"', rendered.html)
        self.assertIn(FOOTER, rendered.html)

    def test_text_lists_links_and_footer(self) -> None:
        """Test the plaintext rendering."""
        text = format_digest_text(_digest(), "AI Weekly")

        self.assertTrue(text.startswith("AI WEEKLY\n"))
        self.assertIn("- Models <cheaper>", text)
        self.assertIn("  - Paper: https://example.com/?a=1&b=2", text)
        self.assertIn("  - Bare: N/A", text)
        self.assertTrue(text.rstrip().endswith(FOOTER))

    def test_omits_empty_sections(self) -> None:
        """Test that highlights and closing note are optional."""
        rendered = render_digest(_digest(highlights=[], closing_note=""), "AI Weekly")

        self.assertNotIn("Highlights", rendered.html)
        self.assertNotIn("HIGHLIGHTS", rendered.text)


if __name__ == "__main__":
    unittest.main()
