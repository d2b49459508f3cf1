"""Render digests as HTML and plaintext e-mail bodies."""

from html import escape

from src.digest.models import Digest, RenderedDigest

FOOTER = "Generated by Newsletter Digest"

_STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px; }
    h1 { color: #1a1a1a; border-bottom: 2px solid #eee; padding-bottom: 10px; }
    h2 { color: #444; margin-top: 30px; }
    .highlight { background: #f8f9fa; padding: 15px; border-radius: 8px; margin: 15px 0; }
    .newsletter { border-left: 3px solid #007bff; padding-left: 15px; margin: 20px 0; }
    .source { font-weight: bold; color: #007bff; }
    .link { color: #007bff; text-decoration: none; }
    .footer { margin-top: 40px; padding-top: 20px; border-top: 1px solid #eee; font-size: 14px; color: #666; }
"""


def format_subject(schedule_name: str, digest: Digest) -> str:
    """Build the e-mail subject for a digest.

    :param schedule_name: Name of the schedule the digest belongs to.
    :param digest: The generated digest.
    :returns: The subject line.
    """
    return f"{schedule_name} - {digest.period_covered}"


def format_digest_html(digest: Digest, title: str) -> str:
    """Render a digest as an HTML document.

    :param digest: The generated digest.
    :param title: Heading shown at the top of the document.
    :returns: HTML string.
    """
    lines = [
        "<!DOCTYPE html>",
        "<html>",
        "<head>",
        '  <meta charset="utf-8">',
        f"  <style>{_STYLE}  </style>",
        "</head>",
        "<body>",
        f"  <h1>{escape(title)}</h1>",
        f"  <p><em>{escape(digest.period_covered)}</em></p>",
    ]

    if digest.highlights:
        lines.append('  <div class="highlight">')
        lines.append("    <h2>Highlights</h2>")
        lines.append("    <ul>")
        lines.extend(f"      <li>{escape(highlight)}</li>" for highlight in digest.highlights)
        lines.append("    </ul>")
        lines.append("  </div>")

    lines.append("  <h2>Newsletter Summaries</h2>")
    for entry in digest.newsletters:
        lines.append('  <div class="newsletter">')
        lines.append(f'    <p class="source">{escape(entry.source)}</p>')
        lines.append(f"    <h3>{escape(entry.headline)}</h3>")
        lines.append(f"    <p>{escape(entry.summary)}</p>")
        if entry.top_links:
            lines.append("    <p><strong>Links:</strong></p>")
            lines.append("    <ul>")
            for link in entry.top_links:
                href = escape(link.url or "#", quote=True)
                title = escape(link.title)
                lines.append(f'      <li><a class="link" href="{href}">{title}</a></li>')
            lines.append("    </ul>")
        lines.append("  </div>")

    lines.append('  <div class="footer">')
    if digest.closing_note:
        lines.append(f"    <p>{escape(digest.closing_note)}</p>")
    lines.append(f"    <p><em>{FOOTER}</em></p>")
    lines.append("  </div>")
    lines.append("</body>")
    lines.append("</html>")

    return "\n".join(lines)


def format_digest_text(digest: Digest, title: str) -> str:
    """Render a digest as plain text.

    :param digest: The generated digest.
    :param title: Heading shown at the top of the text.
    :returns: Plaintext string.
    """
    lines = [title.upper(), digest.period_covered, ""]

    if digest.highlights:
        lines.append("HIGHLIGHTS")
        lines.append("=" * 40)
        lines.extend(f"- {highlight}" for highlight in digest.highlights)
        lines.append("")

    lines.append("NEWSLETTER SUMMARIES")
    lines.append("=" * 40)
    lines.append("")

    for entry in digest.newsletters:
        lines.append(f"[{entry.source}]")
        lines.append(entry.headline)
        lines.append("-" * 30)
        lines.append(entry.summary)
        if entry.top_links:
            lines.append("")
            lines.append("Links:")
            lines.extend(f"  - {link.title}: {link.url or 'N/A'}" for link in entry.top_links)
        lines.append("")

    if digest.closing_note:
        lines.append(digest.closing_note)
        lines.append("")
    lines.append("---")
    lines.append(FOOTER)

    return "\n".join(lines) + "\n"


def render_digest(digest: Digest, schedule_name: str) -> RenderedDigest:
    """Render a digest for delivery.

    :param digest: The generated digest.
    :param schedule_name: Name of the schedule the digest belongs to.
    :returns: Subject, HTML and plaintext renderings.
    """
    return RenderedDigest(
        subject=format_subject(schedule_name, digest),
        html=format_digest_html(digest, schedule_name),
        text=format_digest_text(digest, schedule_name),
    )
