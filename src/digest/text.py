"""Plaintext preparation of newsletter bodies for extraction."""

import re

from bs4 import BeautifulSoup

_WHITESPACE_PATTERN = re.compile(r"\s+")


def html_to_text(html: str) -> str:
    """Convert an HTML document to a single line of plain text.

    Scripts and styles are removed, tags become spaces and whitespace is
    collapsed.

    :param html: Raw HTML.
    :returns: The visible text.
    """
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(["script", "style", "head", "noscript"]):
        element.decompose()

    text = soup.get_text(separator=" ")
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def prepare_body(body_text: str | None, body_html: str | None, max_chars: int) -> str:
    """Choose the best body for extraction and cap its length.

    The plaintext part wins; otherwise the HTML part is flattened.

    :param body_text: Plaintext body, if any.
    :param body_html: HTML body, if any.
    :param max_chars: Maximum characters to return.
    :returns: The prepared body, possibly empty.
    """
    if body_text and body_text.strip():
        body = body_text.strip()
    elif body_html:
        body = html_to_text(body_html)
    else:
        body = ""

    return body[:max_chars]
