"""Prompts for newsletter extraction and digest generation."""

from src.enums import SummaryLength

EXTRACTION_SYSTEM_PROMPT = """You extract structured content from email newsletters.

Respond with valid JSON only, no other text, matching this shape:
{
  "topics": ["short topic names, 1-4 words each"],
  "key_takeaways": ["one sentence per takeaway"],
  "sections": [{"heading": "section heading", "summary": "two or three sentences"}],
  "links": [{"title": "link text", "url": "https://... or null"}]
}

Use between 1 and 8 topics, named the way a reader would search for them
(e.g. "AI", "Climate Policy", "Startups"). Ignore unsubscribe links, sponsor
boilerplate and footers. Only include URLs that appear in the newsletter."""

EXTRACTION_USER_TEMPLATE = """Sender: {sender}
Subject: {subject}

Newsletter body:
{body}"""

DIGEST_SYSTEM_PROMPT = """You write a concise email digest from a set of newsletters.

Respond with valid JSON only, no other text, matching this shape:
{
  "period_covered": "human-readable period, e.g. 'Week of 3 March 2025'",
  "highlights": ["the most important points across all newsletters"],
  "newsletters": [
    {
      "source": "newsletter or sender name",
      "headline": "one-line headline",
      "summary": "prose summary",
      "top_links": [{"title": "link title", "url": "https://... or null"}]
    }
  ],
  "closing_note": "one friendly closing sentence"
}

Write exactly one entry in "newsletters" per input newsletter, in input order.
Focus on what relates to the reader's topics."""

DIGEST_USER_TEMPLATE = """Reader's topics: {topics}
Summary length: {length_guidance}
{links_guidance}
{custom_instructions}
Newsletters (JSON):
{newsletters_json}"""

LENGTH_GUIDANCE: dict[SummaryLength, str] = {
    SummaryLength.SHORT: "short, one or two sentences per newsletter and at most 3 highlights",
    SummaryLength.MEDIUM: "medium, one paragraph per newsletter and at most 5 highlights",
    SummaryLength.LONG: "long, several paragraphs per newsletter and up to 8 highlights",
}

LINKS_INCLUDED = "Include up to 3 of the most useful links per newsletter in top_links."
LINKS_EXCLUDED = "Do not include links; leave top_links empty."
