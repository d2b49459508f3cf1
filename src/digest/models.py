"""Pydantic records for extracted newsletter content and generated digests."""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Section(BaseModel):
    """A section of a newsletter."""

    model_config = ConfigDict(extra="ignore")

    heading: str
    summary: str


class Link(BaseModel):
    """A titled link, optionally without a URL."""

    model_config = ConfigDict(extra="ignore")

    title: str
    url: str | None = None


class ExtractedContent(BaseModel):
    """Structured content extracted from one newsletter."""

    model_config = ConfigDict(extra="ignore")

    topics: list[str] = Field(default_factory=list)
    key_takeaways: list[str] = Field(default_factory=list)
    sections: list[Section] = Field(default_factory=list)
    links: list[Link] = Field(default_factory=list)

    @field_validator("topics")
    @classmethod
    def clean_topics(cls, v: list[str]) -> list[str]:
        """Strip whitespace and drop empty or duplicate topics.

        :param v: Raw topics.
        :returns: Cleaned topics in original order.
        """
        seen: set[str] = set()
        cleaned: list[str] = []
        for topic in v:
            stripped = topic.strip()
            if stripped and stripped.lower() not in seen:
                seen.add(stripped.lower())
                cleaned.append(stripped)
        return cleaned


class DigestEntry(BaseModel):
    """The digest's summary of one newsletter."""

    model_config = ConfigDict(extra="ignore")

    source: str
    headline: str
    summary: str
    top_links: list[Link] = Field(default_factory=list)


class Digest(BaseModel):
    """A generated digest."""

    model_config = ConfigDict(extra="ignore")

    period_covered: str
    highlights: list[str] = Field(default_factory=list)
    newsletters: list[DigestEntry] = Field(default_factory=list)
    closing_note: str = ""


class DigestInput(BaseModel):
    """One newsletter's extracted content as handed to the digest generator."""

    id: str
    sender: str
    subject: str
    content: ExtractedContent


class RenderedDigest(BaseModel):
    """A digest rendered for delivery."""

    subject: str
    html: str
    text: str
