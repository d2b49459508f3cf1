"""Topic matching between schedules and extracted newsletters."""

from collections.abc import Iterable


def topics_match(schedule_topic: str, newsletter_topic: str) -> bool:
    """Check whether two topics match.

    Case-insensitive; either string containing the other counts as a match.

    :param schedule_topic: A topic from a schedule's filter.
    :param newsletter_topic: A topic derived from a newsletter.
    :returns: True if the topics match.
    """
    wanted = schedule_topic.strip().lower()
    found = newsletter_topic.strip().lower()
    if not wanted or not found:
        return False
    return wanted in found or found in wanted


def matches_any_topic(schedule_topics: Iterable[str], newsletter_topics: Iterable[str]) -> bool:
    """Check whether any schedule topic matches any newsletter topic.

    :param schedule_topics: The schedule's topic filter.
    :param newsletter_topics: The newsletter's derived topics.
    :returns: True if at least one pair matches.
    """
    newsletter_topics = list(newsletter_topics)
    return any(
        topics_match(schedule_topic, newsletter_topic)
        for schedule_topic in schedule_topics
        for newsletter_topic in newsletter_topics
    )
