"""Newsletter database models and operations."""

from src.database.newsletters.models import Newsletter
from src.database.newsletters.operations import (
    delete_newsletter,
    get_newsletter_by_id,
    get_newsletters_for_processing,
    get_recent_newsletters,
    has_unprocessed_newsletters,
    insert_newsletter,
    list_newsletters,
    mark_newsletters_processed,
    newsletter_exists,
    save_extraction,
    update_newsletter_body,
)

__all__ = [
    "Newsletter",
    "delete_newsletter",
    "get_newsletter_by_id",
    "get_newsletters_for_processing",
    "get_recent_newsletters",
    "has_unprocessed_newsletters",
    "insert_newsletter",
    "list_newsletters",
    "mark_newsletters_processed",
    "newsletter_exists",
    "save_extraction",
    "update_newsletter_body",
]
