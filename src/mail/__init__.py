"""AgentMail integration: mailbox client, message models and sync."""

from src.mail.client import AgentMailClient, MailClientError
from src.mail.config import MailConfig, get_mail_settings
from src.mail.models import ListMessagesResult, MailMessage, SendMessageResult
from src.mail.sync import MailboxSyncService, SyncResult

__all__ = [
    "AgentMailClient",
    "ListMessagesResult",
    "MailClientError",
    "MailConfig",
    "MailMessage",
    "MailboxSyncService",
    "SendMessageResult",
    "SyncResult",
    "get_mail_settings",
]
