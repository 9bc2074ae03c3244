from app.domains.scheduling.infrastructure.notifications.message_sender import (
    IMessageSender,
    LoggingMessageSender,
    OutgoingMessage,
    SmtpMessageSender,
)
from app.domains.scheduling.infrastructure.notifications.notification_dispatcher import NotificationDispatcher

__all__ = [
    "IMessageSender",
    "LoggingMessageSender",
    "NotificationDispatcher",
    "OutgoingMessage",
    "SmtpMessageSender",
]
