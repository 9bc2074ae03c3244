# ============================================================================
# SCOPE: GLOBAL
# Description: Base container with process-wide singletons (event publisher,
#              lock registry, attachment storage, password hasher).
# ============================================================================
"""
Base Container - Shared Singletons.

Single Responsibility: Create and cache resources shared by every request.
"""

import logging

from app.config.settings import Settings, get_settings
from app.core.domain.events import DomainEventPublisher
from app.domains.scheduling.infrastructure.locking import KeyedLockRegistry, get_lock_registry
from app.domains.scheduling.infrastructure.notifications import (
    IMessageSender,
    LoggingMessageSender,
    NotificationDispatcher,
    SmtpMessageSender,
)
from app.domains.scheduling.infrastructure.security import BcryptPasswordHasher
from app.domains.scheduling.infrastructure.storage import LocalAttachmentStorage

logger = logging.getLogger(__name__)


class BaseContainer:
    """
    Base container for shared singletons.

    Request-scoped objects (sessions, repositories, services) are built by the
    domain containers on top of these.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

        self._event_publisher: DomainEventPublisher | None = None
        self._message_sender: IMessageSender | None = None
        self._attachment_storage: LocalAttachmentStorage | None = None
        self._password_hasher: BcryptPasswordHasher | None = None

        logger.info("BaseContainer initialized")

    def get_message_sender(self) -> IMessageSender:
        if self._message_sender is None:
            if self.settings.SMTP_HOST:
                logger.info(f"Creating SMTP message sender: {self.settings.SMTP_HOST}:{self.settings.SMTP_PORT}")
                self._message_sender = SmtpMessageSender(
                    host=self.settings.SMTP_HOST,
                    port=self.settings.SMTP_PORT,
                    username=self.settings.SMTP_USER,
                    password=self.settings.SMTP_PASSWORD,
                    from_email=self.settings.MAIL_FROM,
                    use_tls=self.settings.SMTP_USE_TLS,
                )
            else:
                logger.info("SMTP_HOST not set, notifications will only be logged")
                self._message_sender = LoggingMessageSender()
        return self._message_sender

    def get_event_publisher(self) -> DomainEventPublisher:
        """Publisher with the notification dispatcher subscribed."""
        if self._event_publisher is None:
            publisher = DomainEventPublisher()
            dispatcher = NotificationDispatcher(self.get_message_sender(), clinic_name=self.settings.CLINIC_NAME)
            dispatcher.register(publisher)
            self._event_publisher = publisher
        return self._event_publisher

    def get_lock_registry(self) -> KeyedLockRegistry:
        return get_lock_registry()

    def get_attachment_storage(self) -> LocalAttachmentStorage:
        if self._attachment_storage is None:
            self._attachment_storage = LocalAttachmentStorage(
                storage_path=self.settings.ATTACHMENTS_DIR,
                public_url_base=self.settings.ATTACHMENTS_PUBLIC_URL,
            )
        return self._attachment_storage

    def get_password_hasher(self) -> BcryptPasswordHasher:
        if self._password_hasher is None:
            self._password_hasher = BcryptPasswordHasher()
        return self._password_hasher
