"""
Message senders used by the notification dispatcher.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingMessage:
    to: str
    subject: str
    body: str


@runtime_checkable
class IMessageSender(Protocol):
    async def send(self, message: OutgoingMessage) -> None: ...


class LoggingMessageSender(IMessageSender):
    """Writes messages to the log instead of delivering them (no SMTP configured)."""

    async def send(self, message: OutgoingMessage) -> None:
        logger.info(f"[mail] to={message.to} subject={message.subject!r}")


class SmtpMessageSender(IMessageSender):
    """Sends plain-text e-mail through an SMTP server."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str = "",
        password: str = "",
        from_email: str = "no-reply@localhost",
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.use_tls = use_tls

    async def send(self, message: OutgoingMessage) -> None:
        # smtplib is blocking
        await asyncio.to_thread(self._send_sync, message)
        logger.info(f"E-mail sent to {message.to}: {message.subject}")

    def _send_sync(self, message: OutgoingMessage) -> None:
        msg = MIMEMultipart()
        msg["From"] = self.from_email
        msg["To"] = message.to
        msg["Subject"] = message.subject
        msg.attach(MIMEText(message.body, "plain"))

        with smtplib.SMTP(self.host, self.port) as server:
            if self.use_tls:
                server.starttls()
            if self.username:
                server.login(self.username, self.password)
            server.send_message(msg)
