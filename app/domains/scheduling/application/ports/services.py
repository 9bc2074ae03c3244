"""
Service Ports

Interfaces for the transaction boundary, attachment storage, password
hashing, event publishing and in-process locking used by the scheduling
application services.
"""

from collections.abc import Hashable
from contextlib import AbstractAsyncContextManager
from typing import Protocol, runtime_checkable

from app.core.domain import DomainEvent
from app.domains.scheduling.domain.value_objects.clinical import LabReport


@runtime_checkable
class IUnitOfWork(Protocol):
    """Transaction boundary shared by the repositories of one request."""

    async def commit(self) -> None:
        """Make every pending change durable."""
        ...

    async def rollback(self) -> None:
        """Discard every pending change."""
        ...


@runtime_checkable
class IAttachmentStorage(Protocol):
    """
    Durable storage for lab report files.

    Example:
        ```python
        report = await storage.store(content, "blood-test.pdf")
        # report.url -> "/attachments/3f2c...e1.pdf"
        await storage.delete(report.url)
        ```
    """

    async def store(self, content: bytes, original_name: str) -> LabReport:
        """
        Persist a file.

        Args:
            content: File bytes
            original_name: Client file name, kept for display

        Returns:
            LabReport with a durable URL
        """
        ...

    async def delete(self, url: str) -> bool:
        """
        Remove a stored file.

        Returns:
            True if the file existed and was removed
        """
        ...


@runtime_checkable
class IPasswordHasher(Protocol):
    async def hash(self, password: str) -> str: ...

    async def verify(self, password: str, password_hash: str) -> bool: ...


@runtime_checkable
class IEventPublisher(Protocol):
    async def publish_all(self, events: list[DomainEvent]) -> None: ...


@runtime_checkable
class ILockRegistry(Protocol):
    """Per-key mutual exclusion within one process."""

    def hold(self, key: Hashable) -> AbstractAsyncContextManager[None]:
        """Acquire the lock for key for the duration of the context."""
        ...
