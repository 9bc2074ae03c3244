"""
Local Attachment Storage

Stores lab report files on the local filesystem and serves them under a
public URL prefix.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path, PurePosixPath
from uuid import uuid4

from app.domains.scheduling.application.ports.services import IAttachmentStorage
from app.domains.scheduling.domain.value_objects.clinical import LabReport

logger = logging.getLogger(__name__)


class LocalAttachmentStorage(IAttachmentStorage):
    """
    Manages lab report file storage and URL generation.

    - Saves files under a uuid name that keeps the original extension
    - Generates URLs as {public_url_base}/{filename}
    - Deletes files by URL
    """

    def __init__(
        self,
        storage_path: str | Path,
        public_url_base: str,
    ):
        """
        Initialize the storage service.

        Args:
            storage_path: Directory path for storing files
            public_url_base: URL prefix the directory is served under
                            (e.g., "/attachments" or "https://cdn.example.com/labs")
        """
        self.storage_path = Path(storage_path)
        self.public_url_base = public_url_base.rstrip("/")

        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Ensure the storage directory exists."""
        self.storage_path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Attachment storage directory: {self.storage_path}")

    async def store(self, content: bytes, original_name: str) -> LabReport:
        """
        Store a file and return its lab report reference.

        Args:
            content: File bytes
            original_name: Client file name

        Returns:
            LabReport with the public URL and original name
        """
        # Unique filename prevents enumeration and collisions
        suffix = PurePosixPath(original_name).suffix.lower()
        filename = f"{uuid4().hex}{suffix}"

        file_path = self.storage_path / filename
        await asyncio.to_thread(file_path.write_bytes, content)

        logger.info(f"Attachment stored: {file_path} ({len(content)} bytes)")

        return LabReport(url=f"{self.public_url_base}/{filename}", original_name=original_name)

    def get_file_path(self, url: str) -> Path | None:
        """
        Resolve a public URL to the stored file.

        Returns:
            Full path if the URL belongs to this storage and the file exists, None otherwise
        """
        filename = self._filename_from_url(url)
        if filename is None:
            return None
        file_path = self.storage_path / filename
        if file_path.exists():
            return file_path
        return None

    async def delete(self, url: str) -> bool:
        """
        Delete a stored file.

        Returns:
            True if deleted, False if not found
        """
        file_path = self.get_file_path(url)
        if file_path is None:
            logger.warning(f"Attachment to delete not found: {url}")
            return False

        await asyncio.to_thread(file_path.unlink)
        logger.info(f"Attachment deleted: {file_path.name}")
        return True

    def _filename_from_url(self, url: str) -> str | None:
        prefix = f"{self.public_url_base}/"
        if not url.startswith(prefix):
            return None
        filename = url[len(prefix):]
        # Reject anything that is not a plain file name
        if not filename or "/" in filename or "\\" in filename or filename in (".", ".."):
            return None
        return filename
