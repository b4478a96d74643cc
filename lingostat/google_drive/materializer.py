"""
Remote file materializer for Drive share links.
"""

import asyncio
from pathlib import Path
from typing import Optional

from lingostat.config import Settings, get_settings
from lingostat.extractors.base import RemoteFileMaterializer
from lingostat.google_drive.client import GoogleDriveClient
from lingostat.utils.errors import InvalidDriveLinkError
from lingostat.utils.logging import get_logger
from lingostat.utils.urls import extract_drive_file_id

logger = get_logger(__name__)


class DriveFileMaterializer(RemoteFileMaterializer):
    """Download the file behind a Drive share URL, connecting once."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[GoogleDriveClient] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or GoogleDriveClient(settings=self.settings)
        self._connect_lock = asyncio.Lock()

    async def _ensure_connected(self) -> None:
        async with self._connect_lock:
            if not self.client.is_connected:
                await self.client.connect()

    async def materialize(self, url: str, destination: Path) -> Path:
        file_id = extract_drive_file_id(url)
        if file_id is None:
            raise InvalidDriveLinkError(url)

        await self._ensure_connected()
        logger.debug(f"Materializing Drive file {file_id}")
        return await self.client.download_file(file_id, Path(destination))
