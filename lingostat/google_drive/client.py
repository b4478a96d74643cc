"""
Google Drive API client for downloading shared files.
"""

import asyncio
import re
from pathlib import Path
from typing import Any, Dict, Optional

from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import Resource, build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload
from httplib2 import HttpLib2Error
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from lingostat.config import Settings, get_settings
from lingostat.google_drive.auth import GoogleDriveAuth
from lingostat.utils.errors import (
    DriveAuthenticationError,
    DriveConnectionError,
    DriveFileNotFoundError,
    DriveQuotaExceededError,
    GoogleDriveError,
)
from lingostat.utils.logging import get_logger, log_performance

logger = get_logger(__name__)

_UNSAFE_FILENAME = re.compile(r"[^\w.\- ]+")

# Failures a Drive request can raise besides our own errors
_REQUEST_ERRORS = (HttpError, HttpLib2Error, GoogleAuthError, OSError)


def safe_filename(name: str, fallback: str) -> str:
    """Strip path separators and odd characters from a remote file name."""
    cleaned = _UNSAFE_FILENAME.sub("_", Path(name).name).strip(" .")
    return cleaned or fallback


def _raise_for_http_error(e: HttpError, file_id: str) -> None:
    status = e.resp.status
    if status == 404:
        raise DriveFileNotFoundError(file_id)
    if status == 429:
        retry_after = e.resp.get("retry-after")
        raise DriveQuotaExceededError(retry_after=int(retry_after) if retry_after else None)
    raise GoogleDriveError(f"Drive request failed for {file_id}: {e}", {"status": status})


def _raise_for_request_error(e: Exception, file_id: str) -> None:
    """Translate any failure of a Drive request into a GoogleDriveError."""
    if isinstance(e, HttpError):
        _raise_for_http_error(e, file_id)
    if isinstance(e, GoogleAuthError):
        raise DriveAuthenticationError(f"Drive credentials rejected for {file_id}: {e}", {"file_id": file_id})
    if isinstance(e, (HttpLib2Error, ConnectionError, TimeoutError)):
        raise DriveConnectionError(file_id, str(e))
    raise GoogleDriveError(f"Drive request failed for {file_id}: {e}", {"file_id": file_id})


class GoogleDriveClient:
    """Client for Google Drive file downloads."""

    def __init__(
        self,
        auth_manager: Optional[GoogleDriveAuth] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Initialize Google Drive client.

        Args:
            auth_manager: Authentication manager
            settings: Settings providing the download chunk size
        """
        self.settings = settings or get_settings()
        self.auth_manager = auth_manager or GoogleDriveAuth(self.settings)
        self.chunk_size = self.settings.drive_chunk_size

        self._service: Optional[Resource] = None

    @property
    def is_connected(self) -> bool:
        return self._service is not None

    async def connect(self) -> None:
        """
        Connect to Google Drive API.

        Raises:
            DriveAuthenticationError: If authentication fails
        """
        if not self.auth_manager.is_authenticated:
            await self.auth_manager.authenticate()

        try:
            self._service = build(
                "drive",
                "v3",
                credentials=self.auth_manager.credentials,
                cache_discovery=False,
            )
            logger.info("Connected to Google Drive API")
        except (HttpError, HttpLib2Error, OSError, ValueError) as e:
            logger.error(f"Failed to build Drive service: {e}")
            raise GoogleDriveError(f"Failed to connect to Drive API: {e}")

    def ensure_connected(self) -> None:
        """Ensure client is connected to Drive API."""
        if not self._service:
            raise GoogleDriveError("Not connected to Drive API. Call connect() first.")

    @retry(
        retry=retry_if_exception_type((DriveQuotaExceededError, DriveConnectionError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        reraise=True,
    )
    async def get_file_metadata(self, file_id: str) -> Dict[str, Any]:
        """
        Get file metadata from Drive.

        Raises:
            DriveFileNotFoundError: If file not found
            DriveQuotaExceededError: If rate limited after retries
            DriveConnectionError: If the network keeps failing after retries
        """
        self.ensure_connected()

        try:
            return await asyncio.get_event_loop().run_in_executor(
                None,
                lambda: self._service.files().get(fileId=file_id, fields="id, name, mimeType, size").execute(),
            )
        except _REQUEST_ERRORS as e:
            _raise_for_request_error(e, file_id)

    def _download(self, file_id: str, destination: Path) -> None:
        request = self._service.files().get_media(fileId=file_id)
        with open(destination, "wb") as fh:
            downloader = MediaIoBaseDownload(fh, request, chunksize=self.chunk_size)
            done = False
            while not done:
                status, done = downloader.next_chunk()
                if status:
                    logger.debug(f"Download {int(status.progress() * 100)}% of {destination.name}")

    @log_performance
    async def download_file(self, file_id: str, destination_dir: Path) -> Path:
        """
        Download a Drive file into a local directory.

        Args:
            file_id: Google Drive file ID
            destination_dir: Existing directory to write into

        Returns:
            Path to downloaded file

        Raises:
            DriveFileNotFoundError: If file not found
            DriveAuthenticationError: If credentials are rejected mid-request
            GoogleDriveError: For other download errors
        """
        self.ensure_connected()

        metadata = await self.get_file_metadata(file_id)
        fallback = f"drive-file-{file_id}"
        destination = Path(destination_dir) / safe_filename(metadata.get("name") or "", fallback)

        logger.info(f"Downloading {destination.name} to {destination_dir}")
        try:
            await asyncio.get_event_loop().run_in_executor(None, lambda: self._download(file_id, destination))
        except _REQUEST_ERRORS as e:
            _raise_for_request_error(e, file_id)

        logger.info(f"Downloaded {destination.name} ({destination.stat().st_size} bytes)")
        return destination
