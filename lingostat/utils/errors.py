"""
Custom exceptions for the lingostat ingestion engine.

This module defines all custom exceptions used throughout the application.
The traversal controller decides from these types whether a failure is
contained to one branch or aborts the run.
"""

from pathlib import Path
from typing import Any, Iterable, Optional, Union


class LingostatException(Exception):
    """Base exception for all lingostat-specific errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# Traversal Exceptions
# =============================================================================


class TraversalError(LingostatException):
    """Base exception for content tree traversal errors."""

    pass


class DirectoryListingError(TraversalError):
    """A directory could not be listed."""

    def __init__(self, path: Union[str, Path], reason: str) -> None:
        """Initialize with the directory and the underlying reason."""
        message = f"Cannot list directory '{path}': {reason}"
        super().__init__(message, {"path": str(path)})


class RootNotFoundError(TraversalError):
    """The root path handed to a run does not exist."""

    def __init__(self, path: Union[str, Path]) -> None:
        """Initialize with the missing path."""
        message = f"Root path '{path}' does not exist"
        super().__init__(message, {"path": str(path)})


# =============================================================================
# Extraction Exceptions
# =============================================================================


class ExtractionError(LingostatException):
    """Base exception for local content extraction errors."""

    pass


class DocumentExtractionError(ExtractionError):
    """Error during document text or link extraction."""

    pass


class DocumentCorruptedError(DocumentExtractionError):
    """Document file is corrupted or not a valid document."""

    pass


class MediaProbeError(ExtractionError):
    """Media duration could not be determined."""

    pass


class SpreadsheetExtractionError(ExtractionError):
    """Workbook could not be read."""

    pass


class ArchiveExtractionError(ExtractionError):
    """Archive could not be decompressed."""

    pass


class UnsafeArchiveMemberError(ArchiveExtractionError):
    """Archive member would be written outside the extraction directory."""

    def __init__(self, archive: Union[str, Path], member: str) -> None:
        """Initialize with the archive and offending member name."""
        message = f"Archive '{archive}' contains unsafe member '{member}'"
        super().__init__(message, {"archive": str(archive), "member": member})


# =============================================================================
# Remote Content Exceptions
# =============================================================================


class RemoteContentError(LingostatException):
    """Base exception for remote content lookups and downloads."""

    pass


class VideoLookupError(RemoteContentError):
    """Video metadata lookup failed."""

    pass


class UnresolvableVideoError(VideoLookupError):
    """URL does not denote a single video (channel, user or playlist page)."""

    def __init__(self, url: str) -> None:
        """Initialize with the URL."""
        message = f"URL '{url}' does not identify a single video"
        super().__init__(message, {"url": url})


class GoogleDriveError(RemoteContentError):
    """Base exception for Google Drive operations."""

    pass


class DriveAuthenticationError(GoogleDriveError):
    """Authentication with Google Drive failed."""

    pass


class DriveQuotaExceededError(GoogleDriveError):
    """Google Drive API quota exceeded."""

    def __init__(self, retry_after: Optional[int] = None) -> None:
        """Initialize with retry information."""
        message = "Google Drive API quota exceeded"
        details = {}
        if retry_after:
            message += f". Retry after {retry_after} seconds"
            details["retry_after"] = retry_after
        super().__init__(message, details)


class DriveConnectionError(GoogleDriveError):
    """Transport failure talking to Google Drive (DNS, socket, TLS)."""

    def __init__(self, file_id: str, reason: str) -> None:
        """Initialize with file ID and the underlying error."""
        message = f"Network error reaching Google Drive for '{file_id}': {reason}"
        super().__init__(message, {"file_id": file_id})


class DriveFileNotFoundError(GoogleDriveError):
    """File not found in Google Drive."""

    def __init__(self, file_id: str) -> None:
        """Initialize with file ID."""
        message = f"File with ID '{file_id}' not found in Google Drive"
        super().__init__(message, {"file_id": file_id})


class InvalidDriveLinkError(GoogleDriveError):
    """Drive share URL carries no recognizable file identifier."""

    def __init__(self, url: str) -> None:
        """Initialize with the URL."""
        message = f"No Google Drive file ID found in '{url}'"
        super().__init__(message, {"url": url})


# =============================================================================
# Workspace Exceptions
# =============================================================================


class WorkspaceError(LingostatException):
    """Base exception for run workspace handling."""

    pass


class WorkspaceCleanupError(WorkspaceError):
    """Some workspace directories could not be removed."""

    def __init__(self, paths: Iterable[Union[str, Path]]) -> None:
        """Initialize with the paths left behind."""
        remaining = [str(p) for p in paths]
        message = f"Failed to remove {len(remaining)} workspace path(s)"
        super().__init__(message, {"paths": remaining})
