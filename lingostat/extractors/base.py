"""
Collaborator contracts consumed by the ingestion engine.

Each extractor is an abstract base class with async methods. The engine only
depends on these contracts; the default implementations live in sibling
modules and tests substitute fakes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Set

from lingostat.models import LanguageGuess, VideoInfo


class MediaProbe(ABC):
    """Audio/video duration probe."""

    @abstractmethod
    async def probe_duration(self, path: Path) -> float:
        """
        Return the duration of a local media file in seconds.

        Raises:
            MediaProbeError: If the media is unreadable or corrupt
        """


class DocumentExtractor(ABC):
    """Document text, line and link extractor."""

    @abstractmethod
    async def extract_lines(self, path: Path) -> List[str]:
        """
        Return the ordered, non-blank lines of a document.

        Raises:
            DocumentExtractionError: If the document is unreadable or encrypted
        """

    @abstractmethod
    async def extract_links(self, path: Path) -> Set[str]:
        """
        Return absolute URLs found in text and link annotations.

        Raises:
            DocumentExtractionError: If the document is corrupt
        """


class SpreadsheetLinkExtractor(ABC):
    """Spreadsheet link extractor."""

    @abstractmethod
    async def extract_links(self, path: Path) -> Set[str]:
        """
        Return absolute URLs from cell text and hyperlinks across all sheets.

        Raises:
            SpreadsheetExtractionError: If the workbook is unreadable
        """


class ArchiveExtractor(ABC):
    """Archive extractor."""

    @abstractmethod
    async def extract(self, path: Path, destination: Path) -> Path:
        """
        Extract the regular file members of an archive into `destination`.

        Returns:
            The directory holding the extracted members

        Raises:
            ArchiveExtractionError: If the archive is corrupt
        """


class LanguageDetector(ABC):
    """Content and short-title language detector. Never raises."""

    @abstractmethod
    async def detect(self, text: str) -> LanguageGuess:
        """Detect the language of a body of text."""

    @abstractmethod
    async def detect_short(self, text: str) -> str:
        """Detect the language code of a short string such as a title."""


class VideoLookup(ABC):
    """Video duration and title lookup."""

    @abstractmethod
    async def lookup(self, url: str) -> VideoInfo:
        """
        Return duration and title of a single online video.

        Raises:
            UnresolvableVideoError: If the URL denotes no single video
            VideoLookupError: If the lookup itself fails
        """


class RemoteFileMaterializer(ABC):
    """Downloads a cloud-drive share into a local directory."""

    @abstractmethod
    async def materialize(self, url: str, destination: Path) -> Path:
        """
        Download the file behind a share URL into `destination`.

        Returns:
            Path of the local file

        Raises:
            GoogleDriveError: On auth failure, missing file or network error
        """


@dataclass
class ExtractorSet:
    """One implementation of each collaborator contract."""

    media: MediaProbe
    documents: DocumentExtractor
    spreadsheets: SpreadsheetLinkExtractor
    archives: ArchiveExtractor
    language: LanguageDetector
    videos: VideoLookup
    remote_files: RemoteFileMaterializer
