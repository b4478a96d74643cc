"""
Shared fixtures and fake collaborators for lingostat tests.
"""

import asyncio
import struct
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

import pytest

from lingostat.config import Settings
from lingostat.engine.progress import ProgressReporter
from lingostat.extractors.archive import ZipArchiveExtractor
from lingostat.extractors.base import (
    DocumentExtractor,
    ExtractorSet,
    LanguageDetector,
    MediaProbe,
    RemoteFileMaterializer,
    SpreadsheetLinkExtractor,
    VideoLookup,
)
from lingostat.models import LanguageGuess, ProgressEvent, ProgressType, VideoInfo
from lingostat.utils.errors import (
    DocumentCorruptedError,
    GoogleDriveError,
    MediaProbeError,
    UnresolvableVideoError,
)
from lingostat.utils.urls import normalize_link


class FakeMediaProbe(MediaProbe):
    """Durations keyed by file name."""

    def __init__(self, durations: Optional[Dict[str, float]] = None, delay: float = 0.0) -> None:
        self.durations = durations or {}
        self.delay = delay
        self.calls: List[str] = []

    async def probe_duration(self, path: Path) -> float:
        self.calls.append(Path(path).name)
        if self.delay:
            await asyncio.sleep(self.delay)
        name = Path(path).name
        if name not in self.durations:
            raise MediaProbeError(f"Unreadable media: {name}")
        return self.durations[name]


class FakeDocumentExtractor(DocumentExtractor):
    """Lines and links keyed by file name; unknown names are corrupt."""

    def __init__(self, documents: Optional[Dict[str, Tuple[List[str], Iterable[str]]]] = None) -> None:
        self.documents = documents or {}
        self.line_calls: List[str] = []
        self.link_calls: List[str] = []

    def _lookup(self, path: Path):
        name = Path(path).name
        if name not in self.documents:
            raise DocumentCorruptedError(f"PDF file is corrupted: {name}")
        return self.documents[name]

    async def extract_lines(self, path: Path) -> List[str]:
        self.line_calls.append(Path(path).name)
        return list(self._lookup(path)[0])

    async def extract_links(self, path: Path) -> Set[str]:
        self.link_calls.append(Path(path).name)
        return set(self._lookup(path)[1])


class FakeSpreadsheetExtractor(SpreadsheetLinkExtractor):
    def __init__(self, links: Optional[Dict[str, Iterable[str]]] = None) -> None:
        self.links = links or {}

    async def extract_links(self, path: Path) -> Set[str]:
        return set(self.links.get(Path(path).name, ()))


class FakeLanguageDetector(LanguageDetector):
    """Returns the language of the first marker found in the text."""

    def __init__(self, markers: Optional[Dict[str, str]] = None, default: str = "en") -> None:
        self.markers = markers or {}
        self.default = default

    async def detect(self, text: str) -> LanguageGuess:
        for marker, language in self.markers.items():
            if marker in text:
                return LanguageGuess(language=language, confidence=0.99)
        return LanguageGuess(language=self.default, confidence=0.5, is_reliable=False)

    async def detect_short(self, text: str) -> str:
        return (await self.detect(text)).language


class FakeVideoLookup(VideoLookup):
    def __init__(self, videos: Optional[Dict[str, VideoInfo]] = None, delay: float = 0.0) -> None:
        self.videos = {normalize_link(url): info for url, info in (videos or {}).items()}
        self.delay = delay
        self.calls: List[str] = []

    def add(self, url: str, info: VideoInfo) -> None:
        self.videos[normalize_link(url)] = info

    async def lookup(self, url: str) -> VideoInfo:
        self.calls.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        key = normalize_link(url)
        if key not in self.videos:
            raise UnresolvableVideoError(url)
        return self.videos[key]


class FakeMaterializer(RemoteFileMaterializer):
    """Writes a file with the given name into the destination, or fails."""

    def __init__(self, files: Optional[Dict[str, str]] = None) -> None:
        self.files = files or {}
        self.destinations: List[Path] = []

    async def materialize(self, url: str, destination: Path) -> Path:
        self.destinations.append(Path(destination))
        if url not in self.files:
            raise GoogleDriveError(f"Network error downloading {url}")
        target = Path(destination) / self.files[url]
        target.write_bytes(b"downloaded")
        return target


class RecordingSink:
    """Progress handler that keeps every event."""

    def __init__(self) -> None:
        self.events: List[ProgressEvent] = []

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def of_type(self, progress_type: ProgressType) -> List[ProgressEvent]:
        return [e for e in self.events if e.type == progress_type]


def write_corrupt_deflate_zip(path: Path, member: str = "inner.pdf") -> Path:
    """Zip with valid headers whose deflate stream starts with an invalid block type."""
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(member, b"lingostat " * 200)
    data = bytearray(path.read_bytes())
    name_len, extra_len = struct.unpack("<HH", data[26:30])
    start = 30 + name_len + extra_len
    data[start : start + 2] = b"\xff\xff"
    path.write_bytes(bytes(data))
    return path


def write_truncated_xlsx(path: Path) -> Path:
    """Workbook container holding only a cut-off content types part."""
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("[Content_Types].xml", "<Types")
    return path


@pytest.fixture
def temp_dir(tmp_path) -> Path:
    """Temporary directory for test content trees."""
    root = tmp_path / "content"
    root.mkdir()
    return root


@pytest.fixture
def workspace_root(tmp_path) -> Path:
    return tmp_path / "workspace"


@pytest.fixture
def settings(workspace_root) -> Settings:
    """Settings with an isolated workspace and no .env file."""
    return Settings(_env_file=None, workspace_dir=workspace_root)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def reporter(sink) -> ProgressReporter:
    reporter = ProgressReporter()
    reporter.subscribe(sink)
    return reporter


@pytest.fixture
def fakes():
    """Fresh fake collaborators; tests fill in their tables."""
    return {
        "media": FakeMediaProbe(),
        "documents": FakeDocumentExtractor(),
        "spreadsheets": FakeSpreadsheetExtractor(),
        "language": FakeLanguageDetector(),
        "videos": FakeVideoLookup(),
        "remote_files": FakeMaterializer(),
    }


@pytest.fixture
def extractors(fakes) -> ExtractorSet:
    """Extractor set of fakes plus the real zip extractor."""
    return ExtractorSet(archives=ZipArchiveExtractor(), **fakes)
