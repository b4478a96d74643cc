"""
Core data models for the lingostat ingestion engine.

This module defines the Pydantic models used throughout the application:
content items discovered during traversal, per-language statistics,
progress events and the result of a run.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer

# Language bucket for items that carry provenance only
OTHER_LANGUAGE = "other"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# =============================================================================
# Enums
# =============================================================================


class ContentKind(str, Enum):
    """Kind of item found while walking the content tree."""

    DIRECTORY = "directory"
    FILE = "file"
    LINK = "link"


class FileCategory(str, Enum):
    """Classification of a local file, resolved once from its extension."""

    AUDIO = "audio"
    VIDEO = "video"
    DOCUMENT = "document"
    SPREADSHEET = "spreadsheet"
    ARCHIVE = "archive"
    UNKNOWN = "unknown"


class LinkCategory(str, Enum):
    """Classification of a discovered hyperlink."""

    VIDEO_PLATFORM = "video_platform"
    CLOUD_DRIVE = "cloud_drive"
    OTHER = "other"


class ProgressType(str, Enum):
    """Type of progress event."""

    FILE = "file"
    LINK = "link"
    WARNING = "warning"
    COMPLETE = "complete"


# =============================================================================
# Content Models
# =============================================================================


class ContentItem(BaseModel):
    """A directory, file or link; identity is its path or URL string."""

    model_config = ConfigDict(frozen=True)

    kind: ContentKind
    location: str = Field(..., min_length=1, description="Filesystem path or URL")
    extension: Optional[str] = Field(None, description="Lower-cased extension without dot")

    @classmethod
    def directory(cls, path: Union[str, Path]) -> "ContentItem":
        return cls(kind=ContentKind.DIRECTORY, location=str(path))

    @classmethod
    def file(cls, path: Union[str, Path]) -> "ContentItem":
        suffix = Path(path).suffix.lower().lstrip(".")
        return cls(kind=ContentKind.FILE, location=str(path), extension=suffix or None)

    @classmethod
    def link(cls, url: str) -> "ContentItem":
        return cls(kind=ContentKind.LINK, location=url)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ContentItem":
        """Build a directory or file item depending on what `path` is on disk."""
        if Path(path).is_dir():
            return cls.directory(path)
        return cls.file(path)

    @property
    def identity(self) -> str:
        return self.location

    @property
    def path(self) -> Path:
        return Path(self.location)


# =============================================================================
# Statistics Models
# =============================================================================


class LanguageStats(BaseModel):
    """Accumulated counters for one language bucket."""

    model_config = ConfigDict(frozen=True)

    watch_seconds: float = Field(0.0, ge=0.0, description="Total media duration")
    lines: int = Field(0, ge=0, description="Total non-blank document lines")
    doc_count: int = Field(0, ge=0, description="Number of documents")
    media_count: int = Field(0, ge=0, description="Number of audio/video items")
    items: Tuple[str, ...] = Field(default_factory=tuple, description="Contributing items in merge order")

    def add(
        self,
        watch_seconds: float,
        lines: int,
        doc_count: int,
        media_count: int,
        item_id: str,
    ) -> "LanguageStats":
        """Return a new bucket with the measurement added."""
        return LanguageStats(
            watch_seconds=self.watch_seconds + watch_seconds,
            lines=self.lines + lines,
            doc_count=self.doc_count + doc_count,
            media_count=self.media_count + media_count,
            items=self.items + (item_id,),
        )


class StatsTotals(BaseModel):
    """Counters summed over every language bucket."""

    model_config = ConfigDict(frozen=True)

    watch_seconds: float = 0.0
    lines: int = 0
    doc_count: int = 0
    media_count: int = 0


# =============================================================================
# Progress Models
# =============================================================================


class ProgressEvent(BaseModel):
    """Structured progress notification emitted while items are visited."""

    model_config = ConfigDict(frozen=True)

    type: ProgressType
    message: str
    current_item: Optional[str] = None
    percentage: Optional[float] = Field(None, ge=0.0, le=100.0)


# =============================================================================
# Collaborator Results
# =============================================================================


class LanguageGuess(BaseModel):
    """Result of content language detection."""

    language: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    is_reliable: bool = True


class VideoInfo(BaseModel):
    """Metadata of a single online video."""

    video_id: str
    title: str = ""
    duration_seconds: float = Field(0.0, ge=0.0)


# =============================================================================
# Run Result
# =============================================================================


class BranchFailure(BaseModel):
    """A subtree or link whose processing failed without aborting the run."""

    model_config = ConfigDict(frozen=True)

    item: str
    error_type: str
    message: str

    @classmethod
    def from_exception(cls, item: str, error: BaseException) -> "BranchFailure":
        return cls(item=item, error_type=type(error).__name__, message=str(error))


class RunResult(BaseModel):
    """Immutable snapshot returned by a completed run."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    root: str
    language_stats: Mapping[str, LanguageStats]
    totals: StatsTotals
    failures: Tuple[BranchFailure, ...] = ()
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: datetime = Field(default_factory=_utcnow)

    def model_post_init(self, __context: Any) -> None:
        # Freeze the mapping so callers cannot mutate the snapshot
        if not isinstance(self.language_stats, MappingProxyType):
            object.__setattr__(self, "language_stats", MappingProxyType(dict(self.language_stats)))

    @field_serializer("language_stats")
    def _serialize_stats(self, stats: Mapping[str, LanguageStats]) -> dict[str, Any]:
        return {language: bucket.model_dump() for language, bucket in sorted(stats.items())}

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()

    @property
    def languages(self) -> list[str]:
        return sorted(self.language_stats)
