"""
Extractor adapters consumed by the ingestion engine.

This package defines the collaborator contracts (media probe, document,
spreadsheet and archive extractors, language detection, video lookup and
remote file materialization) and their default implementations.
"""

from lingostat.extractors.base import (
    ArchiveExtractor,
    DocumentExtractor,
    ExtractorSet,
    LanguageDetector,
    MediaProbe,
    RemoteFileMaterializer,
    SpreadsheetLinkExtractor,
    VideoLookup,
)
from lingostat.extractors.factory import create_default_extractors

__all__ = [
    "ArchiveExtractor",
    "DocumentExtractor",
    "ExtractorSet",
    "LanguageDetector",
    "MediaProbe",
    "RemoteFileMaterializer",
    "SpreadsheetLinkExtractor",
    "VideoLookup",
    "create_default_extractors",
]
