"""
Construction of the default extractor set.
"""

from typing import Optional

from lingostat.config import Settings, get_settings
from lingostat.extractors.archive import ZipArchiveExtractor
from lingostat.extractors.base import ExtractorSet
from lingostat.extractors.language import LangdetectLanguageDetector
from lingostat.extractors.media import MutagenMediaProbe
from lingostat.extractors.pdf import PDFDocumentExtractor
from lingostat.extractors.spreadsheet import OpenpyxlSpreadsheetExtractor
from lingostat.extractors.video import YtDlpVideoLookup
from lingostat.google_drive.materializer import DriveFileMaterializer


def create_default_extractors(settings: Optional[Settings] = None) -> ExtractorSet:
    """
    Build the production extractor set.

    Args:
        settings: Settings to configure the adapters (defaults to global settings)

    Returns:
        ExtractorSet with one default implementation per contract
    """
    settings = settings or get_settings()
    return ExtractorSet(
        media=MutagenMediaProbe(ffprobe_path=settings.ffprobe_path),
        documents=PDFDocumentExtractor(),
        spreadsheets=OpenpyxlSpreadsheetExtractor(),
        archives=ZipArchiveExtractor(),
        language=LangdetectLanguageDetector(
            default_language=settings.default_language,
            min_confidence=settings.language_min_confidence,
            sample_chars=settings.language_sample_chars,
        ),
        videos=YtDlpVideoLookup(socket_timeout=settings.video_lookup_timeout),
        remote_files=DriveFileMaterializer(settings=settings),
    )
