"""
Classification of files and links.

Files are classified once from their extension into a closed set of
categories; links are classified by host.
"""

from lingostat.models import ContentItem, FileCategory, LinkCategory
from lingostat.utils.urls import CLOUD_DRIVE_HOSTS, VIDEO_PLATFORM_HOSTS, url_host

AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "m4a", "aac", "flac", "ogg", "oga", "opus", "wma"})
VIDEO_EXTENSIONS = frozenset({"mp4", "m4v", "mov", "mkv", "avi", "webm", "wmv", "mpeg", "mpg"})
DOCUMENT_EXTENSIONS = frozenset({"pdf"})
SPREADSHEET_EXTENSIONS = frozenset({"xlsx", "xlsm"})
ARCHIVE_EXTENSIONS = frozenset({"zip"})

_EXTENSION_CATEGORIES = {
    **{ext: FileCategory.AUDIO for ext in AUDIO_EXTENSIONS},
    **{ext: FileCategory.VIDEO for ext in VIDEO_EXTENSIONS},
    **{ext: FileCategory.DOCUMENT for ext in DOCUMENT_EXTENSIONS},
    **{ext: FileCategory.SPREADSHEET for ext in SPREADSHEET_EXTENSIONS},
    **{ext: FileCategory.ARCHIVE for ext in ARCHIVE_EXTENSIONS},
}


def classify_file(item: ContentItem) -> FileCategory:
    """Classify a file item by its extension."""
    if not item.extension:
        return FileCategory.UNKNOWN
    return _EXTENSION_CATEGORIES.get(item.extension, FileCategory.UNKNOWN)


def classify_link(url: str) -> LinkCategory:
    """Classify a link as video platform, cloud drive share or other."""
    host = url_host(url)
    if host in VIDEO_PLATFORM_HOSTS:
        return LinkCategory.VIDEO_PLATFORM
    if host in CLOUD_DRIVE_HOSTS:
        return LinkCategory.CLOUD_DRIVE
    return LinkCategory.OTHER
