"""
URL helpers shared by link classification and the remote adapters.
"""

import re
from typing import Optional
from urllib.parse import parse_qs, urlsplit, urlunsplit

VIDEO_PLATFORM_HOSTS = frozenset(
    {
        "youtube.com",
        "www.youtube.com",
        "m.youtube.com",
        "music.youtube.com",
        "youtube-nocookie.com",
        "www.youtube-nocookie.com",
        "youtu.be",
    }
)
CLOUD_DRIVE_HOSTS = frozenset({"drive.google.com", "docs.google.com"})

# Drive file IDs are URL-safe base64-ish tokens
_DRIVE_PATH_ID = re.compile(r"/d/([A-Za-z0-9_-]{10,})(?:/|$)")
_DRIVE_ID_VALUE = re.compile(r"^[A-Za-z0-9_-]{10,}$")
_VIDEO_ID = re.compile(r"^[A-Za-z0-9_-]{11}$")

_DEFAULT_PORTS = {"http": 80, "https": 443}


def url_host(url: str) -> str:
    """Lower-cased host of a URL, or an empty string."""
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def normalize_link(url: str) -> str:
    """
    Normalize a URL into the identifier used for de-duplication.

    Scheme and host are lower-cased, default ports, fragments and trailing
    slashes are dropped. Path and query keep their case since both can be
    significant (video and file IDs are case-sensitive).
    """
    url = url.strip()
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url

    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    netloc = host
    if port and port != _DEFAULT_PORTS.get(scheme):
        netloc = f"{host}:{port}"
    if parts.username:
        userinfo = parts.username + (f":{parts.password}" if parts.password else "")
        netloc = f"{userinfo}@{netloc}"

    path = parts.path.rstrip("/")
    return urlunsplit((scheme, netloc, path, parts.query, ""))


def extract_drive_file_id(url: str) -> Optional[str]:
    """
    Extract the remote file identifier from a Drive share URL.

    Two forms are accepted: a `/d/{id}/` path segment
    (https://drive.google.com/file/d/{id}/view) and an `id=` query
    parameter (https://drive.google.com/open?id={id}).
    """
    parts = urlsplit(url)
    match = _DRIVE_PATH_ID.search(parts.path)
    if match:
        return match.group(1)

    for value in parse_qs(parts.query).get("id", []):
        if _DRIVE_ID_VALUE.match(value):
            return value
    return None


def extract_video_id(url: str) -> Optional[str]:
    """
    Extract a single-video identifier from a video platform URL.

    Returns None for channel, user, playlist-only and bare-host URLs,
    which do not denote one video.
    """
    parts = urlsplit(url)
    host = url_host(url)
    segments = [s for s in parts.path.split("/") if s]

    candidate: Optional[str] = None
    if host == "youtu.be":
        candidate = segments[0] if segments else None
    elif host in VIDEO_PLATFORM_HOSTS:
        if segments[:1] == ["watch"]:
            candidate = (parse_qs(parts.query).get("v") or [None])[0]
        elif len(segments) >= 2 and segments[0] in ("shorts", "embed", "live", "v"):
            candidate = segments[1]

    if candidate and _VIDEO_ID.match(candidate):
        return candidate
    return None
