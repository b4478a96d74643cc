"""
Online video metadata lookup using yt-dlp.
"""

import asyncio
from typing import Any, Dict

import yt_dlp
from yt_dlp.utils import DownloadError

from lingostat.extractors.base import VideoLookup
from lingostat.models import VideoInfo
from lingostat.utils.errors import UnresolvableVideoError, VideoLookupError
from lingostat.utils.logging import get_logger
from lingostat.utils.urls import extract_video_id

logger = get_logger(__name__)


class YtDlpVideoLookup(VideoLookup):
    """Fetch duration and title of a single video without downloading it."""

    def __init__(self, socket_timeout: int = 30) -> None:
        self._ydl_opts: Dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
            "noplaylist": True,
            "socket_timeout": socket_timeout,
        }

    def _extract_info(self, url: str) -> Dict[str, Any]:
        with yt_dlp.YoutubeDL(self._ydl_opts.copy()) as ydl:
            return ydl.extract_info(url, download=False) or {}

    async def lookup(self, url: str) -> VideoInfo:
        video_id = extract_video_id(url)
        if video_id is None:
            raise UnresolvableVideoError(url)

        watch_url = f"https://www.youtube.com/watch?v={video_id}"
        try:
            info = await asyncio.get_event_loop().run_in_executor(None, lambda: self._extract_info(watch_url))
        except DownloadError as e:
            raise VideoLookupError(f"Failed to fetch video metadata: {url}", {"error": str(e)})

        return VideoInfo(
            video_id=str(info.get("id") or video_id),
            title=str(info.get("title") or ""),
            duration_seconds=float(info.get("duration") or 0),
        )
