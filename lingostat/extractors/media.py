"""
Audio/video duration probing.

Durations are read from container headers with mutagen. When mutagen cannot
parse a file and an ffprobe binary is configured, ffprobe's JSON format
section is used instead.
"""

import asyncio
import json
import subprocess
from pathlib import Path
from typing import Optional

import mutagen
from mutagen import MutagenError

from lingostat.extractors.base import MediaProbe
from lingostat.utils.errors import MediaProbeError
from lingostat.utils.logging import get_logger

logger = get_logger(__name__)


class MutagenMediaProbe(MediaProbe):
    """Duration probe backed by mutagen with an optional ffprobe fallback."""

    def __init__(self, ffprobe_path: Optional[str] = None) -> None:
        self.ffprobe_path = ffprobe_path

    def _mutagen_duration(self, path: Path) -> Optional[float]:
        try:
            media = mutagen.File(path)
        except (MutagenError, OSError) as e:
            logger.debug(f"mutagen could not read {path.name}: {e}")
            return None

        if media is None or media.info is None:
            return None
        length = getattr(media.info, "length", None)
        return float(length) if length is not None else None

    def _ffprobe_duration(self, path: Path) -> Optional[float]:
        if not self.ffprobe_path:
            return None

        cmd = [
            self.ffprobe_path,
            "-v",
            "error",
            "-print_format",
            "json",
            "-show_format",
            str(path),
        ]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=True)
            data = json.loads(proc.stdout or "{}")
        except (OSError, subprocess.CalledProcessError, json.JSONDecodeError) as e:
            logger.debug(f"ffprobe failed for {path.name}: {e}")
            return None

        duration = data.get("format", {}).get("duration")
        try:
            return float(duration) if duration is not None else None
        except ValueError:
            return None

    def _probe(self, path: Path) -> float:
        if not path.is_file():
            raise MediaProbeError(f"Media file not found: {path}")

        duration = self._mutagen_duration(path)
        if duration is None:
            duration = self._ffprobe_duration(path)
        if duration is None:
            raise MediaProbeError(f"Could not determine duration of {path.name}", {"path": str(path)})
        return duration

    async def probe_duration(self, path: Path) -> float:
        path = Path(path)
        duration = await asyncio.get_event_loop().run_in_executor(None, lambda: self._probe(path))
        logger.debug(f"Probed {path.name}: {duration:.1f}s")
        return duration
