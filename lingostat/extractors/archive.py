"""
Zip archive extraction.
"""

import asyncio
import shutil
import zipfile
import zlib
from pathlib import Path

from lingostat.extractors.base import ArchiveExtractor
from lingostat.utils.errors import ArchiveExtractionError, UnsafeArchiveMemberError
from lingostat.utils.logging import get_logger

logger = get_logger(__name__)


class ZipArchiveExtractor(ArchiveExtractor):
    """Extract regular file members of a zip archive."""

    def _extract(self, path: Path, destination: Path) -> Path:
        destination.mkdir(parents=True, exist_ok=True)
        root = destination.resolve()

        try:
            with zipfile.ZipFile(path) as archive:
                count = 0
                for member in archive.infolist():
                    if member.is_dir():
                        continue

                    target = (root / member.filename).resolve()
                    if root not in target.parents:
                        raise UnsafeArchiveMemberError(path, member.filename)

                    target.parent.mkdir(parents=True, exist_ok=True)
                    with archive.open(member) as src, open(target, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                    count += 1
        except zipfile.BadZipFile as e:
            raise ArchiveExtractionError(f"Corrupt archive: {path.name}", {"error": str(e)})
        except (zlib.error, EOFError) as e:
            raise ArchiveExtractionError(f"Corrupt member data in {path.name}", {"error": str(e)})
        except (RuntimeError, NotImplementedError) as e:
            # encrypted members or unsupported compression methods
            raise ArchiveExtractionError(f"Cannot read archive: {path.name}", {"error": str(e)})

        logger.debug(f"Extracted {count} members from {path.name}")
        return destination

    async def extract(self, path: Path, destination: Path) -> Path:
        return await asyncio.get_event_loop().run_in_executor(
            None, lambda: self._extract(Path(path), Path(destination))
        )
