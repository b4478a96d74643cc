"""
Spreadsheet link extraction using openpyxl.
"""

import asyncio
import zipfile
from pathlib import Path
from typing import Set

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from lingostat.extractors.base import SpreadsheetLinkExtractor
from lingostat.extractors.pdf import find_urls
from lingostat.utils.errors import SpreadsheetExtractionError
from lingostat.utils.logging import get_logger

logger = get_logger(__name__)


class OpenpyxlSpreadsheetExtractor(SpreadsheetLinkExtractor):
    """Scan every cell of every sheet for URLs and hyperlink targets."""

    def _read_links(self, path: Path) -> Set[str]:
        try:
            # read_only mode drops hyperlink objects; malformed XML parts raise
            # SyntaxError subclasses from either etree or lxml
            workbook = load_workbook(path, data_only=True)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError, SyntaxError, ValueError, TypeError) as e:
            raise SpreadsheetExtractionError(f"Failed to open workbook: {path.name}", {"error": str(e)})

        links: Set[str] = set()
        try:
            for sheet in workbook.worksheets:
                for row in sheet.iter_rows():
                    for cell in row:
                        if isinstance(cell.value, str):
                            links.update(find_urls(cell.value))
                        target = cell.hyperlink.target if cell.hyperlink else None
                        if target and target.lower().startswith(("http://", "https://")):
                            links.add(target.strip())
        except (SyntaxError, ValueError, TypeError) as e:
            raise SpreadsheetExtractionError(f"Failed to read workbook: {path.name}", {"error": str(e)})
        finally:
            workbook.close()
        return links

    async def extract_links(self, path: Path) -> Set[str]:
        path = Path(path)
        links = await asyncio.get_event_loop().run_in_executor(None, lambda: self._read_links(path))
        logger.debug(f"Extracted {len(links)} links from {path.name}")
        return links
