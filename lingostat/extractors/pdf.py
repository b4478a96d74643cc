"""
PDF line and link extraction using PyMuPDF.
"""

import asyncio
import re
from pathlib import Path
from typing import List, Set

import fitz  # PyMuPDF

from lingostat.extractors.base import DocumentExtractor
from lingostat.utils.errors import DocumentCorruptedError, DocumentExtractionError
from lingostat.utils.logging import get_logger

logger = get_logger(__name__)

URL_PATTERN = re.compile(r"https?://[^\s<>\"'\]\[)(]+", re.IGNORECASE)

# Sentence punctuation that commonly trails a URL in running text
_TRAILING_PUNCTUATION = ".,;:!?"


def find_urls(text: str) -> Set[str]:
    """Find absolute http(s) URLs in free text."""
    return {match.rstrip(_TRAILING_PUNCTUATION) for match in URL_PATTERN.findall(text)}


class PDFDocumentExtractor(DocumentExtractor):
    """Extract non-blank lines and links from PDF files."""

    def _open(self, path: Path) -> fitz.Document:
        try:
            doc = fitz.open(path)
        except fitz.FileDataError as e:
            raise DocumentCorruptedError(f"PDF file is corrupted: {path.name}", {"error": str(e)})
        except RuntimeError as e:
            raise DocumentExtractionError(f"Failed to open PDF: {path.name}", {"error": str(e)})

        if doc.needs_pass:
            doc.close()
            raise DocumentExtractionError(f"PDF is encrypted: {path.name}")
        return doc

    def _read_lines(self, path: Path) -> List[str]:
        with self._open(path) as doc:
            lines = []
            for page in doc:
                for line in page.get_text("text").splitlines():
                    line = line.strip()
                    if line:
                        lines.append(line)
            return lines

    def _read_links(self, path: Path) -> Set[str]:
        links: Set[str] = set()
        with self._open(path) as doc:
            for page in doc:
                links.update(find_urls(page.get_text("text")))
                for link in page.get_links():
                    uri = link.get("uri")
                    if uri and uri.lower().startswith(("http://", "https://")):
                        links.add(uri.strip())
        return links

    async def extract_lines(self, path: Path) -> List[str]:
        lines = await asyncio.get_event_loop().run_in_executor(None, lambda: self._read_lines(Path(path)))
        logger.debug(f"Extracted {len(lines)} lines from {Path(path).name}")
        return lines

    async def extract_links(self, path: Path) -> Set[str]:
        links = await asyncio.get_event_loop().run_in_executor(None, lambda: self._read_links(Path(path)))
        logger.debug(f"Extracted {len(links)} links from {Path(path).name}")
        return links
