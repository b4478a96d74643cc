"""
Traversal controller.

Recursively classifies directory entries and dispatches them to the matching
extractor, fanning out concurrently over directory entries and discovered
links. Failures of a child branch are contained at the fan-out that spawned
it; failures of the item passed to `traverse` itself propagate to the caller.
"""

import asyncio
from pathlib import Path
from typing import Awaitable, List, Sequence, Tuple

from lingostat.engine.classify import classify_file
from lingostat.engine.context import RunContext
from lingostat.engine.links import LinkResolver
from lingostat.models import (
    OTHER_LANGUAGE,
    BranchFailure,
    ContentItem,
    ContentKind,
    FileCategory,
    ProgressType,
)
from lingostat.utils.errors import DirectoryListingError, LingostatException
from lingostat.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

Branch = Tuple[str, Awaitable[None]]


class TraversalController:
    """Walk a content tree and merge measurements into the run's aggregate."""

    def __init__(self, ctx: RunContext) -> None:
        self.ctx = ctx
        self.links = LinkResolver(ctx, self)

    async def traverse(self, item: ContentItem) -> None:
        """
        Process one item and everything reachable from it.

        Raises:
            LingostatException: If this item itself cannot be processed
            OSError: On unexpected filesystem errors for this item
        """
        if item.kind == ContentKind.DIRECTORY:
            await self._traverse_directory(item)
        elif item.kind == ContentKind.LINK:
            await self.links.resolve(item.location)
        else:
            with LogContext(item=item.identity):
                await self._traverse_file(item)

    async def fan_out(self, branches: Sequence[Branch]) -> None:
        """
        Run sibling branches concurrently and wait for all of them.

        Contained failures are logged and recorded on the run. Cancellation
        and errors outside the lingostat/OS taxonomy always propagate, as does
        the first contained failure when fail-fast is enabled.
        """
        if not branches:
            return

        results = await asyncio.gather(*(coro for _, coro in branches), return_exceptions=True)

        contained: List[Tuple[str, BaseException]] = []
        for (label, _), result in zip(branches, results):
            if not isinstance(result, BaseException):
                continue
            if not isinstance(result, (LingostatException, OSError)):
                raise result
            contained.append((label, result))

        for label, error in contained:
            if self.ctx.settings.fail_fast:
                raise error
            logger.warning(f"Skipping {label}: {error}", extra={"error_type": type(error).__name__})
            self.ctx.failures.append(BranchFailure.from_exception(label, error))

    async def _list_directory(self, path: Path) -> List[Path]:
        try:
            return await asyncio.get_event_loop().run_in_executor(None, lambda: sorted(path.iterdir()))
        except OSError as e:
            raise DirectoryListingError(path, e.strerror or str(e))

    async def _traverse_directory(self, item: ContentItem) -> None:
        entries = await self._list_directory(item.path)
        logger.debug(f"Listing {item.location}: {len(entries)} entries")

        branches: List[Branch] = []
        for entry in entries:
            child = ContentItem.directory(entry) if entry.is_dir() else ContentItem.file(entry)
            branches.append((child.identity, self.traverse(child)))
        await self.fan_out(branches)

    async def _traverse_file(self, item: ContentItem) -> None:
        category = classify_file(item)
        self.ctx.reporter.emit(ProgressType.FILE, f"Processing {item.path.name}", current_item=item.identity)

        if category == FileCategory.ARCHIVE:
            await self._process_archive(item)
        elif category in (FileCategory.AUDIO, FileCategory.VIDEO):
            await self._process_media(item)
        elif category == FileCategory.DOCUMENT:
            await self._process_document(item)
        elif category == FileCategory.SPREADSHEET:
            await self._process_spreadsheet(item)
        else:
            self.record(OTHER_LANGUAGE, item.identity, ProgressType.FILE)

    def record(
        self,
        language: str,
        item_id: str,
        progress_type: ProgressType,
        watch_seconds: float = 0.0,
        lines: int = 0,
        doc_count: int = 0,
        media_count: int = 0,
    ) -> None:
        """Merge a measurement and report it."""
        merged = self.ctx.aggregator.merge(
            language,
            watch_seconds=watch_seconds,
            lines=lines,
            doc_count=doc_count,
            media_count=media_count,
            item_id=item_id,
        )
        if merged:
            self.ctx.reporter.emit(progress_type, f"Recorded {item_id} under '{language}'", current_item=item_id)

    async def _process_archive(self, item: ContentItem) -> None:
        destination = self.ctx.workspace.archive_dir(item.path)
        async with self.ctx.limiter:
            extracted = await self.ctx.extractors.archives.extract(item.path, destination)
        await self.traverse(ContentItem.directory(extracted))

    async def _process_media(self, item: ContentItem) -> None:
        async with self.ctx.limiter:
            duration = await self.ctx.extractors.media.probe_duration(item.path)
        self.record(
            self.ctx.default_language,
            item.identity,
            ProgressType.FILE,
            watch_seconds=duration,
            media_count=1,
        )

    async def _detect_language(self, text: str) -> str:
        async with self.ctx.limiter:
            guess = await self.ctx.extractors.language.detect(text)
        return guess.language

    async def _extract_document_links(self, item: ContentItem):
        async with self.ctx.limiter:
            return await self.ctx.extractors.documents.extract_links(item.path)

    async def _process_document(self, item: ContentItem) -> None:
        async with self.ctx.limiter:
            lines = await self.ctx.extractors.documents.extract_lines(item.path)

        language, links = await asyncio.gather(
            self._detect_language("\n".join(lines)),
            self._extract_document_links(item),
        )
        self.record(language, item.identity, ProgressType.FILE, lines=len(lines), doc_count=1)
        await self.resolve_all(links)

    async def _process_spreadsheet(self, item: ContentItem) -> None:
        async with self.ctx.limiter:
            links = await self.ctx.extractors.spreadsheets.extract_links(item.path)
        await self.resolve_all(links)

    async def resolve_all(self, links) -> None:
        """Resolve discovered links concurrently."""
        await self.fan_out([(url, self.traverse(ContentItem.link(url))) for url in sorted(links)])
