"""
Link resolver.

Claims each discovered link on the run's seen-set, then measures it directly
(video platform), materializes and traverses it (cloud drive) or records it
for provenance only.
"""

from typing import TYPE_CHECKING

from lingostat.engine.classify import classify_link
from lingostat.engine.context import RunContext
from lingostat.models import OTHER_LANGUAGE, ContentItem, LinkCategory, ProgressType
from lingostat.utils.errors import GoogleDriveError, UnresolvableVideoError
from lingostat.utils.logging import LogContext, get_logger
from lingostat.utils.urls import extract_drive_file_id

if TYPE_CHECKING:
    from lingostat.engine.traversal import TraversalController

logger = get_logger(__name__)


class LinkResolver:
    """Resolve hyperlinks at most once per run."""

    def __init__(self, ctx: RunContext, controller: "TraversalController") -> None:
        self.ctx = ctx
        self.controller = controller

    async def resolve(self, url: str) -> None:
        """
        Process a link unless it was already claimed in this run.

        Raises:
            VideoLookupError: If a video lookup fails
            LingostatException: If a materialized file cannot be traversed
        """
        if not self.ctx.aggregator.seen.claim(url):
            logger.debug(f"Already processed {url}")
            return

        category = classify_link(url)
        with LogContext(item=url):
            self.ctx.reporter.emit(ProgressType.LINK, f"Processing link {url}", current_item=url)
            if category == LinkCategory.VIDEO_PLATFORM:
                await self._resolve_video(url)
            elif category == LinkCategory.CLOUD_DRIVE:
                await self._resolve_drive(url)
            else:
                self.controller.record(OTHER_LANGUAGE, url, ProgressType.LINK)

    async def _resolve_video(self, url: str) -> None:
        try:
            async with self.ctx.limiter:
                info = await self.ctx.extractors.videos.lookup(url)
        except UnresolvableVideoError:
            logger.info(f"Not a single video, skipping {url}")
            return

        async with self.ctx.limiter:
            language = await self.ctx.extractors.language.detect_short(info.title)

        self.controller.record(
            language,
            url,
            ProgressType.LINK,
            watch_seconds=info.duration_seconds,
            media_count=1,
        )

    async def _resolve_drive(self, url: str) -> None:
        destination = self.ctx.workspace.download_dir(extract_drive_file_id(url) or "drive")
        try:
            async with self.ctx.limiter:
                local_path = await self.ctx.extractors.remote_files.materialize(url, destination)
        except GoogleDriveError as e:
            logger.warning(f"Could not download {url}: {e}")
            self.ctx.reporter.emit(
                ProgressType.WARNING,
                f"Skipped Drive file {url}: {e.message}",
                current_item=url,
            )
            return

        await self.controller.traverse(ContentItem.file(local_path))
