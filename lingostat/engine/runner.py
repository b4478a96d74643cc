"""
Run lifecycle.

`IngestionEngine.run` opens a fresh workspace and run context, traverses the
root, and always removes the workspace, whether the run succeeds, fails or
is cancelled.
"""

import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from lingostat.config import Settings, get_settings
from lingostat.engine.concurrency import ConcurrencyLimiter
from lingostat.engine.context import RunContext
from lingostat.engine.progress import ProgressHandler, ProgressReporter
from lingostat.engine.traversal import TraversalController
from lingostat.engine.workspace import RunWorkspace
from lingostat.extractors import ExtractorSet, create_default_extractors
from lingostat.models import ContentItem, ProgressType, RunResult
from lingostat.utils.errors import RootNotFoundError
from lingostat.utils.logging import LogContext, get_logger, log_performance

logger = get_logger(__name__)


class IngestionEngine:
    """Entry point that drives one traversal per call to `run`."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        extractors: Optional[ExtractorSet] = None,
        reporter: Optional[ProgressReporter] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            settings: Engine settings (defaults to global settings)
            extractors: Collaborator adapters (defaults to the production set)
            reporter: Progress sink shared by every run of this engine
        """
        self.settings = settings or get_settings()
        self.extractors = extractors or create_default_extractors(self.settings)
        self.reporter = reporter or ProgressReporter()

    def subscribe(self, handler: ProgressHandler) -> None:
        """Receive progress events from subsequent runs."""
        self.reporter.subscribe(handler)

    def _new_context(self, run_id: str, workspace: RunWorkspace) -> RunContext:
        ctx = RunContext(
            run_id=run_id,
            settings=self.settings,
            extractors=self.extractors,
            reporter=self.reporter,
            workspace=workspace,
            limiter=ConcurrencyLimiter(self.settings.max_concurrency),
        )
        ctx.aggregator.reset()
        return ctx

    @log_performance
    async def run(self, root: Union[str, Path]) -> RunResult:
        """
        Analyze everything reachable from `root`.

        Args:
            root: Directory (or single file) to analyze

        Returns:
            Immutable result with per-language statistics and contained failures

        Raises:
            RootNotFoundError: If root does not exist
            LingostatException: If the root itself cannot be traversed
        """
        root_path = Path(root)
        if not root_path.exists():
            raise RootNotFoundError(root_path)

        run_id = uuid.uuid4().hex[:12]
        started_at = datetime.now(timezone.utc)

        with LogContext(run_id=run_id):
            logger.info(f"Starting run {run_id} on {root_path}")
            with RunWorkspace(self.settings.workspace_dir) as workspace:
                ctx = self._new_context(run_id, workspace)
                await TraversalController(ctx).traverse(ContentItem.from_path(root_path))

            result = RunResult(
                run_id=run_id,
                root=str(root_path),
                language_stats=ctx.aggregator.snapshot(),
                totals=ctx.aggregator.totals(),
                failures=tuple(ctx.failures),
                started_at=started_at,
                finished_at=datetime.now(timezone.utc),
            )
            if result.failures:
                logger.warning(f"Run {run_id} finished with {len(result.failures)} skipped branch(es)")
            self.reporter.emit(ProgressType.COMPLETE, "Analysis complete", percentage=100.0)
            return result


async def analyze(
    root: Union[str, Path],
    settings: Optional[Settings] = None,
    extractors: Optional[ExtractorSet] = None,
    reporter: Optional[ProgressReporter] = None,
) -> RunResult:
    """Run a single analysis with a throwaway engine."""
    engine = IngestionEngine(settings=settings, extractors=extractors, reporter=reporter)
    return await engine.run(root)
