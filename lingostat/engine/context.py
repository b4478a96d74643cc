"""
Per-run context threaded through the traversal controller and link resolver.
"""

from dataclasses import dataclass, field
from typing import List

from lingostat.config import Settings
from lingostat.engine.concurrency import ConcurrencyLimiter
from lingostat.engine.progress import ProgressReporter
from lingostat.engine.state import StatsAggregator
from lingostat.engine.workspace import RunWorkspace
from lingostat.extractors.base import ExtractorSet
from lingostat.models import BranchFailure


@dataclass
class RunContext:
    """Everything one run owns. Built fresh by every call to `run()`."""

    run_id: str
    settings: Settings
    extractors: ExtractorSet
    reporter: ProgressReporter
    workspace: RunWorkspace
    limiter: ConcurrencyLimiter
    aggregator: StatsAggregator = field(default_factory=StatsAggregator)
    failures: List[BranchFailure] = field(default_factory=list)

    @property
    def default_language(self) -> str:
        return self.settings.default_language
