"""
Ingestion engine: traversal, link resolution, aggregation and run lifecycle.
"""

from lingostat.engine.classify import classify_file, classify_link
from lingostat.engine.concurrency import ConcurrencyLimiter
from lingostat.engine.context import RunContext
from lingostat.engine.links import LinkResolver
from lingostat.engine.progress import ProgressReporter
from lingostat.engine.runner import IngestionEngine, analyze
from lingostat.engine.state import SeenSet, StatsAggregator
from lingostat.engine.traversal import TraversalController
from lingostat.engine.workspace import RunWorkspace

__all__ = [
    "classify_file",
    "classify_link",
    "ConcurrencyLimiter",
    "RunContext",
    "LinkResolver",
    "ProgressReporter",
    "IngestionEngine",
    "analyze",
    "SeenSet",
    "StatsAggregator",
    "TraversalController",
    "RunWorkspace",
]
