"""
Formatting and export of run results.
"""

import json
from pathlib import Path
from typing import List, Union

import pycountry

from lingostat.models import OTHER_LANGUAGE, RunResult
from lingostat.utils.logging import get_logger

logger = get_logger(__name__)

BREAKDOWN_HEADER = "--- Language Breakdown ---"


def format_duration(seconds: float) -> str:
    """Render a duration in the largest unit below the next threshold."""
    if seconds < 60:
        return f"{seconds:.1f} seconds"
    if seconds < 3600:
        return f"{seconds / 60:.1f} minutes"
    if seconds < 86400:
        return f"{seconds / 3600:.1f} hours"
    return f"{seconds / 86400:.1f} days"


def language_display_name(code: str) -> str:
    """Human-readable name for a language tag."""
    if code == OTHER_LANGUAGE:
        return "Other"
    try:
        language = pycountry.languages.get(alpha_2=code)
    except KeyError:
        language = None
    if language is not None:
        return language.name
    return code.capitalize()


def format_breakdown(result: RunResult) -> str:
    """One line per language, sorted by language code."""
    lines: List[str] = [BREAKDOWN_HEADER]
    for code in result.languages:
        stats = result.language_stats[code]
        lines.append(
            f"{language_display_name(code)} - Watch time: {format_duration(stats.watch_seconds)}, "
            f"Lines: {stats.lines}, PDFs: {stats.doc_count}, Videos/Audio: {stats.media_count}"
        )
    return "\n".join(lines) + "\n"


def export_result(result: RunResult, path: Union[str, Path]) -> Path:
    """Write the result as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(result.model_dump(mode="json"), indent=2), encoding="utf-8")
    logger.info(f"Wrote results to {path}")
    return path


def export_provenance(result: RunResult, directory: Union[str, Path]) -> List[Path]:
    """
    Write one `<language>.txt` per bucket listing its contributing items.

    Returns:
        Paths of the written files
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    written = []
    for code in result.languages:
        target = directory / f"{code}.txt"
        items = result.language_stats[code].items
        target.write_text("".join(f"{item}\n" for item in items), encoding="utf-8")
        written.append(target)

    logger.info(f"Wrote {len(written)} provenance file(s) to {directory}")
    return written
