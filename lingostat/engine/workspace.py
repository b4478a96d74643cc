"""
Run-scoped working directories.

Every directory a run creates (extracted archives, downloaded files) lives
under a per-run directory that is removed when the run ends, whatever the
outcome.
"""

import re
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from lingostat.utils.errors import WorkspaceCleanupError, WorkspaceError
from lingostat.utils.logging import get_logger

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")
_MAX_LABEL = 40


def _label(text: str) -> str:
    return _UNSAFE_CHARS.sub("_", text).strip("_")[:_MAX_LABEL] or "item"


class RunWorkspace:
    """
    Scoped acquisition of the working area for a single run.

    Usage:
        with RunWorkspace(settings.workspace_dir) as workspace:
            target = workspace.archive_dir(archive_path)
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)
        self._created_root = False
        self._run_dir: Optional[Path] = None
        self._allocated: List[Path] = []

    @property
    def run_dir(self) -> Path:
        if self._run_dir is None:
            raise WorkspaceError("Workspace is not open")
        return self._run_dir

    @property
    def allocated(self) -> List[Path]:
        """Directories handed out during this run."""
        return list(self._allocated)

    def open(self) -> "RunWorkspace":
        if not self.root.exists():
            self.root.mkdir(parents=True)
            self._created_root = True
        self._run_dir = Path(tempfile.mkdtemp(prefix="run-", dir=self.root))
        logger.debug(f"Opened workspace {self._run_dir}")
        return self

    def _allocate(self, prefix: str) -> Path:
        path = Path(tempfile.mkdtemp(prefix=prefix, dir=self.run_dir))
        self._allocated.append(path)
        return path

    def archive_dir(self, archive_path: Union[str, Path]) -> Path:
        """Fresh directory for extracting an archive, named after its stem."""
        return self._allocate(f"unzipped-{_label(Path(archive_path).stem)}-")

    def download_dir(self, key: str) -> Path:
        """Fresh directory for a materialized remote file."""
        return self._allocate(f"download-{_label(key)}-")

    def close(self) -> List[Path]:
        """
        Remove the run directory, and the root if this run created it.

        Returns:
            Paths that could not be removed
        """
        leftovers: List[Path] = []
        if self._run_dir is not None:
            shutil.rmtree(self._run_dir, ignore_errors=True)
            if self._run_dir.exists():
                leftovers.append(self._run_dir)
            logger.debug(f"Removed workspace {self._run_dir}")
            self._run_dir = None

        if self._created_root and not leftovers:
            try:
                self.root.rmdir()
            except OSError as e:
                # another run may still be using it
                logger.debug(f"Kept workspace root {self.root}: {e}")
            self._created_root = False

        self._allocated.clear()
        return leftovers

    def __enter__(self) -> "RunWorkspace":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        leftovers = self.close()
        if not leftovers:
            return
        logger.warning(f"Failed to remove workspace directories: {', '.join(map(str, leftovers))}")
        if exc_type is None:
            raise WorkspaceCleanupError(leftovers)
