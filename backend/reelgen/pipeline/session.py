"""Per-run resource ownership.

A ReelSession names and tracks every temporary file one reel run creates,
so the run can remove exactly its own files and nothing else in the
shared temp directory.
"""
import logging
import re
import uuid
from pathlib import Path
from typing import List, Optional

from reelgen.config import settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")


def safe_name(value: str, max_length: int = 40) -> str:
    """Reduce an arbitrary id to something usable inside a file name."""
    cleaned = _UNSAFE_CHARS.sub("_", value).strip("_")
    return cleaned[:max_length] or "x"


class ReelSession:
    """Temporary files and identity of a single reel run."""

    def __init__(self, meeting_id: Optional[str] = None, temp_dir: Optional[Path] = None):
        self.run_id = uuid.uuid4().hex[:12]
        self.meeting_id = meeting_id or self.run_id
        self.temp_dir = Path(temp_dir or settings.temp_dir)
        self._temp_files: List[Path] = []
        self._torn_down = False

    def __repr__(self):
        return (
            f"<ReelSession(run={self.run_id}, meeting={self.meeting_id}, "
            f"files={len(self._temp_files)})>"
        )

    @property
    def temp_files(self) -> List[Path]:
        return list(self._temp_files)

    @property
    def is_torn_down(self) -> bool:
        return self._torn_down

    def temp_path(self, stem: str, suffix: str = ".mp4") -> Path:
        """
        Reserve a run-unique temp file path and register it for cleanup.

        The file itself is not created here.
        """
        if self._torn_down:
            raise RuntimeError(f"Session {self.run_id} already torn down")
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        path = self.temp_dir / f"{self.run_id}_{safe_name(stem)}{suffix}"
        if path not in self._temp_files:
            self._temp_files.append(path)
        return path

    def teardown(self) -> int:
        """
        Delete every registered temp file. Runs once; later calls are no-ops.

        Failures are logged and skipped.

        Returns:
            Number of files deleted
        """
        if self._torn_down:
            return 0
        self._torn_down = True

        deleted = 0
        for path in self._temp_files:
            try:
                path.unlink()
                deleted += 1
                logger.debug(f"Cleaned up temp file: {path}")
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Could not delete temp file {path}: {e}")

        logger.info(f"Session {self.run_id}: removed {deleted} temp file(s)")
        return deleted
