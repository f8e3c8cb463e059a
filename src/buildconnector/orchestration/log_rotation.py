"""
Rotating storage for captured build output.

The store hands out fresh, timestamped log files inside one directory and
keeps at most a fixed number of files there, evicting the oldest one by
modification time when the cap would be exceeded.
"""

import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

from ..models.config import MAX_LOG_FILES
from ..validation import ErrorSeverity, handle_file_error

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H.%M.%S"


class LogRotationStore:
    """
    Allocates log files named ``<prefix>.<yyyy-MM-dd_HH.mm.ss>.log``.

    Allocation and eviction happen under one lock, so concurrent callers
    never evict the same file or both skip an eviction. The log directory
    must exist before the first allocation; the store does not create it.
    """

    def __init__(
        self,
        log_dir: Union[str, Path],
        prefix: str = "maven",
        max_files: int = MAX_LOG_FILES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if max_files < 1:
            raise ValueError(f"max_files must be >= 1, got {max_files}")
        self.log_dir = Path(log_dir)
        self.prefix = prefix
        self.max_files = max_files
        self._clock = clock
        self._lock = threading.Lock()

    def allocate(self) -> Path:
        """
        Create a new, empty log file and return its path.

        If the directory already holds ``max_files`` or more files, the one
        with the oldest modification time is deleted first.

        Returns:
            Path of the created file

        Raises:
            OSError: If the directory is missing, or a file cannot be
                deleted or created
        """
        with self._lock:
            if not self.log_dir.is_dir():
                raise FileNotFoundError(f"Log directory does not exist: {self.log_dir}")

            files = self.list_files()
            if len(files) >= self.max_files:
                self._evict(files[0])

            path = self._create_unique_file()
            logger.debug(f"Allocated log file {path}")
            return path

    def list_files(self) -> List[Path]:
        """Return the files in the log directory, oldest modification first."""
        files = [p for p in self.log_dir.iterdir() if p.is_file()]
        files.sort(key=lambda p: (p.stat().st_mtime_ns, p.name))
        return files

    def _evict(self, path: Path) -> None:
        try:
            path.unlink()
            logger.info(f"Log limit of {self.max_files} reached, removed oldest log file {path.name}")
        except FileNotFoundError:
            logger.debug(f"Log file {path} vanished before eviction")
        except OSError as e:
            handle_file_error(
                error=e,
                context=f"evicting log file {path}",
                severity=ErrorSeverity.WARNING,
                reraise=True,
                logger=logger,
            )

    def _create_unique_file(self) -> Path:
        stamp = self._clock().strftime(TIMESTAMP_FORMAT)
        sequence: Optional[int] = None
        while True:
            if sequence is None:
                name = f"{self.prefix}.{stamp}.log"
            else:
                name = f"{self.prefix}.{stamp}.{sequence}.log"
            path = self.log_dir / name
            try:
                # Exclusive create: never reuse a file from the same second.
                with open(path, "x", encoding="utf-8"):
                    pass
                return path
            except FileExistsError:
                sequence = 1 if sequence is None else sequence + 1
