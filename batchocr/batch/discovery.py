"""Background discovery of units under an input root."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path

from ..constants import COMBINED_MARKER, SUPPORTED_EXTENSIONS
from ..exceptions import DiscoveryError
from ..types import Unit
from .estimator import estimate_unit
from .queue import WorkQueue

logger = logging.getLogger(__name__)

ARTIFACT_DIR_SUFFIX = f".{COMBINED_MARKER}"


def list_supported_files(root: Path, recursive: bool = False) -> list[Path]:
    """Regular files under ``root`` with a supported extension, sorted by path.

    Raises:
        DiscoveryError: If ``root`` cannot be listed
    """
    def _on_error(err: OSError) -> None:
        if Path(err.filename or "") == root:
            raise DiscoveryError(f"Cannot scan {root}: {err}") from err
        logger.warning("Skipping unreadable directory %s: %s", err.filename, err.strerror)

    files: list[Path] = []
    if recursive:
        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            # Skip artifact directories written by earlier runs
            dirnames[:] = sorted(d for d in dirnames if not d.endswith(ARTIFACT_DIR_SUFFIX))
            files.extend(Path(dirpath) / name for name in filenames)
    else:
        try:
            files = list(root.iterdir())
        except OSError as e:
            raise DiscoveryError(f"Cannot scan {root}: {e}") from e

    return sorted(p for p in files if p.suffix.lower() in SUPPORTED_EXTENSIONS and p.is_file())


class DiscoveryScanner:
    """Producer thread that walks the input root and feeds the work queue.

    Files are listed and sorted first, then estimated and enqueued one at a
    time, so consumers see totals that refine while discovery runs. Whatever
    happens, the queue is marked discovery-complete when the thread ends.

    Example:
        >>> queue = WorkQueue()
        >>> scanner = DiscoveryScanner(Path("scans"), queue, recursive=True)
        >>> scanner.start()
        >>> if not queue.wait_for_work(timeout=30):
        ...     print("No supported files found")
    """

    def __init__(
        self,
        root: Path,
        queue: WorkQueue,
        recursive: bool = False,
        estimator: Callable[[Path], Unit] = estimate_unit,
    ):
        self.root = Path(root)
        self.queue = queue
        self.recursive = recursive
        self.estimator = estimator
        self.error: Exception | None = None
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self.run, name="scope-discovery", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        """Ask the scanner to stop after the current file."""
        self._stop.set()

    def join(self, timeout: float | None = None) -> None:
        self._thread.join(timeout)

    @property
    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def run(self) -> None:
        try:
            files = list_supported_files(self.root, self.recursive)
            logger.debug("Discovered %d supported files under %s", len(files), self.root)
            for path in files:
                if self._stop.is_set():
                    logger.debug("Discovery stopped early")
                    break
                self.queue.enqueue(self.estimator(path))
        except Exception as e:  # noqa: BLE001 - reported once; discovery still completes
            self.error = e
            logger.error("Discovery failed under %s: %s", self.root, e)
        finally:
            self.queue.mark_discovery_complete()
