"""Folder batch processing.

Discovery runs on a background thread while the main thread consumes units
from the work queue. Images and PDFs go to their processors; a failure in one
unit is logged and counted, and the loop moves on. The folder bar and the
per-document bar are drawn together through one ``ProgressCoordinator``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ..checkpoint.oracle import CheckpointOracle
from ..config import BatchConfig
from ..constants import COMBINED_MARKER, FIRST_WORK_POLL_INTERVAL
from ..exceptions import BatchOcrError, DiscoveryError
from ..io.naming import ArtifactNaming, mirror_output_path
from ..processing.image import ImageProcessor
from ..processing.pdf import DocumentProcessor
from ..progress.coordinator import ProgressCoordinator
from ..progress.logging import StepLogger
from ..progress.tracker import FolderProgressTracker
from ..recognition.handle import EngineFactory, EngineHandle
from ..types import Unit, UnitKind, UnitOutcome, UnitStatus
from .discovery import DiscoveryScanner
from .estimator import estimate_unit
from .queue import WorkQueue
from .types import BatchSummary

logger = logging.getLogger(__name__)
log = StepLogger(logger, "FOLDER")


class FolderBatchProcessor:
    """Processes every supported file under a directory.

    Args:
        config: Batch configuration
        engine_factory: Engine constructor shared by every unit
        coordinator: Coordinator enabled for the duration of the run
        estimator: Builds the unit for each discovered file

    Example:
        >>> processor = FolderBatchProcessor(config, engine_registry.factory("tesseract"), ProgressCoordinator())
        >>> summary = processor.process(Path("scans"))
        >>> summary.exit_code
        0
    """

    def __init__(
        self,
        config: BatchConfig,
        engine_factory: EngineFactory,
        coordinator: ProgressCoordinator | None = None,
        estimator: Callable[[Path], Unit] = estimate_unit,
    ):
        self.config = config
        self.engine_factory = engine_factory
        self.estimator = estimator
        self.coordinator = coordinator or ProgressCoordinator()
        self.image_processor = ImageProcessor(config, engine_factory)
        self.document_processor = DocumentProcessor(config, engine_factory, coordinator=self.coordinator)
        self._handle: EngineHandle | None = None
        self.queue: WorkQueue | None = None

    def _main_handle(self) -> EngineHandle:
        # Created on first use so a folder of skipped units never starts an engine
        if self._handle is None:
            self._handle = EngineHandle.open(self.engine_factory)
        return self._handle

    def process(self, input_root: Path) -> BatchSummary:
        """Run the batch and return its summary.

        Raises:
            DiscoveryError: If ``input_root`` is not a directory
        """
        # Unit paths are made relative to the roots when mirroring
        input_root = Path(input_root).absolute()
        if not input_root.is_dir():
            raise DiscoveryError(f"Not a directory: {input_root}")
        output_root = Path(self.config.output_dir).absolute() if self.config.output_dir else input_root

        queue = self.queue = WorkQueue()
        scanner = DiscoveryScanner(input_root, queue, recursive=self.config.recursive, estimator=self.estimator)
        scanner.start()
        log.step("Scanning %s%s", input_root, " (recursive)" if self.config.recursive else "")

        summary = BatchSummary()
        if not queue.wait_for_work(self.config.first_work_timeout, FIRST_WORK_POLL_INTERVAL):
            scanner.stop()
            scanner.join(timeout=self.config.shutdown_timeout)
            log.complete("No supported files found in %s", input_root)
            return summary

        self.coordinator.enable()
        tracker = FolderProgressTracker("Folder", queue.metrics, queue.total_units, coordinator=self.coordinator)
        tracker.start()
        try:
            while queue.has_more():
                unit = queue.dequeue()
                if unit is None:
                    break
                tracker.update_total(queue.total_units)
                outcome = self._process_unit(unit, input_root, output_root)
                self._record(summary, unit, outcome)
                queue.mark_unit_completed(unit)
                tracker.increment()
        finally:
            if queue.completed_units >= queue.total_units:
                tracker.done()
            else:
                tracker.fail("stopped before all files were processed")
            self.coordinator.disable()
            scanner.stop()
            scanner.join(timeout=self.config.shutdown_timeout)
            if self._handle is not None:
                self._handle.close()
                self._handle = None

        metrics = queue.metrics()
        log.step(
            "Processed %d files (%s, %s)", metrics.completed_units, metrics.best_label, metrics.reliability_label
        )
        log.complete(
            "Processing complete: %d success, %d errors (%d skipped)",
            summary.success,
            summary.errors,
            summary.skipped,
        )
        return summary

    def _process_unit(self, unit: Unit, input_root: Path, output_root: Path) -> UnitOutcome:
        try:
            if unit.kind is UnitKind.IMAGE:
                out_dir = mirror_output_path(unit.path, input_root, output_root, "").parent
                return self.image_processor.process(unit.path, out_dir, handle=self._image_handle(unit, out_dir))
            if unit.kind is UnitKind.MULTI_PAGE:
                out_dir = mirror_output_path(unit.path, input_root, output_root, f".{COMBINED_MARKER}")
                handle = self._main_handle() if self.config.workers == 1 else None
                return self.document_processor.process(unit.path, out_dir, handle=handle)
            return UnitOutcome.failed(f"Unsupported file type: {unit.path.suffix}")
        except BatchOcrError as e:
            log.error("%s: %s", unit.name, e)
            return UnitOutcome.failed(str(e))
        except Exception as e:
            logger.exception("Unexpected error processing %s", unit.path)
            return UnitOutcome.failed(str(e))

    def _image_handle(self, unit: Unit, out_dir: Path) -> EngineHandle | None:
        if CheckpointOracle(out_dir, ArtifactNaming(unit.path.name)).is_image_done():
            return None
        return self._main_handle()

    @staticmethod
    def _record(summary: BatchSummary, unit: Unit, outcome: UnitOutcome) -> None:
        if outcome.status is UnitStatus.FAILED:
            summary.errors += 1
            summary.failed_units.append((unit.name, outcome.error or "unknown error"))
            return
        summary.success += 1
        if outcome.status is UnitStatus.SKIPPED:
            summary.skipped += 1
