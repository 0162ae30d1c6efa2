"""Resumable processing of multi-page documents.

Per page the processor skips pages whose artifact triple already validates,
renders the page at the document's target DPI, recognises it, and writes the
preview image, text and markup atomically. After each page the merge stage
advances; once every page is done the combined artifacts are written.

With one worker everything runs on the calling thread and only preview
encoding is offloaded (one page at a time). With more workers a
``WorkerPool`` pulls page indices and each worker owns its engine.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from ..checkpoint.oracle import MARKUP_EXT, TEXT_EXT, CheckpointOracle
from ..config import BatchConfig
from ..conversion.input.pdf import PdfInfo, get_pdf_info, open_page_renderer, resolve_target_dpi
from ..conversion.output.xhtml import render_page_document
from ..exceptions import BatchOcrError, RecognitionError
from ..io.atomic import atomic_write_image, atomic_write_text
from ..io.naming import ArtifactNaming, document_output_dir
from ..misc import tz_now
from ..progress.logging import StepLogger
from ..progress.tracker import ProgressTracker
from ..recognition.handle import EngineFactory, EngineHandle
from ..types import OcrResult, PageImage, PageResult, UnitOutcome, UnitStatus
from .merge import MergeStage, PageArtifact
from .workers import WorkerPool

if TYPE_CHECKING:
    import numpy as np

    from ..progress.coordinator import ProgressCoordinator

logger = logging.getLogger(__name__)
log = StepLogger(logger, "PDF")


class PageRenderer(Protocol):
    def render(self, page_index: int, dpi: int) -> np.ndarray: ...


RendererFactory = Callable[[Path], AbstractContextManager[PageRenderer]]


@dataclass
class _DocumentRun:
    """Mutable state of one document run, shared by its workers."""

    pdf_path: Path
    naming: ArtifactNaming
    oracle: CheckpointOracle
    merger: MergeStage
    renderer: PageRenderer
    dpi: int
    tracker: ProgressTracker
    processed: int = 0
    skipped: int = 0
    page_errors: int = 0
    failed_pages: list[int] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def count(self, attr: str) -> None:
        with self.lock:
            setattr(self, attr, getattr(self, attr) + 1)

    def page_failed(self, page_num: int) -> None:
        with self.lock:
            self.failed_pages.append(page_num)


class DocumentProcessor:
    """Processes one PDF into page, range and combined artifacts.

    Args:
        config: Batch configuration (workers, DPI override, formats, ...)
        engine_factory: Zero-argument engine constructor, called on the thread that uses the engine
        coordinator: Progress coordinator shared with the folder run, if any
        renderer_factory: Opens a page renderer for a PDF path
        info_loader: Reads page count and geometry of a PDF

    Example:
        >>> processor = DocumentProcessor(BatchConfig(workers=4), engine_registry.factory("tesseract"))
        >>> outcome = processor.process(Path("report.pdf"))
        >>> outcome.status
        <UnitStatus.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        config: BatchConfig,
        engine_factory: EngineFactory,
        coordinator: ProgressCoordinator | None = None,
        renderer_factory: RendererFactory = open_page_renderer,
        info_loader: Callable[[Path], PdfInfo] = get_pdf_info,
    ):
        self.config = config
        self.engine_factory = engine_factory
        self.coordinator = coordinator
        self.renderer_factory = renderer_factory
        self.info_loader = info_loader

    # ==================== Entry point ====================

    def process(self, pdf_path: Path, output_dir: Path | None = None, handle: EngineHandle | None = None) -> UnitOutcome:
        """Process a PDF, resuming from whatever artifacts already exist.

        Args:
            pdf_path: Source document
            output_dir: Artifact directory (defaults to ``<pdf>.oneocr``)
            handle: Engine handle of the calling thread to reuse in single-worker mode

        Returns:
            Outcome of the unit. Unit-level failures are returned, not raised;
            KeyboardInterrupt propagates.
        """
        pdf_path = Path(pdf_path)
        output_dir = output_dir or document_output_dir(pdf_path, self.config.output_dir)
        fmt = self.config.image_format

        # Stat-only check before opening the document
        quick = CheckpointOracle(output_dir, ArtifactNaming(pdf_path.name), fmt)
        if quick.is_document_done():
            log.success("%s already complete, skipping", pdf_path.name)
            return UnitOutcome.skipped()

        try:
            info = self.info_loader(pdf_path)
        except BatchOcrError as e:
            log.error("%s: %s", pdf_path.name, e)
            return UnitOutcome.failed(str(e))
        if info.page_count <= 0:
            log.error("%s has no pages", pdf_path.name)
            return UnitOutcome.failed("document has no pages")

        naming = ArtifactNaming(pdf_path.name, info.page_count)
        oracle = CheckpointOracle(output_dir, naming, fmt)
        merger = MergeStage(oracle, pdf_path.name)

        try:
            if merger.promote_final_range():
                log.success("%s: combined artifacts restored from merged range", pdf_path.name)
                return UnitOutcome.skipped(info.page_count)
            if not oracle.missing_pages():
                merger.finalize()
                log.success("%s: all %d pages found, combined artifacts rebuilt", pdf_path.name, info.page_count)
                return UnitOutcome.skipped(info.page_count)
        except BatchOcrError as e:
            log.error("%s: %s", pdf_path.name, e)
            return UnitOutcome.failed(str(e))

        return self._process_pages(pdf_path, info, naming, oracle, merger, handle)

    def _process_pages(
        self,
        pdf_path: Path,
        info: PdfInfo,
        naming: ArtifactNaming,
        oracle: CheckpointOracle,
        merger: MergeStage,
        handle: EngineHandle | None,
    ) -> UnitOutcome:
        dpi = resolve_target_dpi(info, self.config.target_dpi)
        oracle.output_dir.mkdir(parents=True, exist_ok=True)
        log.step("%s: %d pages at %d DPI, %d worker(s)", pdf_path.name, info.page_count, dpi, self.config.workers)

        tracker = ProgressTracker(f"PDF {pdf_path.name}", info.page_count, coordinator=self.coordinator).start()
        try:
            with self.renderer_factory(pdf_path) as renderer:
                run = _DocumentRun(pdf_path, naming, oracle, merger, renderer, dpi, tracker)
                if self.config.workers == 1:
                    self._run_sequential(run, handle)
                else:
                    self._run_parallel(run)
        except KeyboardInterrupt:
            tracker.fail("interrupted")
            raise
        except BatchOcrError as e:
            tracker.fail(str(e))
            return UnitOutcome.failed(str(e))

        missing = oracle.missing_pages()
        if missing:
            shown = ", ".join(str(p) for p in missing[:10])
            tracker.fail(f"{len(missing)} page(s) incomplete: {shown}")
            return UnitOutcome(
                status=UnitStatus.FAILED,
                pages_processed=run.processed,
                pages_skipped=run.skipped,
                page_errors=run.page_errors,
                error=f"{len(missing)} page(s) incomplete",
            )

        try:
            merger.finalize()
        except BatchOcrError as e:
            tracker.fail(str(e))
            return UnitOutcome.failed(str(e))

        tracker.done()
        if run.page_errors:
            log.warning("%s: %d page(s) recorded empty after recognition errors", pdf_path.name, run.page_errors)
        log.success("%s: %d processed, %d resumed", pdf_path.name, run.processed, run.skipped)
        return UnitOutcome(
            status=UnitStatus.COMPLETED,
            pages_processed=run.processed,
            pages_skipped=run.skipped,
            page_errors=run.page_errors,
        )

    # ==================== Worker modes ====================

    def _run_sequential(self, run: _DocumentRun, handle: EngineHandle | None) -> None:
        owned = None
        pending = self._resume_done_pages(run)
        encoder = ThreadPoolExecutor(max_workers=1, thread_name_prefix="preview-encoder")
        try:
            for page_index in pending:
                if handle is None:
                    handle = owned = EngineHandle.open(self.engine_factory)
                self._process_page(run, handle, page_index, encoder)
        finally:
            encoder.shutdown(wait=True, cancel_futures=True)
            if owned is not None:
                owned.close()

    def _run_parallel(self, run: _DocumentRun) -> None:
        pending = self._resume_done_pages(run)
        if not pending:
            return
        pool: WorkerPool[int] = WorkerPool(
            min(self.config.workers, len(pending)),
            self.engine_factory,
            shutdown_timeout=self.config.shutdown_timeout,
        )
        pool.run(pending, lambda handle, index: self._process_page(run, handle, index))
        for error in pool.errors:
            log.error("%s: worker stopped early: %s", run.pdf_path.name, error)

    # ==================== Per page ====================

    def _resume_done_pages(self, run: _DocumentRun) -> list[int]:
        """Load every checkpointed page, merge them once and return the page indices still to do."""
        pending: list[int] = []
        for page_index in range(run.naming.total_pages):
            if not self._load_if_done(run, page_index + 1):
                pending.append(page_index)
        if run.skipped:
            run.merger.advance()
        return pending

    def _load_if_done(self, run: _DocumentRun, page_num: int) -> bool:
        if not run.oracle.is_page_done(page_num):
            return False
        try:
            run.merger.load_existing(page_num)
        except BatchOcrError as e:
            # Unreadable artifacts: redo the page
            logger.warning("Page %d of %s unreadable, reprocessing: %s", page_num, run.pdf_path.name, e)
            return False
        run.count("skipped")
        run.tracker.increment()
        return True

    def _recognize(self, run: _DocumentRun, handle: EngineHandle, bitmap: np.ndarray, page_num: int) -> tuple[OcrResult, str | None]:
        try:
            result = handle.recognize(bitmap, self.config.max_lines)
        except RecognitionError as e:
            run.count("page_errors")
            log.error("%s page %d: %s", run.pdf_path.name, page_num, e)
            return OcrResult.empty(), str(e)
        return result.filter_by_confidence(self.config.min_confidence), None

    def _process_page(
        self,
        run: _DocumentRun,
        handle: EngineHandle,
        page_index: int,
        encoder: ThreadPoolExecutor | None = None,
    ) -> None:
        """Render, recognise and persist one page. Page failures are logged, not raised."""
        page_num = page_index + 1
        naming, out = run.naming, run.oracle.output_dir
        try:
            bitmap = run.renderer.render(page_index, run.dpi)
            result, error = self._recognize(run, handle, bitmap, page_num)

            preview_name = naming.page(page_num, self.config.image_format)
            height, width = int(bitmap.shape[0]), int(bitmap.shape[1])
            page = PageResult(page_num, result, PageImage(preview_name, width, height), error)

            preview: Future | None = None
            if encoder is not None:
                preview = encoder.submit(atomic_write_image, out / preview_name, bitmap, self.config.image_format)
            else:
                atomic_write_image(out / preview_name, bitmap, self.config.image_format)

            artifact = PageArtifact.from_page_result(page)
            atomic_write_text(out / naming.page(page_num, TEXT_EXT), artifact.text)
            atomic_write_text(
                out / naming.page(page_num, MARKUP_EXT),
                render_page_document(artifact.section, preview_name, tz_now().isoformat()),
            )
            if preview is not None:
                preview.result()
        except BatchOcrError as e:
            run.page_failed(page_num)
            log.error("%s page %d failed: %s", run.pdf_path.name, page_num, e)
            run.tracker.increment()
            return

        run.merger.add(artifact)
        run.merger.advance()
        run.count("processed")
        run.tracker.increment()
