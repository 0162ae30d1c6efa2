"""Single-image unit processing.

An image unit produces ``<name>.oneocr.txt``, ``<name>.oneocr.xhtml`` and
``<name>.oneocr.json`` (plus an optional SVG overlay) next to its mirrored
output path. Recognition failures fail the unit without writing anything,
so the image is retried on the next run.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..checkpoint.oracle import CheckpointOracle
from ..config import BatchConfig
from ..conversion.input.image import load_image
from ..conversion.output.json import result_to_compact_json
from ..conversion.output.svg import render_svg_overlay
from ..conversion.output.xhtml import render_page_document, render_page_section
from ..exceptions import BatchOcrError
from ..io.atomic import atomic_write_text
from ..io.naming import ArtifactNaming
from ..misc import tz_now
from ..progress.logging import StepLogger
from ..recognition.handle import EngineFactory, EngineHandle
from ..types import PageImage, PageResult, UnitOutcome, UnitStatus

logger = logging.getLogger(__name__)
log = StepLogger(logger, "IMAGE")

SVG_EXT = "svg"


class ImageProcessor:
    """Recognises standalone images and writes their artifacts."""

    def __init__(self, config: BatchConfig, engine_factory: EngineFactory):
        self.config = config
        self.engine_factory = engine_factory

    def recognize(self, image_path: Path, handle: EngineHandle | None = None) -> PageResult:
        """Load and recognise one image, applying the confidence filter.

        Raises:
            FileLoadError: If the image cannot be decoded
            RecognitionError: If the engine fails
        """
        image_path = Path(image_path)
        bitmap = load_image(image_path)
        height, width = int(bitmap.shape[0]), int(bitmap.shape[1])

        if handle is None:
            with EngineHandle.open(self.engine_factory) as owned:
                result = owned.recognize(bitmap, self.config.max_lines)
        else:
            result = handle.recognize(bitmap, self.config.max_lines)

        result = result.filter_by_confidence(self.config.min_confidence)
        logger.debug("%s: %d lines, %d words", image_path.name, result.line_count, result.word_count)
        return PageResult(page_num=1, result=result, image=PageImage(image_path.name, width, height))

    def write_artifacts(self, page: PageResult, output_dir: Path, svg: bool | None = None) -> list[Path]:
        """Write text, markup, JSON and optionally SVG artifacts; returns the written paths.

        The text file is written last so its presence marks a finished unit.
        """
        naming = ArtifactNaming(page.image.source_name)
        oracle = CheckpointOracle(output_dir, naming, self.config.image_format)
        text_path, markup_path, json_path = oracle.image_paths()
        timestamp = tz_now().isoformat()
        written = []

        section = render_page_section(page.result, page.image)
        written.append(atomic_write_text(markup_path, render_page_document(section, page.image.source_name, timestamp)))
        written.append(atomic_write_text(json_path, result_to_compact_json(page.result, page.image, timestamp)))
        if self.config.generate_svg if svg is None else svg:
            svg_path = Path(output_dir) / naming.combined(SVG_EXT)
            written.append(atomic_write_text(svg_path, render_svg_overlay(page.result, page.image)))
        written.append(atomic_write_text(text_path, page.result.text))
        return written

    def process(self, image_path: Path, output_dir: Path | None = None, handle: EngineHandle | None = None) -> UnitOutcome:
        """Process one image unit unless its artifacts already exist."""
        image_path = Path(image_path)
        output_dir = Path(output_dir) if output_dir is not None else image_path.parent
        oracle = CheckpointOracle(output_dir, ArtifactNaming(image_path.name), self.config.image_format)
        if oracle.is_image_done():
            log.success("%s already complete, skipping", image_path.name)
            return UnitOutcome.skipped(1)

        try:
            page = self.recognize(image_path, handle)
            self.write_artifacts(page, output_dir)
        except BatchOcrError as e:
            log.error("%s: %s", image_path.name, e)
            return UnitOutcome.failed(str(e))

        log.success("%s: %d lines", image_path.name, page.result.line_count)
        return UnitOutcome(status=UnitStatus.COMPLETED, pages_processed=1)
