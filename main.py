#!/usr/bin/env python3
"""
Main entry point for batchocr
Provides command-line interface for recognising images, PDFs and whole folders
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import TYPE_CHECKING

from dotenv import load_dotenv

# Load environment variables from .env file (BATCHOCR_CONFIG and engine settings)
load_dotenv()

# Processing imports are deferred to keep --help and argument errors fast
if TYPE_CHECKING:
    from batchocr.config import BatchConfig
    from batchocr.progress import ProgressCoordinator


def setup_logging(
    level: str = "INFO",
    verbose: bool = False,
    timestamps: bool = False,
    coordinator: ProgressCoordinator | None = None,
) -> ProgressCoordinator:
    """Setup logging with a timestamped log file and a progress-aware console handler."""
    from batchocr.misc import tz_now  # noqa: PLC0415 - lazy import for startup performance
    from batchocr.progress import ProgressCoordinator, setup_console_logging  # noqa: PLC0415

    logs_dir = Path(".logs")
    logs_dir.mkdir(exist_ok=True)

    timestamp = tz_now().strftime("%Y-%m-%d_%H-%M-%S")
    log_filename = logs_dir / f"{timestamp}_batchocr.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    file_handler = logging.FileHandler(log_filename, encoding="utf-8")
    file_handler.setLevel(getattr(logging, level.upper()))
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root.addHandler(file_handler)

    coordinator = coordinator or ProgressCoordinator()
    setup_console_logging(coordinator, verbose=verbose, timestamps=timestamps)
    return coordinator


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    from batchocr.exceptions import BatchOcrError  # noqa: PLC0415
    from batchocr.misc import set_default_timezone  # noqa: PLC0415

    parser = _build_argument_parser()
    args = parser.parse_args(argv)

    # Logging levels come from the merged config, so it loads first
    try:
        config = _load_config(args)
    except BatchOcrError as exc:
        setup_logging(args.log_level or "INFO", args.verbose, args.timestamps)
        logging.getLogger(__name__).error("%s", exc)
        return 1

    if config.timezone:
        set_default_timezone(config.timezone)
    coordinator = setup_logging(config.log_level, config.verbose, config.timestamps)
    logger = logging.getLogger(__name__)

    return _execute_command(args, config, coordinator, logger)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-v", "--verbose", action="store_true", help="Show step-by-step progress messages")
    parser.add_argument(
        "--min-confidence",
        type=float,
        help="Drop words below this confidence (0.0-1.0, default: 0.0)",
    )
    parser.add_argument(
        "--max-lines",
        type=int,
        help="Maximum lines recognised per page (default: 1000)",
    )
    parser.add_argument(
        "--engine",
        type=str,
        help="Recognition engine name or module:Class spec (default: tesseract)",
    )
    parser.add_argument("--config", type=str, help="YAML config file (default: $BATCHOCR_CONFIG or settings/batchocr.yaml)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log file level (default: INFO)",
    )
    parser.add_argument("--timestamps", action="store_true", help="Prefix console messages with HH:MM:SS.mmm")
    parser.add_argument("--timezone", type=str, help="IANA timezone for log names and page timestamps (default: UTC)")


def _add_document_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--output", type=str, help="Output root directory (default: next to the input)")
    parser.add_argument("-t", "--threads", type=int, help="Recognition workers per document (default: 1)")
    parser.add_argument("--dpi", type=int, help="Force render DPI (clamped to 100-300)")
    parser.add_argument(
        "--image-format",
        choices=["webp", "png", "jpeg"],
        help="Page preview image format (default: webp)",
    )


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="batchocr - Resumable OCR for images, PDFs and folders",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent(
            """
            Examples:
              # Single image (writes scan.png.oneocr.txt and .json)
              python main.py image scan.png
              python main.py image scan.png --no-defaults --show-confidence
              python main.py image scan.png --svg --min-confidence 0.6

              # Multi-page document (writes report.pdf.oneocr/)
              python main.py pdf report.pdf
              python main.py pdf report.pdf --threads 4 --dpi 150

              # Whole folder, resumable
              python main.py folder ./scans --recursive --output ./ocr
            """
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    image_parser = subparsers.add_parser("image", help="Recognise a single image")
    image_parser.add_argument("input", type=str, help="Image file")
    image_parser.add_argument("-o", "--output", dest="text_output", type=str, help="Text output path")
    image_parser.add_argument("--svg", action="store_true", help="Also write an SVG overlay of the boxes")
    image_parser.add_argument("--no-defaults", action="store_true", help="Do not write the default output files")
    image_parser.add_argument("--print", dest="print_result", action="store_true", help="Print results to stdout")
    image_parser.add_argument("--show-confidence", action="store_true", help="Include word confidences when printing")
    image_parser.add_argument("--show-bounds", action="store_true", help="Include line bounds when printing")
    _add_common_arguments(image_parser)

    pdf_parser = subparsers.add_parser("pdf", help="Recognise a PDF page by page")
    pdf_parser.add_argument("input", type=str, help="PDF file")
    _add_document_arguments(pdf_parser)
    _add_common_arguments(pdf_parser)

    folder_parser = subparsers.add_parser("folder", help="Recognise every image and PDF in a folder")
    folder_parser.add_argument("input", type=str, help="Input directory")
    folder_parser.add_argument("-r", "--recursive", action="store_true", help="Descend into subdirectories")
    folder_parser.add_argument("--svg", action="store_true", help="Also write SVG overlays for images")
    _add_document_arguments(folder_parser)
    _add_common_arguments(folder_parser)

    return parser


def _load_config(args: argparse.Namespace) -> BatchConfig:
    from batchocr.config import BatchConfig, resolve_config_path  # noqa: PLC0415

    base = BatchConfig.from_yaml(resolve_config_path(args.config))
    config = BatchConfig.from_cli(args, base=base)
    config.validate()
    return config


def _execute_command(
    args: argparse.Namespace, config: BatchConfig, coordinator: ProgressCoordinator, logger: logging.Logger
) -> int:
    from batchocr.exceptions import BatchOcrError  # noqa: PLC0415

    try:
        if args.command == "image":
            return _run_image(args, config, logger)
        if args.command == "pdf":
            return _run_pdf(args, config, coordinator, logger)
        return _run_folder(args, config, coordinator, logger)
    except KeyboardInterrupt:
        logger.error("Interrupted; completed artifacts are kept and will be skipped on the next run")
        return 1
    except BatchOcrError as exc:
        logger.error("%s", exc)
        return 1
    except Exception as exc:  # noqa: BLE001 - retain broad logging for CLI
        logger.error("Unexpected error: %s", exc, exc_info=True)
        return 1


def _engine_factory(config: BatchConfig):
    from batchocr.recognition import engine_registry  # noqa: PLC0415

    return engine_registry.factory(config.engine, **config.engine_options)


def _run_image(args: argparse.Namespace, config: BatchConfig, logger: logging.Logger) -> int:
    from batchocr.conversion.output import render_svg_overlay, result_to_compact_json, structured_text  # noqa: PLC0415
    from batchocr.io import ArtifactNaming, atomic_write_text  # noqa: PLC0415
    from batchocr.processing import ImageProcessor  # noqa: PLC0415

    image_path = Path(args.input)
    if not image_path.is_file():
        logger.error("Input file does not exist: %s", image_path)
        return 1

    processor = ImageProcessor(config, _engine_factory(config))
    page = processor.recognize(image_path)

    naming = ArtifactNaming(image_path.name)
    text_path = Path(args.text_output) if args.text_output else None
    json_path = None
    if not args.no_defaults:
        text_path = text_path or image_path.with_name(naming.combined("txt"))
        json_path = image_path.with_name(naming.combined("json"))
    svg_path = image_path.with_name(naming.combined("svg")) if config.generate_svg else None

    written = []
    if text_path is not None:
        written.append(atomic_write_text(text_path, page.result.text))
    if json_path is not None:
        written.append(atomic_write_text(json_path, result_to_compact_json(page.result, page.image)))
    if svg_path is not None:
        written.append(atomic_write_text(svg_path, render_svg_overlay(page.result, page.image)))

    if args.print_result or not written:
        sys.stdout.write(structured_text(page.result, args.show_confidence, args.show_bounds))
    for path in written:
        logger.info("Results saved to: %s", path)
    return 0


def _run_pdf(
    args: argparse.Namespace, config: BatchConfig, coordinator: ProgressCoordinator, logger: logging.Logger
) -> int:
    from batchocr.io import document_output_dir  # noqa: PLC0415
    from batchocr.processing import DocumentProcessor  # noqa: PLC0415

    pdf_path = Path(args.input)
    if not pdf_path.is_file():
        logger.error("Input file does not exist: %s", pdf_path)
        return 1

    output_dir = document_output_dir(pdf_path, config.output_dir)
    outcome = DocumentProcessor(config, _engine_factory(config), coordinator=coordinator).process(pdf_path, output_dir)
    if not outcome.succeeded:
        logger.error("Processing failed: %s", outcome.error)
        return 1
    logger.info("Results saved to: %s", output_dir)
    return 0


def _run_folder(
    args: argparse.Namespace, config: BatchConfig, coordinator: ProgressCoordinator, logger: logging.Logger
) -> int:
    from batchocr.batch import FolderBatchProcessor  # noqa: PLC0415

    input_path = Path(args.input)
    if not input_path.is_dir():
        logger.error("Input directory does not exist: %s", input_path)
        return 1

    summary = FolderBatchProcessor(config, _engine_factory(config), coordinator).process(input_path)
    for name, error in summary.failed_units:
        logger.info("Failed: %s (%s)", name, error)
    return summary.exit_code


if __name__ == "__main__":
    sys.exit(main())
