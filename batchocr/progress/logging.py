"""Console logging that cooperates with live progress bars.

Records are printed through the coordinator's rich console, so while bars
are live each line lands above them and the bars are redrawn below.
``StepLogger`` adds a category tag and a record kind that
``CategoryFormatter`` turns into a marker::

    ▶️ [PDF] Rendering page 3/12
    ✅ [PDF] report.pdf done (12 pages)
    ❌ [FOLDER] scan.tiff: Could not load image
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from datetime import datetime
from typing import Any

from rich.text import Text

from .coordinator import ProgressCoordinator

MARKERS = {
    "step": "▶️",
    "info": "",
    "success": "✅",
    "warning": "⚠️",
    "error": "❌",
    "debug": "🔍",
    "complete": "🏁",
}

_LEVEL_KINDS = {
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


class CategoryFormatter(logging.Formatter):
    """Formats records as ``[HH:MM:SS.mmm] <marker> [CATEGORY] message``.

    Args:
        timestamps: Prefix each line with a wall-clock timestamp
    """

    def __init__(self, timestamps: bool = False):
        super().__init__()
        self.timestamps = timestamps

    def format(self, record: logging.LogRecord) -> str:
        kind = getattr(record, "kind", None) or _LEVEL_KINDS.get(record.levelno, "info")
        parts = []
        if self.timestamps:
            stamp = datetime.fromtimestamp(record.created)
            parts.append(f"[{stamp:%H:%M:%S}.{int(record.msecs):03d}]")
        marker = MARKERS.get(kind, "")
        if marker:
            parts.append(marker)
        category = getattr(record, "category", None)
        if category:
            parts.append(f"[{category}]")
        parts.append(record.getMessage())
        text = " ".join(parts)
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


class ProgressAwareHandler(logging.Handler):
    """Handler that prints records on the coordinator's console, above any live bars."""

    def __init__(self, coordinator: ProgressCoordinator):
        super().__init__()
        self.coordinator = coordinator

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            self.coordinator.console.print(Text(message), soft_wrap=True, highlight=False)
        except Exception:  # noqa: BLE001 - logging must not raise
            self.handleError(record)


class StepLogger(logging.LoggerAdapter):
    """Logger adapter with a fixed category and step/success/complete helpers.

    Example:
        >>> log = StepLogger(logging.getLogger(__name__), "PDF")
        >>> log.step("Rendering page %d", 3)
        >>> log.success("Done")
    """

    def __init__(self, logger: logging.Logger, category: str):
        super().__init__(logger, {"category": category})

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs

    def _with_kind(self, level: int, kind: str, msg: str, *args: Any, **kwargs: Any) -> None:
        kwargs["extra"] = {**kwargs.get("extra", {}), "kind": kind}
        self.log(level, msg, *args, **kwargs)

    def step(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._with_kind(logging.INFO, "step", msg, *args, **kwargs)

    def success(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._with_kind(logging.INFO, "success", msg, *args, **kwargs)

    def complete(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Completion lines are shown even in non-verbose mode."""
        self._with_kind(logging.WARNING, "complete", msg, *args, **kwargs)


def setup_console_logging(
    coordinator: ProgressCoordinator,
    verbose: bool = False,
    timestamps: bool = False,
) -> ProgressAwareHandler:
    """Attach a progress-aware console handler to the root logger.

    Non-verbose mode only lets warnings, errors and completion lines through.
    """
    handler = ProgressAwareHandler(coordinator)
    handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handler.setFormatter(CategoryFormatter(timestamps=timestamps))
    logging.getLogger().addHandler(handler)
    return handler
