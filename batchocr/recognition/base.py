"""Base recognition engine class and interface.

Engines are black boxes: they take a decoded RGB bitmap and return lines of
words with confidences and optional bounding quads, plus a skew angle.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..constants import DEFAULT_MAX_LINES
from ..exceptions import RecognitionError

if TYPE_CHECKING:
    import numpy as np

    from ..types import OcrResult

logger = logging.getLogger(__name__)

__all__ = ["RecognitionEngine"]

RGB_IMAGE_NDIM = 3


class RecognitionEngine(ABC):
    """Abstract base class for all recognition engines.

    Subclasses implement ``_recognize_impl``; ``recognize`` validates the
    bitmap and wraps engine failures in ``RecognitionError``.

    Engines are not assumed to be thread-safe. Wrap them in an
    ``EngineHandle`` created on the thread that will use them.

    Example:
        >>> class MyEngine(RecognitionEngine):
        ...     name = "my-engine"
        ...
        ...     def _recognize_impl(self, bitmap, width, height, max_lines):
        ...         return OcrResult(lines=[...])
    """

    name: str = "base-engine"

    @abstractmethod
    def _recognize_impl(self, bitmap: np.ndarray, width: int, height: int, max_lines: int) -> OcrResult:
        """Recognise text in an RGB bitmap of the given size."""

    def recognize(self, bitmap: np.ndarray, max_lines: int = DEFAULT_MAX_LINES) -> OcrResult:
        """Recognise text in an (H, W, 3) uint8 RGB bitmap.

        Raises:
            ValueError: If the bitmap is not an RGB image
            RecognitionError: If the engine fails
        """
        if bitmap is None:
            raise ValueError("Bitmap cannot be None")
        if bitmap.ndim != RGB_IMAGE_NDIM or bitmap.shape[2] != RGB_IMAGE_NDIM:
            raise ValueError(f"Expected an (H, W, 3) bitmap, got shape {bitmap.shape}")

        height, width = int(bitmap.shape[0]), int(bitmap.shape[1])
        try:
            result = self._recognize_impl(bitmap, width, height, max_lines)
        except RecognitionError:
            raise
        except Exception as e:
            raise RecognitionError(f"{self.name} failed on {width}x{height} bitmap: {e}") from e

        logger.debug("%s recognised %d lines", self.name, result.line_count)
        return result

    def close(self) -> None:  # noqa: B027 - optional hook
        """Release native resources. Called on the owning thread."""
