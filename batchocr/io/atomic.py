"""Atomic artifact writes.

Every artifact is written to a sibling ``<name>.tmp`` file, flushed to disk
and renamed over the final path with ``os.replace``. Readers never observe a
partially-written final path; on failure the temp file is removed and the
final path keeps whatever it held before.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import IO, TYPE_CHECKING

from ..constants import IMAGE_FORMATS, TEMP_SUFFIX
from ..exceptions import FileSaveError

if TYPE_CHECKING:
    import numpy as np

logger = logging.getLogger(__name__)


def temp_path_for(path: Path) -> Path:
    """Return the sibling temp path used while ``path`` is being written."""
    return path.with_name(path.name + TEMP_SUFFIX)


def atomic_write(path: Path, write: Callable[[IO[bytes]], None]) -> Path:
    """Write ``path`` atomically through a binary file handle.

    Args:
        path: Final artifact path
        write: Callback that writes the full content to the given handle

    Returns:
        The final path

    Raises:
        FileSaveError: If writing or renaming fails (temp file already removed)
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = temp_path_for(path)
    try:
        with open(tmp, "wb") as fh:
            write(fh)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp, path)
    except Exception as e:
        tmp.unlink(missing_ok=True)
        raise FileSaveError(f"Failed to write {path}: {e}") from e
    except BaseException:
        # KeyboardInterrupt mid-write
        tmp.unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s", path)
    return path


def atomic_write_bytes(path: Path, data: bytes) -> Path:
    return atomic_write(path, lambda fh: fh.write(data))


def atomic_write_text(path: Path, text: str) -> Path:
    """Write UTF-8 text atomically. An empty string produces a valid empty file."""
    return atomic_write_bytes(path, text.encode("utf-8"))


def atomic_write_image(path: Path, bitmap: np.ndarray, image_format: str = "webp") -> Path:
    """Encode an RGB bitmap with Pillow and write it atomically.

    Args:
        path: Final image path
        bitmap: RGB array of shape (H, W, 3)
        image_format: Preview format key (webp, png, jpeg)
    """
    from PIL import Image  # noqa: PLC0415 - keep Pillow off the import path of text-only callers

    pil_format = IMAGE_FORMATS.get(image_format.lower())
    if pil_format is None:
        raise FileSaveError(f"Unsupported preview format: {image_format}")

    def encode(fh: IO[bytes]) -> None:
        # Bitmaps Pillow rejects must surface as FileSaveError
        Image.fromarray(bitmap).save(fh, format=pil_format)

    return atomic_write(path, encode)
