"""Image file loading utilities."""

from __future__ import annotations

import logging
from pathlib import Path

import cv2
import numpy as np
from PIL import Image

from ...exceptions import FileLoadError

logger = logging.getLogger(__name__)

GRAYSCALE_NDIM = 2
RGBA_CHANNELS = 4


def _to_rgb(image_np: np.ndarray) -> np.ndarray:
    """Convert an OpenCV BGR/BGRA/grayscale array to RGB."""
    if image_np.ndim == GRAYSCALE_NDIM:
        return cv2.cvtColor(image_np, cv2.COLOR_GRAY2RGB)
    if image_np.shape[2] == RGBA_CHANNELS:
        return cv2.cvtColor(image_np, cv2.COLOR_BGRA2RGB)
    return cv2.cvtColor(image_np, cv2.COLOR_BGR2RGB)


def load_image(image_path: Path) -> np.ndarray:
    """Load an image file as an RGB bitmap.

    OpenCV handles JPEG, PNG, BMP, TIFF and WebP. Formats it cannot decode
    (GIF on most builds) are read through Pillow, first frame only.

    Args:
        image_path: Path to the image file

    Returns:
        Image as (H, W, 3) uint8 numpy array in RGB order

    Raises:
        FileLoadError: If the image cannot be decoded

    Example:
        >>> image = load_image(Path("photo.jpg"))
        >>> image.shape
        (1080, 1920, 3)
    """
    image_np = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)
    if image_np is not None:
        rgb = _to_rgb(image_np)
    else:
        try:
            with Image.open(image_path) as pil_image:
                rgb = np.array(pil_image.convert("RGB"))
        except (OSError, ValueError) as e:
            raise FileLoadError(f"Could not load image: {image_path}") from e

    if rgb.dtype != np.uint8:
        # 16-bit PNG/TIFF
        rgb = (rgb / 257).astype(np.uint8)

    logger.debug("Loaded image: %s, shape: %s", image_path, rgb.shape)
    return np.ascontiguousarray(rgb)
