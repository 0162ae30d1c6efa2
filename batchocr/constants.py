"""Shared constants for the batch OCR pipeline."""

# =============================================================================
# File Classification
# =============================================================================
IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif", ".webp", ".gif"})
"""Extensions recognised as single-page image units."""

MULTIPAGE_EXTENSIONS = frozenset({".pdf"})
"""Extensions recognised as multi-page document units."""

SUPPORTED_EXTENSIONS = IMAGE_EXTENSIONS | MULTIPAGE_EXTENSIONS
"""Every extension the discovery scanner will enqueue."""

# =============================================================================
# Page Estimation
# =============================================================================
AVERAGE_BYTES_PER_PAGE = 150 * 1024
"""Mixed-content average used when a document's page count cannot be parsed."""

RELIABILITY_THRESHOLD = 0.7
"""Minimum page-count reliability for page-based progress percentages."""

# =============================================================================
# Rendering
# =============================================================================
MIN_AUTO_DPI = 75
"""Lower clamp for the automatically computed render resolution."""

MAX_AUTO_DPI = 100
"""Upper clamp for the automatically computed render resolution."""

DEFAULT_DPI = 100
"""Resolution used when page geometry is unavailable."""

MIN_OVERRIDE_DPI = 100
"""Lower clamp for a user-supplied render resolution."""

MAX_OVERRIDE_DPI = 300
"""Upper clamp for a user-supplied render resolution."""

POINTS_PER_INCH = 72.0
"""PDF user-space units per inch."""

BYTES_PER_PIXEL = 3
"""RGB bytes per pixel used by the render-budget estimate."""

COMPRESSION_RATIO = 0.5
"""Assumed preview compression ratio used by the render-budget estimate."""

DEFAULT_IMAGE_FORMAT = "webp"
"""Format of the per-page preview image."""

IMAGE_FORMATS = {"webp": "WEBP", "png": "PNG", "jpeg": "JPEG", "jpg": "JPEG"}
"""Preview extension to Pillow format name."""

# =============================================================================
# Recognition
# =============================================================================
DEFAULT_MAX_LINES = 1000
"""Maximum number of text lines requested from the engine per bitmap."""

DEFAULT_ENGINE = "tesseract"
"""Registry name of the default recognition engine."""

HIGH_CONFIDENCE = 0.7
"""Words at or above this confidence count as high confidence."""

MEDIUM_CONFIDENCE = 0.6
"""Words at or above this confidence (and below HIGH_CONFIDENCE) count as medium."""

# =============================================================================
# Concurrency
# =============================================================================
FIRST_WORK_TIMEOUT = 30.0
"""Seconds to wait for the first discovered unit before giving up."""

FIRST_WORK_POLL_INTERVAL = 0.1
"""Polling interval (seconds) while waiting for the first unit."""

SHUTDOWN_TIMEOUT = 60.0
"""Seconds given to workers to finish after an interrupt before cancellation."""

# =============================================================================
# Artifact Naming
# =============================================================================
COMBINED_MARKER = "oneocr"
"""Infix of combined artifacts: ``name.oneocr.{ext}``."""

TEMP_SUFFIX = ".tmp"
"""Suffix of the sibling temp file used by atomic writes."""

PAGE_TEXT_DELIMITER = "\n"
"""Separator between page texts in the combined text artifact."""

# =============================================================================
# Progress Display
# =============================================================================
PROGRESS_BAR_WIDTH = 30
"""Width of the bar column shared by every progress task."""

RATE_WINDOW_SECONDS = 2.0
"""Sliding window used for the instantaneous processing rate."""
