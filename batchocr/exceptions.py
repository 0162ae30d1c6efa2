"""Custom exception classes for the batch OCR pipeline.

Exception Hierarchy:
    BatchOcrError (base)
    ├── ConfigurationError
    │   ├── InvalidConfigError
    │   └── MissingConfigError
    ├── DiscoveryError
    ├── ProcessingError
    │   ├── RecognitionError
    │   ├── RenderingError
    │   └── MergeError
    ├── EngineError
    │   ├── EngineUnavailableError
    │   └── EngineAffinityError
    ├── FileError
    │   ├── FileLoadError
    │   ├── FileSaveError
    │   └── FileFormatError
    ├── QueueClosedError
    └── DependencyError

Usage:
    try:
        processor.process(unit)
    except RecognitionError as e:
        # One page failed, the document continues
        logger.warning("Recognition failed: %s", e)
    except BatchOcrError as e:
        # Count the unit as an error, the batch continues
        logger.error("Unit failed: %s", e)
"""

from __future__ import annotations


class BatchOcrError(Exception):
    """Base exception for all batch OCR errors."""


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(BatchOcrError):
    """Base exception for configuration-related errors."""


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid or malformed.

    Examples:
        - Worker count below 1
        - Confidence threshold outside [0, 1]
        - Unknown preview image format
    """


class MissingConfigError(ConfigurationError):
    """Raised when a config file named by --config or BATCHOCR_CONFIG does not exist."""


# ============================================================================
# Discovery Errors
# ============================================================================


class DiscoveryError(BatchOcrError):
    """Raised when scanning the input root fails.

    Discovery errors are reported once; the queue is still marked complete
    with whatever was found before the failure.
    """


# ============================================================================
# Processing Errors
# ============================================================================


class ProcessingError(BatchOcrError):
    """Base exception for processing-related errors."""


class RecognitionError(ProcessingError):
    """Raised when the recognition engine fails on a bitmap."""


class RenderingError(ProcessingError):
    """Raised when a document page cannot be rendered to a bitmap."""


class MergeError(ProcessingError):
    """Raised when combined artifacts cannot be built from page artifacts.

    Attributes:
        missing_pages: Page numbers without a complete artifact set
    """

    def __init__(self, message: str, missing_pages: list[int] | None = None):
        super().__init__(message)
        self.missing_pages = missing_pages or []


# ============================================================================
# Engine Errors
# ============================================================================


class EngineError(BatchOcrError):
    """Base exception for recognition engine lifecycle errors."""


class EngineUnavailableError(EngineError):
    """Raised when an engine name cannot be resolved or its backend is missing."""


class EngineAffinityError(EngineError):
    """Raised when an engine handle is used outside the thread that created it.

    Engine handles are bound to their creating thread. Cross-thread use
    produces silently broken results with native engines, so it is rejected.
    """


# ============================================================================
# File Errors
# ============================================================================


class FileError(BatchOcrError):
    """Base exception for file-related errors."""


class FileLoadError(FileError):
    """Raised when loading a file fails.

    Examples:
        - File not found
        - Permission denied
        - Corrupted file
    """


class FileSaveError(FileError):
    """Raised when saving an artifact fails.

    The temporary file has already been removed when this is raised and the
    final path is untouched.
    """


class FileFormatError(FileError):
    """Raised when a file has an unsupported or invalid format."""


# ============================================================================
# Queue Errors
# ============================================================================


class QueueClosedError(BatchOcrError):
    """Raised when a unit is enqueued after discovery was marked complete."""


# ============================================================================
# Dependency Errors
# ============================================================================


class DependencyError(BatchOcrError):
    """Raised when a required dependency is missing or incompatible.

    Examples:
        - PyMuPDF not installed
        - Tesseract binary not on PATH
    """
