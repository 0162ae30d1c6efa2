"""Batch configuration module.

This module provides:
- BatchConfig: Dataclass for all batch OCR options
- YAML configuration file loading
- Validation of numeric ranges and choices
"""

from __future__ import annotations

import argparse
import logging
import os
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .constants import (
    DEFAULT_ENGINE,
    DEFAULT_IMAGE_FORMAT,
    DEFAULT_MAX_LINES,
    FIRST_WORK_TIMEOUT,
    IMAGE_FORMATS,
    SHUTDOWN_TIMEOUT,
)
from .exceptions import InvalidConfigError, MissingConfigError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "BATCHOCR_CONFIG"
DEFAULT_CONFIG_PATH = Path("settings/batchocr.yaml")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Load YAML configuration file with error handling.

    Args:
        config_path: Path to YAML config file

    Returns:
        Configuration dict, or empty dict if file not found or invalid
    """
    try:
        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                logger.warning("Config file %s is not a mapping, ignoring it", config_path)
                return {}
            return data
        logger.debug("Config file not found: %s", config_path)
        return {}
    except yaml.YAMLError as e:
        logger.warning("Failed to parse config file %s: %s", config_path, e)
        return {}
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read config file %s: %s", config_path, e)
        return {}


def resolve_config_path(cli_value: str | None = None) -> Path:
    """CLI flag first, then the BATCHOCR_CONFIG environment variable, then the default.

    Raises:
        MissingConfigError: If an explicitly named config file does not exist
    """
    explicit = cli_value or os.environ.get(CONFIG_ENV_VAR)
    if not explicit:
        return DEFAULT_CONFIG_PATH
    path = Path(explicit)
    if not path.is_file():
        source = "--config" if cli_value else CONFIG_ENV_VAR
        raise MissingConfigError(f"Config file from {source} not found: {path}")
    return path


@dataclass
class BatchConfig:
    """Batch OCR configuration with validation.

    Configuration Sources (in order of precedence):
    1. CLI arguments via from_cli()
    2. YAML configuration file via from_yaml()
    3. Default values

    Example:
        >>> config = BatchConfig(workers=4, min_confidence=0.5)
        >>> config.validate()

        >>> config = BatchConfig.from_yaml(Path("settings/batchocr.yaml"), verbose=True)
    """

    # ==================== Output ====================
    output_dir: Path | None = None
    image_format: str = DEFAULT_IMAGE_FORMAT
    generate_svg: bool = False

    # ==================== Discovery ====================
    recursive: bool = False

    # ==================== Recognition ====================
    engine: str = DEFAULT_ENGINE
    engine_options: dict[str, Any] = field(default_factory=dict)
    max_lines: int = DEFAULT_MAX_LINES
    min_confidence: float = 0.0

    # ==================== Rendering ====================
    target_dpi: int | None = None

    # ==================== Concurrency ====================
    workers: int = 1
    first_work_timeout: float = FIRST_WORK_TIMEOUT
    shutdown_timeout: float = SHUTDOWN_TIMEOUT

    # ==================== Logging ====================
    verbose: bool = False
    log_level: str = "INFO"
    timestamps: bool = False
    timezone: str | None = None

    def __post_init__(self) -> None:
        """Convert path strings to Path objects."""
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)
        self.image_format = self.image_format.lower()
        self.log_level = self.log_level.upper()

    @classmethod
    def from_yaml(cls, config_path: Path, **overrides: Any) -> BatchConfig:
        """Load configuration from YAML file.

        Unknown keys are ignored with a warning.

        Args:
            config_path: Path to YAML configuration file
            **overrides: Values to override from file

        Returns:
            BatchConfig instance
        """
        yaml_config = _load_yaml_config(config_path)

        known = set(cls.__dataclass_fields__)
        kwargs: dict[str, Any] = {}
        for key, value in yaml_config.items():
            field_name = key.replace("-", "_")
            if field_name in known:
                kwargs[field_name] = value
            else:
                logger.warning("Ignoring unknown config key '%s' in %s", key, config_path)

        kwargs.update(overrides)
        return cls(**kwargs)

    @staticmethod
    def _get_arg(args: argparse.Namespace, name: str, default: Any = None) -> Any:
        """Safely get argument value from namespace."""
        return getattr(args, name, default)

    @classmethod
    def _extract_cli_kwargs(cls, args: argparse.Namespace) -> dict[str, Any]:
        """Extract configuration kwargs from CLI arguments.

        Only values the user actually set are returned, so YAML values survive
        for flags left at their defaults.
        """
        # Format: (cli_name, config_name, transform_func)
        mappings: list[tuple[str, str, Any]] = [
            ("output", "output_dir", Path),
            ("image_format", "image_format", None),
            ("engine", "engine", None),
            ("max_lines", "max_lines", None),
            ("min_confidence", "min_confidence", None),
            ("dpi", "target_dpi", None),
            ("threads", "workers", None),
            ("log_level", "log_level", None),
            ("timezone", "timezone", None),
        ]

        kwargs: dict[str, Any] = {}
        for cli_name, config_name, transform in mappings:
            value = cls._get_arg(args, cli_name)
            if value is not None:
                kwargs[config_name] = transform(value) if transform else value

        # Boolean flags only override when switched on
        for flag, config_name in (
            ("recursive", "recursive"),
            ("svg", "generate_svg"),
            ("verbose", "verbose"),
            ("timestamps", "timestamps"),
        ):
            if cls._get_arg(args, flag):
                kwargs[config_name] = True

        return kwargs

    @classmethod
    def from_cli(cls, args: argparse.Namespace, base: BatchConfig | None = None) -> BatchConfig:
        """Create configuration from CLI arguments, layered over ``base`` if given."""
        kwargs = cls._extract_cli_kwargs(args)
        if base is None:
            return cls(**kwargs)
        return base.merged_with(**kwargs)

    def merged_with(self, **overrides: Any) -> BatchConfig:
        return replace(self, **overrides)

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            InvalidConfigError: If any value is out of range
        """
        if self.workers < 1:
            raise InvalidConfigError(f"workers must be >= 1, got {self.workers}")
        if self.max_lines < 1:
            raise InvalidConfigError(f"max_lines must be >= 1, got {self.max_lines}")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise InvalidConfigError(f"min_confidence must be within [0, 1], got {self.min_confidence}")
        if self.target_dpi is not None and self.target_dpi <= 0:
            raise InvalidConfigError(f"target_dpi must be positive, got {self.target_dpi}")
        if self.image_format not in IMAGE_FORMATS:
            raise InvalidConfigError(
                f"image_format must be one of {sorted(IMAGE_FORMATS)}, got '{self.image_format}'"
            )
        if self.first_work_timeout <= 0 or self.shutdown_timeout <= 0:
            raise InvalidConfigError("timeouts must be positive")
        if self.log_level not in LOG_LEVELS:
            raise InvalidConfigError(f"log_level must be one of {LOG_LEVELS}, got '{self.log_level}'")
        if self.timezone is not None:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise InvalidConfigError(f"Unknown timezone '{self.timezone}'") from e
        if self.workers > 1:
            logger.info("Using %d recognition workers (experimental; single worker is the safe default)", self.workers)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["output_dir"] = str(self.output_dir) if self.output_dir else None
        return data
