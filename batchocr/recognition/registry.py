"""Engine registry for managing recognition engine implementations.

Engines are resolved lazily so that optional backends (pytesseract) are only
imported when selected.
"""

from __future__ import annotations

import functools
import importlib
import logging
from collections.abc import Callable
from typing import Any

from ..exceptions import EngineUnavailableError
from .base import RecognitionEngine

logger = logging.getLogger(__name__)

__all__ = ["EngineRegistry", "engine_registry"]


class EngineRegistry:
    """Registry for recognition engine implementations.

    Names resolve in this order: custom registrations, built-ins, then
    ``module.path:ClassName`` specs for engines living outside the package.

    Example:
        >>> from batchocr.recognition.registry import engine_registry
        >>> engine = engine_registry.create("tesseract", lang="deu")
        >>> factory = engine_registry.factory("tesseract")  # for per-thread construction
    """

    # Built-in engine mappings (name -> (module, class, default_kwargs))
    _BUILTIN_ENGINES: dict[str, tuple[str, str, dict[str, Any]]] = {
        "tesseract": ("batchocr.recognition.tesseract", "TesseractEngine", {}),
    }

    _ALIASES: dict[str, str] = {
        "ocr": "tesseract",
        "pytesseract": "tesseract",
    }

    def __init__(self) -> None:
        self._custom_engines: dict[str, Callable[..., RecognitionEngine]] = {}
        self._loaded_classes: dict[str, type] = {}

    def register(self, name: str, engine_class: type | Callable[..., RecognitionEngine]) -> None:
        """Register a custom engine class or factory function."""
        if name in self._BUILTIN_ENGINES:
            logger.warning("Overriding built-in engine: %s", name)
        self._custom_engines[name] = engine_class
        logger.debug("Registered engine: %s", name)

    def get_class(self, name: str) -> tuple[Callable[..., RecognitionEngine], dict[str, Any]]:
        """Get engine class by name (lazy loading).

        Raises:
            EngineUnavailableError: If the name is unknown or its module cannot be imported
        """
        resolved = self._ALIASES.get(name, name)

        if resolved in self._custom_engines:
            return self._custom_engines[resolved], {}

        if resolved in self._BUILTIN_ENGINES:
            module_path, class_name, default_kwargs = self._BUILTIN_ENGINES[resolved]
            if resolved not in self._loaded_classes:
                self._loaded_classes[resolved] = self._import(module_path, class_name)
            return self._loaded_classes[resolved], dict(default_kwargs)

        if ":" in resolved:
            module_path, class_name = resolved.split(":", 1)
            return self._import(module_path, class_name), {}

        raise EngineUnavailableError(f"Unknown engine: '{name}'. Available: {', '.join(self.list_available())}")

    @staticmethod
    def _import(module_path: str, class_name: str) -> type:
        try:
            module = importlib.import_module(module_path)
        except ImportError as e:
            raise EngineUnavailableError(f"Failed to import engine module '{module_path}': {e}") from e
        try:
            return getattr(module, class_name)
        except AttributeError as e:
            raise EngineUnavailableError(f"Engine class '{class_name}' not found in '{module_path}'") from e

    def create(self, name: str, **kwargs: Any) -> RecognitionEngine:
        """Create an engine instance on the calling thread."""
        engine_class, default_kwargs = self.get_class(name)
        return engine_class(**{**default_kwargs, **kwargs})

    def factory(self, name: str, **kwargs: Any) -> Callable[[], RecognitionEngine]:
        """Return a zero-argument constructor, resolved eagerly so bad names fail early.

        Workers call the factory on their own thread to build their engine.
        """
        self.get_class(name)
        return functools.partial(self.create, name, **kwargs)

    def list_available(self) -> list[str]:
        all_names = set(self._BUILTIN_ENGINES)
        all_names.update(self._custom_engines)
        return sorted(all_names)

    def __contains__(self, name: str) -> bool:
        resolved = self._ALIASES.get(name, name)
        return resolved in self._BUILTIN_ENGINES or resolved in self._custom_engines

    def __repr__(self) -> str:
        return f"EngineRegistry(available={self.list_available()})"


# Global registry instance
engine_registry = EngineRegistry()
