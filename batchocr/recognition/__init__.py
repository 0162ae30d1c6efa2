"""Recognition engines.

This module provides:
- RecognitionEngine: Abstract engine interface
- EngineHandle: Thread-bound wrapper enforcing one engine per thread
- EngineRegistry / engine_registry: Lazy name-based engine lookup
"""

from .base import RecognitionEngine
from .handle import EngineFactory, EngineHandle
from .registry import EngineRegistry, engine_registry

__all__ = ["RecognitionEngine", "EngineHandle", "EngineFactory", "EngineRegistry", "engine_registry"]
