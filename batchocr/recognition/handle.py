"""Thread-bound engine handles.

Native recognition engines misbehave when an instance created on one thread
is called from another: calls do not fail loudly, they just return garbage.
An ``EngineHandle`` records the thread that created it and refuses to be used,
closed, copied or pickled anywhere else.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..constants import DEFAULT_MAX_LINES
from ..exceptions import EngineAffinityError

if TYPE_CHECKING:
    import numpy as np

    from ..types import OcrResult
    from .base import RecognitionEngine

logger = logging.getLogger(__name__)

EngineFactory = Callable[[], "RecognitionEngine"]


class EngineHandle:
    """One engine instance owned by the thread that created it.

    Example:
        >>> def worker():
        ...     with EngineHandle.open(factory) as handle:
        ...         result = handle.recognize(bitmap)
    """

    __slots__ = ("_engine", "_owner", "_owner_name", "_closed")

    def __init__(self, engine: RecognitionEngine):
        self._engine = engine
        self._owner = threading.get_ident()
        self._owner_name = threading.current_thread().name
        self._closed = False

    @classmethod
    def open(cls, factory: EngineFactory) -> EngineHandle:
        """Construct the engine on the calling thread and bind a handle to it."""
        engine = factory()
        logger.debug("Engine %s created on thread %s", engine.name, threading.current_thread().name)
        return cls(engine)

    @property
    def name(self) -> str:
        return self._engine.name

    @property
    def owner_thread(self) -> str:
        return self._owner_name

    def _check_owner(self) -> None:
        if threading.get_ident() != self._owner:
            raise EngineAffinityError(
                f"Engine handle created on thread {self._owner_name!r} "
                f"used from thread {threading.current_thread().name!r}"
            )

    def recognize(self, bitmap: np.ndarray, max_lines: int = DEFAULT_MAX_LINES) -> OcrResult:
        self._check_owner()
        if self._closed:
            raise EngineAffinityError("Engine handle is closed")
        return self._engine.recognize(bitmap, max_lines)

    def close(self) -> None:
        self._check_owner()
        if self._closed:
            return
        self._closed = True
        self._engine.close()

    def __enter__(self) -> EngineHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __copy__(self):
        raise TypeError("EngineHandle cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("EngineHandle cannot be copied")

    def __reduce__(self):
        raise TypeError("EngineHandle cannot be pickled or sent to another process")
