"""Tests for thread-bound engine handles."""

from __future__ import annotations

import copy
import pickle
import threading

import numpy as np
import pytest

from batchocr.exceptions import EngineAffinityError
from batchocr.recognition import EngineHandle


def _run_in_thread(func):
    """Run ``func`` on a fresh thread and return the exception it raised, if any."""
    errors: list[BaseException] = []

    def target():
        try:
            func()
        except BaseException as e:  # noqa: BLE001
            errors.append(e)

    thread = threading.Thread(target=target, name="other-thread")
    thread.start()
    thread.join()
    return errors[0] if errors else None


class TestEngineHandle:
    """Tests for EngineHandle."""

    def test_recognize_on_owner_thread(self, fake_engine_cls):
        handle = EngineHandle.open(fake_engine_cls)

        result = handle.recognize(np.zeros((4, 4, 3), dtype=np.uint8))

        assert result.text == "page 1"
        assert handle.owner_thread == threading.current_thread().name

    def test_cross_thread_use_is_rejected(self, fake_engine_cls, sample_bitmap):
        handle = EngineHandle.open(fake_engine_cls)

        error = _run_in_thread(lambda: handle.recognize(sample_bitmap))

        assert isinstance(error, EngineAffinityError)
        assert "other-thread" in str(error)

    def test_cross_thread_close_is_rejected(self, fake_engine_cls):
        handle = EngineHandle.open(fake_engine_cls)
        assert isinstance(_run_in_thread(handle.close), EngineAffinityError)
        handle.close()

    def test_close_releases_engine_once(self, fake_engine_cls):
        engine = fake_engine_cls()
        handle = EngineHandle(engine)

        with handle:
            pass
        handle.close()

        assert engine.closed is True

    def test_closed_handle_refuses_work(self, fake_engine_cls):
        handle = EngineHandle.open(fake_engine_cls)
        handle.close()
        with pytest.raises(EngineAffinityError):
            handle.recognize(np.zeros((4, 4, 3), dtype=np.uint8))

    @pytest.mark.parametrize("duplicate", [copy.copy, copy.deepcopy, pickle.dumps])
    def test_cannot_be_duplicated(self, fake_engine_cls, duplicate):
        handle = EngineHandle.open(fake_engine_cls)
        with pytest.raises(TypeError):
            duplicate(handle)
