"""
Progress sinks.

The pipeline reports integer percentages (10/30/50/80/100) synchronously and
in non-decreasing order to whatever sink the caller hands in.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Protocol, runtime_checkable

from tqdm import tqdm


@runtime_checkable
class ProgressSink(Protocol):
    def report(self, percent: int) -> None: ...


def report_progress(sink: Optional[ProgressSink], percent: int) -> None:
    if sink is not None:
        sink.report(percent)


class CallbackProgress:
    """Adapts a plain callable ``fn(percent)`` to the sink interface."""

    def __init__(self, callback: Callable[[int], None]):
        self.callback = callback

    def report(self, percent: int) -> None:
        self.callback(percent)


class LoggingProgress:
    def __init__(self, logger: logging.Logger = None, label: str = "raster"):
        self.logger = logger or logging.getLogger(__name__)
        self.label = label

    def report(self, percent: int) -> None:
        self.logger.info(f"{self.label}: {percent}%")


class RecordingProgress:
    """
    Keeps every reported value.  Safe to read from another thread while a
    background job is still reporting.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._values: List[int] = []

    def report(self, percent: int) -> None:
        with self._lock:
            self._values.append(percent)

    @property
    def values(self) -> List[int]:
        with self._lock:
            return list(self._values)

    @property
    def latest(self) -> int:
        with self._lock:
            return self._values[-1] if self._values else 0


class TqdmProgress:
    """Terminal progress bar from 0 to 100."""

    def __init__(self, desc: str = "raster", **tqdm_kwargs):
        self.bar = tqdm(total=100, desc=desc, ncols=70, **tqdm_kwargs)
        self._current = 0

    def report(self, percent: int) -> None:
        step = max(0, percent - self._current)
        self._current += step
        self.bar.update(step)

    def close(self) -> None:
        self.bar.close()

    def __enter__(self) -> "TqdmProgress":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
