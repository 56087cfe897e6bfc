"""
Execution timing utilities.

Section timings for a Hopkins run. Work queued on a GPU finishes
asynchronously, so a timer can be given a synchronization callback that
is invoked at every boundary (TorchOracle.synchronize for GPU oracles).
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator


class Timer:
    """
    Accumulating timer with an optional device barrier.

    Usage:
        timer = Timer(sync=getattr(oracle, 'synchronize', None))
        timer.start()

        with timer.section('extent'):
            box = estimate_extent(data)

        with timer.section('trials'):
            summary = run_trials(...)

        timer.stop()
        timer.result()
        # {'total_seconds': 0.05, 'extent': 0.001, 'trials': 0.048}
    """

    def __init__(self, sync: Callable[[], None] | None = None):
        self._sync = sync
        self._sections: dict[str, float] = {}
        self._start_time: float | None = None
        self._total: float | None = None

    def _now(self) -> float:
        if self._sync is not None:
            self._sync()
        return time.perf_counter()

    def start(self) -> None:
        self._start_time = self._now()

    def stop(self) -> None:
        if self._start_time is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = self._now() - self._start_time

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time a named section; repeated sections accumulate."""
        begin = self._now()
        try:
            yield
        finally:
            self._sections[name] = self._sections.get(name, 0.0) + self._now() - begin

    def result(self) -> dict[str, float]:
        """
        'total_seconds' plus one entry per section.

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._sections}
