from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Iterator

from pubrel.publish.model import UploadProgressSample

# Minimum wall time between two samples.
SAMPLE_INTERVAL_SECONDS = 0.1


class ProgressTracker:
    """Counts bytes flowing through a chunk stream and reports samples.

    A sample is reported whenever at least ``interval`` seconds passed since
    the previous one, and always once more when the stream is exhausted.
    """

    def __init__(
        self,
        *,
        file_name: str,
        total: int,
        on_sample: Callable[[UploadProgressSample], None],
        interval: float = SAMPLE_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.file_name = file_name
        self.total = total
        self.transferred = 0
        self._on_sample = on_sample
        self._interval = interval
        self._clock = clock
        self._started: float | None = None
        self._last_report: float | None = None

    def _report(self, now: float) -> None:
        started = self._started if self._started is not None else now
        self._last_report = now
        self._on_sample(
            UploadProgressSample(
                file_name=self.file_name,
                transferred=self.transferred,
                total=self.total,
                elapsed=now - started,
            )
        )

    def wrap(self, chunks: Iterable[bytes]) -> Iterator[bytes]:
        self._started = self._clock()
        self._last_report = self._started
        for chunk in chunks:
            self.transferred += len(chunk)
            yield chunk
            now = self._clock()
            if now - self._last_report >= self._interval:
                self._report(now)
        self._report(self._clock())
