from __future__ import annotations

from pubrel.publish.model import UploadProgressSample
from pubrel.publish.progress import ProgressTracker


class _Clock:
    """Advances by a fixed step every time it is read."""

    def __init__(self, step: float) -> None:
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        return value


def test_passes_chunks_through_and_reports_final_sample() -> None:
    samples: list[UploadProgressSample] = []
    tracker = ProgressTracker(
        file_name="a.zip",
        total=6,
        on_sample=samples.append,
        clock=_Clock(step=0.01),
    )

    out = list(tracker.wrap([b"abc", b"def"]))

    assert out == [b"abc", b"def"]
    assert tracker.transferred == 6
    # Too fast for an intermediate sample; only the final one.
    assert len(samples) == 1
    assert samples[0].transferred == 6
    assert samples[0].percentage == 100.0


def test_samples_at_interval() -> None:
    samples: list[UploadProgressSample] = []
    tracker = ProgressTracker(
        file_name="a.zip",
        total=40,
        on_sample=samples.append,
        interval=0.1,
        clock=_Clock(step=0.25),
    )

    list(tracker.wrap([b"x" * 10] * 4))

    assert [s.transferred for s in samples] == [10, 20, 30, 40, 40]
    assert samples[-1].elapsed > samples[0].elapsed
    assert all(s.file_name == "a.zip" for s in samples)


def test_empty_stream_reports_once() -> None:
    samples: list[UploadProgressSample] = []
    tracker = ProgressTracker(file_name="e.bin", total=0, on_sample=samples.append)

    assert list(tracker.wrap([])) == []
    assert len(samples) == 1
    assert samples[0].percentage == 100.0
