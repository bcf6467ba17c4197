from __future__ import annotations

from pubrel.output.console import ConsoleProtocol, Style
from pubrel.publish.events import EventKind, PublishEvent

# Progress lines are printed once per bucket of this many percent.
PROGRESS_STEP = 10


def _format_bytes(n: int) -> str:
    size = float(n)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if size < 1024 or unit == "GiB":
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{n} B"


class ConsoleEventSink:
    """Renders publish events as console lines."""

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console
        self._progress_bucket: dict[str, int] = {}
        self.reported_error = False

    def emit(self, event: PublishEvent) -> None:
        c = self._console
        name = event.file_name or ""
        tag = event.tag or ""
        match event.kind:
            case EventKind.CREATE_RELEASE:
                c.print(f"creating release {tag}", Style.DIM)
            case EventKind.CREATED_RELEASE:
                c.success(f"created release {tag}")
            case EventKind.REUSE_RELEASE:
                c.info(f"reusing release {tag}")
            case EventKind.SKIP_RELEASE:
                c.warning(f"release {tag} is already published; nothing to do")
            case EventKind.EDIT_RELEASE:
                c.print(f"editing release {tag}", Style.DIM)
            case EventKind.EDITED_RELEASE:
                c.success(f"edited release {tag}")
            case EventKind.DELETED_TAG_RELEASE:
                c.info(f"deleted tag {tag}")
            case EventKind.UPLOAD_ASSET:
                self._progress_bucket.pop(name, None)
                c.print(f"uploading {name}", Style.DIM)
            case EventKind.UPLOAD_PROGRESS:
                self._render_progress(event)
            case EventKind.DUPLICATED_ASSET:
                c.warning(f"asset {name} already exists")
            case EventKind.DUPLICATED_ASSET_DELETED:
                c.info(f"deleted existing asset {name}")
            case EventKind.UPLOADED_ASSET:
                c.success(f"uploaded {name}")
            case EventKind.ERROR:
                self.reported_error = True
                c.error(event.message or "publish failed")

    def _render_progress(self, event: PublishEvent) -> None:
        sample = event.progress
        if sample is None:
            return
        bucket = int(sample.percentage) // PROGRESS_STEP
        if self._progress_bucket.get(sample.file_name) == bucket:
            return
        self._progress_bucket[sample.file_name] = bucket
        self._console.print(
            f"  {sample.file_name}: {sample.percentage:5.1f}% "
            f"({_format_bytes(sample.transferred)} / {_format_bytes(sample.total)})",
            Style.DIM,
        )
