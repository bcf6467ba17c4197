"""Lifecycle and progress notifications of a publish.

Events are delivered synchronously to an ``EventSink`` as they happen. The
sink is independent of the publish result: a caller can watch progress
without caring about the outcome, and vice versa.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol

from pubrel.publish.model import Release, UploadProgressSample

__all__ = [
    "EventKind",
    "PublishEvent",
    "EventSink",
    "NullSink",
    "RecordingSink",
]


class EventKind(StrEnum):
    CREATE_RELEASE = "create-release"
    CREATED_RELEASE = "created-release"
    REUSE_RELEASE = "reuse-release"
    SKIP_RELEASE = "skip-release"
    EDIT_RELEASE = "edit-release"
    EDITED_RELEASE = "edited-release"
    DELETED_TAG_RELEASE = "deleted-tag-release"
    UPLOAD_ASSET = "upload-asset"
    UPLOAD_PROGRESS = "upload-progress"
    DUPLICATED_ASSET = "duplicated-asset"
    DUPLICATED_ASSET_DELETED = "duplicated-asset-deleted"
    UPLOADED_ASSET = "uploaded-asset"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class PublishEvent:
    """A notification; only the fields relevant to ``kind`` are set."""

    kind: EventKind
    release: Release | None = None
    file_name: str | None = None
    tag: str | None = None
    progress: UploadProgressSample | None = None
    message: str | None = None


class EventSink(Protocol):
    def emit(self, event: PublishEvent) -> None: ...


class NullSink:
    """Discards every event."""

    def emit(self, event: PublishEvent) -> None:
        del event


def _empty_events() -> list[PublishEvent]:
    return []


@dataclass
class RecordingSink:
    """Keeps every event, for tests and post-run inspection."""

    events: list[PublishEvent] = field(default_factory=_empty_events)

    def emit(self, event: PublishEvent) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> list[str]:
        return [str(e.kind) for e in self.events]

    def lifecycle(self) -> list[tuple[str, str | None]]:
        """(kind, file_name) pairs without the progress samples."""
        return [
            (str(e.kind), e.file_name)
            for e in self.events
            if e.kind is not EventKind.UPLOAD_PROGRESS
        ]

    def of_kind(self, kind: EventKind) -> list[PublishEvent]:
        return [e for e in self.events if e.kind is kind]
