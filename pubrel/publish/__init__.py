"""Release publishing: resolve, edit, tag cleanup and asset uploads."""

from .errors import PublishError, describe_error, publish_error_exit_code
from .events import EventKind, EventSink, NullSink, PublishEvent, RecordingSink
from .model import Release, ReleaseAsset, UploadProgressSample
from .orchestrator import PublishOutcome, publish_release

__all__ = [
    # errors
    "PublishError",
    "describe_error",
    "publish_error_exit_code",
    # events
    "EventKind",
    "EventSink",
    "NullSink",
    "PublishEvent",
    "RecordingSink",
    # model
    "Release",
    "ReleaseAsset",
    "UploadProgressSample",
    # orchestrator
    "PublishOutcome",
    "publish_release",
]
