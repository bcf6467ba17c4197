"""Asset transfer: stream one local file to the release upload endpoint."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pubrel.core.result import Err, Ok, Result
from pubrel.core.structured import as_str_dict
from pubrel.platform.files import content_type_for, iter_chunks
from pubrel.publish import api
from pubrel.publish.context import RequestContext, upload_target
from pubrel.publish.errors import (
    AssetAccessError,
    MalformedResponse,
    PublishError,
    ServiceStatusError,
)
from pubrel.publish.events import EventKind, EventSink, PublishEvent
from pubrel.publish.model import (
    AssetUploadTask,
    ReleaseAsset,
    UploadProgressSample,
    asset_from_payload,
    has_error_code,
)
from pubrel.publish.progress import ProgressTracker
from pubrel.transport.http import HttpClient

CONFLICT_STATUS = 422
ALREADY_EXISTS = "already_exists"


@dataclass(frozen=True, slots=True)
class Uploaded:
    file_name: str
    asset: ReleaseAsset


@dataclass(frozen=True, slots=True)
class DuplicateAsset:
    """The release already holds an asset with this name."""

    file_name: str


TransferOutcome = Uploaded | DuplicateAsset


def prepare_task(path: str) -> Result[AssetUploadTask, PublishError]:
    """Stat the file and derive its upload name and content type."""
    try:
        size = os.stat(path).st_size
    except OSError as e:
        return Err(AssetAccessError(path=path, reason=e.strerror or str(e)))

    file_name = Path(path).name
    return Ok(
        AssetUploadTask(
            path=path,
            file_name=file_name,
            size=size,
            content_type=content_type_for(file_name),
        )
    )


def transfer_asset(
    http: HttpClient,
    ctx: RequestContext,
    endpoint: str,
    task: AssetUploadTask,
    sink: EventSink,
) -> Result[TransferOutcome, PublishError]:
    """Upload ``task`` once, emitting ``upload-progress`` samples on ``sink``.

    The file handle is closed before this returns, whatever the outcome.
    """

    def on_sample(sample: UploadProgressSample) -> None:
        sink.emit(
            PublishEvent(
                EventKind.UPLOAD_PROGRESS,
                file_name=task.file_name,
                progress=sample,
            )
        )

    try:
        handle = open(task.path, "rb")
    except OSError as e:
        return Err(AssetAccessError(path=task.path, reason=e.strerror or str(e)))

    with handle:
        tracker = ProgressTracker(file_name=task.file_name, total=task.size, on_sample=on_sample)
        result = api.send_upload(http, ctx, endpoint, task, tracker.wrap(iter_chunks(handle)))

    if isinstance(result, Err):
        return result

    response = result.value
    if response.ok:
        data = as_str_dict(response.body)
        asset = asset_from_payload(data) if data is not None else None
        if asset is None:
            return Err(
                MalformedResponse(
                    url=upload_target(endpoint, task.file_name),
                    message="expected an asset object with id and name",
                )
            )
        return Ok(Uploaded(file_name=task.file_name, asset=asset))

    if response.status == CONFLICT_STATUS and has_error_code(response.body, ALREADY_EXISTS):
        return Ok(DuplicateAsset(file_name=task.file_name))

    return Err(
        ServiceStatusError(
            method="POST",
            url=upload_target(endpoint, task.file_name),
            status=response.status,
            body=response.text,
        )
    )
