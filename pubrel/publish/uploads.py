"""Asset upload sequencing.

Assets are uploaded one at a time, in the order given: the next upload
starts only once the previous asset succeeded, was skipped as a duplicate,
or failed (which aborts the remaining ones). A duplicate-name conflict is
resolved by deleting the existing asset and retrying, at most
``MAX_DUPLICATE_RETRIES`` times per asset.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pubrel.core.result import Err, Ok, Result
from pubrel.publish import api
from pubrel.publish.context import RequestContext
from pubrel.publish.errors import (
    DuplicateAssetMissing,
    DuplicateAssetPersistent,
    PublishError,
    UploadEndpointMissing,
)
from pubrel.publish.events import EventKind, EventSink, PublishEvent
from pubrel.publish.model import Release, ReleaseAsset
from pubrel.publish.transfer import DuplicateAsset, Uploaded, prepare_task, transfer_asset
from pubrel.transport.http import HttpClient

logger = logging.getLogger(__name__)

MAX_DUPLICATE_RETRIES = 1


def upload_assets(
    http: HttpClient,
    ctx: RequestContext,
    release: Release,
    paths: Sequence[str],
    *,
    skip_duplicates: bool,
    sink: EventSink,
) -> Result[tuple[ReleaseAsset, ...], PublishError]:
    """Upload every path to ``release``; returns the assets the service created."""
    if not paths:
        return Ok(())

    endpoint = release.upload_endpoint
    if endpoint is None:
        return Err(UploadEndpointMissing(tag=release.tag, errors=release.errors))

    uploaded: list[ReleaseAsset] = []
    for path in paths:
        result = _upload_one(
            http,
            ctx,
            release,
            endpoint,
            path,
            skip_duplicates=skip_duplicates,
            sink=sink,
        )
        if isinstance(result, Err):
            return result
        if result.value is not None:
            uploaded.append(result.value)
    return Ok(tuple(uploaded))


def _upload_one(
    http: HttpClient,
    ctx: RequestContext,
    release: Release,
    endpoint: str,
    path: str,
    *,
    skip_duplicates: bool,
    sink: EventSink,
) -> Result[ReleaseAsset | None, PublishError]:
    prepared = prepare_task(path)
    if isinstance(prepared, Err):
        return prepared
    task = prepared.value

    resolved = 0
    while True:
        sink.emit(PublishEvent(EventKind.UPLOAD_ASSET, file_name=task.file_name))
        result = transfer_asset(http, ctx, endpoint, task, sink)
        if isinstance(result, Err):
            return result

        match result.value:
            case Uploaded(asset=asset):
                sink.emit(PublishEvent(EventKind.UPLOADED_ASSET, file_name=task.file_name))
                return Ok(asset)
            case DuplicateAsset():
                sink.emit(PublishEvent(EventKind.DUPLICATED_ASSET, file_name=task.file_name))

        if skip_duplicates:
            logger.debug("keeping existing asset %s", task.file_name)
            return Ok(None)
        if resolved >= MAX_DUPLICATE_RETRIES:
            return Err(DuplicateAssetPersistent(file_name=task.file_name, attempts=resolved))

        existing = release.find_asset(task.file_name)
        if existing is None:
            return Err(DuplicateAssetMissing(file_name=task.file_name))

        deleted = api.delete_asset(http, ctx, release, existing)
        if isinstance(deleted, Err):
            return deleted
        resolved += 1
        sink.emit(PublishEvent(EventKind.DUPLICATED_ASSET_DELETED, file_name=task.file_name))
