"""Hosting service calls used by a publish.

One function per HTTP call. Each takes the transport and the per-publish
``RequestContext`` explicitly and maps transport failures and non-2xx
statuses into ``PublishError`` values. Upload requests are the exception:
their status is returned as-is because a 422 is a recoverable conflict.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from pubrel.core.config import PublishConfig
from pubrel.core.result import Err, Ok, Result
from pubrel.core.structured import StrDict, as_obj_list, as_str_dict
from pubrel.publish.context import RequestContext, asset_url, upload_target
from pubrel.publish.errors import (
    MalformedResponse,
    PublishError,
    ServiceStatusError,
    TransportError,
)
from pubrel.publish.model import AssetUploadTask, Release, ReleaseAsset
from pubrel.transport.http import HttpClient, HttpRequest, HttpResponse

__all__ = [
    "LIST_PAGE_SIZE",
    "release_payload",
    "list_releases_page",
    "iter_release_pages",
    "create_release",
    "edit_release",
    "delete_tag",
    "delete_asset",
    "send_upload",
]

logger = logging.getLogger(__name__)

LIST_PAGE_SIZE = 100


def release_payload(config: PublishConfig) -> StrDict:
    """Request body shared by release creation and edit."""
    payload: StrDict = {"tag_name": config.tag}
    if config.target_commitish is not None:
        payload["target_commitish"] = config.target_commitish
    if config.name is not None:
        payload["name"] = config.name
    if config.notes is not None:
        payload["body"] = config.notes
    payload["draft"] = config.draft
    payload["prerelease"] = config.prerelease
    return payload


def _send(
    http: HttpClient,
    request: HttpRequest,
) -> Result[HttpResponse, PublishError]:
    return http.send(request).map_err(
        lambda e: TransportError(method=e.method, url=e.url, message=e.message)
    )


def _call(
    http: HttpClient,
    ctx: RequestContext,
    method: str,
    url: str,
    *,
    json_body: object | None = None,
) -> Result[HttpResponse, PublishError]:
    result = _send(http, HttpRequest(method, url, headers=ctx.headers, json_body=json_body))
    if isinstance(result, Err):
        return result

    response = result.value
    if not response.ok:
        return Err(
            ServiceStatusError(method=method, url=url, status=response.status, body=response.text)
        )
    return result


def _release_from(response: HttpResponse, url: str) -> Result[Release, PublishError]:
    data = as_str_dict(response.body)
    if data is None:
        return Err(MalformedResponse(url=url, message="expected a release object"))
    release = Release.from_payload(data)
    if release is None:
        return Err(MalformedResponse(url=url, message="release is missing id, tag_name or url"))
    return Ok(release)


def list_releases_page(
    http: HttpClient,
    ctx: RequestContext,
    *,
    page: int,
) -> Result[list[StrDict], PublishError]:
    url = f"{ctx.releases_url}?per_page={LIST_PAGE_SIZE}&page={page}"
    result = _call(http, ctx, "GET", url)
    if isinstance(result, Err):
        return result

    items = as_obj_list(result.value.body)
    if items is None:
        return Err(MalformedResponse(url=url, message="expected an array of releases"))
    out: list[StrDict] = []
    for item in items:
        d = as_str_dict(item)
        if d is not None:
            out.append(d)
    return Ok(out)


def iter_release_pages(
    http: HttpClient,
    ctx: RequestContext,
) -> Iterable[Result[list[StrDict], PublishError]]:
    """Yield release listing pages until a short page or an error.

    Consumers stop iterating as soon as they have what they need, so no
    further page is fetched after a match.
    """
    page = 1
    while True:
        result = list_releases_page(http, ctx, page=page)
        yield result
        if isinstance(result, Err) or len(result.value) < LIST_PAGE_SIZE:
            return
        page += 1


def create_release(
    http: HttpClient,
    ctx: RequestContext,
    payload: StrDict,
) -> Result[Release, PublishError]:
    result = _call(http, ctx, "POST", ctx.releases_url, json_body=payload)
    if isinstance(result, Err):
        return result
    return _release_from(result.value, ctx.releases_url)


def edit_release(
    http: HttpClient,
    ctx: RequestContext,
    release: Release,
    payload: StrDict,
) -> Result[Release, PublishError]:
    result = _call(http, ctx, "PATCH", release.url, json_body=payload)
    if isinstance(result, Err):
        return result
    return _release_from(result.value, release.url)


def delete_tag(http: HttpClient, ctx: RequestContext, tag: str) -> Result[None, PublishError]:
    result = _call(http, ctx, "DELETE", ctx.tag_ref_url(tag))
    if isinstance(result, Err):
        return result
    return Ok(None)


def delete_asset(
    http: HttpClient,
    ctx: RequestContext,
    release: Release,
    asset: ReleaseAsset,
) -> Result[None, PublishError]:
    result = _call(http, ctx, "DELETE", asset_url(release.url, asset.id))
    if isinstance(result, Err):
        return result
    logger.debug("deleted asset %s (%d) from %s", asset.name, asset.id, release.tag)
    return Ok(None)


def send_upload(
    http: HttpClient,
    ctx: RequestContext,
    endpoint: str,
    task: AssetUploadTask,
    body: Iterable[bytes],
) -> Result[HttpResponse, PublishError]:
    """POST the streamed body; any HTTP status comes back as Ok."""
    request = HttpRequest(
        "POST",
        upload_target(endpoint, task.file_name),
        headers=ctx.upload_headers(size=task.size, content_type=task.content_type),
        body=body,
    )
    return _send(http, request)
