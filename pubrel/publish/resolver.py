"""Release resolution: reuse a release for the tag or create a new one.

Policy, when ``reuse_release`` is set:
- the first listed release whose tag matches is the candidate;
- it is reused if ``reuse_draft_only`` is off or the candidate is a draft;
- a candidate that may not be reused ends the publish quietly when
  ``skip_if_published`` is set, and otherwise a new release is created.
Without ``reuse_release`` a release is always created.
"""

from __future__ import annotations

from dataclasses import dataclass

from pubrel.core.config import PublishConfig
from pubrel.core.result import Err, Ok, Result
from pubrel.core.structured import get_str
from pubrel.publish import api
from pubrel.publish.context import RequestContext
from pubrel.publish.errors import MalformedResponse, PublishError
from pubrel.publish.events import EventKind, EventSink, PublishEvent
from pubrel.publish.model import Release
from pubrel.transport.http import HttpClient


@dataclass(frozen=True, slots=True)
class Resolved:
    release: Release


@dataclass(frozen=True, slots=True)
class NothingToDo:
    """A published release already exists for the tag and must not be touched."""

    existing: Release


Resolution = Resolved | NothingToDo


def find_release_by_tag(
    http: HttpClient,
    ctx: RequestContext,
    tag: str,
) -> Result[Release | None, PublishError]:
    """First release whose tag_name equals ``tag``; stops listing at the match."""
    for page in api.iter_release_pages(http, ctx):
        if isinstance(page, Err):
            return page
        for item in page.value:
            if get_str(item, "tag_name") != tag:
                continue
            release = Release.from_payload(item)
            if release is None:
                return Err(
                    MalformedResponse(
                        url=ctx.releases_url,
                        message=f"release for tag {tag} is missing id or url",
                    )
                )
            return Ok(release)
    return Ok(None)


def may_reuse(release: Release, config: PublishConfig) -> bool:
    return not config.reuse_draft_only or release.draft


def resolve_release(
    http: HttpClient,
    ctx: RequestContext,
    config: PublishConfig,
    sink: EventSink,
) -> Result[Resolution, PublishError]:
    if config.reuse_release:
        found = find_release_by_tag(http, ctx, config.tag)
        if isinstance(found, Err):
            return found

        existing = found.value
        if existing is not None:
            if may_reuse(existing, config):
                reused = existing.as_reused()
                sink.emit(PublishEvent(EventKind.REUSE_RELEASE, release=reused, tag=reused.tag))
                return Ok(Resolved(reused))
            if config.skip_if_published:
                sink.emit(PublishEvent(EventKind.SKIP_RELEASE, release=existing, tag=existing.tag))
                return Ok(NothingToDo(existing))

    sink.emit(PublishEvent(EventKind.CREATE_RELEASE, tag=config.tag))
    created = api.create_release(http, ctx, api.release_payload(config))
    if isinstance(created, Err):
        return created

    release = created.value
    sink.emit(PublishEvent(EventKind.CREATED_RELEASE, release=release, tag=release.tag))
    return Ok(Resolved(release))
