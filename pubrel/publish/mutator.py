from __future__ import annotations

from dataclasses import dataclass

from pubrel.core.config import PublishConfig
from pubrel.core.result import Err, Ok, Result
from pubrel.publish import api
from pubrel.publish.context import RequestContext
from pubrel.publish.errors import PublishError
from pubrel.publish.events import EventKind, EventSink, PublishEvent
from pubrel.publish.model import Release
from pubrel.transport.http import HttpClient


@dataclass(frozen=True, slots=True)
class EditOutcome:
    """Release after the edit step.

    ``was_draft``/``is_draft`` are None when the edit did not run.
    """

    release: Release
    was_draft: bool | None = None
    is_draft: bool | None = None

    @property
    def edited(self) -> bool:
        return self.was_draft is not None

    @property
    def became_draft(self) -> bool:
        return self.was_draft is False and self.is_draft is True


def edit_release(
    http: HttpClient,
    ctx: RequestContext,
    config: PublishConfig,
    release: Release,
    sink: EventSink,
) -> Result[EditOutcome, PublishError]:
    """PATCH a reused release with the configured metadata, if allowed."""
    if not (release.reused and config.edit_release):
        return Ok(EditOutcome(release))

    sink.emit(PublishEvent(EventKind.EDIT_RELEASE, release=release, tag=release.tag))
    result = api.edit_release(http, ctx, release, api.release_payload(config))
    if isinstance(result, Err):
        return result

    updated = result.value
    edited = release.with_metadata(
        name=updated.name,
        body=updated.body,
        draft=updated.draft,
        prerelease=updated.prerelease,
    )
    sink.emit(PublishEvent(EventKind.EDITED_RELEASE, release=edited, tag=edited.tag))
    return Ok(EditOutcome(edited, was_draft=release.draft, is_draft=edited.draft))


def delete_empty_tag(
    http: HttpClient,
    ctx: RequestContext,
    config: PublishConfig,
    outcome: EditOutcome,
    sink: EventSink,
) -> Result[bool, PublishError]:
    """Delete the tag of a release the edit just turned back into a draft.

    Returns whether the tag was deleted.
    """
    if not (config.delete_empty_tag and outcome.became_draft):
        return Ok(False)

    tag = outcome.release.tag
    result = api.delete_tag(http, ctx, tag)
    if isinstance(result, Err):
        return result

    sink.emit(PublishEvent(EventKind.DELETED_TAG_RELEASE, release=outcome.release, tag=tag))
    return Ok(True)
