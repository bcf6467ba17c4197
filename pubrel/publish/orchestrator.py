"""Publish orchestration.

Stages, in order::

    validate -> precheck-assets -> resolve-release -> edit-release
             -> delete-tag -> upload-assets

Validation and the asset precheck run before any network call. The
remaining stages form a ``TaskGraph``; each receives the results of the
stages it depends on and may be skipped by policy while still producing
a result for its dependents.

The outcome is delivered once, through the returned ``Result``. Progress
and lifecycle events go to the ``EventSink`` independently; a graph
failure additionally emits a single ``error`` event. An optional
``on_complete`` callback is invoked exactly once with the release, or
with None when nothing was published.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from pubrel.core.config import PublishConfig
from pubrel.core.result import Err, Ok, Result
from pubrel.platform.files import is_accessible
from pubrel.publish.context import RequestContext
from pubrel.publish.errors import (
    AssetAccessError,
    ConfigValidationError,
    PublishError,
    describe_error,
    redact_error,
)
from pubrel.publish.events import EventKind, EventSink, NullSink, PublishEvent
from pubrel.publish.graph import SKIPPED, StageResults, TaskGraph
from pubrel.publish.model import Release, ReleaseAsset
from pubrel.publish.mutator import EditOutcome, delete_empty_tag, edit_release
from pubrel.publish.resolver import NothingToDo, Resolved, resolve_release
from pubrel.publish.uploads import upload_assets
from pubrel.transport.http import HttpClient, RealHttpClient

__all__ = [
    "STAGE_RESOLVE",
    "STAGE_EDIT",
    "STAGE_DELETE_TAG",
    "STAGE_UPLOAD",
    "CompletionHandler",
    "PublishOutcome",
    "build_publish_graph",
    "precheck_assets",
    "publish_release",
    "validate_config",
]

logger = logging.getLogger(__name__)

STAGE_RESOLVE = "resolve-release"
STAGE_EDIT = "edit-release"
STAGE_DELETE_TAG = "delete-tag"
STAGE_UPLOAD = "upload-assets"

CompletionHandler = Callable[[Release | None], None]


@dataclass(frozen=True, slots=True)
class PublishOutcome:
    """What a successful publish did.

    ``release`` is None when an already-published release made the publish
    a no-op (skip-if-published).
    """

    release: Release | None
    uploaded: tuple[ReleaseAsset, ...] = ()
    tag_deleted: bool = False

    @property
    def skipped(self) -> bool:
        return self.release is None


class _Completion:
    """Invokes the completion handler at most once."""

    def __init__(self, handler: CompletionHandler | None) -> None:
        self._handler = handler
        self._done = False

    def __call__(self, release: Release | None) -> None:
        if self._done:
            return
        self._done = True
        if self._handler is not None:
            self._handler(release)


def validate_config(config: PublishConfig) -> Result[None, ConfigValidationError]:
    """Fail with every missing required field at once."""
    missing = config.missing_required()
    if missing:
        return Err(ConfigValidationError(missing=missing))
    return Ok(None)


def precheck_assets(paths: Sequence[str]) -> Result[None, AssetAccessError]:
    for path in paths:
        if not is_accessible(path):
            return Err(AssetAccessError(path=path))
    return Ok(None)


def build_publish_graph(
    http: HttpClient,
    ctx: RequestContext,
    config: PublishConfig,
    sink: EventSink,
) -> TaskGraph[PublishError]:
    graph: TaskGraph[PublishError] = TaskGraph()

    def resolve(_: StageResults) -> Result[object, PublishError]:
        return resolve_release(http, ctx, config, sink)

    def edit(results: StageResults) -> Result[object, PublishError]:
        resolution = results.value(STAGE_RESOLVE, Resolved | NothingToDo)
        if isinstance(resolution, NothingToDo):
            return Ok(SKIPPED)
        return edit_release(http, ctx, config, resolution.release, sink)

    def delete_tag(results: StageResults) -> Result[object, PublishError]:
        if results.skipped(STAGE_EDIT):
            return Ok(SKIPPED)
        return delete_empty_tag(http, ctx, config, results.value(STAGE_EDIT, EditOutcome), sink)

    def upload(results: StageResults) -> Result[object, PublishError]:
        if results.skipped(STAGE_EDIT):
            return Ok(SKIPPED)
        release = results.value(STAGE_EDIT, EditOutcome).release
        return upload_assets(
            http,
            ctx,
            release,
            config.assets,
            skip_duplicates=config.skip_duplicated_assets,
            sink=sink,
        )

    graph.add(STAGE_RESOLVE, resolve)
    graph.add(STAGE_EDIT, edit, needs=(STAGE_RESOLVE,))
    graph.add(STAGE_DELETE_TAG, delete_tag, needs=(STAGE_EDIT,))
    # Ordered after delete-tag so uploads never start before the tag decision.
    graph.add(STAGE_UPLOAD, upload, needs=(STAGE_EDIT, STAGE_DELETE_TAG))
    return graph


def _outcome_from(results: StageResults) -> PublishOutcome:
    if results.skipped(STAGE_EDIT):
        return PublishOutcome(release=None)
    return PublishOutcome(
        release=results.value(STAGE_EDIT, EditOutcome).release,
        uploaded=results.value(STAGE_UPLOAD, tuple),
        tag_deleted=results.value(STAGE_DELETE_TAG, bool),
    )


def publish_release(
    config: PublishConfig,
    *,
    http: HttpClient | None = None,
    sink: EventSink | None = None,
    on_complete: CompletionHandler | None = None,
) -> Result[PublishOutcome, PublishError]:
    """Publish a release: resolve or create it, edit it, upload assets.

    Args:
        config: Complete publish configuration
        http: Transport (defaults to RealHttpClient)
        sink: Receiver of lifecycle and progress events
        on_complete: Called exactly once with the release, or None

    Returns:
        Ok(PublishOutcome), or Err with the first failure, token redacted
    """
    events: EventSink = sink if sink is not None else NullSink()
    complete = _Completion(on_complete)

    validated = validate_config(config)
    if isinstance(validated, Err):
        complete(None)
        return validated

    if config.assets and not config.skip_assets_check:
        checked = precheck_assets(config.assets)
        if isinstance(checked, Err):
            complete(None)
            return checked

    ctx = RequestContext.from_config(config)
    graph = build_publish_graph(http or RealHttpClient(), ctx, config, events)
    run = graph.run(on_stage=lambda name: logger.debug("stage %s", name))

    if isinstance(run, Err):
        error = redact_error(run.error.error, config.token)
        message = describe_error(error, secret=config.token)
        logger.debug("stage %s failed: %s", run.error.stage, message)
        events.emit(PublishEvent(EventKind.ERROR, message=message))
        complete(None)
        return Err(error)

    outcome = _outcome_from(run.value)
    complete(outcome.release)
    return Ok(outcome)
