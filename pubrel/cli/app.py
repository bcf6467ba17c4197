from __future__ import annotations

import os
from pathlib import Path

import typer

from pubrel import __version__
from pubrel.cli.render import ConsoleEventSink
from pubrel.core.config import DEFAULT_CONFIG_FILE, load_publish_config, split_repo_slug
from pubrel.core.errors import ErrorCode
from pubrel.core.redact import redact
from pubrel.core.result import Err
from pubrel.output.console import ConsoleProtocol, RichConsole, configure_logging
from pubrel.publish.errors import describe_error, publish_error_exit_code
from pubrel.publish.orchestrator import publish_release
from pubrel.transport.http import DEFAULT_TIMEOUT_SECONDS, HttpClient, RealHttpClient


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def _console() -> ConsoleProtocol:
    return RichConsole()


def _http_client(timeout: float) -> HttpClient:
    return RealHttpClient(timeout=timeout)


def _fail(console: ConsoleProtocol, message: str, code: ErrorCode) -> typer.Exit:
    console.error(message)
    return typer.Exit(code=int(code))


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.command()
def publish(
    assets: list[str] | None = typer.Argument(None, help="Asset files to upload, in order."),
    token: str | None = typer.Option(
        None, "--token", help="API token (default: $GITHUB_TOKEN or $GH_TOKEN)."
    ),
    owner: str | None = typer.Option(None, "--owner", help="Repository owner."),
    repo: str | None = typer.Option(None, "--repo", help="Repository name or owner/name."),
    tag: str | None = typer.Option(None, "--tag", help="Tag of the release."),
    target_commitish: str | None = typer.Option(
        None, "--target-commitish", help="Branch or commit the tag is created from."
    ),
    name: str | None = typer.Option(None, "--name", help="Release title."),
    notes: str | None = typer.Option(None, "--notes", help="Release notes."),
    notes_file: Path | None = typer.Option(
        None, "--notes-file", help="Read release notes from a file."
    ),
    draft: bool | None = typer.Option(None, "--draft/--no-draft", help="Publish as a draft."),
    prerelease: bool | None = typer.Option(
        None, "--prerelease/--no-prerelease", help="Mark as a prerelease."
    ),
    reuse_release: bool | None = typer.Option(
        None, "--reuse-release/--no-reuse-release", help="Reuse a release with the same tag."
    ),
    reuse_draft_only: bool | None = typer.Option(
        None, "--reuse-draft-only/--no-reuse-draft-only", help="Only reuse draft releases."
    ),
    skip_if_published: bool | None = typer.Option(
        None,
        "--skip-if-published/--no-skip-if-published",
        help="Do nothing when a published release exists for the tag.",
    ),
    edit_release: bool | None = typer.Option(
        None, "--edit-release/--no-edit-release", help="Update metadata of a reused release."
    ),
    delete_empty_tag: bool | None = typer.Option(
        None,
        "--delete-empty-tag/--no-delete-empty-tag",
        help="Delete the tag when an edit turns the release back into a draft.",
    ),
    skip_assets_check: bool | None = typer.Option(
        None, "--skip-assets-check/--no-skip-assets-check", help="Do not check assets exist."
    ),
    skip_duplicated_assets: bool | None = typer.Option(
        None,
        "--skip-duplicated-assets/--no-skip-duplicated-assets",
        help="Keep existing assets instead of replacing them.",
    ),
    api_url: str | None = typer.Option(
        None, "--api-url", help="API root (default: $GITHUB_API_URL or api.github.com)."
    ),
    config: Path | None = typer.Option(
        None, "--config", help=f"TOML config file (default: ./{DEFAULT_CONFIG_FILE} if present)."
    ),
    timeout: float = typer.Option(
        DEFAULT_TIMEOUT_SECONDS, "--timeout", help="Network timeout in seconds."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP requests."),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Create a release and upload assets to it."""
    del version
    console = _console()
    configure_logging(verbose=verbose)

    if notes_file is not None:
        try:
            notes = notes_file.read_text(encoding="utf-8")
        except OSError as e:
            raise _fail(console, f"cannot read notes file {notes_file}: {e}", ErrorCode.USER_ERROR)

    if repo is not None and owner is None and "/" in repo:
        owner, repo = split_repo_slug(repo)

    config_path = config
    if config_path is None and Path(DEFAULT_CONFIG_FILE).is_file():
        config_path = Path(DEFAULT_CONFIG_FILE)

    overrides: dict[str, object] = {
        "token": token,
        "owner": owner,
        "repo": repo,
        "tag": tag,
        "target_commitish": target_commitish,
        "name": name,
        "notes": notes,
        "draft": draft,
        "prerelease": prerelease,
        "reuse_release": reuse_release,
        "reuse_draft_only": reuse_draft_only,
        "skip_if_published": skip_if_published,
        "edit_release": edit_release,
        "delete_empty_tag": delete_empty_tag,
        "skip_assets_check": skip_assets_check,
        "skip_duplicated_assets": skip_duplicated_assets,
        "api_root": api_url,
        "assets": list(assets) if assets else None,
    }

    loaded = load_publish_config(path=config_path, overrides=overrides, env=os.environ)
    if isinstance(loaded, Err):
        raise _fail(console, loaded.error.message, ErrorCode.USER_ERROR)
    publish_config = loaded.value

    sink = ConsoleEventSink(console)
    result = publish_release(publish_config, http=_http_client(timeout), sink=sink)

    if isinstance(result, Err):
        if not sink.reported_error:
            console.error(describe_error(result.error, secret=publish_config.token))
        raise typer.Exit(code=publish_error_exit_code(result.error))

    outcome = result.value
    if outcome.release is None:
        return

    release = outcome.release
    link = release.html_url or release.url
    console.success(redact(f"release {release.tag}: {link}", publish_config.token))


def main() -> None:
    app()
