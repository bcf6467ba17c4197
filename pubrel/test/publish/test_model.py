"""Tests for pubrel.publish.model and pubrel.publish.context."""

from __future__ import annotations

import pytest

from pubrel.core.config import PublishConfig
from pubrel.publish.context import USER_AGENT, RequestContext, asset_url, upload_target
from pubrel.publish.model import (
    Release,
    ReleaseAsset,
    UploadProgressSample,
    has_error_code,
    service_errors,
)

RELEASE_URL = "https://api.example.com/repos/octo/widgets/releases/7"


def _payload(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "id": 7,
        "tag_name": "v1.0.0",
        "url": RELEASE_URL,
        "upload_url": "https://uploads.example.com/repos/octo/widgets/releases/7/assets{?name,label}",
        "html_url": "https://example.com/octo/widgets/releases/tag/v1.0.0",
        "name": "1.0.0",
        "body": "  notes\n",
        "draft": True,
        "prerelease": False,
        "assets": [{"id": 3, "name": "a.zip"}, {"name": "broken"}, "junk"],
    }
    data.update(overrides)
    return data


class TestRelease:
    def test_from_payload(self) -> None:
        release = Release.from_payload(_payload())

        assert release is not None
        assert release.id == 7
        assert release.tag == "v1.0.0"
        assert release.draft is True
        assert release.body == "  notes\n"
        assert release.assets == (ReleaseAsset(id=3, name="a.zip"),)
        assert release.reused is False
        assert release.errors == ()

    def test_from_payload_requires_identity(self) -> None:
        assert Release.from_payload(_payload(id=None)) is None
        assert Release.from_payload(_payload(tag_name="")) is None
        assert Release.from_payload(_payload(url=None)) is None

    def test_upload_endpoint_strips_template(self) -> None:
        release = Release.from_payload(_payload())
        assert release is not None
        assert (
            release.upload_endpoint
            == "https://uploads.example.com/repos/octo/widgets/releases/7/assets"
        )

    @pytest.mark.parametrize(
        "overrides",
        [
            {"upload_url": None},
            {"upload_url": "{?name}"},
            {"errors": [{"resource": "Release", "code": "custom", "message": "bad"}]},
        ],
    )
    def test_no_usable_upload_endpoint(self, overrides: dict[str, object]) -> None:
        release = Release.from_payload(_payload(**overrides))
        assert release is not None
        assert release.upload_endpoint is None

    def test_find_asset(self) -> None:
        release = Release.from_payload(_payload())
        assert release is not None
        assert release.find_asset("a.zip") == ReleaseAsset(id=3, name="a.zip")
        assert release.find_asset("b.zip") is None

    def test_with_metadata_keeps_identity(self) -> None:
        release = Release.from_payload(_payload())
        assert release is not None
        reused = release.as_reused()

        edited = reused.with_metadata(name="new", body=None, draft=False, prerelease=True)

        assert (edited.id, edited.tag, edited.url) == (release.id, release.tag, release.url)
        assert edited.reused is True
        assert edited.draft is False
        assert edited.prerelease is True
        assert edited.name == "new"
        # The original value is untouched.
        assert reused.draft is True


def test_service_errors_and_codes() -> None:
    data: dict[str, object] = {
        "errors": [
            {"resource": "ReleaseAsset", "code": "already_exists", "field": "name"},
            "plain message",
        ]
    }
    assert service_errors(data) == ("name already_exists", "plain message")
    assert has_error_code(data, "already_exists")
    assert not has_error_code(data, "invalid")
    assert not has_error_code(None, "already_exists")
    assert not has_error_code({"errors": "nope"}, "already_exists")


class TestUploadProgressSample:
    def test_derived_fields(self) -> None:
        sample = UploadProgressSample(file_name="a.zip", transferred=250, total=1000, elapsed=0.5)
        assert sample.percentage == 25.0
        assert sample.remaining == 750
        assert sample.speed == 500.0
        assert sample.eta == 1.5

    def test_empty_file_is_complete(self) -> None:
        sample = UploadProgressSample(file_name="e", transferred=0, total=0, elapsed=0.0)
        assert sample.percentage == 100.0
        assert sample.speed == 0.0
        assert sample.eta is None


class TestRequestContext:
    def test_headers_and_urls(self) -> None:
        config = PublishConfig(
            token="ghp_x",
            owner="octo",
            repo="widgets",
            tag="v1",
            api_root="https://api.example.com/",
        )

        ctx = RequestContext.from_config(config)

        assert ctx.headers["Authorization"] == "token ghp_x"
        assert ctx.headers["User-Agent"] == USER_AGENT
        assert ctx.releases_url == "https://api.example.com/repos/octo/widgets/releases"
        assert (
            ctx.tag_ref_url("release/v1")
            == "https://api.example.com/repos/octo/widgets/git/refs/tags/release/v1"
        )
        assert "ghp_x" not in repr(ctx)

    def test_headers_are_read_only(self) -> None:
        ctx = RequestContext.from_config(PublishConfig(token="t", owner="o", repo="r", tag="v"))
        with pytest.raises(TypeError):
            ctx.headers["Authorization"] = "token other"  # type: ignore[index]

    def test_upload_headers_are_a_copy(self) -> None:
        ctx = RequestContext.from_config(PublishConfig(token="t", owner="o", repo="r", tag="v"))

        headers = ctx.upload_headers(size=12, content_type="application/zip")

        assert headers["Content-Length"] == "12"
        assert headers["Content-Type"] == "application/zip"
        assert "Content-Length" not in ctx.headers


def test_asset_url_resolves_parent() -> None:
    assert asset_url(RELEASE_URL, 42) == (
        "https://api.example.com/repos/octo/widgets/releases/assets/42"
    )


def test_upload_target_quotes_name() -> None:
    assert upload_target("https://u.example.com/assets", "my app.zip") == (
        "https://u.example.com/assets?name=my%20app.zip"
    )
