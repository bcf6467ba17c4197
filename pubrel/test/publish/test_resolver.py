from __future__ import annotations

from dataclasses import replace

import pytest

from pubrel.core.config import PublishConfig
from pubrel.core.result import Err, Ok
from pubrel.publish.context import RequestContext
from pubrel.publish.errors import MalformedResponse, ServiceStatusError, TransportError
from pubrel.publish.events import RecordingSink
from pubrel.publish.resolver import NothingToDo, Resolved, find_release_by_tag, resolve_release
from pubrel.transport.http import MockHttpClient

API = "https://api.example.com"
RELEASES = f"{API}/repos/octo/widgets/releases"


def _page(n: int) -> str:
    return f"{RELEASES}?per_page=100&page={n}"


def _config(**overrides: object) -> PublishConfig:
    base = PublishConfig(
        token="ghp_secret",
        owner="octo",
        repo="widgets",
        tag="v1.0.0",
        api_root=API,
        name="Widgets 1.0",
    )
    return replace(base, **overrides)


def _release_json(id: int, tag: str, *, draft: bool = False) -> dict[str, object]:
    return {
        "id": id,
        "tag_name": tag,
        "url": f"{RELEASES}/{id}",
        "upload_url": f"https://uploads.example.com/repos/octo/widgets/releases/{id}/assets{{?name,label}}",
        "draft": draft,
        "prerelease": False,
        "assets": [],
    }


class TestFindReleaseByTag:
    def test_stops_at_first_match(self) -> None:
        http = MockHttpClient()
        full_page = [_release_json(i, f"v0.{i}") for i in range(99)]
        full_page.append(_release_json(500, "v1.0.0"))
        http.add("GET", _page(1), json=full_page)
        http.add("GET", _page(2), json=[_release_json(600, "v1.0.0")])

        result = find_release_by_tag(http, RequestContext.from_config(_config()), "v1.0.0")

        assert isinstance(result, Ok)
        assert result.value is not None
        assert result.value.id == 500
        assert http.calls() == [("GET", _page(1))]

    def test_follows_full_pages(self) -> None:
        http = MockHttpClient()
        http.add("GET", _page(1), json=[_release_json(i, f"v0.{i}") for i in range(100)])
        http.add("GET", _page(2), json=[_release_json(700, "v1.0.0")])

        result = find_release_by_tag(http, RequestContext.from_config(_config()), "v1.0.0")

        assert isinstance(result, Ok)
        assert result.value is not None
        assert result.value.id == 700
        assert [url for _, url in http.calls()] == [_page(1), _page(2)]

    def test_no_match(self) -> None:
        http = MockHttpClient()
        http.add("GET", _page(1), json=[_release_json(1, "v0.1")])

        result = find_release_by_tag(http, RequestContext.from_config(_config()), "v1.0.0")

        assert result == Ok(None)

    def test_match_without_identity_is_malformed(self) -> None:
        http = MockHttpClient()
        http.add("GET", _page(1), json=[{"tag_name": "v1.0.0"}])

        result = find_release_by_tag(http, RequestContext.from_config(_config()), "v1.0.0")

        assert isinstance(result, Err)
        assert isinstance(result.error, MalformedResponse)

    def test_listing_must_be_an_array(self) -> None:
        http = MockHttpClient()
        http.add("GET", _page(1), json={"message": "weird"})

        result = find_release_by_tag(http, RequestContext.from_config(_config()), "v1.0.0")

        assert isinstance(result, Err)
        assert isinstance(result.error, MalformedResponse)


class TestResolveRelease:
    def test_creates_without_listing_when_reuse_is_off(self) -> None:
        http = MockHttpClient()
        http.add("POST", RELEASES, status=201, json=_release_json(9, "v1.0.0"))
        sink = RecordingSink()
        config = _config(target_commitish="main", notes="Changes")

        result = resolve_release(http, RequestContext.from_config(config), config, sink)

        assert isinstance(result, Ok)
        assert isinstance(result.value, Resolved)
        assert result.value.release.id == 9
        assert result.value.release.reused is False
        assert http.calls("GET") == []
        assert http.calls("POST") == [("POST", RELEASES)]
        assert http.requests[0].json_body == {
            "tag_name": "v1.0.0",
            "target_commitish": "main",
            "name": "Widgets 1.0",
            "body": "Changes",
            "draft": False,
            "prerelease": False,
        }
        assert sink.kinds == ["create-release", "created-release"]

    def test_reuses_matching_draft(self) -> None:
        http = MockHttpClient()
        http.add("GET", _page(1), json=[_release_json(4, "v1.0.0", draft=True)])
        sink = RecordingSink()
        config = _config(reuse_release=True, reuse_draft_only=True)

        result = resolve_release(http, RequestContext.from_config(config), config, sink)

        assert isinstance(result, Ok)
        assert isinstance(result.value, Resolved)
        assert result.value.release.id == 4
        assert result.value.release.reused is True
        assert http.calls("POST") == []
        assert sink.kinds == ["reuse-release"]

    def test_reuses_published_release_when_drafts_not_required(self) -> None:
        http = MockHttpClient()
        http.add("GET", _page(1), json=[_release_json(4, "v1.0.0", draft=False)])
        config = _config(reuse_release=True, reuse_draft_only=False)

        result = resolve_release(http, RequestContext.from_config(config), config, RecordingSink())

        assert isinstance(result, Ok)
        assert isinstance(result.value, Resolved)
        assert result.value.release.reused is True

    def test_published_match_falls_back_to_create(self) -> None:
        http = MockHttpClient()
        http.add("GET", _page(1), json=[_release_json(4, "v1.0.0", draft=False)])
        http.add("POST", RELEASES, status=201, json=_release_json(10, "v1.0.0"))
        sink = RecordingSink()
        config = _config(reuse_release=True, reuse_draft_only=True)

        result = resolve_release(http, RequestContext.from_config(config), config, sink)

        assert isinstance(result, Ok)
        assert isinstance(result.value, Resolved)
        assert result.value.release.id == 10
        assert sink.kinds == ["create-release", "created-release"]

    def test_skip_if_published(self) -> None:
        http = MockHttpClient()
        http.add("GET", _page(1), json=[_release_json(4, "v1.0.0", draft=False)])
        sink = RecordingSink()
        config = _config(reuse_release=True, reuse_draft_only=True, skip_if_published=True)

        result = resolve_release(http, RequestContext.from_config(config), config, sink)

        assert isinstance(result, Ok)
        assert isinstance(result.value, NothingToDo)
        assert result.value.existing.id == 4
        assert http.calls("POST") == []
        assert sink.kinds == ["skip-release"]

    @pytest.mark.parametrize("status", [401, 422, 500])
    def test_create_failure(self, status: int) -> None:
        http = MockHttpClient()
        http.add("POST", RELEASES, status=status, json={"message": "nope"})
        sink = RecordingSink()
        config = _config()

        result = resolve_release(http, RequestContext.from_config(config), config, sink)

        assert isinstance(result, Err)
        assert isinstance(result.error, ServiceStatusError)
        assert result.error.status == status
        assert sink.kinds == ["create-release"]

    def test_listing_transport_failure(self) -> None:
        http = MockHttpClient()
        http.add_error("GET", _page(1), "Name or service not known")
        config = _config(reuse_release=True)

        result = resolve_release(http, RequestContext.from_config(config), config, RecordingSink())

        assert isinstance(result, Err)
        assert isinstance(result.error, TransportError)
        assert http.calls("POST") == []
