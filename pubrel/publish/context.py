from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import quote, urljoin

from pubrel import PROJECT_URL, __version__
from pubrel.core.config import PublishConfig

USER_AGENT = f"publish-release {__version__} ({PROJECT_URL})"
ACCEPT = "application/vnd.github+json"


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Per-publish request settings, built once from the config.

    Every request-issuing call receives this value explicitly; headers are
    never rebuilt or mutated per request. Upload-specific headers are added
    to a copy by ``upload_headers``.
    """

    api_root: str
    owner: str
    repo: str
    token: str = field(repr=False)
    headers: Mapping[str, str] = field(repr=False)

    @classmethod
    def from_config(cls, config: PublishConfig) -> RequestContext:
        headers = {
            "Authorization": f"token {config.token}",
            "User-Agent": USER_AGENT,
            "Accept": ACCEPT,
        }
        return cls(
            api_root=config.api_root.rstrip("/"),
            owner=config.owner,
            repo=config.repo,
            token=config.token,
            headers=MappingProxyType(headers),
        )

    @property
    def repo_url(self) -> str:
        return f"{self.api_root}/repos/{quote(self.owner, safe='')}/{quote(self.repo, safe='')}"

    @property
    def releases_url(self) -> str:
        return f"{self.repo_url}/releases"

    def tag_ref_url(self, tag: str) -> str:
        return f"{self.repo_url}/git/refs/tags/{quote(tag, safe='/')}"

    def upload_headers(self, *, size: int, content_type: str) -> dict[str, str]:
        headers = dict(self.headers)
        headers["Content-Length"] = str(size)
        headers["Content-Type"] = content_type
        return headers


def asset_url(release_url: str, asset_id: int) -> str:
    """Resolve ``{release_url}/../assets/{id}``."""
    return urljoin(release_url.rstrip("/") + "/", f"../assets/{asset_id}")


def upload_target(endpoint: str, file_name: str) -> str:
    return f"{endpoint}?name={quote(file_name, safe='')}"
