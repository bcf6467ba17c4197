from __future__ import annotations

from dataclasses import dataclass, replace

from pubrel.core.structured import StrDict, as_obj_list, as_str_dict, get_int, get_str


@dataclass(frozen=True, slots=True)
class ReleaseAsset:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class Release:
    """A release record on the hosting service.

    ``assets`` reflects the release as it was resolved; it is not refreshed
    after this publish uploads or deletes anything.
    """

    id: int
    tag: str
    url: str
    upload_url: str | None
    draft: bool
    prerelease: bool
    name: str | None = None
    body: str | None = None
    html_url: str | None = None
    assets: tuple[ReleaseAsset, ...] = ()
    reused: bool = False
    # Errors the service reported in the creation payload.
    errors: tuple[str, ...] = ()

    @property
    def upload_endpoint(self) -> str | None:
        """Upload URL with its ``{?name,label}`` template stripped."""
        if self.errors or not self.upload_url:
            return None
        endpoint = self.upload_url.split("{", 1)[0]
        return endpoint or None

    def find_asset(self, name: str) -> ReleaseAsset | None:
        return next((a for a in self.assets if a.name == name), None)

    def as_reused(self) -> Release:
        return replace(self, reused=True)

    def with_metadata(
        self,
        *,
        name: str | None,
        body: str | None,
        draft: bool,
        prerelease: bool,
    ) -> Release:
        """Copy with the editable fields updated; id and tag never change."""
        return replace(self, name=name, body=body, draft=draft, prerelease=prerelease)

    @classmethod
    def from_payload(cls, data: StrDict) -> Release | None:
        """Parse a release object; None when id, tag or url are missing."""
        release_id = get_int(data, "id")
        tag = get_str(data, "tag_name")
        url = get_str(data, "url")
        if release_id is None or tag is None or url is None:
            return None

        assets: list[ReleaseAsset] = []
        for item in as_obj_list(data.get("assets")) or []:
            d = as_str_dict(item)
            if d is None:
                continue
            asset = asset_from_payload(d)
            if asset is not None:
                assets.append(asset)

        return cls(
            id=release_id,
            tag=tag,
            url=url,
            upload_url=get_str(data, "upload_url"),
            draft=data.get("draft") is True,
            prerelease=data.get("prerelease") is True,
            name=get_str(data, "name"),
            body=_raw_str(data, "body"),
            html_url=get_str(data, "html_url"),
            assets=tuple(assets),
            errors=service_errors(data),
        )


def asset_from_payload(data: StrDict) -> ReleaseAsset | None:
    asset_id = get_int(data, "id")
    name = get_str(data, "name")
    if asset_id is None or name is None:
        return None
    return ReleaseAsset(id=asset_id, name=name)


def service_errors(data: StrDict) -> tuple[str, ...]:
    """Flatten the ``errors`` array of a service payload into short strings."""
    out: list[str] = []
    for item in as_obj_list(data.get("errors")) or []:
        d = as_str_dict(item)
        if d is None:
            if isinstance(item, str):
                out.append(item)
            continue
        parts = [p for p in (get_str(d, "field"), get_str(d, "code"), get_str(d, "message")) if p]
        out.append(" ".join(parts) or "unknown error")
    return tuple(out)


def has_error_code(data: object, code: str) -> bool:
    d = as_str_dict(data)
    if d is None:
        return False
    for item in as_obj_list(d.get("errors")) or []:
        entry = as_str_dict(item)
        if entry is not None and get_str(entry, "code") == code:
            return True
    return False


def _raw_str(data: StrDict, key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


@dataclass(frozen=True, slots=True)
class AssetUploadTask:
    path: str
    file_name: str
    size: int
    content_type: str


@dataclass(frozen=True, slots=True)
class UploadProgressSample:
    """One progress reading for an asset transfer."""

    file_name: str
    transferred: int
    total: int
    elapsed: float

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 100.0
        return min(100.0, self.transferred * 100.0 / self.total)

    @property
    def remaining(self) -> int:
        return max(0, self.total - self.transferred)

    @property
    def speed(self) -> float:
        """Average bytes per second since the transfer started."""
        if self.elapsed <= 0:
            return 0.0
        return self.transferred / self.elapsed

    @property
    def eta(self) -> float | None:
        speed = self.speed
        if speed <= 0:
            return None
        return self.remaining / speed
