from __future__ import annotations

from dataclasses import dataclass, fields, replace

from pubrel.core.errors import ErrorCode
from pubrel.core.redact import redact

# Response bodies are kept for diagnosis but clipped in messages.
_BODY_PREVIEW = 300


@dataclass(frozen=True, slots=True)
class ConfigValidationError:
    missing: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AssetAccessError:
    path: str
    reason: str = "not found or not readable"


@dataclass(frozen=True, slots=True)
class TransportError:
    method: str
    url: str
    message: str


@dataclass(frozen=True, slots=True)
class ServiceStatusError:
    method: str
    url: str
    status: int
    body: str


@dataclass(frozen=True, slots=True)
class MalformedResponse:
    url: str
    message: str


@dataclass(frozen=True, slots=True)
class UploadEndpointMissing:
    tag: str
    errors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DuplicateAssetMissing:
    file_name: str


@dataclass(frozen=True, slots=True)
class DuplicateAssetPersistent:
    file_name: str
    attempts: int


PublishError = (
    ConfigValidationError
    | AssetAccessError
    | TransportError
    | ServiceStatusError
    | MalformedResponse
    | UploadEndpointMissing
    | DuplicateAssetMissing
    | DuplicateAssetPersistent
)


def redact_error(error: PublishError, secret: str | None) -> PublishError:
    """Copy of ``error`` with ``secret`` masked in every text field."""
    if not secret:
        return error

    changes: dict[str, object] = {}
    for f in fields(error):
        value = getattr(error, f.name)
        if isinstance(value, str):
            changes[f.name] = redact(value, secret)
        elif isinstance(value, tuple):
            changes[f.name] = tuple(
                redact(v, secret) if isinstance(v, str) else v for v in value
            )
    return replace(error, **changes)


def describe_error(error: PublishError, *, secret: str | None = None) -> str:
    """One-line description, with ``secret`` masked wherever it appears."""
    match error:
        case ConfigValidationError(missing=missing):
            text = f"missing required options: {', '.join(missing)}"
        case AssetAccessError(path=path, reason=reason):
            text = f"asset {path}: {reason}"
        case TransportError(method=method, url=url, message=message):
            text = f"{method} {url} failed: {message}"
        case ServiceStatusError(method=method, url=url, status=status, body=body):
            text = f"{method} {url} returned HTTP {status}"
            preview = body.strip()
            if preview:
                if len(preview) > _BODY_PREVIEW:
                    preview = preview[:_BODY_PREVIEW] + "..."
                text += f": {preview}"
        case MalformedResponse(url=url, message=message):
            text = f"unexpected response from {url}: {message}"
        case UploadEndpointMissing(tag=tag, errors=errors):
            text = f"release {tag} has no usable upload endpoint"
            if errors:
                text += f" ({'; '.join(errors)})"
        case DuplicateAssetMissing(file_name=file_name):
            text = f"asset {file_name} already exists but was not found on the release"
        case DuplicateAssetPersistent(file_name=file_name, attempts=attempts):
            text = f"asset {file_name} still conflicts after {attempts} delete-and-retry attempt(s)"
    return redact(text, secret)


def publish_error_exit_code(error: PublishError) -> int:
    match error:
        case ConfigValidationError():
            return int(ErrorCode.USER_ERROR)
        case AssetAccessError():
            return int(ErrorCode.IO_ERROR)
        case TransportError():
            return int(ErrorCode.NETWORK_ERROR)
        case (
            ServiceStatusError()
            | MalformedResponse()
            | UploadEndpointMissing()
            | DuplicateAssetMissing()
            | DuplicateAssetPersistent()
        ):
            return int(ErrorCode.SERVICE_ERROR)
