from __future__ import annotations

import pytest

from pubrel.core.errors import ErrorCode
from pubrel.core.redact import REDACTED
from pubrel.publish.errors import (
    AssetAccessError,
    ConfigValidationError,
    DuplicateAssetMissing,
    DuplicateAssetPersistent,
    MalformedResponse,
    PublishError,
    ServiceStatusError,
    TransportError,
    UploadEndpointMissing,
    describe_error,
    publish_error_exit_code,
    redact_error,
)

SECRET = "ghp_abc123"


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (
            ConfigValidationError(missing=("token", "tag")),
            "missing required options: token, tag",
        ),
        (AssetAccessError(path="dist/a.zip"), "asset dist/a.zip: not found or not readable"),
        (
            TransportError(method="GET", url="https://x/r", message="timed out"),
            "GET https://x/r failed: timed out",
        ),
        (
            ServiceStatusError(method="POST", url="https://x/r", status=500, body=""),
            "POST https://x/r returned HTTP 500",
        ),
        (
            MalformedResponse(url="https://x/r", message="expected a release object"),
            "unexpected response from https://x/r: expected a release object",
        ),
        (
            UploadEndpointMissing(tag="v1", errors=("name custom",)),
            "release v1 has no usable upload endpoint (name custom)",
        ),
        (
            DuplicateAssetMissing(file_name="x.bin"),
            "asset x.bin already exists but was not found on the release",
        ),
        (
            DuplicateAssetPersistent(file_name="x.bin", attempts=1),
            "asset x.bin still conflicts after 1 delete-and-retry attempt(s)",
        ),
    ],
)
def test_describe_error(error: PublishError, expected: str) -> None:
    assert describe_error(error) == expected


def test_describe_clips_long_bodies() -> None:
    error = ServiceStatusError(method="POST", url="u", status=422, body="x" * 1000)

    text = describe_error(error)

    assert text.endswith("...")
    assert len(text) < 400


def test_describe_masks_secret() -> None:
    error = TransportError(method="GET", url=f"https://x/?t={SECRET}", message="boom")

    text = describe_error(error, secret=SECRET)

    assert SECRET not in text
    assert REDACTED in text


def test_redact_error_covers_strings_and_tuples() -> None:
    error = UploadEndpointMissing(tag="v1", errors=(f"token {SECRET} rejected", "other"))

    redacted = redact_error(error, SECRET)

    assert isinstance(redacted, UploadEndpointMissing)
    assert redacted.errors == (f"token {REDACTED} rejected", "other")
    assert redacted.tag == "v1"


def test_redact_error_keeps_non_text_fields() -> None:
    error = ServiceStatusError(method="GET", url="u", status=401, body=f"bad {SECRET}")

    redacted = redact_error(error, SECRET)

    assert redacted == ServiceStatusError(
        method="GET", url="u", status=401, body=f"bad {REDACTED}"
    )
    assert redact_error(error, None) is error


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ConfigValidationError(missing=("tag",)), ErrorCode.USER_ERROR),
        (AssetAccessError(path="a"), ErrorCode.IO_ERROR),
        (TransportError(method="GET", url="u", message="m"), ErrorCode.NETWORK_ERROR),
        (ServiceStatusError(method="GET", url="u", status=500, body=""), ErrorCode.SERVICE_ERROR),
        (DuplicateAssetPersistent(file_name="x", attempts=1), ErrorCode.SERVICE_ERROR),
    ],
)
def test_exit_codes(error: PublishError, code: ErrorCode) -> None:
    assert publish_error_exit_code(error) == int(code)
