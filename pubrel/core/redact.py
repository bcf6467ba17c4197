"""Credential scrubbing for text that leaves the publish core."""

from __future__ import annotations

REDACTED = "[REDACTED]"


def redact(text: str, secret: str | None) -> str:
    """Replace every occurrence of ``secret`` in ``text`` with a fixed mask.

    An empty or missing secret leaves the text untouched.
    """
    if not secret:
        return text
    return text.replace(secret, REDACTED)
