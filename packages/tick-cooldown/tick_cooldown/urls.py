"""URL normalisation and the item input boundary."""
from __future__ import annotations

import re
from dataclasses import replace
from urllib.parse import urlsplit, urlunsplit

from tick_cooldown.types import (
    MIN_DURATION_MS,
    ItemDraft,
    Scope,
    Settings,
    TrackedItem,
    ValidationError,
)

_HAS_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


def normalize_url(text: str) -> str | None:
    """Return an absolute http(s) URL, or None if ``text`` is not one.

    A missing scheme defaults to https.
    """
    candidate = text.strip()
    if not candidate:
        return None
    if candidate.startswith("//"):
        candidate = "https:" + candidate
    elif not _HAS_SCHEME.match(candidate):
        candidate = "https://" + candidate

    try:
        parts = urlsplit(candidate)
        port = parts.port
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None
    if any(ch.isspace() for ch in parts.netloc):
        return None

    netloc = parts.hostname.lower()
    if ":" in netloc:
        netloc = f"[{netloc}]"
    if parts.username or parts.password:
        userinfo = parts.username or ""
        if parts.password:
            userinfo += ":" + parts.password
        netloc = f"{userinfo}@{netloc}"
    if port is not None:
        netloc += f":{port}"
    return urlunsplit(
        (parts.scheme.lower(), netloc, parts.path or "/", parts.query, parts.fragment)
    )


def hostname(url: str) -> str:
    """Hostname of ``url``, or ``url`` itself when it cannot be parsed."""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return url
    return host or url


def origin(url: str) -> str | None:
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    if not parts.scheme or not parts.hostname:
        return None
    result = f"{parts.scheme}://{parts.hostname}"
    if port is not None:
        result += f":{port}"
    return result


def validate_draft(
    draft: ItemDraft,
    settings: Settings,
    existing: TrackedItem | None = None,
) -> ItemDraft:
    """Check and complete user input before it reaches the store.

    For a new item (``existing`` is None) missing fields are filled from
    ``settings`` and the URL; for an edit only the given fields are checked.
    Raises ValidationError.
    """
    changes: dict[str, object] = {}

    if draft.url is not None:
        url = normalize_url(draft.url)
        if url is None:
            raise ValidationError(f"Invalid URL: {draft.url!r}")
        changes["url"] = url
    elif existing is None:
        raise ValidationError("A URL is required")

    if draft.duration_ms is not None:
        if draft.duration_ms < MIN_DURATION_MS:
            raise ValidationError(
                f"Duration must be at least {MIN_DURATION_MS // 60_000} minute(s)"
            )
    elif existing is None:
        changes["duration_ms"] = settings.default_duration_ms

    if draft.label is not None:
        changes["label"] = draft.label.strip()
    if existing is None:
        if not changes.get("label"):
            changes["label"] = hostname(str(changes["url"]))
        if draft.scope is None:
            changes["scope"] = Scope.DOMAIN
    elif draft.label is not None and not changes["label"]:
        changes["label"] = hostname(str(changes.get("url", existing.url)))

    return replace(draft, **changes)
