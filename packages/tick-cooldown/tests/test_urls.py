"""Tests for tick_cooldown.urls - normalisation and the input boundary."""
from __future__ import annotations

import pytest

from tick_cooldown.types import ItemDraft, Scope, Settings, TrackedItem, ValidationError
from tick_cooldown.urls import hostname, normalize_url, origin, validate_draft


class TestNormalizeUrl:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("example.com", "https://example.com/"),
            ("  news.ycombinator.com  ", "https://news.ycombinator.com/"),
            ("HTTP://Example.COM/Path?q=1", "http://example.com/Path?q=1"),
            ("//cdn.example.org/x", "https://cdn.example.org/x"),
            ("localhost:3000", "https://localhost:3000/"),
            ("https://example.com/a#frag", "https://example.com/a#frag"),
        ],
    )
    def test_valid(self, text: str, expected: str) -> None:
        assert normalize_url(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "https://", "ftp://files.example.com", "http://exa mple.com", "a:b:c"],
    )
    def test_invalid(self, text: str) -> None:
        assert normalize_url(text) is None


class TestHostAndOrigin:
    def test_hostname(self) -> None:
        assert hostname("https://www.example.com:8443/x") == "www.example.com"

    def test_hostname_falls_back_to_input(self) -> None:
        assert hostname("not a url") == "not a url"

    def test_origin(self) -> None:
        assert origin("https://example.com:8443/a/b") == "https://example.com:8443"
        assert origin("https://example.com/a") == "https://example.com"
        assert origin("nothing") is None


class TestValidateDraft:
    def test_new_item_gets_defaults(self) -> None:
        settings = Settings(default_duration_ms=900_000)
        draft = validate_draft(ItemDraft(url="example.com"), settings)
        assert draft.url == "https://example.com/"
        assert draft.duration_ms == 900_000
        assert draft.label == "example.com"
        assert draft.scope is Scope.DOMAIN

    def test_blank_label_falls_back_to_hostname(self) -> None:
        draft = validate_draft(ItemDraft(url="example.com", label="   "), Settings())
        assert draft.label == "example.com"

    def test_given_fields_are_kept(self) -> None:
        draft = validate_draft(
            ItemDraft(url="example.com", label=" Ex ", scope=Scope.URL, duration_ms=120_000),
            Settings(),
        )
        assert draft.label == "Ex"
        assert draft.scope is Scope.URL
        assert draft.duration_ms == 120_000

    def test_new_item_requires_url(self) -> None:
        with pytest.raises(ValidationError):
            validate_draft(ItemDraft(label="x"), Settings())

    def test_bad_url_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_draft(ItemDraft(url="ftp://example.com"), Settings())

    def test_short_duration_rejected(self) -> None:
        with pytest.raises(ValidationError):
            validate_draft(ItemDraft(url="example.com", duration_ms=59_999), Settings())

    def test_edit_only_checks_given_fields(self) -> None:
        existing = TrackedItem(
            id="a",
            url="https://example.com/",
            label="Example",
            duration_ms=60_000,
            created_at=0,
            updated_at=0,
        )
        draft = validate_draft(ItemDraft(id="a", label="New"), Settings(), existing=existing)
        assert draft.url is None
        assert draft.duration_ms is None
        assert draft.scope is None
        assert draft.label == "New"

    def test_edit_blank_label_uses_hostname(self) -> None:
        existing = TrackedItem(
            id="a",
            url="https://example.com/",
            label="Example",
            duration_ms=60_000,
            created_at=0,
            updated_at=0,
        )
        draft = validate_draft(ItemDraft(id="a", label=""), Settings(), existing=existing)
        assert draft.label == "example.com"
