from __future__ import annotations

from datetime import datetime, timezone

import jwt
import pytest

from bytespark.core.config import AppSettings
from bytespark.i18n.locales import LocaleRegistry
from bytespark.services.auth import AdminAuthService
from bytespark.services.sitemap import build_sitemap_entries, render_sitemap
from scripts.issue_admin_token import main as issue_token_main

SETTINGS = AppSettings(JWT_SECRET_KEY="secret", ADMIN_USER_ID="admin-1", ACCESS_TOKEN_TTL=60)


def test_issued_token_verifies_as_admin() -> None:
    service = AdminAuthService(SETTINGS)

    token = service.issue_token()

    assert token.expires_in == 60
    assert service.verify_token(token.access_token) == "admin-1"


def test_expired_or_foreign_tokens_are_rejected() -> None:
    service = AdminAuthService(SETTINGS)
    expired = jwt.encode({"sub": "admin-1", "exp": 1}, "secret", algorithm="HS256")
    forged = jwt.encode({"sub": "admin-1", "exp": 4102444800}, "other-secret", algorithm="HS256")

    with pytest.raises(PermissionError):
        service.verify_token(expired)
    with pytest.raises(PermissionError):
        service.verify_token(forged)
    with pytest.raises(PermissionError):
        service.verify_token(service.issue_token("visitor").access_token)


def test_unconfigured_admin_denies_everything() -> None:
    service = AdminAuthService(AppSettings(JWT_SECRET_KEY="secret"))

    with pytest.raises(ValueError):
        service.issue_token()
    with pytest.raises(PermissionError):
        service.verify_token("anything")


def test_issue_admin_token_cli(capsys: pytest.CaptureFixture[str]) -> None:
    assert issue_token_main([], settings=SETTINGS) == 0
    token = capsys.readouterr().out.strip()
    assert AdminAuthService(SETTINGS).verify_token(token) == "admin-1"

    assert issue_token_main([], settings=AppSettings(ADMIN_USER_ID="admin-1")) == 1


def test_sitemap_covers_every_locale_and_article() -> None:
    registry = LocaleRegistry.from_codes(["en", "ja"])
    updated = datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)

    entries = build_sitemap_entries("https://blog.example.com/", registry, [("hello", "ja", updated)])
    xml = render_sitemap(entries)

    assert [entry.loc for entry in entries] == [
        "https://blog.example.com/en",
        "https://blog.example.com/en/about",
        "https://blog.example.com/en/blogs",
        "https://blog.example.com/ja",
        "https://blog.example.com/ja/about",
        "https://blog.example.com/ja/blogs",
        "https://blog.example.com/ja/blog/hello",
    ]
    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<lastmod>2026-03-04</lastmod>" in xml
    assert 'xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"' in xml
