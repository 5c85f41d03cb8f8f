from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from app.services.email_service import password_reset_email
from app.services.reset_token_service import (
    build_reset_url,
    clear_reset_token,
    generate_reset_token,
    issue_reset_token,
)


def test_token_has_256_bits_of_entropy():
    token = generate_reset_token()
    assert len(token) == 64
    int(token, 16)
    assert generate_reset_token() != token


def test_issue_sets_token_and_one_hour_expiry():
    user = SimpleNamespace(reset_password_token=None, reset_password_expires=None)
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    token = issue_reset_token(user, now=now)

    assert user.reset_password_token == token
    assert user.reset_password_expires == now + timedelta(hours=1)


def test_second_issue_overwrites_first():
    user = SimpleNamespace(reset_password_token=None, reset_password_expires=None)
    first = issue_reset_token(user)
    second = issue_reset_token(user)
    assert first != second
    assert user.reset_password_token == second


def test_clear_resets_both_fields():
    user = SimpleNamespace(reset_password_token=None, reset_password_expires=None)
    issue_reset_token(user)
    clear_reset_token(user)
    assert user.reset_password_token is None
    assert user.reset_password_expires is None


def test_reset_url_embeds_token():
    assert build_reset_url("abc") == "http://frontend.test/reset_password?token=abc"


def test_reset_email_escapes_username():
    html = password_reset_email("<b>bob</b>", "http://x/reset?token=1", timedelta(hours=1))
    assert "&lt;b&gt;bob&lt;/b&gt;" in html
    assert "expires in 1 hour" in html
