"""Single-use password reset tokens stored on the user row."""
import secrets
from datetime import datetime, timedelta
from typing import Optional
from app.config import get_settings
from app.models.user import User, utcnow

TOKEN_BYTES = 32  # 256 bits


def generate_reset_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


def issue_reset_token(user: User, now: Optional[datetime] = None, ttl: Optional[timedelta] = None) -> str:
    """Set a fresh token and expiry on ``user``. Any previous token is overwritten."""
    now = now or utcnow()
    ttl = ttl or get_settings().reset_token_ttl
    token = generate_reset_token()
    user.reset_password_token = token
    user.reset_password_expires = now + ttl
    return token


def clear_reset_token(user: User) -> None:
    user.reset_password_token = None
    user.reset_password_expires = None


def build_reset_url(token: str) -> str:
    return f"{get_settings().frontend_url.rstrip('/')}/reset_password?token={token}"
