"""
Auth flows: register, login, profile, update, forgot-password, reset-password.

Each flow is a short, independent unit of work against the request's session.
Errors are raised as app.exceptions types and mapped to responses by the
exception handlers; nothing here builds HTTP responses.
"""

import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.auth import create_token
from app.config import get_settings
from app.exceptions import Forbidden, InvalidCredentials, InvalidOrExpiredToken, NotFound, ValidationError
from app.models.user import User, Role
from app.services.email_service import email_service, password_reset_email
from app.services.password_service import hash_password, verify_password_async
from app.services.reset_token_service import build_reset_url, clear_reset_token, issue_reset_token
from app.services.user_store import UserStore, validate_user_fields

logger = logging.getLogger(__name__)

RESET_EMAIL_SUBJECT = "Password Reset Request"

# Checked against when the email is unknown so both login failures cost one bcrypt verify
DUMMY_HASH = hash_password("not-a-real-password")


class AuthService:
    def __init__(self, db: AsyncSession, mailer=None):
        self.db = db
        self.users = UserStore(db)
        self.mailer = mailer or email_service

    async def register(self, username, email, password, role=None) -> tuple[User, str]:
        if not username or not email or not password:
            raise ValidationError("Username, email, and password are required")

        # Self-assigned roles follow the original open registration unless disabled
        if not get_settings().allow_role_on_register:
            role = None
        user = await self.users.create(username, email, password, role or Role.STAFF)
        return user, create_token(user)

    async def login(self, email, password) -> tuple[User, str]:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = await self.users.find_by_email(email)
        # Same error and the same bcrypt cost for unknown email and wrong password
        stored_hash = user.password if user is not None else DUMMY_HASH
        if not await verify_password_async(password, stored_hash) or user is None:
            logger.info("Failed login attempt for %s", email)
            raise InvalidCredentials()

        logger.info("User %s logged in", user.id)
        return user, create_token(user)

    async def update_user(self, target_id: int, fields: dict, acting_user: User) -> User:
        user = await self.users.get(target_id)
        if user is None:
            raise NotFound("User not found")

        if not acting_user.is_admin and acting_user.id != user.id:
            raise Forbidden("Unauthorized to update this user")

        changes = {k: v for k, v in fields.items() if k in ("username", "email", "password") and v}
        if fields.get("role") and acting_user.is_admin:
            changes["role"] = fields["role"]

        if changes:
            await self.users.update(user, changes)
            logger.info("User %s updated fields %s of user %s", acting_user.id, sorted(changes), user.id)
        return user

    async def forgot_password(self, email) -> None:
        if not email:
            raise ValidationError("Email is required")

        user = await self.users.find_by_email(email)
        if user is None:
            raise NotFound("No account with that email")

        settings = get_settings()
        token = issue_reset_token(user, ttl=settings.reset_token_ttl)
        await self.users.save(user)
        # The token must survive a failed send so a retried delivery can reuse it
        await self.db.commit()

        reset_url = build_reset_url(token)
        await self.mailer.send(
            user.email,
            RESET_EMAIL_SUBJECT,
            password_reset_email(user.username, reset_url, settings.reset_token_ttl),
        )
        logger.info("Password reset issued for user %s", user.id)

    async def reset_password(self, token, new_password) -> None:
        if not token or not new_password:
            raise ValidationError("Token and new password are required")

        user = await self.users.find_by_reset_token(token)
        if user is None:
            raise InvalidOrExpiredToken()

        messages = validate_user_fields({"password": new_password})
        if messages:
            raise ValidationError(errors=messages)

        clear_reset_token(user)
        await self.users.update(user, {"password": new_password})
        logger.info("Password reset completed for user %s", user.id)
