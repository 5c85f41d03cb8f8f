"""
Credential store: every read and write of the ``users`` table goes through here.

Writes validate the incoming fields, hash a password whenever it is part of the
change-set and translate unique-constraint collisions into DuplicateError. The
unique indexes on username/email are the real serialization point; the
pre-check only gives a friendlier error in the common case.
"""

import logging
from datetime import datetime
from typing import Optional
from email_validator import validate_email, EmailNotValidError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.exceptions import DuplicateError, InternalError, ValidationError
from app.models.user import User, Role, utcnow
from app.services.password_service import hash_password_async

logger = logging.getLogger(__name__)

USERNAME_MIN, USERNAME_MAX = 3, 50
PASSWORD_MIN, PASSWORD_MAX = 6, 100
UNIQUE_FIELDS = ("username", "email")


def parse_role(value) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(errors=["Role must be admin, doctor, staff, or patient"])


def validate_user_fields(fields: dict) -> list[str]:
    """Return one message per failing field. Only keys present in ``fields`` are checked."""
    messages = []
    if "username" in fields:
        username = fields["username"] or ""
        if not USERNAME_MIN <= len(username) <= USERNAME_MAX:
            messages.append(f"Username must be between {USERNAME_MIN} and {USERNAME_MAX} characters")
    if "email" in fields:
        try:
            validate_email(fields["email"] or "", check_deliverability=False)
        except EmailNotValidError:
            messages.append("Must be a valid email address")
    if "password" in fields:
        password = fields["password"] or ""
        if not PASSWORD_MIN <= len(password) <= PASSWORD_MAX:
            messages.append(f"Password must be at least {PASSWORD_MIN} characters long")
    if "role" in fields:
        try:
            parse_role(fields["role"])
        except ValidationError as e:
            messages.extend(e.errors)
    return messages


def _duplicate_field(exc: IntegrityError) -> str:
    """
    Name the column behind a unique violation. Postgres reports the index name
    (``ix_users_email``) and SQLite the qualified column (``users.email``); both
    appear before any echoed value, so the earliest match wins.
    """
    text = str(exc.orig).lower()
    hits = []
    for field in UNIQUE_FIELDS:
        for marker in (f"ix_users_{field}", f"users.{field}"):
            pos = text.find(marker)
            if pos != -1:
                hits.append((pos, field))
    return min(hits)[1] if hits else "username"


class UserStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        return await self.db.scalar(select(User).where(User.email == email))

    async def find_by_username(self, username: str) -> Optional[User]:
        return await self.db.scalar(select(User).where(User.username == username))

    async def find_by_reset_token(self, token: str, now: Optional[datetime] = None) -> Optional[User]:
        """Only a token whose expiry is still in the future matches."""
        now = now or utcnow()
        return await self.db.scalar(
            select(User).where(
                User.reset_password_token == token,
                User.reset_password_expires > now,
            )
        )

    async def list_all(self) -> list[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())

    async def create(self, username: str, email: str, password: str, role=Role.STAFF) -> User:
        fields = {"username": username, "email": email, "password": password, "role": role}
        messages = validate_user_fields(fields)
        if messages:
            raise ValidationError(errors=messages)
        await self._check_unique(fields)

        user = User(
            username=username,
            email=email,
            password=await hash_password_async(password),
            role=parse_role(role),
        )
        self.db.add(user)
        await self._flush()
        logger.info("Created user %s (id=%s, role=%s)", user.username, user.id, user.role.value)
        return user

    async def update(self, user: User, fields: dict) -> User:
        """Partial update: keys absent from ``fields`` are left untouched."""
        messages = validate_user_fields(fields)
        if messages:
            raise ValidationError(errors=messages)
        await self._check_unique(fields, exclude_id=user.id)

        for key, value in fields.items():
            if key == "password":
                value = await hash_password_async(value)
            elif key == "role":
                value = parse_role(value)
            setattr(user, key, value)

        await self._flush()
        return user

    async def save(self, user: User) -> User:
        await self._flush()
        return user

    async def _check_unique(self, fields: dict, exclude_id: Optional[int] = None) -> None:
        for field in UNIQUE_FIELDS:
            if field not in fields:
                continue
            query = select(User.id).where(getattr(User, field) == fields[field])
            if exclude_id is not None:
                query = query.where(User.id != exclude_id)
            if await self.db.scalar(query) is not None:
                raise DuplicateError(field)

    async def _flush(self) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent writer on a unique column
            await self.db.rollback()
            raise DuplicateError(_duplicate_field(e)) from e
        except SQLAlchemyError as e:
            logger.exception("User store write failed")
            raise InternalError() from e
