"""Tests for the credential store against an in-memory SQLite database."""

from datetime import timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from app.exceptions import DuplicateError, ValidationError
from app.models.user import Role, utcnow
from app.services.password_service import verify_password
from app.services.user_store import UserStore, _duplicate_field, validate_user_fields


async def _skip_unique_check(self, fields, exclude_id=None):
    return None


class TestValidateUserFields:
    def test_valid_fields(self):
        assert validate_user_fields(
            {"username": "staff2", "email": "staff2@example.com", "password": "password123", "role": "staff"}
        ) == []

    def test_collects_every_failure(self):
        messages = validate_user_fields(
            {"username": "ab", "email": "not-an-email", "password": "123", "role": "janitor"}
        )
        assert messages == [
            "Username must be between 3 and 50 characters",
            "Must be a valid email address",
            "Password must be at least 6 characters long",
            "Role must be admin, doctor, staff, or patient",
        ]

    def test_only_present_keys_are_checked(self):
        assert validate_user_fields({"password": "longenough"}) == []


class TestDuplicateField:
    def _error(self, message):
        return IntegrityError("INSERT INTO users ...", {}, Exception(message))

    def test_postgres_index_name(self):
        error = self._error(
            'duplicate key value violates unique constraint "ix_users_email"\n'
            "DETAIL:  Key (email)=(username@example.com) already exists."
        )
        assert _duplicate_field(error) == "email"

    def test_postgres_username_index(self):
        error = self._error(
            'duplicate key value violates unique constraint "ix_users_username"\n'
            "DETAIL:  Key (username)=(email) already exists."
        )
        assert _duplicate_field(error) == "username"

    def test_sqlite_qualified_column(self):
        assert _duplicate_field(self._error("UNIQUE constraint failed: users.username")) == "username"
        assert _duplicate_field(self._error("UNIQUE constraint failed: users.email")) == "email"


class TestUserStore:
    async def test_create_hashes_password_and_defaults_role(self, db):
        store = UserStore(db)
        user = await store.create("staff2", "staff2@example.com", "password123")
        await db.commit()

        assert user.id is not None
        assert user.role is Role.STAFF
        assert user.password != "password123"
        assert verify_password("password123", user.password)
        assert user.created_at == user.updated_at

    async def test_create_rejects_invalid_fields(self, db):
        with pytest.raises(ValidationError) as exc:
            await UserStore(db).create("ab", "bad", "123")
        assert len(exc.value.errors) == 3

    async def test_duplicate_email(self, db):
        store = UserStore(db)
        await store.create("first", "same@example.com", "password123")
        with pytest.raises(DuplicateError) as exc:
            await store.create("second", "same@example.com", "password123")
        assert exc.value.field == "email"
        assert exc.value.message == "email already exists"

    async def test_duplicate_username(self, db):
        store = UserStore(db)
        await store.create("taken", "one@example.com", "password123")
        with pytest.raises(DuplicateError) as exc:
            await store.create("taken", "two@example.com", "password123")
        assert exc.value.field == "username"

    async def test_unique_index_catches_create_race(self, db, monkeypatch):
        store = UserStore(db)
        await store.create("first", "same@example.com", "password123")
        monkeypatch.setattr(UserStore, "_check_unique", _skip_unique_check)
        with pytest.raises(DuplicateError) as exc:
            await store.create("second", "same@example.com", "password123")
        assert exc.value.field == "email"

    async def test_unique_index_catches_update_race(self, db, monkeypatch):
        store = UserStore(db)
        await store.create("first", "first@example.com", "password123")
        second = await store.create("second", "second@example.com", "password123")
        monkeypatch.setattr(UserStore, "_check_unique", _skip_unique_check)
        with pytest.raises(DuplicateError) as exc:
            await store.update(second, {"email": "first@example.com"})
        assert exc.value.field == "email"

    async def test_update_rehashes_only_when_password_changes(self, db):
        store = UserStore(db)
        user = await store.create("staff2", "staff2@example.com", "password123")
        original_hash = user.password

        await store.update(user, {"username": "staff3"})
        assert user.password == original_hash

        await store.update(user, {"password": "newpass123"})
        assert user.password != original_hash
        assert verify_password("newpass123", user.password)

    async def test_update_allows_keeping_own_email(self, db):
        store = UserStore(db)
        user = await store.create("staff2", "staff2@example.com", "password123")
        await store.update(user, {"email": "staff2@example.com"})

    async def test_find_by_reset_token_ignores_expired(self, db):
        store = UserStore(db)
        user = await store.create("staff2", "staff2@example.com", "password123")
        user.reset_password_token = "tok"
        user.reset_password_expires = utcnow() - timedelta(minutes=1)
        await db.commit()

        assert await store.find_by_reset_token("tok") is None

        user.reset_password_expires = utcnow() + timedelta(minutes=30)
        await db.commit()
        found = await store.find_by_reset_token("tok")
        assert found is not None and found.id == user.id
