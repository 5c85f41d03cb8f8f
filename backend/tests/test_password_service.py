"""Unit tests for bcrypt password hashing."""

from app.services.password_service import hash_password, verify_password, verify_password_async


class TestPasswordHashing:
    def test_hash_is_not_plaintext(self):
        hashed = hash_password("password123")
        assert hashed != "password123"
        assert hashed.startswith("$2")

    def test_hashes_are_salted(self):
        assert hash_password("password123") != hash_password("password123")

    def test_uses_configured_rounds(self):
        hashed = hash_password("password123", rounds=5)
        assert hashed.split("$")[2] == "05"

    def test_verify_matches(self):
        hashed = hash_password("password123")
        assert verify_password("password123", hashed) is True
        assert verify_password("wrong", hashed) is False

    def test_malformed_hash_returns_false(self):
        assert verify_password("password123", "not-a-bcrypt-hash") is False
        assert verify_password("password123", "") is False

    async def test_async_verify(self):
        hashed = hash_password("password123")
        assert await verify_password_async("password123", hashed) is True
