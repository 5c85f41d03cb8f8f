"""Password hashing with bcrypt."""
import asyncio
import bcrypt
from app.config import get_settings


def hash_password(plaintext: str, rounds: int | None = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or get_settings().bcrypt_rounds)
    return bcrypt.hashpw(plaintext.encode("utf-8"), salt).decode("utf-8")


def verify_password(plaintext: str, hashed: str) -> bool:
    """bcrypt.checkpw compares in constant time. A malformed hash is a mismatch."""
    if not plaintext or not hashed:
        return False
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


async def hash_password_async(plaintext: str) -> str:
    return await asyncio.to_thread(hash_password, plaintext)


async def verify_password_async(plaintext: str, hashed: str) -> bool:
    return await asyncio.to_thread(verify_password, plaintext, hashed)
