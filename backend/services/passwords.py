"""
Password hashing for user accounts.

Hashes are stored as "<salt hex>:<key hex>" using PBKDF2-HMAC-SHA256.
"""
import hashlib
import hmac
import os

ITERATIONS = 100_000
SALT_BYTES = 16


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, ITERATIONS)


def hash_password(password: str) -> str:
    salt = os.urandom(SALT_BYTES)
    return f"{salt.hex()}:{_derive(password, salt).hex()}"


def verify_password(password: str, stored_hash: str | None) -> bool:
    """Check a password against a stored hash. Malformed or missing hashes never match."""
    if not stored_hash or ":" not in stored_hash:
        return False
    salt_hex, key_hex = stored_hash.split(":", 1)
    try:
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(key_hex)
    except ValueError:
        return False
    return hmac.compare_digest(_derive(password, salt), expected)
