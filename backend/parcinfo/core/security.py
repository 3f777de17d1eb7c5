"""
Credential hashing and session tokens.

Stored password format is ``<hex derived key>.<hex salt>``. Keys are derived
with scrypt using the cost parameters from settings.
"""
import hashlib
import hmac
import secrets

from parcinfo.core.config import settings
from parcinfo.core.exceptions import CredentialHashError

HASH_SEPARATOR = "."


def _derive_key(password: str, salt: bytes, key_length: int) -> bytes:
    n = settings.SCRYPT_N
    r = settings.SCRYPT_R
    p = settings.SCRYPT_P
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt,
        n=n,
        r=r,
        p=p,
        dklen=key_length,
        maxmem=256 * n * r + 1024 * 1024,
    )


def get_password_hash(password: str) -> str:
    """Hash password with a fresh random salt"""
    salt = secrets.token_bytes(max(16, settings.SCRYPT_SALT_BYTES))
    key = _derive_key(password, salt, settings.SCRYPT_KEY_LENGTH)
    return f"{key.hex()}{HASH_SEPARATOR}{salt.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password against a stored hash in constant time.

    Raises CredentialHashError when the stored value is not in the
    ``key.salt`` format; that is a data fault, not a wrong password.
    """
    key_hex, sep, salt_hex = (hashed_password or "").partition(HASH_SEPARATOR)
    if not sep or not key_hex or not salt_hex:
        raise CredentialHashError("Stored password hash is missing its salt separator")

    try:
        expected = bytes.fromhex(key_hex)
        salt = bytes.fromhex(salt_hex)
    except ValueError as e:
        raise CredentialHashError("Stored password hash is not hex encoded") from e

    candidate = _derive_key(plain_password, salt, len(expected))
    return hmac.compare_digest(candidate, expected)


def generate_session_token() -> str:
    """Opaque session identifier for the session cookie"""
    return secrets.token_urlsafe(32)
