"""Security utilities for password hashing and bearer tokens."""

from datetime import datetime, timedelta, timezone
from typing import Any

from bcrypt import checkpw, gensalt, hashpw
from fastapi.encoders import jsonable_encoder
from jose import JWTError, jwt

from donation_api.core.exceptions import AuthError

BCRYPT_ROUNDS = 10
DEFAULT_TOKEN_TTL_SECONDS = 14400

# Registered claims added at issuance, not part of the caller identity
_TIME_CLAIMS = ("exp", "iat")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with a fresh salt.

    Args:
        password: Plain text password to hash

    Returns:
        Hashed password as a string

    Example:
        ```python
        from donation_api.core.security import hash_password

        hashed = hash_password("my_password")
        ```
    """
    return hashpw(password.encode("utf-8"), gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a password against a hash.

    A missing or malformed hash never matches.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Hashed password to compare against

    Returns:
        True if password matches, False otherwise
    """
    if not plain_password or not hashed_password:
        return False
    try:
        return checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def strip_password(record: dict[str, Any] | None) -> dict[str, Any] | None:
    """Return a copy of a user record without its password hash."""
    if record is None:
        return None
    return {key: value for key, value in record.items() if key != "password"}


def issue_token(
    claims: dict[str, Any],
    secret: str,
    ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
    algorithm: str = "HS256",
) -> str:
    """Sign a bearer token carrying a user record.

    Args:
        claims: User record to embed; the password is dropped
        secret: Signing secret
        ttl_seconds: Token lifetime in seconds
        algorithm: JWT signing algorithm

    Returns:
        Encoded JWT token string

    Example:
        ```python
        from donation_api.core.security import issue_token

        token = issue_token({"id": 1, "email": "a@x.com"}, secret="s3cret")
        ```
    """
    to_encode = jsonable_encoder(strip_password(claims))

    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + timedelta(seconds=ttl_seconds)})

    return jwt.encode(to_encode, secret, algorithm=algorithm)


def verify_token(token: str, secret: str, algorithm: str = "HS256") -> dict[str, Any]:
    """Validate a bearer token and return the caller claims.

    Args:
        token: JWT token string
        secret: Signing secret
        algorithm: Expected JWT algorithm

    Returns:
        The embedded user record, without the ``iat``/``exp`` claims

    Raises:
        AuthError: If the signature is invalid or the token has expired
    """
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        raise AuthError(f"invalid token: {e}") from e

    return {key: value for key, value in payload.items() if key not in _TIME_CLAIMS}
