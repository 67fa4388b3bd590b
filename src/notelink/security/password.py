"""Password hashing.

New hashes use bcrypt_sha256, which has no 72-byte limit. Plain bcrypt hashes
(accounts imported from the old Node service) still verify and are replaced by
a bcrypt_sha256 hash the next time the user logs in.
"""

from typing import Optional, Tuple

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt_sha256", "bcrypt"], deprecated=["bcrypt"])


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_and_rehash(plain_password: str, hashed_password: str) -> Tuple[bool, Optional[str]]:
    """Verify a password and return a replacement hash if the stored one is stale.

    The second item is None unless the password matched a deprecated scheme.
    """
    return pwd_context.verify_and_update(plain_password, hashed_password)
