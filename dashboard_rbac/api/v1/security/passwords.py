from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

pwd_context = PasswordHasher()


def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)


def verify_password(hashed_password: str, plain_password: str) -> bool:
    """Argon2 verification; any mismatch or unreadable hash is simply False."""
    if not hashed_password or not plain_password:
        return False
    try:
        return pwd_context.verify(hashed_password, plain_password)
    except (VerificationError, InvalidHashError):
        return False
