"""
Password hashing helpers.
"""
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. Malformed hashes count as a mismatch."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def dummy_verify() -> None:
    """Spend the same time as a real verification when there is no user to check against."""
    pwd_context.dummy_verify()
