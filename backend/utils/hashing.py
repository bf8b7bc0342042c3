# backend/utils/hashing.py
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_PH = PasswordHasher()


# Hash a plaintext password (argon2id, random salt embedded in the hash)
def get_password_hash(password: str) -> str:
    if not password:
        raise ValueError("Password must not be empty")
    return _PH.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _PH.verify(password_hash, password)
    except (VerificationError, InvalidHashError):
        return False
