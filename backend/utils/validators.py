# backend/utils/validators.py
import re

# Syntactic only: something@something.something, no whitespace or extra "@"
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Lowercase, uppercase, digit and one special character; at least 6 characters
PASSWORD_RE = re.compile(
    r"^(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?]).{6,}$",
)

INVALID_EMAIL_MESSAGE = "Invalid email format"
WEAK_PASSWORD_MESSAGE = (
    "Password must be at least 6 characters and include at least one lowercase letter, "
    "one uppercase letter, one number, and one special character."
)


def is_valid_email(email) -> bool:
    if not isinstance(email, str):
        return False
    return EMAIL_RE.fullmatch(email) is not None


def is_strong_password(password) -> bool:
    if not isinstance(password, str):
        return False
    return PASSWORD_RE.fullmatch(password) is not None


def credential_error(email, password):
    """Return the first user-facing validation message, or None when both checks pass."""
    if not is_valid_email(email):
        return INVALID_EMAIL_MESSAGE
    if not is_strong_password(password):
        return WEAK_PASSWORD_MESSAGE
    return None
