# maintenix/auth/utils.py
import re

import bcrypt

BCRYPT_MAX_BYTES = 72

SPECIAL_CHARACTERS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


def hash_password(password: str, rounds: int = 12) -> str:
    pwd_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds)
    hashed_bytes = bcrypt.hashpw(pwd_bytes, salt)
    return hashed_bytes.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    password_bytes = plain_password.encode("utf-8")
    hashed_password_bytes = hashed_password.encode("utf-8")
    return bcrypt.checkpw(password_bytes, hashed_password_bytes)


def signup_password_problem(password: str) -> str | None:
    """
    Returns a user-facing reason the password is too weak for signup, or None.
    """
    if len(password) < 8:
        return "Password must be at least 8 characters"
    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        return f"Password must be at most {BCRYPT_MAX_BYTES} bytes long"
    if (
        not re.search(r"[A-Z]", password)
        or not re.search(r"[a-z]", password)
        or not SPECIAL_CHARACTERS.search(password)
    ):
        return "Password must contain uppercase, lowercase, and special characters"
    return None


def email_domain(email: str) -> str:
    return email.rsplit("@", 1)[-1].lower()
