"""
Password hashing for the back-office account.

The account's bcrypt hash is configured as ADMIN_PASSWORD_HASH. Produce one
with:

    python -m app.core.security
"""

import getpass

import bcrypt

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a plain password with a fresh salt."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Check a login password against the configured hash.

    A missing or malformed hash never matches.
    """
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        return False


if __name__ == "__main__":
    print(hash_password(getpass.getpass("Password: ")))
