"""One-way hashing for passwords and other secrets (bcrypt, random salt per call)"""

import bcrypt

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


def _encode(secret: str) -> bytes:
    return secret.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_secret(secret: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(_encode(secret), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_secret(secret: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(secret), hashed.encode("utf-8"))
    except ValueError:
        return False
