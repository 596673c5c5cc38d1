"""Account number generation"""

import secrets

ACCOUNT_NUMBER_LENGTH = 10


def generate_account_number(length: int = ACCOUNT_NUMBER_LENGTH) -> str:
    """
    Generate a random numeric account number.

    Uniqueness is not guaranteed here; callers check candidates against the
    store and retry on collision.

    Example:
        generate_account_number() -> "0481729365"
    """
    return "".join(str(secrets.randbelow(10)) for _ in range(length))
