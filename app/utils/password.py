# app/utils/password.py
import random
import string

LOWERCASE = string.ascii_lowercase
UPPERCASE = string.ascii_uppercase
DIGITS = string.digits
SPECIAL = "!@#$%^&*"

PASSWORD_LENGTH = 8

_rng = random.SystemRandom()


def generate_strong_password(length: int = PASSWORD_LENGTH) -> str:
    """
    Temporary password with at least one lowercase, uppercase, digit and
    symbol; the rest is drawn from all four sets and the result shuffled.
    """
    required = [
        _rng.choice(LOWERCASE),
        _rng.choice(UPPERCASE),
        _rng.choice(DIGITS),
        _rng.choice(SPECIAL),
    ]
    pool = LOWERCASE + UPPERCASE + DIGITS + SPECIAL
    remaining = [_rng.choice(pool) for _ in range(max(length - len(required), 0))]
    chars = required + remaining
    _rng.shuffle(chars)
    return "".join(chars)
