"""
Record ID generation.

IDs are a base-36 millisecond timestamp followed by a base-36 random
part, e.g. ``lq3k9x2a4f8h1m2p7z``. The time prefix keeps IDs roughly
ordered by creation; the random part separates IDs minted in the same
millisecond. Collisions are caught at insert time by the repositories.
"""

import secrets
import time

_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

# 52 random bits, same entropy as a double's mantissa
_RANDOM_BITS = 52


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("to_base36 expects a non-negative integer")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ALPHABET[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Generate a new record ID."""
    millis = time.time_ns() // 1_000_000
    return to_base36(millis) + to_base36(secrets.randbits(_RANDOM_BITS))
