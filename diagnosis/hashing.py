"""
Deterministic hashing helpers.

FNV-1a (32-bit) is used for alias selection and for the save code shown
with a result. Both must be stable across runs and platforms, so the
builtin hash() is never used here.
"""

from typing import Iterable

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193

_BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

SAVE_CODE_WIDTH = 7


def fnv1a_32(data: bytes) -> int:
    """32-bit FNV-1a hash of `data`."""
    h = FNV_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME) & 0xFFFFFFFF
    return h


def to_base36(value: int) -> str:
    """Uppercase base-36 representation of a non-negative integer."""
    if value < 0:
        raise ValueError(f"value must be non-negative, got {value}")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def save_code(answers: Iterable[int]) -> str:
    """
    Short code identifying an answer vector.

    Same answers always give the same code; the code is not reversible.
    """
    text = ",".join(str(int(a)) for a in answers)
    return to_base36(fnv1a_32(text.encode("utf-8"))).rjust(SAVE_CODE_WIDTH, "0")
