"""
Seeded pseudo-randomness.

FNV-1a turns any serializable seed material into a 32-bit integer and
Mulberry32 expands that integer into a reproducible float stream. Same
seed, same sequence: nothing is stored between calls.
"""

from typing import Any

from vivario.shared.hashing import canonicalize

MASK_32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
MULBERRY_INCREMENT = 0x6D2B79F5


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK_32


def fnv1a_32(text: str) -> int:
    """32-bit FNV-1a over the UTF-8 bytes of text."""
    h = FNV_OFFSET_BASIS
    for byte in str(text).encode("utf-8"):
        h ^= byte
        h = _imul(h, FNV_PRIME)
    return h


def stable_seed(*parts: Any) -> int:
    """
    Seed from arbitrary parts (profile snapshot, variant key, day index...).

    Strings and ints are joined as-is, everything else goes through
    canonical JSON first.
    """
    rendered = []
    for part in parts:
        if isinstance(part, (str, int)):
            rendered.append(str(part))
        else:
            rendered.append(canonicalize(part))
    return fnv1a_32("|".join(rendered))


class Mulberry32:
    """Counter-based generator, bit-compatible with the usual JS mulberry32."""

    def __init__(self, seed: int):
        self._state = int(seed) & MASK_32

    def next_uint32(self) -> int:
        self._state = (self._state + MULBERRY_INCREMENT) & MASK_32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK_32
        return (t ^ (t >> 14)) & MASK_32

    def random(self) -> float:
        """Next float in [0, 1)."""
        return self.next_uint32() / 4294967296
