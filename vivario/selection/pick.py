"""
Uniqueness-tracking pick functions.

pick_unique and pick_weighted are the only places where variability enters
scenario and plan output. Both are pure functions of (pool, seed) plus the
caller-owned `used` set.
"""

import re
from typing import Any, Callable, Iterable, List, Optional, Sequence, Set, TypeVar

from .rng import Mulberry32

T = TypeVar("T")

MAX_PROBES = 14
PROBE_STRIDE = 9

_QUOTES = str.maketrans({
    "’": "'",
    "‘": "'",
    "“": '"',
    "”": '"',
    "«": '"',
    "»": '"',
})
_PUNCTUATION = re.compile(r"[.,!?…:;()\"]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: Any) -> str:
    """
    Signature used for duplicate detection.

    Lowercased, typographic quotes folded, sentence punctuation dropped,
    whitespace collapsed.
    """
    s = str(text or "").lower().translate(_QUOTES)
    s = _PUNCTUATION.sub("", s)
    return _WHITESPACE.sub(" ", s).strip()


def _text_of(item: Any) -> str:
    if isinstance(item, str):
        return item
    for attr in ("text", "id"):
        value = getattr(item, attr, None)
        if value is not None:
            return str(value)
    if isinstance(item, dict):
        return str(item.get("text") or item.get("id") or "")
    return str(item)


def pick_unique(
    pool: Sequence[T],
    seed: int,
    used: Set[str],
    allow_repeat: bool = False,
    text_of: Callable[[Any], str] = _text_of,
) -> Optional[T]:
    """
    Pick one item whose normalized text is not in `used`.

    Probes min(14, n) deterministic offsets (seed + k*9) mod n, then falls
    back to a linear scan. The accepted signature is added to `used`.

    Returns None when every item is already used, unless allow_repeat is
    set, in which case the seed-indexed item is returned again.
    """
    n = len(pool)
    if n == 0:
        return None

    for k in range(min(MAX_PROBES, n)):
        candidate = pool[(seed + k * PROBE_STRIDE) % n]
        signature = normalize_text(text_of(candidate))
        if signature and signature not in used:
            used.add(signature)
            return candidate

    for candidate in pool:
        signature = normalize_text(text_of(candidate))
        if signature and signature not in used:
            used.add(signature)
            return candidate

    if allow_repeat:
        return pool[seed % n]
    return None


def pick_unique_many(
    pool: Sequence[T],
    seed: int,
    used: Set[str],
    count: int,
    text_of: Callable[[Any], str] = _text_of,
) -> List[T]:
    """Up to `count` unique picks; stops early when the pool runs dry."""
    picked: List[T] = []
    for i in range(max(0, count)):
        item = pick_unique(pool, seed + i * 7919, used, text_of=text_of)
        if item is None:
            break
        picked.append(item)
    return picked


def _default_weight(item: Any) -> float:
    value = getattr(item, "weight", None)
    if value is None and isinstance(item, dict):
        value = item.get("weight")
    try:
        weight = float(value) if value is not None else 1.0
    except (TypeError, ValueError):
        return 1.0
    return weight if weight > 0 else 0.0


def pick_weighted(
    pool: Iterable[T],
    seed: int,
    weight: Callable[[Any], float] = _default_weight,
) -> Optional[T]:
    """
    Single draw proportional to declared weights (no resampling).
    Items without a weight count as 1.
    """
    items = list(pool)
    if not items:
        return None

    weights = [max(0.0, float(weight(it))) for it in items]
    total = sum(weights)
    if total <= 0:
        return items[0]

    r = Mulberry32(seed).random() * total
    for item, w in zip(items, weights):
        r -= w
        if r < 0:
            return item
    return items[-1]
