"""
Vivario Canonical Hashing Layer

Canonical JSON is the single serialization used for seeds and payload
fingerprints: the same profile always produces the same bytes, whatever
the dict insertion order.
"""

import hashlib
import json
from typing import Any

# Fields that change between two otherwise identical payloads
VOLATILE_FIELDS = frozenset([
    "created_at",
    "generated_at",
    "updated_at",
    "timestamp",
    "session_id",
    "result_hash",
])


def canonicalize(obj: Any, exclude_volatile: bool = True) -> str:
    """
    Convert object to canonical JSON string.
    Sets are sorted, floats rounded, objects exposing model_dump() are dumped.
    """
    def _clean(o: Any) -> Any:
        if hasattr(o, "model_dump"):
            o = o.model_dump(mode="json")
        if isinstance(o, dict):
            return {
                str(k): _clean(v)
                for k, v in sorted(o.items(), key=lambda kv: str(kv[0]))
                if not (exclude_volatile and k in VOLATILE_FIELDS)
            }
        if isinstance(o, (set, frozenset)):
            return sorted(_clean(i) for i in o)
        if isinstance(o, (list, tuple)):
            return [_clean(i) for i in o]
        if isinstance(o, float):
            return round(o, 10)
        return o

    cleaned = _clean(obj)
    return json.dumps(cleaned, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def canonicalize_and_hash(obj: Any, exclude_volatile: bool = True) -> str:
    """
    Fingerprint for stored payloads.
    Returns: "sha256:<64-char-hex>"
    """
    canonical = canonicalize(obj, exclude_volatile)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"sha256:{digest}"
