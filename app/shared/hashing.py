"""
Canonical Hashing Layer
Single source of truth for the determinism hashes attached to DQQ results
and persisted daily summaries.
"""

import hashlib
import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any

HASH_PREFIX = "sha256:"

# Generated fields never take part in a hash
VOLATILE_FIELDS = frozenset([
    "evaluated_at",
    "created_at",
    "updated_at",
    "timestamp",
    "_metadata"
])


def _clean(o: Any, exclude_volatile: bool) -> Any:
    if isinstance(o, Enum):
        return _clean(o.value, exclude_volatile)
    if is_dataclass(o) and not isinstance(o, type):
        return _clean(asdict(o), exclude_volatile)
    if isinstance(o, dict):
        return {
            str(k.value if isinstance(k, Enum) else k): _clean(v, exclude_volatile)
            for k, v in o.items()
            if not (exclude_volatile and k in VOLATILE_FIELDS)
        }
    if isinstance(o, (list, tuple)):
        return [_clean(i, exclude_volatile) for i in o]
    if isinstance(o, (set, frozenset)):
        return sorted(_clean(i, exclude_volatile) for i in o)
    if isinstance(o, float):
        # Indicator values are small integers; normalize any float noise
        return round(o, 10)
    return o


def canonicalize(obj: Any, exclude_volatile: bool = True) -> str:
    """
    Convert object to canonical JSON string.
    Enum members hash as their values, dataclasses as their fields.
    """
    cleaned = _clean(obj, exclude_volatile)
    return json.dumps(cleaned, sort_keys=True, separators=(',', ':'), ensure_ascii=True, default=str)


def canonicalize_and_hash(obj: Any, exclude_volatile: bool = True) -> str:
    """Returns: "sha256:<64-char-hex>" """
    canonical = canonicalize(obj, exclude_volatile)
    digest = hashlib.sha256(canonical.encode('utf-8')).hexdigest()
    return f"{HASH_PREFIX}{digest}"


def verify_hash(obj: Any, expected_hash: str, exclude_volatile: bool = True) -> bool:
    return canonicalize_and_hash(obj, exclude_volatile) == expected_hash


def short_hash(full_hash: str, length: int = 16) -> str:
    """
    Raw digest prefix for log lines and storage keys.
    "sha256:abc123..." -> "abc123..." (first `length` chars)
    """
    if full_hash.startswith(HASH_PREFIX):
        full_hash = full_hash[len(HASH_PREFIX):]
    return full_hash[:length]
