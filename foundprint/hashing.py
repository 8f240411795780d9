"""
Fingerprint Hash for FOUNDprint.

Reduces the ordered raw values of a run to a 32-character identifier.

This is an identifier, not a security primitive. MD5 is adequate:
deterministic and order-sensitive is all that is required.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Iterable


# JSON escapes every control character, so a raw newline never appears
# inside a serialized value
VALUE_SEPARATOR = "\n"


def _dumps(value: Any) -> str:
    # ASCII output keeps lone surrogates as \ud800 escapes
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=str,
    )


def _key(key: Any) -> str:
    return key if isinstance(key, str) else _dumps(_normalize(key))


def _normalize(value: Any) -> Any:
    """
    Rewrite a value into a JSON shape with a single stable ordering.

    Mapping keys become strings. Sets become lists sorted by the canonical
    form of their elements, so the result does not depend on hash seeds.
    """
    if isinstance(value, dict):
        return {_key(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((_normalize(v) for v in value), key=_dumps)
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def canonical_form(value: Any) -> str:
    """
    Deterministic string form of a raw value.

    Mappings serialize with sorted keys, tuples as lists, sets in sorted
    order. Anything JSON cannot encode falls back to its str().
    """
    return _dumps(_normalize(value))


def fingerprint_hash(values: Iterable[Any]) -> str:
    """Hash the ordered values into a hex identifier."""
    joined = VALUE_SEPARATOR.join(canonical_form(v) for v in values)
    return hashlib.md5(joined.encode("ascii")).hexdigest()
