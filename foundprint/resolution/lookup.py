"""
Market Share Lookup for FOUNDprint.

Three-tier strategy, first match wins:
    1. Exact     — normalized value equals a table key
    2. Partial   — value contains a key, or a key contains the value,
                   scanning keys in the table's declared order
    3. Default   — the table's default percent, marked as an estimate

The partial tier is bidirectional substring containment with no word
boundaries. A short key can match an unrelated long value ("es" is inside
"Espanol-Custom"). That behavior is kept as-is.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..domain import BaselineRecord, ReferenceTable


# Guards for non-positive percents. Not meaningful data.
MAX_ENTROPY_BITS = 10.0
MAX_ONE_IN_X = 1000.0


class MatchTier(Enum):
    """Which lookup tier produced a result."""
    EXACT = "exact"
    PARTIAL = "partial"
    DEFAULT = "default"


@dataclass(frozen=True)
class LookupResult:
    """Outcome of resolving one value against one table."""
    percent: float
    estimated: bool
    tier: MatchTier
    matched_key: Optional[str] = None


@dataclass(frozen=True)
class ProbeLookup:
    """
    Entropy data a probe attaches to a successful detection.

    `percent` is None and `from_baseline` is set when the entropy came from
    a study baseline rather than a market-share percentage.
    """
    percent: Optional[float]
    source: Optional[str]
    source_label: str
    estimated: bool
    entropy: float
    one_in_x: float
    note: Optional[str] = None
    from_baseline: bool = False


# =============================================================================
# FORMULAS
# =============================================================================

def percent_to_entropy(percent: float) -> float:
    """
    entropy = log2(100 / percent)

    25% -> 2 bits, 1% -> ~6.64 bits. Non-positive percents clamp to 10 bits.
    """
    if percent <= 0:
        return MAX_ENTROPY_BITS
    return math.log2(100.0 / percent)


def percent_to_one_in_x(percent: float) -> float:
    """The X in "1 in X people". Non-positive percents clamp to 1000."""
    if percent <= 0:
        return MAX_ONE_IN_X
    return 100.0 / percent


def normalize_value(value: Any) -> str:
    """String form of a raw value, whitespace trimmed."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


# =============================================================================
# RESOLVER
# =============================================================================

def resolve(table: ReferenceTable, value: Any) -> LookupResult:
    """
    Resolve a raw value against a reference table.

    Pure function of table and value.
    """
    normalized = normalize_value(value)
    exact = table.exact_map

    if normalized in exact:
        return LookupResult(
            percent=exact[normalized],
            estimated=False,
            tier=MatchTier.EXACT,
            matched_key=normalized,
        )

    for key, percent in table.entries:
        if key in normalized or normalized in key:
            return LookupResult(
                percent=percent,
                estimated=False,
                tier=MatchTier.PARTIAL,
                matched_key=key,
            )

    return LookupResult(
        percent=table.default_percent,
        estimated=True,
        tier=MatchTier.DEFAULT,
    )


def lookup_from_table(table: ReferenceTable, result: LookupResult) -> ProbeLookup:
    """Probe lookup data for a market-share percentage."""
    return ProbeLookup(
        percent=result.percent,
        source=table.source_citation,
        source_label=table.source_label,
        estimated=result.estimated,
        entropy=percent_to_entropy(result.percent),
        one_in_x=percent_to_one_in_x(result.percent),
        note=table.note,
    )


def lookup_from_baseline(
    baseline: BaselineRecord,
    bits: Optional[float] = None,
    note: Optional[str] = None,
) -> ProbeLookup:
    """
    Probe lookup data for a study baseline.

    `bits` overrides the record's value for composite or reduced-confidence
    observations.
    """
    entropy = baseline.bits if bits is None else bits
    return ProbeLookup(
        percent=None,
        source=baseline.source_citation,
        source_label=baseline.source_label,
        estimated=True,
        entropy=entropy,
        one_in_x=2.0 ** entropy,
        note=note if note is not None else baseline.note,
        from_baseline=True,
    )


def resolve_with_baseline(
    table: ReferenceTable,
    baseline: Optional[BaselineRecord],
    value: Any,
) -> ProbeLookup:
    """
    Look up a value, falling back to the study baseline on a miss.

    A default-percent estimate is replaced by the baseline when one exists,
    since the baseline is a cited measurement and the default is a guess.
    """
    result = resolve(table, value)
    if result.estimated and baseline is not None:
        return lookup_from_baseline(baseline)
    return lookup_from_table(table, result)
