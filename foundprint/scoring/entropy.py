"""
Entropy Resolution for FOUNDprint.

Converts one successful probe result into entropy bits. The rules are an
explicit ordered list; the first one that applies wins:

    1. lookup_match      - probe lookup that is a real table match
    2. probe_supplied    - entropy the probe computed itself (estimated
                           lookup, or a bare entropy value); a lookup
                           built from a baseline is labelled baseline
    3. combination_rule  - sum of named baselines for two-part attributes
    4. baseline          - the attribute's study baseline
    5. fallback          - fixed conservative value plus a warning

Rule 5 means the reference data is incomplete. It should never fire.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import EngineConfig
from ..domain import MissingEntropyConfigurationWarning
from ..probes.base import ProbeResult
from ..utils.logging import get_logger


logger = get_logger(__name__)


# =============================================================================
# FORMULAS
# =============================================================================

def anonymity_set_size(bits: float) -> float:
    """2 ** bits: how many people share this combination."""
    try:
        return 2.0 ** bits
    except OverflowError:
        return math.inf


def display_anonymity_set(bits: float, population: float) -> float:
    """Anonymity set capped at the population, for display only."""
    return min(anonymity_set_size(bits), population)


def is_capped(bits: float, population: float) -> bool:
    """True once the anonymity set reaches the population constant."""
    return anonymity_set_size(bits) >= population


# =============================================================================
# RESOLUTION RULES
# =============================================================================

@dataclass(frozen=True)
class EntropyResolution:
    """Entropy for one observation and where it came from."""
    entropy_bits: float
    strategy: str
    estimated: bool
    source_citation: Optional[str]
    source_label: str
    percent: Optional[float] = None
    one_in_x: Optional[float] = None
    note: Optional[str] = None

    def __post_init__(self):
        bits = self.entropy_bits
        if isinstance(bits, bool) or not isinstance(bits, (int, float)):
            raise TypeError(f"entropy_bits must be a number, got {bits!r}")
        if not math.isfinite(bits) or bits < 0:
            raise ValueError(f"entropy_bits must be finite and >= 0, got {bits}")


ResolutionRule = Callable[[str, ProbeResult, EngineConfig], Optional[EntropyResolution]]


def resolve_lookup_match(
    attribute_key: str,
    result: ProbeResult,
    config: EngineConfig,
) -> Optional[EntropyResolution]:
    """Rule 1: a lookup that matched the table."""
    lookup = result.lookup
    if lookup is None or lookup.estimated:
        return None
    return EntropyResolution(
        entropy_bits=lookup.entropy,
        strategy="lookup_match",
        estimated=False,
        source_citation=lookup.source,
        source_label=lookup.source_label,
        percent=lookup.percent,
        one_in_x=lookup.one_in_x,
        note=lookup.note,
    )


def resolve_probe_supplied(
    attribute_key: str,
    result: ProbeResult,
    config: EngineConfig,
) -> Optional[EntropyResolution]:
    """
    Rule 2: entropy the probe computed itself.

    A lookup the probe built from a study baseline keeps the `baseline`
    strategy label, even when its bits were adjusted.
    """
    lookup = result.lookup
    if lookup is not None:
        return EntropyResolution(
            entropy_bits=lookup.entropy,
            strategy="baseline" if lookup.from_baseline else "probe_supplied",
            estimated=True,
            source_citation=lookup.source,
            source_label=lookup.source_label,
            percent=lookup.percent,
            one_in_x=lookup.one_in_x,
            note=lookup.note,
        )
    if result.entropy is not None:
        return EntropyResolution(
            entropy_bits=result.entropy,
            strategy="probe_supplied",
            estimated=True,
            source_citation=None,
            source_label="Computed by probe",
        )
    return None


def resolve_combination_rule(
    attribute_key: str,
    result: ProbeResult,
    config: EngineConfig,
) -> Optional[EntropyResolution]:
    """Rule 3: sum of named baselines for inherently two-part attributes."""
    parts = config.combination_rules.get(attribute_key)
    if not parts:
        return None
    records = [config.baselines[part] for part in parts]
    primary = records[0]
    return EntropyResolution(
        entropy_bits=sum(record.bits for record in records),
        strategy="combination_rule",
        estimated=True,
        source_citation=primary.source_citation,
        source_label=" + ".join(record.source_label for record in records),
        note=f"Sum of {', '.join(parts)} baselines",
    )


def resolve_baseline(
    attribute_key: str,
    result: ProbeResult,
    config: EngineConfig,
) -> Optional[EntropyResolution]:
    """Rule 4: the attribute's study baseline."""
    record = config.baselines.get(attribute_key)
    if record is None:
        return None
    return EntropyResolution(
        entropy_bits=record.bits,
        strategy="baseline",
        estimated=True,
        source_citation=record.source_citation,
        source_label=record.source_label,
        note=record.note,
    )


def resolve_fallback(
    attribute_key: str,
    result: ProbeResult,
    config: EngineConfig,
) -> Optional[EntropyResolution]:
    """Rule 5: conservative constant. Signals a data-completeness bug."""
    message = (
        f"No entropy configuration for attribute '{attribute_key}'; "
        f"using conservative fallback of {config.fallback_bits} bits"
    )
    logger.warning(message)
    warnings.warn(message, MissingEntropyConfigurationWarning, stacklevel=2)
    return EntropyResolution(
        entropy_bits=config.fallback_bits,
        strategy="fallback",
        estimated=True,
        source_citation=None,
        source_label="Conservative fallback",
    )


RESOLUTION_RULES: tuple[ResolutionRule, ...] = (
    resolve_lookup_match,
    resolve_probe_supplied,
    resolve_combination_rule,
    resolve_baseline,
    resolve_fallback,
)


def resolve_entropy(
    attribute_key: str,
    result: ProbeResult,
    config: EngineConfig,
    rules: tuple[ResolutionRule, ...] = RESOLUTION_RULES,
) -> EntropyResolution:
    """Apply the resolution rules in order; the first that applies wins."""
    for rule in rules:
        resolution = rule(attribute_key, result, config)
        if resolution is not None:
            return resolution
    # Only reachable with a custom rule list lacking the fallback
    raise LookupError(f"No resolution rule applied to '{attribute_key}'")
