"""
Core Domain Objects for FOUNDprint.

Every number the engine reports must trace back to a cited table or study.
The objects here carry that lineage from the reference data through to the
final report.

Domain Objects:
    ReferenceTable       — Market-share percentages for one attribute
    BaselineRecord       — Study-derived entropy for one attribute
    AttributeSpec        — Display name and spoofing difficulty
    ResolvedObservation  — One successfully detected characteristic
    ProbeFailure         — An attribute that could not be detected
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


# =============================================================================
# ERRORS
# =============================================================================

class ReferenceDataError(ValueError):
    """Raised when static reference data violates one of its invariants."""
    pass


class ProbeUnavailable(Exception):
    """
    Raised by a probe when the capability it reads is absent or blocked.

    Equivalent to the probe returning None.
    """
    pass


class MissingEntropyConfigurationWarning(UserWarning):
    """
    An attribute fell through to the conservative fallback entropy.

    Never expected with complete reference data.
    """
    pass


class FailureKind(Enum):
    """Why an attribute is missing from the entropy total."""
    UNAVAILABLE = "unavailable"   # Probe returned nothing or raised ProbeUnavailable
    EXCEPTION = "exception"       # Probe raised; demoted to unavailable


@dataclass(frozen=True)
class ProbeFailure:
    """
    An attribute that produced no observation in a run.

    Failures are surfaced in the report, never retried within a run.
    """
    attribute_key: str
    name: str
    kind: FailureKind
    reason: str = ""


# =============================================================================
# REFERENCE DATA
# =============================================================================

@dataclass(frozen=True)
class ReferenceTable:
    """
    Market-share data for one attribute.

    `entries` is an explicitly ordered sequence of (value, percent) pairs.
    The order is the scan order of the partial-match lookup tier.

    Invariants enforced:
    1. Every percent is in (0, 100]
    2. default_percent is present and in (0, 100]
    3. Keys are unique
    """
    source_citation: str
    source_label: str
    entries: tuple[tuple[str, float], ...]
    default_percent: float
    note: Optional[str] = None

    def __post_init__(self):
        keys = [key for key, _ in self.entries]
        if len(set(keys)) != len(keys):
            raise ReferenceDataError(
                f"Duplicate keys in table '{self.source_label}'"
            )
        for key, percent in self.entries:
            if not (0.0 < percent <= 100.0):
                raise ReferenceDataError(
                    f"percent for '{key}' must be in (0, 100], got {percent}"
                )
        if self.default_percent is None or not (0.0 < self.default_percent <= 100.0):
            raise ReferenceDataError(
                f"default_percent must be in (0, 100], got {self.default_percent}"
            )

    @property
    def keys(self) -> tuple[str, ...]:
        return tuple(key for key, _ in self.entries)

    @property
    def exact_map(self) -> Mapping[str, float]:
        return MappingProxyType(dict(self.entries))


@dataclass(frozen=True)
class BaselineCandidate:
    """One study's entropy measurement for an attribute."""
    study: str
    bits: float
    excluded_reason: Optional[str] = None

    @property
    def excluded(self) -> bool:
        return self.excluded_reason is not None


def select_conservative(candidates: tuple[BaselineCandidate, ...]) -> float:
    """
    Pick the lowest entropy across the admissible candidate studies.

    Excluded candidates are skipped even when they are numerically lower.
    """
    admissible = [c.bits for c in candidates if not c.excluded]
    if not admissible:
        raise ReferenceDataError("No admissible baseline candidates")
    return min(admissible)


@dataclass(frozen=True)
class BaselineRecord:
    """
    Study-derived entropy used when no direct lookup applies.

    Invariants enforced:
    1. bits >= 0
    2. If candidates are listed, bits equals the conservative selection
       over them (minimum of the non-excluded studies)
    """
    attribute_key: str
    bits: float
    source_citation: Optional[str]
    source_label: str
    note: str
    candidates: tuple[BaselineCandidate, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if self.bits < 0:
            raise ReferenceDataError(
                f"Baseline '{self.attribute_key}' bits must be >= 0, got {self.bits}"
            )
        if self.candidates:
            selected = select_conservative(self.candidates)
            if abs(selected - self.bits) > 1e-9:
                raise ReferenceDataError(
                    f"Baseline '{self.attribute_key}' uses {self.bits} bits but "
                    f"conservative selection gives {selected}"
                )

    @property
    def excluded_candidates(self) -> list[BaselineCandidate]:
        return [c for c in self.candidates if c.excluded]


# =============================================================================
# ATTRIBUTES
# =============================================================================

class Difficulty(Enum):
    """How hard it is for a user to change or spoof an attribute."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class AttributeSpec:
    """Display metadata for a detectable characteristic."""
    key: str
    name: str
    difficulty: Difficulty
    change_requires: str


# =============================================================================
# OBSERVATIONS
# =============================================================================

@dataclass(frozen=True)
class ResolvedObservation:
    """
    A successfully detected characteristic with its entropy contribution.

    `strategy` names the resolution rule that produced `entropy_bits`, so
    every contribution can be explained line by line.
    """
    attribute_key: str
    name: str
    raw_value: Any
    message: str
    percent: Optional[float]
    estimated: bool
    entropy_bits: float
    one_in_x: float
    source_citation: Optional[str]
    source_label: str
    strategy: str
    note: Optional[str] = None
