"""
Pixel Ratio Disambiguation for FOUNDprint.

A reported device pixel ratio mixes two causes: physical pixel density and
browser zoom. A 1x display at 110% zoom reports 1.1. This module recovers
the most likely (base density, zoom) split.

Strategy:
    1. Reading matches a canonical base ratio     -> high confidence, no zoom
    2. Reading matches base x zoom for some pair  -> medium confidence
       (smallest base wins, then the smallest residual)
    3. Nothing matches                            -> low confidence, assume
       the smallest base and infer zoom from the raw reading

Limitations:
    - 2x density and 1x at 200% zoom are indistinguishable; the exact base
      match wins
    - Some browsers do not change the ratio on zoom at all
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# Ascending. Lower densities are more common, so they win ties.
CANONICAL_BASE_RATIOS: tuple[float, ...] = (1.0, 1.25, 1.5, 2.0, 2.5, 3.0)

# Browser zoom presets as percentages. 100 is handled by the exact pass.
CANONICAL_SCALE_PERCENTS: tuple[int, ...] = (
    100, 110, 120, 125, 133, 150, 175, 200,
    90, 80, 75, 67, 50, 33,
)

MATCH_TOLERANCE = 0.015
DISPLAY_PRECISION = 3


class Confidence(Enum):
    """How sure the disambiguation is."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class DisambiguationResult:
    """Most likely explanation of a pixel ratio reading."""
    display_value: float
    canonical_base: float
    scale_factor_percent: int
    is_scaled: bool
    confidence: Confidence
    matched_bucket_key: str

    @property
    def density_description(self) -> str:
        if self.canonical_base >= 2:
            return "high-density (Retina/HiDPI)"
        elif self.canonical_base >= 1.5:
            return "enhanced density"
        return "standard density"


def bucket_key(base: float) -> str:
    """Table key for a base ratio: 1.0 -> "1", 1.25 -> "1.25"."""
    return f"{base:g}"


def disambiguate(
    raw_ratio: Optional[float],
    base_ratios: tuple[float, ...] = CANONICAL_BASE_RATIOS,
    scale_percents: tuple[int, ...] = CANONICAL_SCALE_PERCENTS,
    tolerance: float = MATCH_TOLERANCE,
) -> DisambiguationResult:
    """
    Split a raw pixel ratio into base density and zoom.

    A missing or zero reading is treated as 1, as browsers do.
    """
    display = round(raw_ratio or 1.0, DISPLAY_PRECISION)

    for base in base_ratios:
        if abs(display - base) < tolerance:
            return DisambiguationResult(
                display_value=display,
                canonical_base=base,
                scale_factor_percent=100,
                is_scaled=False,
                confidence=Confidence.HIGH,
                matched_bucket_key=bucket_key(base),
            )

    candidates: list[tuple[float, float, int]] = []
    for base in base_ratios:
        for percent in scale_percents:
            if percent == 100:
                continue
            diff = abs(display - base * (percent / 100.0))
            if diff < tolerance:
                candidates.append((base, diff, percent))

    if candidates:
        base, _, percent = min(candidates, key=lambda c: (c[0], c[1]))
        return DisambiguationResult(
            display_value=display,
            canonical_base=base,
            scale_factor_percent=percent,
            is_scaled=True,
            confidence=Confidence.MEDIUM,
            matched_bucket_key=bucket_key(base),
        )

    smallest = min(base_ratios)
    return DisambiguationResult(
        display_value=display,
        canonical_base=smallest,
        scale_factor_percent=round(display * 100),
        is_scaled=True,
        confidence=Confidence.LOW,
        matched_bucket_key=bucket_key(smallest),
    )
