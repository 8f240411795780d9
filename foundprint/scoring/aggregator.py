"""
Entropy Aggregator for FOUNDprint.

Sums entropy contributions in the order the orchestrator supplies them and
tracks when the anonymity set first reaches the population constant.

Core principle:
    cumulative_bits is the true sum and is never clamped.
    Only the anonymity set shown to a reader is capped.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..config import EngineConfig
from .entropy import display_anonymity_set, is_capped


@dataclass
class AggregateState:
    """
    Running totals for one run.

    Mutated only by EntropyAggregator, once per processed observation.
    """
    cumulative_bits: float = 0.0
    processed_count: int = 0
    ever_capped: bool = False


@dataclass(frozen=True)
class AggregateUpdate:
    """What changed when one observation was added."""
    entropy_bits: float
    cumulative_bits: float
    processed_count: int
    display_anonymity_set: float
    capped: bool
    crossed_now: bool
    was_capped: bool

    @property
    def is_first(self) -> bool:
        return self.processed_count == 1


class EntropyAggregator:
    """
    Accumulates entropy bits for one run.

    A new run gets a new aggregator; state never carries over.
    """

    def __init__(self, config: EngineConfig):
        self.config = config
        self.state = AggregateState()

    def add(self, entropy_bits: float) -> AggregateUpdate:
        """Add one contribution and report the transition."""
        if not math.isfinite(entropy_bits) or entropy_bits < 0:
            raise ValueError(f"entropy_bits must be finite and >= 0, got {entropy_bits}")

        state = self.state
        was_capped = state.ever_capped

        state.cumulative_bits += entropy_bits
        state.processed_count += 1

        capped = is_capped(state.cumulative_bits, self.config.population)
        crossed_now = capped and not was_capped
        if capped:
            state.ever_capped = True

        return AggregateUpdate(
            entropy_bits=entropy_bits,
            cumulative_bits=state.cumulative_bits,
            processed_count=state.processed_count,
            display_anonymity_set=self.display_anonymity_set,
            capped=capped,
            crossed_now=crossed_now,
            was_capped=was_capped,
        )

    @property
    def cumulative_bits(self) -> float:
        return self.state.cumulative_bits

    @property
    def display_anonymity_set(self) -> float:
        return display_anonymity_set(
            self.state.cumulative_bits, self.config.population
        )
