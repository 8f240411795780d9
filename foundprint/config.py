"""
Engine Configuration for FOUNDprint.

One immutable value holds every constant the engine depends on:
    - population constant (display capping only)
    - fixed attribute processing order
    - reference tables and baseline records
    - combination rules for two-part observations

It is built once and passed by reference into the orchestrator and the
aggregator. There is no ambient global state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping

from . import __version__
from .domain import AttributeSpec, BaselineRecord, ReferenceDataError, ReferenceTable
from .reference import (
    ATTRIBUTE_ORDER,
    ATTRIBUTES,
    BASELINES,
    COMBINATION_RULES,
    REFERENCE_TABLES,
    WORLD_POPULATION,
)


# Entropy used when an attribute has no table, rule, or baseline at all
FALLBACK_ENTROPY_BITS = 1.0


@dataclass(frozen=True)
class EngineConfig:
    """
    Immutable engine configuration.

    Invariants enforced:
    1. population > 1
    2. Every attribute in attribute_order has an AttributeSpec
    3. attribute_order has no duplicates
    4. Every combination rule names existing baseline records
    """
    population: float
    attribute_order: tuple[str, ...]
    attributes: Mapping[str, AttributeSpec]
    tables: Mapping[str, ReferenceTable]
    baselines: Mapping[str, BaselineRecord]
    combination_rules: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    fallback_bits: float = FALLBACK_ENTROPY_BITS
    version: str = __version__

    def __post_init__(self):
        # Freeze any plain dicts handed in by callers
        for name in ("attributes", "tables", "baselines", "combination_rules"):
            value = getattr(self, name)
            if not isinstance(value, MappingProxyType):
                object.__setattr__(self, name, MappingProxyType(dict(value)))
        object.__setattr__(self, "attribute_order", tuple(self.attribute_order))
        self._validate()

    def _validate(self) -> None:
        if not self.population or self.population <= 1:
            raise ReferenceDataError(
                f"population must be > 1, got {self.population}"
            )
        if len(set(self.attribute_order)) != len(self.attribute_order):
            raise ReferenceDataError("attribute_order contains duplicates")
        for key in self.attribute_order:
            if key not in self.attributes:
                raise ReferenceDataError(
                    f"Attribute '{key}' in attribute_order has no AttributeSpec"
                )
        for key, parts in self.combination_rules.items():
            for part in parts:
                if part not in self.baselines:
                    raise ReferenceDataError(
                        f"Combination rule for '{key}' names unknown baseline '{part}'"
                    )
        if self.fallback_bits < 0:
            raise ReferenceDataError("fallback_bits must be >= 0")

    def with_population(self, population: float) -> EngineConfig:
        """Copy of this config with a different population constant."""
        return replace(self, population=population)

    def spec_for(self, attribute_key: str) -> AttributeSpec:
        return self.attributes[attribute_key]


def default_config() -> EngineConfig:
    """Build the configuration from the bundled reference data."""
    return EngineConfig(
        population=WORLD_POPULATION,
        attribute_order=ATTRIBUTE_ORDER,
        attributes=ATTRIBUTES,
        tables=REFERENCE_TABLES,
        baselines=BASELINES,
        combination_rules=COMBINATION_RULES,
    )
