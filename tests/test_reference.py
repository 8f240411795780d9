"""
Tests for reference data, domain invariants, and engine configuration.

These tests verify:
1. Tables and baselines reject invalid data at construction
2. Baselines are the most conservative admissible study
3. Every attribute has a resolution path other than the fallback
4. Configuration is immutable and validated
"""

import pytest

from foundprint.config import EngineConfig, default_config
from foundprint.domain import (
    BaselineCandidate,
    BaselineRecord,
    Difficulty,
    ReferenceDataError,
    ReferenceTable,
    select_conservative,
)
from foundprint.reference import (
    ATTRIBUTE_ORDER,
    ATTRIBUTES,
    BASELINES,
    COMBINATION_RULES,
    REFERENCE_TABLES,
    WORLD_POPULATION,
)


# =============================================================================
# REFERENCE TABLE TESTS
# =============================================================================

class TestReferenceTable:
    """Test ReferenceTable invariants."""

    def test_valid_table(self):
        table = ReferenceTable(
            source_citation="https://example.org/data",
            source_label="Example",
            entries=(("a", 50), ("b", 25)),
            default_percent=1.0,
        )
        assert table.keys == ("a", "b")
        assert table.exact_map["b"] == 25

    def test_rejects_zero_percent(self):
        with pytest.raises(ReferenceDataError, match="must be in"):
            ReferenceTable("src", "label", (("a", 0),), default_percent=1.0)

    def test_rejects_percent_over_100(self):
        with pytest.raises(ReferenceDataError, match="must be in"):
            ReferenceTable("src", "label", (("a", 101),), default_percent=1.0)

    def test_rejects_missing_default(self):
        with pytest.raises(ReferenceDataError, match="default_percent"):
            ReferenceTable("src", "label", (("a", 10),), default_percent=None)

    def test_rejects_duplicate_keys(self):
        with pytest.raises(ReferenceDataError, match="Duplicate"):
            ReferenceTable("src", "label", (("a", 10), ("a", 20)), default_percent=1.0)

    def test_exact_map_is_read_only(self):
        table = REFERENCE_TABLES["timezone"]
        with pytest.raises(TypeError):
            table.exact_map["Europe/Berlin"] = 50

    def test_all_bundled_tables_valid(self):
        for table in REFERENCE_TABLES.values():
            assert table.entries
            assert 0 < table.default_percent <= 100
            assert table.source_citation


# =============================================================================
# BASELINE TESTS
# =============================================================================

class TestBaselines:
    """Test conservative baseline selection."""

    def test_select_conservative_picks_minimum(self):
        candidates = (
            BaselineCandidate("A", 5.0),
            BaselineCandidate("B", 3.0),
            BaselineCandidate("C", 4.0),
        )
        assert select_conservative(candidates) == 3.0

    def test_select_conservative_skips_excluded(self):
        candidates = (
            BaselineCandidate("A", 5.0),
            BaselineCandidate("B", 0.5, excluded_reason="biased sample"),
        )
        assert select_conservative(candidates) == 5.0

    def test_select_conservative_requires_admissible(self):
        with pytest.raises(ReferenceDataError):
            select_conservative((BaselineCandidate("A", 1.0, excluded_reason="x"),))

    def test_record_rejects_non_conservative_bits(self):
        with pytest.raises(ReferenceDataError, match="conservative selection"):
            BaselineRecord(
                attribute_key="fonts",
                bits=13.9,
                source_citation=None,
                source_label="Panopticlick 2010",
                note="",
                candidates=(
                    BaselineCandidate("Panopticlick 2010", 13.9),
                    BaselineCandidate("Hiding in the Crowd 2018", 6.97),
                ),
            )

    def test_record_rejects_negative_bits(self):
        with pytest.raises(ReferenceDataError, match=">= 0"):
            BaselineRecord("x", -1.0, None, "label", "")

    def test_every_baseline_is_minimum_of_admissible(self):
        for key, record in BASELINES.items():
            admissible = [c.bits for c in record.candidates if not c.excluded]
            assert record.bits == min(admissible), key

    def test_timezone_excludes_french_sample(self):
        record = BASELINES["timezone"]
        assert record.bits == 3.04
        excluded = record.excluded_candidates
        assert len(excluded) == 1
        assert excluded[0].bits == 0.10
        # The excluded study is numerically lower but not selected
        assert excluded[0].bits < record.bits

    def test_known_values(self):
        assert BASELINES["canvas"].bits == 8.04
        assert BASELINES["fonts"].bits == 6.97
        assert BASELINES["user_agent"].bits == 6.32
        assert BASELINES["webgl_renderer"].bits == 3.41
        assert BASELINES["webgl_vendor"].bits == 1.82
        assert BASELINES["cookies_enabled"].bits == 0.0


# =============================================================================
# DATA COMPLETENESS TESTS
# =============================================================================

class TestDataCompleteness:
    """Every attribute must resolve without the conservative fallback."""

    def test_order_has_sixteen_attributes(self):
        assert len(ATTRIBUTE_ORDER) == 16
        assert len(set(ATTRIBUTE_ORDER)) == 16

    def test_every_attribute_has_spec(self):
        for key in ATTRIBUTE_ORDER:
            assert ATTRIBUTES[key].key == key

    def test_every_attribute_has_combination_or_baseline(self):
        for key in ATTRIBUTE_ORDER:
            assert key in COMBINATION_RULES or key in BASELINES, key

    def test_combination_parts_exist(self):
        for parts in COMBINATION_RULES.values():
            for part in parts:
                assert part in BASELINES

    def test_difficulty_tiers(self):
        assert ATTRIBUTES["timezone"].difficulty == Difficulty.EASY
        assert ATTRIBUTES["user_agent"].difficulty == Difficulty.MEDIUM
        assert ATTRIBUTES["canvas"].difficulty == Difficulty.HARD


# =============================================================================
# CONFIGURATION TESTS
# =============================================================================

class TestEngineConfig:
    """Test EngineConfig construction and immutability."""

    def test_default_config(self):
        config = default_config()
        assert config.population == WORLD_POPULATION == 8.3e9
        assert config.attribute_order == ATTRIBUTE_ORDER
        assert config.fallback_bits == 1.0
        assert config.combination_rules["webgl"] == ("webgl_renderer", "webgl_vendor")

    def test_config_is_frozen(self):
        config = default_config()
        with pytest.raises(AttributeError):
            config.population = 100

    def test_mappings_are_read_only(self):
        config = default_config()
        with pytest.raises(TypeError):
            config.baselines["canvas"] = None

    def test_with_population(self):
        config = default_config()
        small = config.with_population(1000)
        assert small.population == 1000
        assert config.population == 8.3e9
        assert small.baselines is config.baselines

    def test_rejects_population_of_one(self):
        with pytest.raises(ReferenceDataError, match="population"):
            default_config().with_population(1)

    def test_rejects_order_without_spec(self):
        with pytest.raises(ReferenceDataError, match="no AttributeSpec"):
            EngineConfig(
                population=8.3e9,
                attribute_order=("timezone", "mystery"),
                attributes=ATTRIBUTES,
                tables=REFERENCE_TABLES,
                baselines=BASELINES,
            )

    def test_rejects_unknown_combination_part(self):
        with pytest.raises(ReferenceDataError, match="unknown baseline"):
            EngineConfig(
                population=8.3e9,
                attribute_order=ATTRIBUTE_ORDER,
                attributes=ATTRIBUTES,
                tables=REFERENCE_TABLES,
                baselines=BASELINES,
                combination_rules={"webgl": ("webgl_renderer", "gpu_clock")},
            )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
