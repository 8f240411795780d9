"""
Tests for entropy aggregation and the fingerprint hash.

These tests verify:
1. Bits sum exactly and are never clamped
2. The display anonymity set caps at the population
3. The first crossing of the cap is reported exactly once
4. The hash is deterministic and order-sensitive
"""

import json
import re

import pytest

from foundprint.config import default_config
from foundprint.hashing import canonical_form, fingerprint_hash
from foundprint.scoring.aggregator import EntropyAggregator


# =============================================================================
# AGGREGATOR TESTS
# =============================================================================

class TestEntropyAggregator:
    """Test running totals."""

    def setup_method(self):
        self.config = default_config()

    def test_sums_contributions(self):
        aggregator = EntropyAggregator(self.config)
        for bits in (2.0, 3.0, 5.0):
            aggregator.add(bits)
        assert aggregator.cumulative_bits == 10.0
        assert aggregator.display_anonymity_set == 1024

    def test_first_update(self):
        aggregator = EntropyAggregator(self.config)
        first = aggregator.add(1.0)
        second = aggregator.add(1.0)
        assert first.is_first
        assert not second.is_first
        assert second.processed_count == 2

    def test_total_never_clamped(self):
        aggregator = EntropyAggregator(self.config)
        for _ in range(5):
            aggregator.add(10.0)
        assert aggregator.cumulative_bits == 50.0
        assert aggregator.display_anonymity_set == self.config.population

    def test_crossing_reported_once(self):
        aggregator = EntropyAggregator(self.config)
        updates = [aggregator.add(bits) for bits in (20.0, 10.0, 5.0, 2.0)]
        # 2^33 > 8.3e9, 2^30 is not
        assert [u.crossed_now for u in updates] == [False, False, True, False]
        assert [u.was_capped for u in updates] == [False, False, False, True]
        assert aggregator.state.ever_capped

    def test_display_set_never_exceeds_population(self):
        aggregator = EntropyAggregator(self.config)
        for bits in (8.04, 10.0, 6.97, 6.32, 5.23, 4.83):
            update = aggregator.add(bits)
            assert update.display_anonymity_set <= self.config.population

    def test_rejects_negative(self):
        aggregator = EntropyAggregator(self.config)
        with pytest.raises(ValueError):
            aggregator.add(-0.5)
        assert aggregator.cumulative_bits == 0.0

    def test_rejects_non_finite(self):
        aggregator = EntropyAggregator(self.config)
        aggregator.add(2.0)
        for bits in (float("nan"), float("inf")):
            with pytest.raises(ValueError):
                aggregator.add(bits)
        assert aggregator.cumulative_bits == 2.0

    def test_smaller_population(self):
        aggregator = EntropyAggregator(self.config.with_population(1000))
        update = aggregator.add(10.0)
        assert update.crossed_now
        assert update.display_anonymity_set == 1000


# =============================================================================
# HASH TESTS
# =============================================================================

class TestFingerprintHash:
    """Test hash determinism and sensitivity."""

    def test_format(self):
        digest = fingerprint_hash(["1920x1080", 2.0, "Europe/Berlin"])
        assert re.fullmatch(r"[0-9a-f]{32}", digest)

    def test_deterministic(self):
        values = ["1920x1080", 1.25, {"vendor": "v", "renderer": "r"}, None, True]
        assert fingerprint_hash(values) == fingerprint_hash(list(values))

    def test_order_sensitive(self):
        assert fingerprint_hash(["a", "b"]) != fingerprint_hash(["b", "a"])

    def test_value_sensitive(self):
        assert fingerprint_hash(["a", "b"]) != fingerprint_hash(["a", "c"])

    def test_no_boundary_collision(self):
        assert fingerprint_hash(["ab", "c"]) != fingerprint_hash(["a", "bc"])

    def test_mapping_key_order_irrelevant(self):
        first = fingerprint_hash([{"vendor": "v", "renderer": "r"}])
        second = fingerprint_hash([{"renderer": "r", "vendor": "v"}])
        assert first == second

    def test_empty(self):
        assert fingerprint_hash([]) == "d41d8cd98f00b204e9800998ecf8427e"

    def test_lone_surrogate(self):
        # json.loads accepts "\ud800" escapes from profile files
        value = json.loads('"Mozilla \\ud800 Chrome/120"')
        digest = fingerprint_hash([value])
        assert re.fullmatch(r"[0-9a-f]{32}", digest)
        assert canonical_form(value) == '"Mozilla \\ud800 Chrome/120"'

    def test_mixed_key_types(self):
        digest = fingerprint_hash([{1: "a", "b": 2}])
        assert digest == fingerprint_hash([{"b": 2, 1: "a"}])
        assert canonical_form({1: "a", "b": 2}) == '{"1":"a","b":2}'

    def test_set_order_is_canonical(self):
        fonts = {"Arial", "Fira Code", "Consolas", "Georgia"}
        expected = '["Arial","Consolas","Fira Code","Georgia"]'
        assert canonical_form(fonts) == expected
        assert canonical_form(frozenset(fonts)) == expected
        assert fingerprint_hash([fonts]) == fingerprint_hash([sorted(fonts)])

    def test_mixed_type_set(self):
        assert canonical_form({1, "a"}) == '["a",1]'

    def test_non_ascii_escaped(self):
        assert canonical_form("Zürich") == '"Z\\u00fcrich"'

    def test_canonical_form(self):
        assert canonical_form({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'
        assert canonical_form(None) == "null"
        assert canonical_form("x\ny") == '"x\\ny"'


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
