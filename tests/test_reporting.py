"""
Tests for reporting and the CLI.

These tests verify:
1. Number formatting and step framings
2. Spoofability totals by difficulty tier
3. CLI commands run and exit cleanly
"""

import json

import pytest

from foundprint.cli.main import create_parser, main
from foundprint.config import default_config
from foundprint.domain import Difficulty
from foundprint.orchestrator import StepRecord, run_experiment
from foundprint.probes.base import FunctionProbe, ProbeResult
from foundprint.reporting import (
    format_final,
    format_number,
    format_running_total,
    format_share_line,
    format_spoofability,
    summarize_spoofability,
)


CONFIG = default_config()


def step(**overrides):
    fields = dict(
        attribute_key="timezone",
        name="Timezone",
        message="You're in the Berlin timezone (UTC+1).",
        entropy_bits=5.06,
        one_in_x=33.3,
        source_citation="https://example.org",
        source_label="Panopticlick POPULATION_STATS.timezones",
        estimated=False,
        cumulative_bits=5.06,
        display_anonymity_set=33.3,
        crossed_uniqueness_now=False,
        already_unique=False,
        is_first=False,
    )
    fields.update(overrides)
    return StepRecord(**fields)


def tiered_report():
    """Easy 2 bits, Medium 3 bits, Hard 5 bits."""
    probes = [
        FunctionProbe(CONFIG.spec_for(key), lambda bits=bits: ProbeResult("v", "", entropy=bits))
        for key, bits in (("timezone", 2.0), ("user_agent", 3.0), ("canvas", 5.0))
    ]
    return run_experiment(probes, CONFIG)


# =============================================================================
# NUMBER FORMATTING TESTS
# =============================================================================

class TestFormatNumber:

    def test_billion(self):
        formatted = format_number(8.3e9)
        assert formatted.text == "8.3 billion"
        assert formatted.is_unique

    def test_trillion(self):
        assert format_number(1.5e12).text == "1.5 trillion"

    def test_million(self):
        formatted = format_number(2_500_000)
        assert formatted.text == "2.5 million"
        assert not formatted.is_unique

    def test_thousands_separator(self):
        assert format_number(12345).text == "12,345"

    def test_small_rounded(self):
        assert format_number(4.0).text == "4"
        assert format_number(33.3).text == "33"

    def test_custom_population(self):
        assert format_number(1024, population=1000).is_unique


# =============================================================================
# STEP NARRATION TESTS
# =============================================================================

class TestStepNarration:

    def test_first_step(self):
        text = format_running_total(step(is_first=True))
        assert text == "You are currently 1 in 33 people."

    def test_ordinary_step(self):
        assert format_running_total(step()) == "You are now 1 in 33 people."

    def test_crossing(self):
        text = format_running_total(step(
            crossed_uniqueness_now=True, display_anonymity_set=8.3e9,
        ))
        assert text == (
            "You are now statistically unique among all 8.3 billion people "
            "(1 in 8.3 billion)."
        )

    def test_crossing_follows_population(self):
        text = format_running_total(
            step(crossed_uniqueness_now=True, display_anonymity_set=1000),
            population=1000,
        )
        assert text == "You are now statistically unique among all 1,000 people (1 in 1,000)."
        assert "billion" not in text

    def test_already_unique(self):
        text = format_running_total(step(already_unique=True, display_anonymity_set=8.3e9))
        assert text == "You are now 1 in 8.3 billion."

    def test_share_line_cited(self):
        text = format_share_line(step())
        assert text.startswith("You share this with 1 in 33 people (5.1 bits;")

    def test_share_line_estimated(self):
        text = format_share_line(step(estimated=True))
        assert text.endswith("(5.1 bits, estimated).")


# =============================================================================
# FINAL REPORT TESTS
# =============================================================================

class TestFinalReport:

    def test_final_not_unique(self):
        text = format_final(tiered_report())
        assert text.startswith("3 tests, 10.0 bits of entropy:")
        assert "You are 1 in 1,024." in text
        assert "Fingerprint:" in text

    def test_spoofability_totals(self):
        summary = summarize_spoofability(tiered_report())
        assert summary.tier_counts == {
            Difficulty.EASY: 1, Difficulty.MEDIUM: 1, Difficulty.HARD: 1,
        }
        assert summary.tier_bits[Difficulty.HARD] == 5.0
        assert summary.total_bits == 10.0
        assert summary.after_easy == 256
        assert summary.after_easy_medium == 32
        assert summary.hard_only == 32
        assert summary.hard_count == 1
        assert summary.attribute_count == 3

    def test_spoofability_potentials_capped(self):
        probes = [
            FunctionProbe(CONFIG.spec_for(key), lambda: ProbeResult("v", "", entropy=20.0))
            for key in ("canvas", "audio")
        ]
        summary = summarize_spoofability(run_experiment(probes, CONFIG))
        assert summary.hard_only == CONFIG.population
        assert summary.after_easy == CONFIG.population

    def test_spoofability_text(self):
        text = format_spoofability(tiered_report())
        assert "Canvas" in text
        assert "Easy 1 (2.0 bits)" in text
        assert "1 of 3 attributes" in text


# =============================================================================
# CLI TESTS
# =============================================================================

class TestCLI:

    def test_parser_commands(self):
        parser = create_parser()
        args = parser.parse_args(["run", "--json", "--population", "1000"])
        assert args.json is True
        assert args.population == 1000.0

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "foundprint" in capsys.readouterr().out

    def test_run_sample(self, capsys):
        assert main(["run"]) == 0
        out = capsys.readouterr().out
        assert "Fingerprint:" in out
        assert "Unable to detect: Connection Type." in out
        assert "REPORT" in out

    def test_run_json(self, capsys):
        assert main(["run", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data["fingerprint_hash"]) == 32
        assert len(data["observations"]) == 15
        assert data["failures"][0]["kind"] == "unavailable"

    def test_run_profile_file(self, tmp_path, capsys):
        path = tmp_path / "device.json"
        path.write_text(json.dumps({"timezone": "Europe/Berlin", "language": "de"}))
        assert main(["run", "--profile", str(path), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert [o["attribute"] for o in data["observations"]] == ["timezone", "language"]

    def test_run_missing_profile(self, tmp_path, capsys):
        assert main(["run", "--profile", str(tmp_path / "nope.json")]) == 1
        assert "Could not load profile" in capsys.readouterr().out

    def test_run_invalid_population(self, capsys):
        assert main(["run", "--population", "1"]) == 1

    def test_baselines(self, capsys):
        assert main(["baselines"]) == 0
        out = capsys.readouterr().out
        assert "timezone: 3.04 bits" in out
        assert "excluded" in out

    def test_pixel_ratio(self, capsys):
        assert main(["pixel-ratio", "1.1"]) == 0
        out = capsys.readouterr().out
        assert "110%" in out
        assert "medium" in out


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
