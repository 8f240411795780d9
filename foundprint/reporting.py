"""
Reporting for FOUNDprint.

Turns step records and run reports into reader-facing text. Nothing here
feeds back into the engine: reporting is a downstream subscriber.

Framings for a step:
    - first step         "You are currently 1 in X people."
    - ordinary step      "You are now 1 in X people."
    - crossing the cap   "You are now statistically unique among all ..."
    - already unique     "You are now 1 in X."
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .domain import Difficulty
from .orchestrator import RunReport, StepRecord
from .reference import WORLD_POPULATION
from .scoring.entropy import anonymity_set_size


# =============================================================================
# NUMBER FORMATTING
# =============================================================================

@dataclass(frozen=True)
class FormattedNumber:
    """Display text for an anonymity set, and whether it reaches the population."""
    text: str
    is_unique: bool
    raw: float


def format_number(num: float, population: float = WORLD_POPULATION) -> FormattedNumber:
    """
    Make a large count readable.

    8300000000 -> "8.3 billion", 12345 -> "12,345"
    """
    if num >= 1e12:
        text = f"{num / 1e12:.1f} trillion"
    elif num >= 1e9:
        text = f"{num / 1e9:.1f} billion"
    elif num >= 1e6:
        text = f"{num / 1e6:.1f} million"
    elif num >= 1e3:
        text = f"{round(num):,}"
    else:
        text = str(round(num))

    return FormattedNumber(text=text, is_unique=num >= population, raw=num)


# =============================================================================
# STEP NARRATION
# =============================================================================

def format_share_line(record: StepRecord) -> str:
    """How many people share this one characteristic."""
    formatted = format_number(record.one_in_x)
    bits = f"{record.entropy_bits:.1f} bits"
    if record.source_citation and not record.estimated:
        return f"You share this with 1 in {formatted.text} people ({bits}; {record.source_label})."
    return f"You share this with 1 in {formatted.text} people ({bits}, estimated)."


def format_running_total(record: StepRecord, population: float = WORLD_POPULATION) -> str:
    """Cumulative anonymity set after this step."""
    formatted = format_number(record.display_anonymity_set, population)

    if record.crossed_uniqueness_now:
        everyone = format_number(population, population).text
        return (
            f"You are now statistically unique among all {everyone} people "
            f"(1 in {formatted.text})."
        )
    if formatted.is_unique:
        return f"You are now 1 in {formatted.text}."
    if record.is_first:
        return f"You are currently 1 in {formatted.text} people."
    return f"You are now 1 in {formatted.text} people."


def format_step(record: StepRecord, population: float = WORLD_POPULATION) -> str:
    """Full narration for one step record."""
    return "\n".join([
        record.message,
        "  " + format_share_line(record),
        "  " + format_running_total(record, population),
    ])


# =============================================================================
# FINAL REVEAL
# =============================================================================

def format_final(report: RunReport) -> str:
    lines = [
        f"{report.successful_count} tests, {report.final_entropy_bits:.1f} bits of entropy:",
    ]
    if report.is_unique:
        lines.append("You are unique.")
    else:
        formatted = format_number(report.display_anonymity_set, report.population)
        lines.append(f"You are 1 in {formatted.text}.")
    lines.append(f"Fingerprint: {report.fingerprint_hash}")

    if report.failures:
        lines.append("")
        lines.append(f"Unable to detect: {', '.join(report.failed_attribute_names)}.")
    return "\n".join(lines)


# =============================================================================
# SPOOFABILITY SUMMARY
# =============================================================================

@dataclass(frozen=True)
class SpoofabilitySummary:
    """
    How much of the fingerprint survives changing the easy attributes.

    Potentials are anonymity sets capped at the population.
    """
    tier_counts: dict[Difficulty, int]
    tier_bits: dict[Difficulty, float]
    total_bits: float
    after_easy: float
    after_easy_medium: float
    hard_only: float
    population: float

    @property
    def hard_count(self) -> int:
        return self.tier_counts[Difficulty.HARD]

    @property
    def attribute_count(self) -> int:
        return sum(self.tier_counts.values())


def summarize_spoofability(report: RunReport) -> SpoofabilitySummary:
    counts = {tier: 0 for tier in Difficulty}
    bits = {tier: 0.0 for tier in Difficulty}
    for summary in report.attribute_summaries:
        counts[summary.difficulty] += 1
        bits[summary.difficulty] += summary.entropy_bits

    total = sum(bits.values())
    population = report.population

    def capped(remaining: float) -> float:
        return min(anonymity_set_size(remaining), population)

    return SpoofabilitySummary(
        tier_counts=counts,
        tier_bits=bits,
        total_bits=total,
        after_easy=capped(total - bits[Difficulty.EASY]),
        after_easy_medium=capped(total - bits[Difficulty.EASY] - bits[Difficulty.MEDIUM]),
        hard_only=capped(bits[Difficulty.HARD]),
        population=population,
    )


def format_spoofability(report: RunReport, summary: Optional[SpoofabilitySummary] = None) -> str:
    """Difficulty table plus the easy/medium removal potentials."""
    summary = summary or summarize_spoofability(report)
    lines = ["REPORT: How difficult is it to change or spoof each attribute?", ""]

    # Easy first, hard last
    for tier in Difficulty:
        for item in report.attribute_summaries:
            if item.difficulty == tier:
                lines.append(f"  {item.name:<22} {tier.value.capitalize():<7} {item.change_requires}")

    lines.append("")
    lines.append("  " + "   ".join(
        f"{tier.value.capitalize()} {summary.tier_counts[tier]} ({summary.tier_bits[tier]:.1f} bits)"
        for tier in Difficulty
    ))

    pop = summary.population
    lines.append("")
    lines.append(
        f"Changing every Easy attribute leaves you 1 in "
        f"{format_number(summary.after_easy, pop).text}."
    )
    lines.append(
        f"Changing every Easy and Medium attribute leaves you 1 in "
        f"{format_number(summary.after_easy_medium, pop).text}."
    )
    removed = summary.tier_bits[Difficulty.EASY] + summary.tier_bits[Difficulty.MEDIUM]
    lines.append(
        f"Even after removing {removed:.1f} bits, the Hard attributes alone "
        f"({summary.tier_bits[Difficulty.HARD]:.1f} bits) make you 1 in "
        f"{format_number(summary.hard_only, pop).text}. "
        f"{summary.hard_count} of {summary.attribute_count} attributes are "
        "difficult or impractical to change."
    )
    return "\n".join(lines)
