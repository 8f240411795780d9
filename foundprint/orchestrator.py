"""
Run Orchestrator for FOUNDprint.

Drives the probes over the fixed attribute order, one at a time, and
reduces their results into one report.

Per attribute:
    1. Await the probe (the only suspension point)
    2. Classify: success / unavailable / error
    3. On success: resolve entropy, update the aggregate, remember the raw
       value for the hash, emit a step record to subscribers
    4. Otherwise: record the failure and move on

After the last attribute the fingerprint hash is computed and the report
assembled. Failed attributes are never retried within a run. A new run
starts from empty state.

Probes never run concurrently with each other or with aggregation. There
is no per-probe timeout: a probe that never resolves stalls the run.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Union

from .config import EngineConfig, default_config
from .domain import (
    Difficulty,
    FailureKind,
    MissingEntropyConfigurationWarning,
    ProbeFailure,
    ProbeUnavailable,
    ResolvedObservation,
)
from .hashing import fingerprint_hash
from .probes.base import Probe, ProbeOutcome, ProbeResult, ProbeStatus
from .scoring.aggregator import EntropyAggregator
from .scoring.entropy import anonymity_set_size, resolve_entropy
from .utils.logging import get_logger


logger = get_logger(__name__)


# =============================================================================
# REPORT RECORDS
# =============================================================================

@dataclass(frozen=True)
class StepRecord:
    """
    Progress record emitted after each successful attribute.

    Subscribers render these; they have no effect on the run.
    """
    attribute_key: str
    name: str
    message: str
    entropy_bits: float
    one_in_x: float
    source_citation: Optional[str]
    source_label: str
    estimated: bool
    cumulative_bits: float
    display_anonymity_set: float
    crossed_uniqueness_now: bool
    already_unique: bool
    is_first: bool


@dataclass(frozen=True)
class AttributeSummary:
    """Per-attribute line for the spoofability summary."""
    name: str
    difficulty: Difficulty
    change_requires: str
    entropy_bits: float


@dataclass
class RunReport:
    """
    Complete result of one run.

    Exposes:
    - Every resolved observation, in processing order
    - Every failed attribute (for audit)
    - The final entropy total and capped anonymity set
    - The fingerprint hash
    """
    observations: list[ResolvedObservation]
    failures: list[ProbeFailure]
    attribute_summaries: list[AttributeSummary]
    fingerprint_hash: str
    final_entropy_bits: float
    display_anonymity_set: float
    population: float
    ever_capped: bool = False

    @property
    def successful_count(self) -> int:
        return len(self.observations)

    @property
    def failed_count(self) -> int:
        return len(self.failures)

    @property
    def failed_attribute_names(self) -> list[str]:
        return [failure.name for failure in self.failures]

    @property
    def is_unique(self) -> bool:
        return self.display_anonymity_set >= self.population

    def get_observation(self, attribute_key: str) -> Optional[ResolvedObservation]:
        """Find an observation by attribute key."""
        for observation in self.observations:
            if observation.attribute_key == attribute_key:
                return observation
        return None


StepSubscriber = Callable[[StepRecord], Any]


# =============================================================================
# PROBE CLASSIFICATION
# =============================================================================

async def invoke_probe(probe: Probe) -> ProbeOutcome:
    """
    Await one probe and classify what happened.

    Exceptions are caught and returned, never raised. Cancellation and
    interpreter exits propagate.
    """
    try:
        result = await probe.detect()
    except ProbeUnavailable as e:
        return ProbeOutcome(status=ProbeStatus.UNAVAILABLE, error=e)
    except Exception as e:
        return ProbeOutcome(status=ProbeStatus.ERROR, error=e)

    if result is None:
        return ProbeOutcome(status=ProbeStatus.UNAVAILABLE)
    if not isinstance(result, ProbeResult):
        return ProbeOutcome(
            status=ProbeStatus.ERROR,
            error=TypeError(f"expected ProbeResult, got {type(result).__name__}"),
        )
    return ProbeOutcome(status=ProbeStatus.SUCCESS, result=result)


# =============================================================================
# ORCHESTRATOR
# =============================================================================

class Orchestrator:
    """
    Sequences probes over the configured attribute order.

    The orchestrator is the only owner of the aggregate state for a run.
    """

    def __init__(
        self,
        probes: Union[Mapping[str, Probe], Iterable[Probe]],
        config: Optional[EngineConfig] = None,
        subscribers: Optional[list[StepSubscriber]] = None,
    ):
        self.config = config or default_config()
        if isinstance(probes, Mapping):
            self.probes = dict(probes)
        else:
            self.probes = {probe.attribute_key: probe for probe in probes}
        self.subscribers: list[StepSubscriber] = list(subscribers or [])

    def subscribe(self, subscriber: StepSubscriber) -> None:
        self.subscribers.append(subscriber)

    async def run(self) -> RunReport:
        """Execute one complete run with fresh state."""
        config = self.config
        aggregator = EntropyAggregator(config)
        observations: list[ResolvedObservation] = []
        failures: list[ProbeFailure] = []
        summaries: list[AttributeSummary] = []
        raw_values: list[Any] = []

        for attribute_key in config.attribute_order:
            probe = self.probes.get(attribute_key)
            if probe is None:
                logger.debug("No probe registered for '%s'; skipping", attribute_key)
                continue

            spec = config.spec_for(attribute_key)
            outcome = await invoke_probe(probe)

            if outcome.status == ProbeStatus.UNAVAILABLE:
                logger.info("%s unavailable", spec.name)
                failures.append(ProbeFailure(
                    attribute_key=attribute_key,
                    name=spec.name,
                    kind=FailureKind.UNAVAILABLE,
                    reason=str(outcome.error) if outcome.error else "",
                ))
                continue

            if outcome.status == ProbeStatus.ERROR:
                logger.warning("%s failed: %s", spec.name, outcome.error)
                failures.append(ProbeFailure(
                    attribute_key=attribute_key,
                    name=spec.name,
                    kind=FailureKind.EXCEPTION,
                    reason=repr(outcome.error),
                ))
                continue

            result = outcome.result
            try:
                resolution = resolve_entropy(attribute_key, result, config)
            except MissingEntropyConfigurationWarning:
                # Raised only when warnings are escalated; a reference data bug
                raise
            except Exception as e:
                # Probe supplied unusable entropy data
                logger.warning("%s returned invalid entropy: %s", spec.name, e)
                failures.append(ProbeFailure(
                    attribute_key=attribute_key,
                    name=spec.name,
                    kind=FailureKind.EXCEPTION,
                    reason=repr(e),
                ))
                continue

            update = aggregator.add(resolution.entropy_bits)
            one_in_x = resolution.one_in_x or anonymity_set_size(resolution.entropy_bits)

            observation = ResolvedObservation(
                attribute_key=attribute_key,
                name=spec.name,
                raw_value=result.value,
                message=result.message,
                percent=resolution.percent,
                estimated=resolution.estimated,
                entropy_bits=resolution.entropy_bits,
                one_in_x=one_in_x,
                source_citation=resolution.source_citation,
                source_label=resolution.source_label,
                strategy=resolution.strategy,
                note=resolution.note,
            )
            observations.append(observation)
            raw_values.append(result.value)
            summaries.append(AttributeSummary(
                name=spec.name,
                difficulty=spec.difficulty,
                change_requires=spec.change_requires,
                entropy_bits=resolution.entropy_bits,
            ))

            self._emit(StepRecord(
                attribute_key=attribute_key,
                name=spec.name,
                message=result.message,
                entropy_bits=resolution.entropy_bits,
                one_in_x=one_in_x,
                source_citation=resolution.source_citation,
                source_label=resolution.source_label,
                estimated=resolution.estimated,
                cumulative_bits=update.cumulative_bits,
                display_anonymity_set=update.display_anonymity_set,
                crossed_uniqueness_now=update.crossed_now,
                already_unique=update.was_capped,
                is_first=update.is_first,
            ))

        return RunReport(
            observations=observations,
            failures=failures,
            attribute_summaries=summaries,
            fingerprint_hash=fingerprint_hash(raw_values),
            final_entropy_bits=aggregator.cumulative_bits,
            display_anonymity_set=aggregator.display_anonymity_set,
            population=config.population,
            ever_capped=aggregator.state.ever_capped,
        )

    def _emit(self, record: StepRecord) -> None:
        """Deliver a step record. Subscriber errors never affect the run."""
        for subscriber in self.subscribers:
            try:
                subscriber(record)
            except Exception as e:
                logger.warning("Step subscriber %r failed: %s", subscriber, e)


def run_experiment(
    probes: Union[Mapping[str, Probe], Iterable[Probe]],
    config: Optional[EngineConfig] = None,
    subscribers: Optional[list[StepSubscriber]] = None,
) -> RunReport:
    """Synchronous entry point: run a fresh orchestration to completion."""
    orchestrator = Orchestrator(probes, config=config, subscribers=subscribers)
    return asyncio.run(orchestrator.run())
