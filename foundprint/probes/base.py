"""
Probe Interface for FOUNDprint.

A probe has one asynchronous operation, `detect()`, which returns either:
    - None                — characteristic unavailable on this platform
    - ProbeResult         — the raw value, a description, and optionally
                            entropy lookup data
A probe may also raise. The orchestrator classifies every outcome as
success, unavailable, or error; nothing a probe does aborts a run.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from ..domain import AttributeSpec
from ..resolution.lookup import ProbeLookup


@dataclass(frozen=True)
class ProbeResult:
    """
    A successful detection.

    `value` feeds the fingerprint hash. `lookup` carries resolved entropy.
    `entropy` is for probes that compute their contribution directly
    without a lookup.
    """
    value: Any
    message: str
    lookup: Optional[ProbeLookup] = None
    entropy: Optional[float] = None


class ProbeStatus(Enum):
    """Classification of a single probe invocation."""
    SUCCESS = "success"
    UNAVAILABLE = "unavailable"
    ERROR = "error"


@dataclass(frozen=True)
class ProbeOutcome:
    """Discriminated result of invoking a probe."""
    status: ProbeStatus
    result: Optional[ProbeResult] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.status == ProbeStatus.SUCCESS


class Probe:
    """
    Base class for characteristic detectors.

    Subclasses implement `detect`. The attribute spec supplies the display
    name and spoofing difficulty used in reports.
    """

    def __init__(self, spec: AttributeSpec):
        self.spec = spec

    @property
    def attribute_key(self) -> str:
        return self.spec.key

    @property
    def name(self) -> str:
        return self.spec.name

    async def detect(self) -> Optional[ProbeResult]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.attribute_key!r})"


DetectFunction = Callable[[], Union[Optional[ProbeResult], Awaitable[Optional[ProbeResult]]]]


class FunctionProbe(Probe):
    """
    Adapts a plain function into a probe.

    The function may return its result directly or return an awaitable.
    """

    def __init__(self, spec: AttributeSpec, func: DetectFunction):
        super().__init__(spec)
        self._func = func

    async def detect(self) -> Optional[ProbeResult]:
        result = self._func()
        if inspect.isawaitable(result):
            result = await result
        return result
