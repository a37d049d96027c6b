"""
Models module for Nest-Guard.

This module provides the immutable value types passed between the client,
the detector, the recovery sequencer and the poll loop.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Sample:
    """A point-in-time read of the thermostat."""

    temperature: int
    hvac_mode: str
    is_cooling: bool


@dataclass(frozen=True)
class PollState:
    """Baseline carried from one poll tick to the next."""

    last_is_cooling: bool = False
    last_temperature: int = 0

    @classmethod
    def from_sample(cls, sample: Sample) -> "PollState":
        return cls(last_is_cooling=sample.is_cooling, last_temperature=sample.temperature)

    # Lets the detector treat a baseline like a sample.
    @property
    def is_cooling(self) -> bool:
        return self.last_is_cooling

    @property
    def temperature(self) -> int:
        return self.last_temperature


@dataclass(frozen=True)
class ObservationRecord:
    """One row of the observation log."""

    timestamp: datetime
    is_cooling: Optional[bool] = None
    temperature: Optional[int] = None
    note: str = ""

    @classmethod
    def for_sample(cls, sample: Sample, timestamp: Optional[datetime] = None) -> "ObservationRecord":
        return cls(
            timestamp=timestamp or datetime.now().astimezone(),
            is_cooling=sample.is_cooling,
            temperature=sample.temperature,
        )

    @classmethod
    def for_note(cls, note: str, timestamp: Optional[datetime] = None) -> "ObservationRecord":
        return cls(timestamp=timestamp or datetime.now().astimezone(), note=note)


@dataclass(frozen=True)
class RecoveryResult:
    """Samples bracketing one recovery sequence."""

    trigger: Sample
    shutoff: Sample
    restart: Sample
    off_attempts: int
    on_attempts: int
