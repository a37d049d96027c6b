"""
Fault detection for Nest-Guard.

A thermostat that reports "cooling" on two consecutive samples while the
ambient temperature rises has most likely failed to engage its compressor.
"""

from typing import Union

from .models import PollState, Sample


def restart_needed(previous: Union[Sample, PollState], current: Sample) -> bool:
    """
    Decide whether the system must be restarted.

    Args:
        previous: The baseline sample (or poll state) from the previous tick.
        current: The sample just read.

    Returns:
        True if both samples are cooling and the temperature went up.
    """
    return previous.is_cooling and current.is_cooling and current.temperature > previous.temperature
