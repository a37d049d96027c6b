"""Pytest configuration and fixtures for Nest-Guard tests."""

import pytest

from nest_guard.config import NestConfig
from nest_guard.models import Sample

THERMOSTAT_ID = "peyiJNo0IldT2YlIVtYaGQ"


class FakeNestClient:
    """Stand-in for NestClient that replays canned results.

    Each entry in `reads` / `writes` is either a Sample to return or an
    exception to raise.
    """

    def __init__(self, reads=None, writes=None):
        self.reads = list(reads or [])
        self.writes = list(writes or [])
        self.read_calls = 0
        self.write_calls = []

    def read(self):
        self.read_calls += 1
        result = self.reads.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    def write(self, hvac_mode):
        self.write_calls.append(hvac_mode)
        result = self.writes.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result


class RecordingLog:
    """Stand-in for ObservationLog that keeps records in memory."""

    def __init__(self):
        self.samples = []
        self.notes = []

    def sample(self, sample):
        self.samples.append(sample)

    def note(self, note):
        self.notes.append(note)


def make_sample(temperature=72, hvac_mode="cool", is_cooling=True) -> Sample:
    return Sample(temperature=temperature, hvac_mode=hvac_mode, is_cooling=is_cooling)


def make_payload(thermostat_id=THERMOSTAT_ID, temperature=72, hvac_mode="cool", hvac_state="cooling") -> dict:
    return {
        "devices": {
            "thermostats": {
                thermostat_id: {
                    "device_id": thermostat_id,
                    "ambient_temperature_f": temperature,
                    "hvac_mode": hvac_mode,
                    "hvac_state": hvac_state,
                },
            },
        },
        "structures": {},
    }


@pytest.fixture
def config() -> NestConfig:
    return NestConfig(thermostat_id=THERMOSTAT_ID, token="c.test-token", minutes=1)


@pytest.fixture
def webhook_config() -> NestConfig:
    return NestConfig(
        thermostat_id=THERMOSTAT_ID,
        token="c.test-token",
        minutes=1,
        webhook_post="http://hooks.example.com/post",
        webhook_get="http://hooks.example.com/get",
    )


@pytest.fixture
def recording_log() -> RecordingLog:
    return RecordingLog()


@pytest.fixture
def no_webhooks():
    """Webhook dispatcher that does nothing."""
    from nest_guard.webhooks import WebhookDispatch

    calls = []

    def dispatch(config, observation_log):
        calls.append(config)
        return WebhookDispatch()

    dispatch.calls = calls
    return dispatch
