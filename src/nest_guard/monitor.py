"""
Monitor module for Nest-Guard.

This module contains the poll loop: read the thermostat, record the sample,
and restart the system when the fault detector fires.
"""

import logging
import time
from typing import Callable, List, Optional

from .detector import restart_needed
from .errors import ProtocolError, RecoveryError, SchemaError, TransportError
from .models import PollState
from .recovery import restart_system
from .webhooks import WebhookDispatch

logger = logging.getLogger("nest-guard")


def tick(
    state: PollState,
    client,
    config,
    observation_log,
    max_attempts: Optional[int] = None,
    pending: Optional[List[WebhookDispatch]] = None,
    restart: Callable = restart_system,
) -> PollState:
    """
    Run one poll tick.

    Args:
        state: Baseline from the previous tick.
        client: The NestClient to use.
        config: The run configuration.
        observation_log: Log receiving the tick's records.
        max_attempts: Optional bound per confirmed write during recovery.
        pending: If given, webhook dispatch handles are appended to it as soon
            as they start.
        restart: Recovery sequencer.

    Returns:
        The baseline for the next tick.
    """
    try:
        sample = client.read()
    except (TransportError, ProtocolError, SchemaError) as e:
        logger.error(f"Error in GET request: {e}")
        observation_log.note(str(e))
        return state

    logger.info(
        f"Thermostat {'cooling' if sample.is_cooling else 'not cooling'} "
        f"at {sample.temperature} (mode '{sample.hvac_mode}')"
    )
    observation_log.sample(sample)

    if not restart_needed(state, sample):
        return PollState.from_sample(sample)

    try:
        result = restart(
            client, config, observation_log, sample, max_attempts=max_attempts, pending=pending
        )
    except RecoveryError as e:
        logger.error(f"System restart abandoned: {e}")
        observation_log.note(f"RESTART: abandoned: {e}")
        return PollState.from_sample(sample)

    return PollState.from_sample(result.restart)


def run_forever(
    config,
    client,
    observation_log,
    state: Optional[PollState] = None,
    max_attempts: Optional[int] = None,
    pending: Optional[List[WebhookDispatch]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Poll the thermostat every `config.minutes` minutes until interrupted.

    The observation log is opened for each tick and closed before sleeping.
    """
    state = state or PollState()
    observation_log.create()

    while True:
        try:
            with observation_log.tick():
                state = tick(
                    state,
                    client,
                    config,
                    observation_log,
                    max_attempts=max_attempts,
                    pending=pending,
                )
        except OSError as e:
            logger.error(f"Problem writing output file {observation_log.path}: {e}")
        except Exception as e:
            logger.exception(f"Unexpected error in main loop: {e}")

        if pending:
            pending[:] = [dispatch for dispatch in pending if dispatch.running]

        logger.debug(f"Sleeping for {config.minutes} minutes")
        sleep(config.interval_seconds)
