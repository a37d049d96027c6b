"""
Recovery module for Nest-Guard.

This module drives the off/on cycle that restarts a thermostat whose
compressor failed to engage. Each mode change is confirmed by reading the
thermostat back; a mismatch or a client error is retried immediately.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .errors import ProtocolError, RecoveryError, SchemaError, TransportError
from .models import RecoveryResult, Sample
from .webhooks import WebhookDispatch, dispatch_webhooks

logger = logging.getLogger("nest-guard")

RESTART_NOTE = "RESTARTING SYSTEM"


@dataclass(frozen=True)
class WriteStep:
    """Log wording for one confirmed write."""

    waiting: str
    done: str
    failed: str


SHUTOFF_STEP = WriteStep(
    waiting="RESTART: waiting on turn off",
    done="RESTART: system turned off",
    failed="Error turning system off",
)

RESTART_STEP = WriteStep(
    waiting="RESTART: waiting on turn on",
    done="RESTART: system turned on",
    failed="Error turning system back on",
)


def confirmed_write(
    client,
    hvac_mode: str,
    observation_log,
    step: WriteStep,
    max_attempts: Optional[int] = None,
) -> Tuple[Sample, int]:
    """
    Write an HVAC mode until the thermostat reports it.

    Args:
        client: The NestClient (anything with a `write(mode)` returning a Sample).
        hvac_mode: The mode to set.
        observation_log: Log receiving one record per attempt.
        step: Log wording for this write.
        max_attempts: Optional bound; None retries forever.

    Returns:
        The confirming Sample and the number of write attempts made.

    Raises:
        RecoveryError: If max_attempts is set and exhausted.
    """
    attempts = 0
    while max_attempts is None or attempts < max_attempts:
        attempts += 1
        try:
            sample = client.write(hvac_mode)
        except (TransportError, ProtocolError, SchemaError) as e:
            logger.error(f"{step.failed}: {e}")
            observation_log.note(f"{step.failed}: {e}")
            continue

        if sample.hvac_mode == hvac_mode:
            logger.info(step.done)
            observation_log.note(step.done)
            return sample, attempts

        logger.warning(f"{step.waiting} (thermostat reports '{sample.hvac_mode}')")
        observation_log.note(step.waiting)

    raise RecoveryError(f"Thermostat did not report '{hvac_mode}' after {attempts} attempts")


def restart_system(
    client,
    config,
    observation_log,
    trigger: Sample,
    max_attempts: Optional[int] = None,
    pending: Optional[List[WebhookDispatch]] = None,
    dispatch: Callable[..., WebhookDispatch] = dispatch_webhooks,
) -> RecoveryResult:
    """
    Turn the thermostat off and back to the mode it was in.

    Args:
        client: The NestClient to use.
        config: The run configuration (webhook URLs).
        observation_log: Log receiving each milestone.
        trigger: The sample that revealed the fault; its mode is restored.
        max_attempts: Optional bound per confirmed write.
        pending: If given, the webhook dispatch handle is appended to it
            before the first write.
        dispatch: Webhook dispatcher.

    Returns:
        The RecoveryResult.
    """
    logger.warning(
        f"Thermostat is cooling but temperature rose to {trigger.temperature}, restarting system"
    )
    observation_log.note(RESTART_NOTE)
    webhooks = dispatch(config, observation_log)
    if pending is not None:
        pending.append(webhooks)

    shutoff, off_attempts = confirmed_write(client, "off", observation_log, SHUTOFF_STEP, max_attempts)
    restart, on_attempts = confirmed_write(
        client, trigger.hvac_mode, observation_log, RESTART_STEP, max_attempts
    )

    logger.info(f"System restart completed after {off_attempts} off and {on_attempts} on attempts")
    result = RecoveryResult(
        trigger=trigger,
        shutoff=shutoff,
        restart=restart,
        off_attempts=off_attempts,
        on_attempts=on_attempts,
    )
    return result
