"""
Webhooks module for Nest-Guard.

Notification webhooks are fired in the background when a recovery sequence
starts. Failures are logged and never retried.
"""

import logging
import threading
from typing import List, Optional, Tuple

import requests

from .errors import ProtocolError, TransportError

logger = logging.getLogger("nest-guard")

WEBHOOK_TIMEOUT = 10  # seconds


def fire_webhook(method: str, url: str, session: Optional[requests.Session] = None) -> None:
    """
    Call a webhook with no body.

    Raises:
        TransportError: If the webhook cannot be reached.
        ProtocolError: If the webhook does not answer with 200.
    """
    http = session or requests
    try:
        response = http.request(method, url, timeout=WEBHOOK_TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise TransportError(f"Problem communicating with webhook {url}: {e}") from e
    if response.status_code != 200:
        raise ProtocolError(
            f"Webhook {url} returned status code {response.status_code}",
            status_code=response.status_code,
        )


class WebhookDispatch:
    """Handle on a background webhook dispatch."""

    def __init__(self, thread: Optional[threading.Thread] = None):
        self._thread = thread

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)


def webhook_targets(config) -> List[Tuple[str, str]]:
    targets = []
    if config.webhook_post:
        targets.append(("POST", config.webhook_post))
    if config.webhook_get:
        targets.append(("GET", config.webhook_get))
    return targets


def _run(targets: List[Tuple[str, str]], observation_log, session) -> None:
    for method, url in targets:
        name = f"webhook-{method.lower()}"
        try:
            fire_webhook(method, url, session=session)
        except (TransportError, ProtocolError) as e:
            logger.error(f"Problem with {name}: {e}")
            observation_log.note(f"Problem with {name}: {e}")
        else:
            logger.info(f"{name} performed")
            observation_log.note(f"{name} performed")


def dispatch_webhooks(config, observation_log, session: Optional[requests.Session] = None) -> WebhookDispatch:
    """
    Fire the configured webhooks on a background thread.

    Args:
        config: The run configuration.
        observation_log: Log receiving one record per webhook.
        session: Optional requests session.

    Returns:
        A WebhookDispatch handle; it is idle when no webhook is configured.
    """
    targets = webhook_targets(config)
    if not targets:
        return WebhookDispatch()

    thread = threading.Thread(
        target=_run,
        args=(targets, observation_log, session),
        name="nest-guard-webhooks",
        daemon=True,
    )
    thread.start()
    return WebhookDispatch(thread)
