"""
Nest Client module for Nest-Guard.

This module provides the NestClient class for reading thermostat state from
the Nest API and changing its HVAC mode.
"""

import logging
import math
import time
from typing import Any, Callable, Optional

import requests

from .config import NEST_API_BASE_URL, NEST_MAX_REDIRECTS, NEST_SETTLE_SECONDS
from .errors import AuthError, ProtocolError, SchemaError, TransportError
from .models import Sample

logger = logging.getLogger("nest-guard")


class AuthForwardingSession(requests.Session):
    """Session that keeps the Authorization header on every redirect.

    The Nest API redirects to a per-user host; requests would otherwise drop
    the header once the host changes.
    """

    def rebuild_auth(self, prepared_request, response):
        return None


def decode_sample(data: Any, thermostat_id: str) -> Sample:
    """
    Decode a Nest API payload into a Sample.

    Args:
        data: The parsed JSON response from the Nest API.
        thermostat_id: ID of the thermostat to extract.

    Returns:
        The thermostat's Sample.

    Raises:
        SchemaError: If the thermostat or one of its fields is missing or mistyped.
    """
    node = data
    path = []
    for key in ("devices", "thermostats", thermostat_id):
        if not isinstance(node, dict):
            where = ".".join(path) or "response"
            raise SchemaError(f"Expected an object at '{where}', got {type(node).__name__}")
        path.append(key)
        if key not in node:
            if key == thermostat_id:
                raise SchemaError(f"Could not find thermostat {thermostat_id} in Nest response")
            raise SchemaError(f"Missing '{'.'.join(path)}' in Nest response")
        node = node[key]

    if not isinstance(node, dict):
        raise SchemaError(f"Thermostat {thermostat_id} is not an object")

    temperature = node.get("ambient_temperature_f")
    if (
        isinstance(temperature, bool)
        or not isinstance(temperature, (int, float))
        or (isinstance(temperature, float) and not math.isfinite(temperature))
    ):
        raise SchemaError(f"Field 'ambient_temperature_f' must be a number, got {temperature!r}")

    hvac_mode = node.get("hvac_mode")
    if not isinstance(hvac_mode, str):
        raise SchemaError(f"Field 'hvac_mode' must be a string, got {hvac_mode!r}")

    hvac_state = node.get("hvac_state")
    if not isinstance(hvac_state, str):
        raise SchemaError(f"Field 'hvac_state' must be a string, got {hvac_state!r}")

    return Sample(
        temperature=int(temperature),
        hvac_mode=hvac_mode,
        is_cooling=hvac_state == "cooling",
    )


class NestClient:
    """Client for interacting with the Nest API."""

    def __init__(
        self,
        token: str,
        thermostat_id: str,
        api_base_url: str = NEST_API_BASE_URL,
        debug: bool = False,
        debug_output: Optional[str] = None,
        settle_seconds: float = NEST_SETTLE_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        session: Optional[requests.Session] = None,
    ):
        self.thermostat_id = thermostat_id
        self.api_base_url = api_base_url.rstrip("/")
        self.debug = debug
        self.debug_output = debug_output
        self.settle_seconds = settle_seconds
        self._sleep = sleep
        self.session = session or AuthForwardingSession()
        self.session.max_redirects = NEST_MAX_REDIRECTS
        auth = token if token.startswith("Bearer ") else f"Bearer {token}"
        self.headers = {
            "Authorization": auth,
            "Content-Type": "application/json",
        }

    @classmethod
    def from_config(cls, config) -> "NestClient":
        return cls(
            token=config.token,
            thermostat_id=config.thermostat_id,
            debug=config.debug,
            debug_output=config.last_output,
        )

    @property
    def thermostat_url(self) -> str:
        return f"{self.api_base_url}/devices/thermostats/{self.thermostat_id}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            logger.debug(f"{method} {url}")
            response = self.session.request(method, url, headers=self.headers, **kwargs)
        except requests.exceptions.TooManyRedirects as e:
            raise TransportError(f"Stopped after {NEST_MAX_REDIRECTS} redirects: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Could not communicate with Nest: {e}") from e

        if response.status_code in (401, 403):
            raise AuthError(
                f"Nest rejected the token with status code {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code != 200:
            raise ProtocolError(
                f"Nest API returned status code {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response

    def _dump(self, body: bytes) -> None:
        if not (self.debug and self.debug_output):
            return
        try:
            with open(self.debug_output, "wb") as dump_file:
                dump_file.write(body)
        except OSError as e:
            logger.warning(f"Could not write debug dump {self.debug_output}: {e}")

    def read(self) -> Sample:
        """
        Read the current thermostat state.

        Returns:
            The thermostat's Sample.

        Raises:
            TransportError, AuthError, ProtocolError, SchemaError
        """
        response = self._request("GET", self.api_base_url)
        self._dump(response.content)
        try:
            data = response.json()
        except ValueError as e:
            raise SchemaError(f"Could not process JSON from Nest: {e}") from e

        sample = decode_sample(data, self.thermostat_id)
        logger.debug(f"Nest sample: {sample}")
        return sample

    def write(self, hvac_mode: str) -> Sample:
        """
        Set the HVAC mode, wait for it to settle and read the thermostat back.

        Args:
            hvac_mode: The mode to set, e.g. "off" or "cool".

        Returns:
            The Sample read after the settle delay.
        """
        logger.info(f"Setting thermostat {self.thermostat_id} to '{hvac_mode}'")
        self._request("PUT", self.thermostat_url, json={"hvac_mode": hvac_mode})
        logger.debug(f"Waiting {self.settle_seconds} seconds for the mode change to settle")
        self._sleep(self.settle_seconds)
        return self.read()

    def close(self) -> None:
        self.session.close()
