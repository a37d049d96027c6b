"""
Nest-Guard: Automated Nest thermostat restart when cooling fails

This package polls a Nest thermostat and, when the system reports cooling while
the temperature keeps rising, turns it off and back on and fires optional
notification webhooks.
"""

from .nest_client import NestClient
from .config import NestConfig, load_config, validate_config
from .detector import restart_needed
from .monitor import run_forever, tick
from .recovery import restart_system
