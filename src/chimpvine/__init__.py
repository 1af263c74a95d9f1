"""Game session client for the chimpvine WordPress backend.

This package authenticates an embedded game against a WordPress REST
backend, fetches the player's saved progress, and reports level
start/end telemetry.

Structure:
- chimpvine/config.py: Configuration via pydantic-settings
- chimpvine/errors.py: Failure taxonomy raised inside the client
- chimpvine/models.py: Wire payloads and game progress state
- chimpvine/session.py: SessionClient, the handshake and report calls
- chimpvine/lib/: Reusable pieces (origin lookup, ready notification)
- chimpvine/cli/: Command-line harness
"""

from chimpvine.config import Settings
from chimpvine.errors import (
    ApplicationFailure,
    ConfigurationFailure,
    NotAuthenticatedError,
    ProtocolFailure,
    SessionError,
    SessionFailedError,
    TransportFailure,
)
from chimpvine.models import GameProgress, SessionState
from chimpvine.session import SessionClient

__all__ = [
    "ApplicationFailure",
    "ConfigurationFailure",
    "GameProgress",
    "NotAuthenticatedError",
    "ProtocolFailure",
    "SessionClient",
    "SessionError",
    "SessionFailedError",
    "SessionState",
    "Settings",
    "TransportFailure",
]
