"""Library utilities for the session client.

This package contains small, **parametric** pieces that the session
client composes. They know nothing about the backend's endpoints.

Modules:
- events: Ready notification (listener registration + awaitable outcome)
- origin: Backend origin resolution and embedding-context lookups
"""

from chimpvine.lib.events import ReadyListener, ReadyNotifier
from chimpvine.lib.origin import (
    OriginLookup,
    resolve_origin,
    settings_lookup,
    static_lookup,
)

__all__ = [
    # Events
    "ReadyListener",
    "ReadyNotifier",
    # Origin
    "OriginLookup",
    "resolve_origin",
    "settings_lookup",
    "static_lookup",
]
