"""Backend origin resolution.

The host page exposes the backend origin to the embedded game; in a
Python process that embedding context is whatever callable the caller
supplies. The default lookup reads ``Settings.origin``.

Examples:
    Testing mode ignores the lookup::

        >>> resolve_origin(Settings(testing=True), static_lookup(None))
        'http://localhost/wordpress'

    A missing origin is a configuration failure::

        >>> resolve_origin(Settings(), static_lookup(""))
        Traceback (most recent call last):
        ...
        chimpvine.errors.ConfigurationFailure: ...
"""

import logging
from collections.abc import Callable

from chimpvine.config import DEFAULT_TEST_ORIGIN, Settings
from chimpvine.errors import ConfigurationFailure

logger = logging.getLogger(__name__)

OriginLookup = Callable[[], str | None]
"""Returns the embedding origin; empty or None means it is unavailable."""


def settings_lookup(config: Settings) -> OriginLookup:
    """Lookup that reads the origin exposed through settings."""

    def lookup() -> str | None:
        return config.origin

    return lookup


def static_lookup(origin: str | None) -> OriginLookup:
    """Lookup that always returns ``origin``."""
    return lambda: origin


def resolve_origin(config: Settings, lookup: OriginLookup) -> str:
    """Determine the backend origin for a session.

    Args:
        config: Session settings.
        lookup: Embedding-context lookup, consulted outside testing mode.

    Returns:
        The origin without a trailing slash.

    Raises:
        ConfigurationFailure: If the lookup returned nothing.
    """
    if config.testing:
        origin = config.test_origin or DEFAULT_TEST_ORIGIN
        logger.debug("Testing mode, using origin %s", origin)
    else:
        origin = lookup()
        if not origin:
            raise ConfigurationFailure("Failed to retrieve the embedding origin")
    return origin.rstrip("/")
