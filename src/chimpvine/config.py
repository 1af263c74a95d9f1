"""Configuration management using pydantic-settings.

Key patterns:
1. Multiple env files (.env, .env.local) - local overrides shared
2. validation_alias for explicit env var names
3. Startup warnings for settings that are almost certainly wrong
4. Singleton instance for the CLI entry point

Library code never reads the singleton: a SessionClient is always handed
its Settings explicitly.

Usage:
    from chimpvine.config import settings
    print(settings.game_id)
"""

import logging
from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_TEST_ORIGIN = "http://localhost/wordpress"


class Settings(BaseSettings):
    """Session settings loaded from environment variables.

    All settings use the CHIMPVINE_ prefix. Fields can also be passed by
    name, which is how tests and the CLI build one-off configurations.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def warn_unset_game_id(self) -> Self:
        """Warn at startup if the game id was never configured."""
        if self.game_id == 0 and not self.api_disabled:
            logger.warning(
                "CHIMPVINE_GAME_ID is not set; results will be filed under game 0"
            )
        return self

    # ==========================================================================
    # GAME
    # ==========================================================================

    game_id: int = Field(
        default=0,
        validation_alias="CHIMPVINE_GAME_ID",
        description="Game identifier sent with every progress fetch and start report",
    )

    api_disabled: bool = Field(
        default=False,
        validation_alias="CHIMPVINE_API_DISABLED",
        description="Skip all network calls and report ready with default progress",
    )

    # ==========================================================================
    # ORIGIN
    # ==========================================================================

    testing: bool = Field(
        default=False,
        validation_alias="CHIMPVINE_TESTING",
        description="Use test_origin instead of the embedding-context lookup",
    )

    test_origin: str = Field(
        default=DEFAULT_TEST_ORIGIN,
        validation_alias="CHIMPVINE_TEST_ORIGIN",
        description="Backend origin used in testing mode",
    )

    origin: str | None = Field(
        default=None,
        validation_alias="CHIMPVINE_ORIGIN",
        description="Embedding origin exposed by the host page (None = not embedded)",
    )

    # ==========================================================================
    # HTTP
    # ==========================================================================

    http_timeout_seconds: float = Field(
        default=30,
        validation_alias="CHIMPVINE_HTTP_TIMEOUT_SECONDS",
        description="Timeout for HTTP requests",
    )

    require_auth: bool = Field(
        default=False,
        validation_alias="CHIMPVINE_REQUIRE_AUTH",
        description="Refuse to send reports before a nonce has been obtained",
    )


# Singleton instance
settings = Settings.model_validate({})
