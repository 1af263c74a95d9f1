"""Wire payloads and session state models.

Python field names are snake_case; the backend's field names are kept as
aliases, so payloads go out with ``model_dump_json(by_alias=True)`` and
responses come in with ``model_validate_json``.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def local_timestamp(now: datetime) -> str:
    """Format a local wall-clock time the way the backend stores it."""
    return now.strftime(TIMESTAMP_FORMAT)


class SessionState(StrEnum):
    """Handshake progress of a session."""

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    READY = "ready"
    FAILED = "failed"
    DISABLED = "disabled"


class GameProgress(BaseModel):
    """Player-facing state exchanged with the backend.

    Owned by the game; the session only writes ``level`` (from the
    progress fetch) and reads the rest back when building reports.
    """

    level: int = 0
    total_points: int = 0
    points_earned: int = 0
    level_data: str = ""
    is_level_completed: bool = False
    sound_on_off: bool = False
    music_on_off: bool = False

    def snapshot(self) -> "GameProgress":
        """Return an independent copy for listeners."""
        return self.model_copy()


# =============================================================================
# RESPONSES
# =============================================================================


class NonceResponse(BaseModel):
    """Body of the admin-ajax ``get_rest_nonce`` action."""

    success: bool
    data: str = ""


class GameResultResponse(BaseModel):
    """Saved progress for a game."""

    model_config = ConfigDict(populate_by_name=True)

    level: int = Field(alias="Level")

    @field_validator("level", mode="before")
    @classmethod
    def null_level_is_zero(cls, value: object) -> object:
        """A player with no saved progress gets ``null``, read as level 0."""
        return 0 if value is None else value


class ReportResponse(BaseModel):
    """Answer to a start or end report."""

    status: str = ""
    userinstance: int


# =============================================================================
# REQUESTS
# =============================================================================


class StartReport(BaseModel):
    """Payload marking the start of a level."""

    model_config = ConfigDict(populate_by_name=True)

    game_id: int = Field(alias="GameID")
    level: int = Field(alias="Level")
    started_at: str = Field(alias="GameStartLocalDateTime")
    sound_on_off: int = Field(alias="SoundOnOff", ge=0, le=1)
    music_on_off: int = Field(alias="MusicOnOff", ge=0, le=1)
    level_passed: int = Field(default=0, alias="LevelPassed")
    is_level_end: int = Field(default=0, alias="islevelend")


class EndReport(BaseModel):
    """Payload marking the end of a level, correlated by ``userinstance``."""

    model_config = ConfigDict(populate_by_name=True)

    userinstance: int
    points_earned: int = Field(alias="PointsEarned")
    total_points: int = Field(alias="TotalPoints")
    ended_at: str = Field(alias="GameEndLocalDateTime")
    level_passed: int = Field(alias="LevelPassed", ge=0, le=1)
    is_level_end: int = Field(default=1, alias="islevelend")
    level_data: str = Field(alias="LevelData")
