"""Session client for the chimpvine WordPress backend.

A SessionClient runs the authentication handshake (nonce, then saved
progress) and sends level start/end reports. It is constructed by the
application and handed to whatever needs it; there is no global
instance.

Every public operation catches ``SessionError`` at its boundary: the
failure is logged with the server body, stored as ``last_error``, and
the operation returns a falsy result. Nothing is retried.

Examples:
    Handshake, then report a level::

        async with SessionClient(Settings(game_id=5, testing=True)) as session:
            session.on_ready(lambda progress: print(progress.level))
            await session.start()
            progress = await session.wait_ready()

            await session.report_start(progress.level, sound_on_off=True)
            ...
            await session.report_end(10, 40, "{}", is_level_completed=True)
"""

import logging
from collections.abc import Callable
from datetime import datetime
from types import TracebackType
from typing import Self, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from chimpvine.config import Settings
from chimpvine.errors import (
    ApplicationFailure,
    NotAuthenticatedError,
    ProtocolFailure,
    SessionError,
    TransportFailure,
)
from chimpvine.lib.events import ReadyListener, ReadyNotifier
from chimpvine.lib.origin import OriginLookup, resolve_origin, settings_lookup
from chimpvine.models import (
    EndReport,
    GameProgress,
    GameResultResponse,
    NonceResponse,
    ReportResponse,
    SessionState,
    StartReport,
    local_timestamp,
)
from chimpvine.version import CLIENT_VERSION

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

NONCE_HEADER = "X-WP-Nonce"

NONCE_PATH = "/wp-admin/admin-ajax.php"
PROGRESS_PATH = "/wp-json/chimpvine/v1/get-game-result"
START_REPORT_PATH = "/wp-json/chimpvine/v1/submit-game-result"
END_REPORT_PATH = "/wp-json/chimpvine/v1/update-game-result"


def build_http_client(
    config: Settings, *, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """Return an AsyncClient with session defaults.

    Redirects are followed, since WordPress sites commonly redirect http
    to https or append a trailing slash.
    """
    return httpx.AsyncClient(
        timeout=config.http_timeout_seconds,
        headers={"User-Agent": f"chimpvine-session/{CLIENT_VERSION}"},
        follow_redirects=True,
        transport=transport,
    )


class SessionClient:
    """Owns one game session's authentication and telemetry state.

    Args:
        config: Session settings (game id, origin mode, API bypass).
        origin_lookup: Embedding-context lookup. Defaults to reading
            ``config.origin``.
        http_client: Client to send requests with. When omitted, one is
            created and closed by ``aclose()``.
        clock: Source of local wall-clock time for report timestamps.
    """

    def __init__(
        self,
        config: Settings,
        *,
        origin_lookup: OriginLookup | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config
        self.origin_lookup = origin_lookup or settings_lookup(config)
        self.clock = clock

        self._owns_client = http_client is None
        self._http = http_client or build_http_client(config)

        self.origin: str | None = None
        self.nonce: str | None = None
        self.user_instance = 0
        self.progress = GameProgress()
        self.state = (
            SessionState.DISABLED
            if config.api_disabled
            else SessionState.UNAUTHENTICATED
        )

        self.last_response: str | None = None
        self.last_error: SessionError | None = None

        self._ready = ReadyNotifier()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this session created it."""
        if self._owns_client:
            await self._http.aclose()

    @property
    def is_ready(self) -> bool:
        """Whether the ready notification has fired for the current state."""
        return self.state in (SessionState.READY, SessionState.DISABLED) and (
            self._ready.notify_count > 0
        )

    # -------------------------------------------------------------------------
    # Ready notification
    # -------------------------------------------------------------------------

    def on_ready(self, listener: ReadyListener) -> Callable[[], None]:
        """Register a ready listener. Returns a callable that removes it."""
        return self._ready.subscribe(listener)

    async def wait_ready(self) -> GameProgress:
        """Wait for the handshake to finish.

        Returns:
            Snapshot of the progress at the time the session became ready.

        Raises:
            SessionFailedError: If the handshake failed.
        """
        return await self._ready.wait()

    # -------------------------------------------------------------------------
    # Handshake
    # -------------------------------------------------------------------------

    async def start(self) -> GameProgress:
        """Resolve the origin and run the nonce/progress handshake.

        With the API disabled no request is made: the session is marked
        ready immediately and default progress is returned.
        """
        if self.config.api_disabled:
            logger.info("API disabled, skipping authentication")
            self._ready.notify(self.progress)
            return self.progress

        try:
            self.origin = resolve_origin(self.config, self.origin_lookup)
        except SessionError as e:
            self._fail(e)
            return self.progress

        logger.info(
            "Starting session for game %d at %s", self.config.game_id, self.origin
        )
        await self.fetch_nonce()
        return self.progress

    async def fetch_nonce(self) -> bool:
        """Obtain a REST nonce, then fetch progress as the continuation.

        Returns:
            True if the nonce was obtained.
        """
        if self.config.api_disabled:
            return True

        try:
            response = await self._request(
                "GET", NONCE_PATH, params={"action": "get_rest_nonce"}
            )
            body = self._parse(response, NonceResponse)
            if not body.success:
                raise ApplicationFailure(
                    "Nonce request was refused", body=response.text
                )
            if not body.data:
                raise ApplicationFailure(
                    "Nonce response carried no nonce", body=response.text
                )
        except SessionError as e:
            self._fail(e)
            return False

        self.nonce = body.data
        self.state = SessionState.AUTHENTICATED
        logger.debug("Obtained REST nonce")

        await self.fetch_progress()
        return True

    async def fetch_progress(self) -> bool:
        """Fetch the saved level for this game.

        On success the ready notification fires, once per successful
        fetch.

        Returns:
            True if progress was fetched.
        """
        if self.config.api_disabled:
            return True

        try:
            response = await self._request(
                "GET",
                PROGRESS_PATH,
                params={"gameid": self.config.game_id},
                headers=self._auth_headers(),
            )
            body = self._parse(response, GameResultResponse)
        except SessionError as e:
            self._fail(e)
            return False

        self.progress.level = body.level
        self.state = SessionState.READY
        logger.info("Session ready at level %d", body.level)
        self._ready.notify(self.progress)
        return True

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    async def report_start(
        self,
        level: int,
        sound_on_off: bool | None = None,
        music_on_off: bool | None = None,
    ) -> int | None:
        """Report that a level has started.

        Sound and music flags default to the values in ``progress``.

        Returns:
            The user instance issued by the server, or None on failure.
        """
        if self.config.api_disabled:
            return self.user_instance

        if sound_on_off is None:
            sound_on_off = self.progress.sound_on_off
        if music_on_off is None:
            music_on_off = self.progress.music_on_off

        report = StartReport(
            game_id=self.config.game_id,
            level=level,
            started_at=local_timestamp(self.clock()),
            sound_on_off=int(sound_on_off),
            music_on_off=int(music_on_off),
        )
        return await self._report(START_REPORT_PATH, report)

    async def report_end(
        self,
        points_earned: int | None = None,
        total_points: int | None = None,
        level_data: str | None = None,
        is_level_completed: bool | None = None,
    ) -> int | None:
        """Report that a level has ended.

        Correlated with the latest start report through ``user_instance``.
        Omitted arguments default to the values in ``progress``.

        Returns:
            The user instance issued by the server, or None on failure.
        """
        if self.config.api_disabled:
            return self.user_instance

        p = self.progress
        report = EndReport(
            userinstance=self.user_instance,
            points_earned=p.points_earned if points_earned is None else points_earned,
            total_points=p.total_points if total_points is None else total_points,
            ended_at=local_timestamp(self.clock()),
            level_passed=int(
                p.is_level_completed
                if is_level_completed is None
                else is_level_completed
            ),
            level_data=p.level_data if level_data is None else level_data,
        )
        return await self._report(END_REPORT_PATH, report)

    async def _report(self, path: str, report: BaseModel) -> int | None:
        try:
            if self.config.require_auth and self.nonce is None:
                raise NotAuthenticatedError(
                    f"Refusing to send {type(report).__name__} before authentication"
                )
            response = await self._request(
                "POST",
                path,
                content=report.model_dump_json(by_alias=True),
                headers={"Content-Type": "application/json", **self._auth_headers()},
            )
            body = self._parse(response, ReportResponse)
        except SessionError as e:
            self._log_failure(e)
            return None

        self.user_instance = body.userinstance
        logger.debug(
            "%s accepted, user instance %d", type(report).__name__, body.userinstance
        )
        return self.user_instance

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        return {NONCE_HEADER: self.nonce or ""}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str | int] | None = None,
        headers: dict[str, str] | None = None,
        content: str | None = None,
    ) -> httpx.Response:
        """Send a request to the origin.

        Raises:
            TransportFailure: If no response was received or its body could
                not be read.
            ProtocolFailure: If the status is not 2xx.
        """
        url = f"{self.origin or ''}{path}"
        try:
            response = await self._http.request(
                method, url, params=params, headers=headers, content=content
            )
        except httpx.RequestError as e:
            raise TransportFailure(f"{method} {path} failed: {e}") from e

        self.last_response = response.text
        if not response.is_success:
            raise ProtocolFailure(
                f"{method} {path} returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return response

    @staticmethod
    def _parse(response: httpx.Response, model: type[T]) -> T:
        """Validate a response body.

        Raises:
            ApplicationFailure: If the body does not match ``model``.
        """
        try:
            return model.model_validate_json(response.text)
        except ValidationError as e:
            raise ApplicationFailure(
                f"Unexpected {model.__name__} body: {e.error_count()} error(s)",
                body=response.text,
            ) from e

    # -------------------------------------------------------------------------
    # Failure handling
    # -------------------------------------------------------------------------

    def _log_failure(self, error: SessionError) -> None:
        self.last_error = error
        if error.body:
            logger.error(
                "%s: %s (response: %s)", type(error).__name__, error, error.body
            )
        else:
            logger.error("%s: %s", type(error).__name__, error)

    def _fail(self, error: SessionError) -> None:
        self._log_failure(error)
        self.state = SessionState.FAILED
        self._ready.fail(error)
