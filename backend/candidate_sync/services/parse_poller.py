"""
Resume parse poller - triggers background parsing and waits for the result.

    idle -> triggering -> parsing -> parsed | failed | timeout
    (any terminal state) --retry--> triggering

The first status check is issued right after the trigger and counts as
attempt 1. Checks are spaced by the poll delay, with no wait after the last.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from ..config import get_settings
from ..exceptions import ApiError, InvalidParseTransitionError, RemoteUnavailableError, SessionExpiredError
from ..schemas.parsing import ParseFailureReason, ParseSession, ParseStatus, PollResult
from .resume_data import extract_user_data_patch

logger = logging.getLogger(__name__)

PARSE_FAILURE_MESSAGE = "Something went wrong with resume parsing."
PARSE_TIMEOUT_MESSAGE = (
    "Resume parsing is taking longer than expected. "
    "You can retry or continue with manual entry."
)
PARSE_NO_DATA_MESSAGE = (
    "Resume was processed but no data could be extracted. "
    "The file may be corrupted or in an unsupported format."
)


def _has_resume_data(response: dict) -> bool:
    return bool(
        response.get("has_resume_data")
        or response.get("hasResumeData")
        or response.get("resume_data")
        or response.get("resumeData")
    )


def _always_active() -> bool:
    return True


class ParseStatusPoller:
    """
    Drives one ParseSession. The session object is the only state; the
    poller can be thrown away and rebuilt around the same session.
    """

    def __init__(
        self,
        api,
        session: ParseSession,
        delay: Optional[float] = None,
        max_attempts: Optional[int] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        log_label: str = "Resume Parser",
    ):
        settings = get_settings()
        self.api = api
        self.session = session
        self.delay = settings.parsing_poll_delay_seconds if delay is None else delay
        self.max_attempts = settings.parsing_max_attempts if max_attempts is None else max_attempts
        self.sleep = sleep
        self.log_label = log_label

    # ========================================================================
    # Transitions
    # ========================================================================

    async def run(self, is_active: Callable[[], bool] = _always_active) -> PollResult:
        """Start a parse cycle from idle (or from a finished cycle)."""
        if self.session.in_flight:
            raise InvalidParseTransitionError("A resume parse is already in progress")
        return await self._cycle(is_active)

    async def retry(self, is_active: Callable[[], bool] = _always_active) -> PollResult:
        """Re-enter the cycle; only allowed once the previous one finished."""
        if not self.session.is_terminal:
            raise InvalidParseTransitionError(
                f"Cannot retry resume parsing from status '{self.session.status.value}'"
            )
        logger.info(f"[{self.log_label}] Retrying resume parse for {self.session.slug}")
        return await self._cycle(is_active)

    def _cancel(self) -> PollResult:
        logger.info(f"[{self.log_label}] Caller went away, stopping poll for {self.session.slug}")
        self.session.status = ParseStatus.IDLE
        return PollResult(success=False, cancelled=True)

    def _finish(self, status: ParseStatus, result: PollResult) -> PollResult:
        self.session.status = status
        self.session.failure_reason = result.failure_reason
        self.session.last_error = result.error_message
        return result

    def _fail(self, reason: ParseFailureReason, message: str) -> PollResult:
        status = ParseStatus.TIMEOUT if reason == ParseFailureReason.TIMEOUT else ParseStatus.FAILED
        return self._finish(
            status,
            PollResult(success=False, failure_reason=reason, error_message=message),
        )

    # ========================================================================
    # Cycle
    # ========================================================================

    async def _cycle(self, is_active: Callable[[], bool]) -> PollResult:
        try:
            return await self._poll(is_active)
        except asyncio.CancelledError:
            self.session.status = ParseStatus.IDLE
            raise

    async def _poll(self, is_active: Callable[[], bool]) -> PollResult:
        slug = self.session.slug
        self.session.status = ParseStatus.TRIGGERING
        self.session.attempts_used = 0
        self.session.last_error = None
        self.session.failure_reason = None

        try:
            await self.api.trigger_parse(slug)
            logger.info(f"[{self.log_label}] Parse triggered for {slug}")
        except SessionExpiredError:
            self.session.status = ParseStatus.IDLE
            raise
        except (ApiError, RemoteUnavailableError) as e:
            # The status endpoint also starts parsing, so keep going
            logger.warning(f"[{self.log_label}] Parse trigger failed: {e}")

        if not is_active():
            return self._cancel()

        self.session.status = ParseStatus.PARSING
        logger.info(
            f"[{self.log_label}] Polling parsing status "
            f"(max {self.max_attempts} attempts, {self.max_attempts * self.delay:g}s)"
        )

        for attempt in range(1, self.max_attempts + 1):
            self.session.attempts_used = attempt
            try:
                response = await self.api.get_parsing_status(slug)
            except SessionExpiredError:
                self.session.status = ParseStatus.IDLE
                raise
            except (ApiError, RemoteUnavailableError) as e:
                if not is_active():
                    return self._cancel()
                logger.warning(f"[{self.log_label}] Parsing status poll error (attempt {attempt}): {e}")
                if attempt == self.max_attempts:
                    return self._fail(ParseFailureReason.ERROR, str(e) or PARSE_FAILURE_MESSAGE)
                response = None

            if not is_active():
                return self._cancel()

            if isinstance(response, dict):
                outcome = self._classify(response, attempt)
                if outcome is not None:
                    return outcome

            if attempt < self.max_attempts:
                await self.sleep(self.delay)
                if not is_active():
                    return self._cancel()

        logger.info(f"[{self.log_label}] Polling timed out after {self.max_attempts} attempts")
        return self._fail(ParseFailureReason.TIMEOUT, PARSE_TIMEOUT_MESSAGE)

    def _classify(self, response: dict, attempt: int) -> Optional[PollResult]:
        """Terminal result for a status response, or None to keep polling."""
        status = str(response.get("parsing_status") or "").lower()

        if status == "parsed" or _has_resume_data(response):
            patch = extract_user_data_patch(response)
            if patch:
                logger.info(f"[{self.log_label}] Resume parsed, sections: {sorted(patch)}")
                return self._finish(ParseStatus.PARSED, PollResult(success=True, data=patch))
            logger.warning(f"[{self.log_label}] Parsing completed but no data found")
            return self._fail(ParseFailureReason.NO_DATA, PARSE_NO_DATA_MESSAGE)

        if status in ("failed", "error"):
            message = str(response.get("error") or response.get("message") or PARSE_FAILURE_MESSAGE)
            logger.error(f"[{self.log_label}] Parsing {status}: {message}")
            return self._fail(ParseFailureReason.ERROR, message)

        if status == "parsing":
            logger.debug(f"[{self.log_label}] Still parsing (attempt {attempt}/{self.max_attempts})")
        else:
            logger.warning(f"[{self.log_label}] Unknown parsing status: '{status}'")
        return None
