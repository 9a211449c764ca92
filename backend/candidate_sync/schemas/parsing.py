"""
Resume parsing schemas - poll session state and poll outcomes
"""
from enum import Enum
from typing import Any, Dict, Optional
from pydantic import BaseModel


class ParseStatus(str, Enum):
    """Lifecycle of one resume parse cycle."""
    IDLE = "idle"
    TRIGGERING = "triggering"
    PARSING = "parsing"  # polling the status endpoint
    PARSED = "parsed"
    FAILED = "failed"
    TIMEOUT = "timeout"


TERMINAL_STATUSES = (ParseStatus.PARSED, ParseStatus.FAILED, ParseStatus.TIMEOUT)


class ParseFailureReason(str, Enum):
    ERROR = "error"
    NO_DATA = "no_data"
    TIMEOUT = "timeout"


class ParseSession(BaseModel):
    slug: str
    attempts_used: int = 0
    status: ParseStatus = ParseStatus.IDLE
    last_error: Optional[str] = None
    failure_reason: Optional[ParseFailureReason] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def in_flight(self) -> bool:
        return self.status in (ParseStatus.TRIGGERING, ParseStatus.PARSING)


class PollResult(BaseModel):
    success: bool
    data: Optional[Dict[str, Any]] = None
    failure_reason: Optional[ParseFailureReason] = None
    error_message: Optional[str] = None
    cancelled: bool = False

    @property
    def can_retry(self) -> bool:
        return self.failure_reason == ParseFailureReason.TIMEOUT


class ParseResponse(BaseModel):
    session: ParseSession
    result: Optional[PollResult] = None
    can_retry: bool = False
    document: Optional[Dict[str, Any]] = None
