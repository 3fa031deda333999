"""State machine for one scan-to-result cycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from .models import ScanRecord, VerificationResult
from .parser import MalformedPayload, parse_payload
from .pipeline import VerificationPipeline

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    VERIFYING = "verifying"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class InvalidTransition(RuntimeError):
    """Raised when a transition is attempted from a state that does not allow it."""

    def __init__(self, action: str, status: SessionStatus) -> None:
        super().__init__(f"cannot {action} while {status.value}")
        self.action = action
        self.status = status


@dataclass(frozen=True, slots=True)
class SessionState:
    status: SessionStatus = SessionStatus.IDLE
    record: Optional[ScanRecord] = None
    result: Optional[VerificationResult] = None
    error: Optional[str] = None


def accepts_scan(state: SessionState) -> bool:
    return state.status is SessionStatus.IDLE


def start_scan(state: SessionState) -> SessionState:
    _require(state, "start a scan", SessionStatus.IDLE)
    return SessionState(status=SessionStatus.SCANNING)


def record_parsed(state: SessionState, record: ScanRecord) -> SessionState:
    _require(state, "accept a record", SessionStatus.SCANNING)
    return replace(state, status=SessionStatus.VERIFYING, record=record)


def parse_failed(state: SessionState, reason: str) -> SessionState:
    """Malformed input is retryable: the session goes back to idle."""

    _require(state, "reject a payload", SessionStatus.SCANNING)
    return SessionState(status=SessionStatus.IDLE, error=reason)


def verification_settled(state: SessionState, result: VerificationResult) -> SessionState:
    _require(state, "complete verification", SessionStatus.VERIFYING)
    return replace(state, status=SessionStatus.COMPLETED, result=result)


def fail(state: SessionState, reason: str) -> SessionState:
    _require(state, "fail", SessionStatus.SCANNING, SessionStatus.VERIFYING)
    return replace(state, status=SessionStatus.FAILED, error=reason)


def cancel(state: SessionState) -> SessionState:
    if state.status is SessionStatus.CANCELLED:
        return state
    return replace(state, status=SessionStatus.CANCELLED)


def reset(state: SessionState) -> SessionState:
    _require(
        state,
        "reset",
        SessionStatus.IDLE,
        SessionStatus.COMPLETED,
        SessionStatus.FAILED,
    )
    return SessionState()


def _require(state: SessionState, action: str, *allowed: SessionStatus) -> None:
    if state.status not in allowed:
        raise InvalidTransition(action, state.status)


class ScanSession:
    """Drives :class:`SessionState` through one scan using a pipeline.

    At most one verification is in flight: scans submitted while the session
    is not idle are ignored. After :meth:`cancel`, a verification that is
    still running is allowed to finish but its result is dropped.
    """

    def __init__(
        self,
        pipeline: VerificationPipeline,
        on_result: Optional[Callable[[ScanRecord, VerificationResult], None]] = None,
    ) -> None:
        self._pipeline = pipeline
        self._on_result = on_result
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def last_error(self) -> Optional[str]:
        return self._state.error

    async def submit(self, raw: str) -> SessionState:
        """Handle one decoded scan and return the resulting state."""

        if not accepts_scan(self._state):
            logger.info("Ignoring scan while session is %s", self._state.status.value)
            return self._state

        self._advance(start_scan(self._state))
        try:
            outcome = parse_payload(raw)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Payload parsing failed unexpectedly")
            return self._advance(fail(self._state, str(exc)))

        if isinstance(outcome, MalformedPayload):
            logger.debug("Malformed payload: %s", outcome.reason)
            return self._advance(parse_failed(self._state, outcome.reason))

        self._advance(record_parsed(self._state, outcome.record))
        try:
            result = await self._pipeline.run(outcome.record)
        except Exception as exc:  # noqa: BLE001
            if self._state.status is not SessionStatus.VERIFYING:
                return self._state
            logger.exception("Verification failed unexpectedly")
            return self._advance(fail(self._state, str(exc)))

        if self._state.status is not SessionStatus.VERIFYING:
            logger.info("Discarding result for batch %s after cancellation", outcome.record.batch_id)
            return self._state

        self._advance(verification_settled(self._state, result))
        if self._on_result is not None:
            self._on_result(outcome.record, result)
        return self._state

    def cancel(self) -> SessionState:
        return self._advance(cancel(self._state))

    def reset(self) -> SessionState:
        return self._advance(reset(self._state))

    def _advance(self, new_state: SessionState) -> SessionState:
        if new_state.status is not self._state.status:
            logger.debug(
                "Session %s -> %s", self._state.status.value, new_state.status.value
            )
        self._state = new_state
        return new_state


__all__ = [
    "SessionStatus",
    "SessionState",
    "InvalidTransition",
    "accepts_scan",
    "start_scan",
    "record_parsed",
    "parse_failed",
    "verification_settled",
    "fail",
    "cancel",
    "reset",
    "ScanSession",
]
