"""Orchestration of remote verification with a local fallback."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Protocol

from .authenticity import AuthenticityChecker
from .client import RemoteOk, RemoteOutcome, RemoteUnavailable
from .config import ProjectConfig
from .expiry import ExpiryCalculator, display_expiry
from .models import ScanRecord, VerificationResult, now_utc

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Remote verification unavailable — using local assessment"


class Verifier(Protocol):
    async def verify(self, record: ScanRecord) -> RemoteOutcome: ...


class VerificationPipeline:
    """Produces exactly one :class:`VerificationResult` per scan record.

    The remote service is tried once. Any unavailability or unexpected error
    degrades to the local heuristic; :meth:`run` never raises.
    """

    def __init__(
        self,
        remote: Optional[Verifier],
        authenticity: AuthenticityChecker,
        expiry: ExpiryCalculator,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._remote = remote
        self._authenticity = authenticity
        self._expiry = expiry
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        remote: Optional[Verifier],
        config: ProjectConfig,
        clock: Callable[[], datetime] = now_utc,
    ) -> "VerificationPipeline":
        policy = config.policy
        return cls(
            remote=remote if config.service.enabled else None,
            authenticity=AuthenticityChecker(
                trusted_manufacturers=policy.trusted_manufacturers,
                banned_substrings=policy.banned_substrings,
            ),
            expiry=ExpiryCalculator(near_expiry_days=policy.near_expiry_days),
            clock=clock,
        )

    async def run(self, record: ScanRecord) -> VerificationResult:
        outcome = await self._attempt_remote(record)
        if isinstance(outcome, RemoteOk):
            logger.debug("Remote verdict received for batch %s", record.batch_id)
            return outcome.result
        logger.info("Falling back to local assessment: %s", outcome.reason)
        return self.assess_locally(record)

    def assess_locally(self, record: ScanRecord) -> VerificationResult:
        assessment = self._expiry.assess(record.expiry_raw, self._clock())
        return VerificationResult(
            authentic=self._authenticity.is_authentic(record.manufacturer_id),
            expired=assessment.is_expired,
            near_expiry=assessment.is_near_expiry,
            manufacturer=record.manufacturer_id,
            batch_number=record.batch_id,
            expiry_date=display_expiry(record.expiry_raw, assessment),
            verified_remotely=False,
            message=FALLBACK_MESSAGE,
        )

    async def _attempt_remote(self, record: ScanRecord) -> RemoteOutcome:
        if self._remote is None:
            return RemoteUnavailable("remote verification disabled")
        try:
            outcome = await self._remote.verify(record)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Remote verifier raised unexpectedly", exc_info=True)
            return RemoteUnavailable(f"unexpected error: {exc}")
        if isinstance(outcome, RemoteOk):
            if not outcome.result.verified_remotely:
                return RemoteOk(replace(outcome.result, verified_remotely=True))
            return outcome
        if isinstance(outcome, RemoteUnavailable):
            return outcome
        return RemoteUnavailable(f"unexpected verifier outcome: {outcome!r}")


__all__ = ["FALLBACK_MESSAGE", "Verifier", "VerificationPipeline"]
