"""Async client for the remote medicine verification service."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError

from .models import CounterfeitReport, ScanRecord, VerificationResult

logger = logging.getLogger(__name__)

VERIFY_PATH = "/api/verify-medicine"
REPORT_PATH = "/api/report-counterfeit"


@dataclass(frozen=True, slots=True)
class RemoteOk:
    result: VerificationResult


@dataclass(frozen=True, slots=True)
class RemoteUnavailable:
    reason: str


RemoteOutcome = Union[RemoteOk, RemoteUnavailable]


class ReportSubmissionError(RuntimeError):
    """Raised when a counterfeit report could not be delivered."""


class _VerdictPayload(BaseModel):
    """Expected shape of the verification service response body."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    authentic: StrictBool
    expired: StrictBool
    near_expiry: StrictBool = Field(alias="nearExpiry")
    manufacturer: Optional[str] = None
    batch_number: Optional[str] = Field(default=None, alias="batchNumber")
    expiry_date: Optional[str] = Field(default=None, alias="expiryDate")
    message: Optional[str] = None


class RemoteVerifier:
    """Wrapper around the verification service HTTP API.

    Every call issues exactly one request. Nothing is retried here; the
    caller decides what to do with an unavailable outcome.
    """

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        async with self._lock:
            if self._client is None:
                headers = {"Content-Type": "application/json"}
                if self._api_key:
                    headers["Authorization"] = f"Bearer {self._api_key}"
                kwargs: Dict[str, Any] = {
                    "base_url": self._base_url,
                    "headers": headers,
                    "transport": self._transport,
                }
                if self._timeout is not None:
                    kwargs["timeout"] = self._timeout
                self._client = httpx.AsyncClient(**kwargs)
            return self._client

    async def close(self) -> None:
        """Dispose the underlying HTTP client."""

        async with self._lock:
            if self._client is not None:
                await self._client.aclose()
                self._client = None

    async def verify(self, record: ScanRecord) -> RemoteOutcome:
        """Ask the service for a verdict on ``record``.

        Timeouts, transport errors, non-2xx statuses and bodies that do not
        match the expected verdict shape all yield :class:`RemoteUnavailable`.
        """

        client = await self._get_client()
        payload = {
            "manufacturerId": record.manufacturer_id,
            "batchId": record.batch_id,
            "expiryDate": record.expiry_raw,
        }
        try:
            response = await client.post(VERIFY_PATH, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as exc:
            return _unavailable(f"request timed out: {exc.__class__.__name__}")
        except httpx.HTTPStatusError as exc:
            return _unavailable(f"service responded with HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            return _unavailable(f"transport error: {exc}")
        except ValueError:
            return _unavailable("response body is not valid JSON")

        if not isinstance(body, dict):
            return _unavailable("response body is not a JSON object")
        try:
            verdict = _VerdictPayload.model_validate(body)
        except ValidationError as exc:
            return _unavailable(f"unexpected response shape ({exc.error_count()} errors)")

        return RemoteOk(
            VerificationResult(
                authentic=verdict.authentic,
                expired=verdict.expired,
                near_expiry=verdict.near_expiry,
                manufacturer=verdict.manufacturer or record.manufacturer_id,
                batch_number=verdict.batch_number or record.batch_id,
                expiry_date=verdict.expiry_date or record.expiry_raw,
                verified_remotely=True,
                message=verdict.message,
            )
        )

    async def submit_report(self, report: CounterfeitReport) -> None:
        """Send a counterfeit report. Raises :class:`ReportSubmissionError` on failure."""

        client = await self._get_client()
        try:
            response = await client.post(REPORT_PATH, json=report.to_payload())
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Counterfeit report submission failed: %s", exc)
            raise ReportSubmissionError(str(exc)) from exc

    async def __aenter__(self) -> "RemoteVerifier":
        await self._get_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()


def _unavailable(reason: str) -> RemoteUnavailable:
    logger.warning("Remote verification unavailable: %s", reason)
    return RemoteUnavailable(reason)


__all__ = [
    "VERIFY_PATH",
    "REPORT_PATH",
    "RemoteOk",
    "RemoteUnavailable",
    "RemoteOutcome",
    "ReportSubmissionError",
    "RemoteVerifier",
]
