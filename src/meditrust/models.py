"""Data models describing scanned products and their verification verdicts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

UNKNOWN = "Unknown"


@dataclass(frozen=True, slots=True)
class ScanRecord:
    """Product identity decoded from one scanned payload."""

    manufacturer_id: str
    batch_id: str
    expiry_raw: str
    product_name: Optional[str]
    raw: str


@dataclass(frozen=True, slots=True)
class ExpiryAssessment:
    """Expiry string resolved against a reference instant.

    ``resolved_instant`` is ``None`` when the expiry could not be parsed; in
    that case both flags are false and ``days_until_expiry`` is ``None``.
    """

    resolved_instant: Optional[datetime]
    is_expired: bool
    is_near_expiry: bool
    days_until_expiry: Optional[int]

    @property
    def is_resolved(self) -> bool:
        return self.resolved_instant is not None


class HeadlineStatus(str, Enum):
    """Single user-facing classification of a verification result."""

    NOT_AUTHENTIC = "not_authentic"
    EXPIRED = "expired"
    NEAR_EXPIRY = "near_expiry"
    AUTHENTIC = "authentic"

    @property
    def label(self) -> str:
        return _HEADLINE_LABELS[self]

    @property
    def symbol(self) -> str:
        return _HEADLINE_SYMBOLS[self]

    @property
    def colour(self) -> str:
        return _HEADLINE_COLOURS[self]


_HEADLINE_LABELS = {
    HeadlineStatus.NOT_AUTHENTIC: "Counterfeit medicine detected",
    HeadlineStatus.EXPIRED: "Expired medicine",
    HeadlineStatus.NEAR_EXPIRY: "Medicine near expiry",
    HeadlineStatus.AUTHENTIC: "Authentic - safe to use",
}

_HEADLINE_SYMBOLS = {
    HeadlineStatus.NOT_AUTHENTIC: "🚫",
    HeadlineStatus.EXPIRED: "⏳",
    HeadlineStatus.NEAR_EXPIRY: "⚠️",
    HeadlineStatus.AUTHENTIC: "✅",
}

_HEADLINE_COLOURS = {
    HeadlineStatus.NOT_AUTHENTIC: "red",
    HeadlineStatus.EXPIRED: "red",
    HeadlineStatus.NEAR_EXPIRY: "yellow",
    HeadlineStatus.AUTHENTIC: "green",
}


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """Canonical verdict for one scan, consumed by presentation layers."""

    authentic: bool
    expired: bool
    near_expiry: bool
    manufacturer: str
    batch_number: str
    expiry_date: str
    verified_remotely: bool
    message: Optional[str] = None

    @property
    def headline(self) -> HeadlineStatus:
        return headline_status(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "authentic": self.authentic,
            "expired": self.expired,
            "nearExpiry": self.near_expiry,
            "manufacturer": self.manufacturer,
            "batchNumber": self.batch_number,
            "expiryDate": self.expiry_date,
            "verifiedRemotely": self.verified_remotely,
            "message": self.message,
        }


def headline_status(result: VerificationResult) -> HeadlineStatus:
    """Pick the headline: not-authentic > expired > near-expiry > authentic."""

    if not result.authentic:
        return HeadlineStatus.NOT_AUTHENTIC
    if result.expired:
        return HeadlineStatus.EXPIRED
    if result.near_expiry:
        return HeadlineStatus.NEAR_EXPIRY
    return HeadlineStatus.AUTHENTIC


def should_offer_report(result: VerificationResult) -> bool:
    """Reporting is offered for counterfeit or expired products only."""

    return headline_status(result) in {HeadlineStatus.NOT_AUTHENTIC, HeadlineStatus.EXPIRED}


@dataclass(frozen=True, slots=True)
class CounterfeitReport:
    """Payload for the counterfeit report submission endpoint."""

    manufacturer_id: str
    batch_id: str
    expiry_date: str
    reporter_location: str
    additional_notes: str = ""

    @classmethod
    def from_record(
        cls, record: ScanRecord, location: str, notes: str = ""
    ) -> "CounterfeitReport":
        return cls(
            manufacturer_id=record.manufacturer_id,
            batch_id=record.batch_id,
            expiry_date=record.expiry_raw,
            reporter_location=location,
            additional_notes=notes,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "manufacturerId": self.manufacturer_id,
            "batchId": self.batch_id,
            "expiryDate": self.expiry_date,
            "reporterLocation": self.reporter_location,
            "additionalNotes": self.additional_notes,
        }


def now_utc() -> datetime:
    """Return the current UTC timestamp with timezone info."""

    return datetime.now(timezone.utc)


__all__ = [
    "UNKNOWN",
    "ScanRecord",
    "ExpiryAssessment",
    "HeadlineStatus",
    "VerificationResult",
    "CounterfeitReport",
    "headline_status",
    "should_offer_report",
    "now_utc",
]
