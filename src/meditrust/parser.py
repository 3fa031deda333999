"""Decoding of raw scanned payloads into scan records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Union

from .models import UNKNOWN, ScanRecord

FIELD_DELIMITER = "|"


@dataclass(frozen=True, slots=True)
class ParsedOk:
    record: ScanRecord


@dataclass(frozen=True, slots=True)
class MalformedPayload:
    raw: str
    reason: str


ParseOutcome = Union[ParsedOk, MalformedPayload]


class MalformedPayloadError(ValueError):
    """Raised by :func:`parse` when a payload cannot yield a scan record."""

    def __init__(self, outcome: MalformedPayload) -> None:
        super().__init__(outcome.reason)
        self.raw = outcome.raw
        self.reason = outcome.reason


def parse_payload(raw: str) -> ParseOutcome:
    """Split ``manufacturer|batch|expiry|name`` into a :class:`ScanRecord`.

    Missing or blank trailing fields fall back to ``"Unknown"`` (or ``None``
    for the product name). The payload is malformed only when both the
    manufacturer and the batch are blank.
    """

    if not raw:
        return MalformedPayload(raw="", reason="empty payload")

    fields = [part.strip() for part in raw.split(FIELD_DELIMITER)]
    manufacturer = _field(fields, 0)
    batch = _field(fields, 1)
    if not manufacturer and not batch:
        return MalformedPayload(raw=raw, reason="manufacturer and batch are both empty")

    return ParsedOk(
        ScanRecord(
            manufacturer_id=manufacturer or UNKNOWN,
            batch_id=batch or UNKNOWN,
            expiry_raw=_field(fields, 2) or UNKNOWN,
            product_name=_field(fields, 3) or None,
            raw=raw,
        )
    )


def parse(raw: str) -> ScanRecord:
    outcome = parse_payload(raw)
    if isinstance(outcome, MalformedPayload):
        raise MalformedPayloadError(outcome)
    return outcome.record


def _field(fields: List[str], index: int) -> Optional[str]:
    if index < len(fields):
        return fields[index]
    return None


__all__ = [
    "FIELD_DELIMITER",
    "ParsedOk",
    "MalformedPayload",
    "ParseOutcome",
    "MalformedPayloadError",
    "parse_payload",
    "parse",
]
