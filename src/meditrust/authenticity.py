"""Local whitelist heuristic used when the verification service is unavailable."""

from __future__ import annotations

from typing import Iterable

DEFAULT_TRUSTED_MANUFACTURERS = frozenset(
    {"pharmacorp", "medlife", "healthcare", "biopharm", "medisafe"}
)
DEFAULT_BANNED_SUBSTRINGS = frozenset(
    {"fake", "counterfeit", "unknown", "blackmarket", "illegal"}
)


class AuthenticityChecker:
    """Default-deny manufacturer check.

    An identifier is authentic only if it is a trusted manufacturer and does
    not contain any banned substring. Matching is case-insensitive.
    """

    def __init__(
        self,
        trusted_manufacturers: Iterable[str] = DEFAULT_TRUSTED_MANUFACTURERS,
        banned_substrings: Iterable[str] = DEFAULT_BANNED_SUBSTRINGS,
    ) -> None:
        self._trusted = frozenset(_normalize(name) for name in trusted_manufacturers)
        self._banned = tuple(
            sorted({_normalize(fragment) for fragment in banned_substrings if fragment.strip()})
        )

    def is_authentic(self, manufacturer_id: str) -> bool:
        identifier = _normalize(manufacturer_id or "")
        if any(fragment in identifier for fragment in self._banned):
            return False
        return identifier in self._trusted


def _normalize(value: str) -> str:
    return value.strip().lower()


__all__ = [
    "DEFAULT_TRUSTED_MANUFACTURERS",
    "DEFAULT_BANNED_SUBSTRINGS",
    "AuthenticityChecker",
]
