"""MediTrust pharmaceutical verification toolkit."""

from .authenticity import AuthenticityChecker
from .client import RemoteOk, RemoteUnavailable, RemoteVerifier, ReportSubmissionError
from .config import ProjectConfig, load_config
from .expiry import ExpiryCalculator
from .models import (
    CounterfeitReport,
    ExpiryAssessment,
    HeadlineStatus,
    ScanRecord,
    VerificationResult,
    headline_status,
)
from .parser import MalformedPayload, MalformedPayloadError, ParsedOk, parse, parse_payload
from .pipeline import VerificationPipeline
from .session import ScanSession, SessionState, SessionStatus

__all__ = [
    "AuthenticityChecker",
    "RemoteOk",
    "RemoteUnavailable",
    "RemoteVerifier",
    "ReportSubmissionError",
    "ProjectConfig",
    "load_config",
    "ExpiryCalculator",
    "CounterfeitReport",
    "ExpiryAssessment",
    "HeadlineStatus",
    "ScanRecord",
    "VerificationResult",
    "headline_status",
    "MalformedPayload",
    "MalformedPayloadError",
    "ParsedOk",
    "parse",
    "parse_payload",
    "VerificationPipeline",
    "ScanSession",
    "SessionState",
    "SessionStatus",
]
