"""Scan service API package."""
from .models import (
    ApiVersion,
    ApiException,
    HttpFailure,
    NotFoundError,
    RateLimitedError,
    RateLimitExhaustedError,
    SchemaError,
    NetworkError,
)
from .schemas import (
    EvidenceKind,
    Evidence,
    Issue,
    TopFix,
    Scan,
    Report,
    ReportMeta,
    ScanQueued,
    ScanStatus,
    RecentReportItem,
    RecentReports,
)
from .http import EnvelopeClient
from .adapter import Endpoint, SchemaAdapter
from .client import ScanApiClient

__all__ = [
    "ApiVersion",
    "ApiException",
    "HttpFailure",
    "NotFoundError",
    "RateLimitedError",
    "RateLimitExhaustedError",
    "SchemaError",
    "NetworkError",
    "EvidenceKind",
    "Evidence",
    "Issue",
    "TopFix",
    "Scan",
    "Report",
    "ReportMeta",
    "ScanQueued",
    "ScanStatus",
    "RecentReportItem",
    "RecentReports",
    "EnvelopeClient",
    "Endpoint",
    "SchemaAdapter",
    "ScanApiClient",
]
