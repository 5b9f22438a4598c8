"""Client for the Privacy Advisor scan service."""
from .api import ApiVersion, ScanApiClient, SchemaAdapter, EnvelopeClient
from .polling import PollingController, ScanJob, JobState
from .scoring import build_report_view, ReportView
from .utils import ClientSettings

__version__ = "0.1.0"

__all__ = [
    "ApiVersion",
    "ScanApiClient",
    "SchemaAdapter",
    "EnvelopeClient",
    "PollingController",
    "ScanJob",
    "JobState",
    "build_report_view",
    "ReportView",
    "ClientSettings",
]
