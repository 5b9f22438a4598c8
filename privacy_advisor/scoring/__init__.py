"""Evidence scoring engine."""
from .details import EvidenceDetails, UnknownDetails, parse_details, evidence_details
from .data_sharing import DataSharingLevel, compute_data_sharing_level, resolve_data_sharing
from .signals import TlsState, TlsStatus, collect_domains, tls_grade, tls_status
from .categories import (
    CategoryGroup,
    SeverityFilter,
    categorize,
    display_kind,
    filter_by_severity,
    group_by_category,
)
from .breakdown import ScoreBreakdownItem, score_breakdown
from .grading import ScoreBand, letter_grade, score_band
from .view import ReportView, build_report_view, export_report

__all__ = [
    "EvidenceDetails",
    "UnknownDetails",
    "parse_details",
    "evidence_details",
    "DataSharingLevel",
    "compute_data_sharing_level",
    "resolve_data_sharing",
    "TlsState",
    "TlsStatus",
    "collect_domains",
    "tls_grade",
    "tls_status",
    "CategoryGroup",
    "SeverityFilter",
    "categorize",
    "display_kind",
    "filter_by_severity",
    "group_by_category",
    "ScoreBreakdownItem",
    "score_breakdown",
    "ScoreBand",
    "letter_grade",
    "score_band",
    "ReportView",
    "build_report_view",
    "export_report",
]
