"""Report view model consumed by the rendering layer."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlparse

from ..api.schemas import Evidence, EvidenceKind, Issue, Report, ReportMeta, TopFix
from .breakdown import ScoreBreakdownItem, score_breakdown
from .categories import CategoryGroup, SeverityFilter, display_kind, filter_by_severity, group_by_category
from .data_sharing import DataSharingLevel, resolve_data_sharing
from .details import detail_string
from .grading import ScoreBand, letter_grade, score_band
from .signals import TlsStatus, collect_domains, count_kind, tls_status

TOP_FIXES_SHOWN = 3
SEVERITY_ORDER = ("critical", "high", "medium", "low", "info")


@dataclass(frozen=True)
class EvidenceView:
    evidence: Evidence
    display_kind: str
    category: str
    domain: Optional[str] = None
    url: Optional[str] = None


@dataclass
class ReportStats:
    tracker_domains: List[str] = field(default_factory=list)
    thirdparty_domains: List[str] = field(default_factory=list)
    cookie_count: int = 0
    insecure_count: int = 0
    tls_grade: Optional[str] = None
    severity_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def tracker_count(self) -> int:
        return len(self.tracker_domains)

    @property
    def thirdparty_count(self) -> int:
        return len(self.thirdparty_domains)


@dataclass
class ReportView:
    scan_id: str
    slug: str
    label: Optional[str]
    score: Optional[float]
    score_band: ScoreBand
    grade: Optional[str]
    summary: Optional[str]
    target_type: str
    domain: str
    share_url: str
    share_message: str
    data_sharing: DataSharingLevel
    tls: TlsStatus
    stats: ReportStats
    categories: List[CategoryGroup]
    breakdown: List[ScoreBreakdownItem]
    evidence: List[EvidenceView]
    issues: List[Issue]
    top_fixes: List[TopFix]
    meta: Optional[ReportMeta] = None
    wallet_risk: Optional[str] = None

    @property
    def score_label(self) -> str:
        return self.score_band.label


def resolve_domain(report: Report) -> str:
    """``meta.domain``, else the hostname of the scanned input, else the slug."""
    if report.meta is not None and report.meta.domain:
        return report.meta.domain
    candidate = report.scan.normalized_input or report.scan.input or ""
    try:
        hostname = urlparse(candidate).hostname
    except ValueError:
        hostname = None
    return hostname or report.scan.slug


def share_url(slug: str, app_origin: Optional[str] = None) -> str:
    path = f"/r/{quote(slug, safe='')}"
    if not app_origin:
        return path
    return f"{app_origin.rstrip('/')}{path}"


def severity_counts(issues: List[Issue]) -> Dict[str, int]:
    counts = {severity: 0 for severity in SEVERITY_ORDER}
    for issue in issues:
        counts[issue.severity] += 1
    return counts


def wallet_risk(scan_meta: Any, target_type: str) -> Optional[str]:
    if target_type != "address":
        return None
    value = detail_string(scan_meta, "walletRisk")
    return value or "None"


def build_report_view(report: Report, app_origin: Optional[str] = None) -> ReportView:
    """Derive everything the report screen shows from one report."""
    evidence = report.evidence
    stats = ReportStats(
        tracker_domains=collect_domains(evidence, EvidenceKind.TRACKER),
        thirdparty_domains=collect_domains(evidence, EvidenceKind.THIRDPARTY),
        cookie_count=count_kind(evidence, EvidenceKind.COOKIE),
        insecure_count=count_kind(evidence, EvidenceKind.INSECURE, EvidenceKind.MIXED_CONTENT),
        severity_counts=severity_counts(list(report.issues)),
    )
    tls = tls_status(evidence)
    stats.tls_grade = tls.grade

    categories = group_by_category(evidence)
    category_of = {id(item): group.name for group in categories for item in group.items}
    views = [
        EvidenceView(
            evidence=item,
            display_kind=display_kind(item.kind),
            category=category_of[id(item)],
            domain=detail_string(item.details, "domain"),
            url=detail_string(item.details, "url"),
        )
        for item in evidence
    ]

    score = report.scan.score
    domain = resolve_domain(report)

    return ReportView(
        scan_id=report.scan.id,
        slug=report.scan.slug,
        label=report.scan.label,
        score=score,
        score_band=score_band(score),
        grade=letter_grade(score) if score is not None else None,
        summary=report.scan.summary,
        target_type=report.scan.target_type,
        domain=domain,
        share_url=share_url(report.scan.slug, app_origin),
        share_message=report.scan.share_message or f"Privacy scan for {domain}",
        data_sharing=resolve_data_sharing(report),
        tls=tls,
        stats=stats,
        categories=categories,
        breakdown=score_breakdown(report),
        evidence=views,
        issues=list(report.issues),
        top_fixes=list(report.top_fixes[:TOP_FIXES_SHOWN]),
        meta=report.meta,
        wallet_risk=wallet_risk(report.scan.meta, report.scan.target_type),
    )


def export_report(
    report: Report,
    severity_filter: SeverityFilter = SeverityFilter.ALL,
    exported_at: Optional[datetime] = None
) -> Dict[str, Any]:
    """
    JSON-ready export of a report's evidence, narrowed by severity.

    Args:
        report: report to export
        severity_filter: ``all``, ``high``, ``medium`` or ``low``; unknown values mean ``all``
        exported_at: export timestamp, defaults to now (UTC)
    """
    severity_filter = SeverityFilter.parse(severity_filter)
    exported_at = exported_at or datetime.now(timezone.utc)
    scan = report.scan
    return {
        "scan": {
            "id": scan.id,
            "input": scan.input,
            "score": scan.score,
            "label": scan.label,
            "slug": scan.slug,
        },
        "filter": severity_filter.value,
        "exportedAt": exported_at.isoformat(),
        "evidence": [
            item.model_dump(mode="json", by_alias=True)
            for item in filter_by_severity(report.evidence, severity_filter)
        ],
    }
