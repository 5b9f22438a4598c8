"""Wire models for the scan service.

The ``ApiModel`` classes describe the internal shape, which is also the
shape the current (v2) API sends. The ``Legacy*`` classes describe the v1
contract and are only ever read by the schema adapter.
"""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Tuple, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

ScanState = Literal["queued", "running", "done", "error"]
ScoreLabel = Literal["Safe", "Caution", "High Risk"]
IssueSeverity = Literal["info", "low", "medium", "high", "critical"]
DataSharingValue = Literal["None", "Low", "Medium", "High"]
Timestamp = Union[datetime, str]

MAX_URL_LENGTH = 2048


class EvidenceKind(str, Enum):
    """Known evidence kinds."""
    TRACKER = "tracker"
    THIRDPARTY = "thirdparty"
    COOKIE = "cookie"
    HEADER = "header"
    INSECURE = "insecure"
    TLS = "tls"
    POLICY = "policy"
    FINGERPRINT = "fingerprint"
    MIXED_CONTENT = "mixed-content"

    @classmethod
    def parse(cls, value: Any) -> Optional["EvidenceKind"]:
        try:
            return cls(value)
        except ValueError:
            return None


def _clamp(value: Optional[float], low: float, high: float) -> Optional[float]:
    if value is None:
        return None
    return min(high, max(low, value))


class ApiModel(BaseModel):
    """Base for internal models: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class UrlScanRequest(ApiModel):
    url: str
    force: Optional[bool] = None

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if len(value) > MAX_URL_LENGTH:
            raise ValueError(f"URL longer than {MAX_URL_LENGTH} characters")
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("URL must be an absolute http(s) URL")
        return value


class ScanQueued(ApiModel):
    scan_id: str
    slug: str
    deduped: Optional[bool] = None


class ScanStatus(ApiModel):
    status: ScanState
    progress: Optional[int] = None
    score: Optional[float] = None
    label: Optional[ScoreLabel] = None
    slug: Optional[str] = None
    updated_at: Optional[Timestamp] = None

    @field_validator("progress")
    @classmethod
    def _clamp_progress(cls, value: Optional[int]) -> Optional[int]:
        return _clamp(value, 0, 100)

    @field_validator("score")
    @classmethod
    def _clamp_score(cls, value: Optional[float]) -> Optional[float]:
        return _clamp(value, 0.0, 100.0)


class Evidence(ApiModel):
    """One finding. ``kind`` stays a plain string so unknown kinds still render."""
    id: str
    scan_id: str
    kind: str
    severity: int
    title: str
    details: Any = None
    created_at: Timestamp

    @field_validator("severity")
    @classmethod
    def _clamp_severity(cls, value: int) -> int:
        return _clamp(value, 1, 5)

    @property
    def known_kind(self) -> Optional[EvidenceKind]:
        return EvidenceKind.parse(self.kind)


class IssueReference(ApiModel):
    label: Optional[str] = Field(default=None, max_length=120)
    url: str


class TopFix(ApiModel):
    id: str
    key: Optional[str] = None
    category: str
    severity: IssueSeverity
    title: str
    how_to_fix: Optional[str] = None
    why_it_matters: Optional[str] = None
    references: Tuple[IssueReference, ...] = ()


class Issue(TopFix):
    summary: Optional[str] = None
    sort_weight: Optional[float] = None


def _drop_invalid(value: Any, handler: Any, block: str) -> Any:
    try:
        return handler(value)
    except ValidationError as e:
        logger.debug(f"Dropping invalid {block} block: {e.error_count()} error(s)")
        return None


class Scan(ApiModel):
    id: str
    target_type: str
    input: str
    normalized_input: Optional[str] = None
    status: str
    score: Optional[float] = None
    label: Optional[str] = None
    summary: Optional[str] = None
    slug: str
    source: Optional[str] = None
    started_at: Optional[Timestamp] = None
    finished_at: Optional[Timestamp] = None
    share_message: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None
    created_at: Optional[Timestamp] = None
    updated_at: Optional[Timestamp] = None

    @field_validator("score")
    @classmethod
    def _clamp_score(cls, value: Optional[float]) -> Optional[float]:
        return _clamp(value, 0.0, 100.0)

    @field_validator("meta", mode="wrap")
    @classmethod
    def _optional_meta(cls, value: Any, handler: Any) -> Any:
        return _drop_invalid(value, handler, "scan meta")


class ReportMeta(ApiModel):
    data_sharing: Optional[DataSharingValue] = None
    domain: Optional[str] = None


class Report(ApiModel):
    """Finished scan bundle. Immutable; a re-fetch yields a new object."""
    scan: Scan
    evidence: Tuple[Evidence, ...]
    issues: Tuple[Issue, ...] = ()
    top_fixes: Tuple[TopFix, ...] = ()
    meta: Optional[ReportMeta] = None

    @field_validator("meta", mode="wrap")
    @classmethod
    def _optional_meta(cls, value: Any, handler: Any) -> Any:
        return _drop_invalid(value, handler, "report meta")


class RecentReportItem(ApiModel):
    slug: str
    score: float
    label: str
    domain: str
    created_at: Timestamp
    evidence_count: int = 0


class RecentReports(ApiModel):
    items: Tuple[RecentReportItem, ...]


# Legacy (v1) contract


class LegacyModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LegacyScanQueued(LegacyModel):
    scan_id: str
    report_slug: str
    deduped: Optional[bool] = None


class LegacyScanStatus(LegacyModel):
    status: ScanState
    progress: Optional[int] = None
    score: Optional[float] = None
    label: Optional[str] = None
    report_slug: Optional[str] = None
    updated_at: Optional[Timestamp] = None


class LegacyEvidence(LegacyModel):
    id: str
    scan_id: str
    type: str
    severity: int
    title: str
    details: Any = None
    created_at: Timestamp


class LegacyScan(Scan):
    model_config = ConfigDict(frozen=False)

    slug: Optional[str] = None
    report_slug: Optional[str] = None


class LegacyReport(LegacyModel):
    scan: LegacyScan
    evidence: List[LegacyEvidence]
    meta: Optional[Dict[str, Any]] = None


class LegacyRecentReportItem(LegacyModel):
    report_slug: str
    score: float
    label: str
    domain: str
    created_at: Timestamp


class LegacyRecentReports(LegacyModel):
    items: List[LegacyRecentReportItem]
