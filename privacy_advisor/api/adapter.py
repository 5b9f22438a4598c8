"""Schema adapter hiding the v1/v2 contract differences."""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Type
from urllib.parse import quote

from pydantic import BaseModel, ValidationError

from .models import ApiVersion, SchemaError
from .schemas import (
    Evidence,
    LegacyRecentReports,
    LegacyReport,
    LegacyScanQueued,
    LegacyScanStatus,
    RecentReportItem,
    RecentReports,
    Report,
    ReportMeta,
    Scan,
    ScanQueued,
    ScanStatus,
)

logger = logging.getLogger(__name__)


def _identity(wire: Any) -> Any:
    return wire


@dataclass(frozen=True)
class Endpoint:
    """One logical request, bound to a single contract version."""
    method: str
    path: str
    wire_model: Type[BaseModel]
    translate: Callable[[Any], Any] = _identity


class SchemaAdapter:
    """
    Translate responses of either contract version into the internal shape.

    The version is fixed at construction. Every ``Endpoint`` it hands out
    carries both the wire model and the translation for that version, so a
    request is decoded by exactly one version end to end.
    """

    def __init__(self, version: ApiVersion = ApiVersion.V2):
        self.version = ApiVersion(version)

    @property
    def prefix(self) -> str:
        return self.version.prefix

    def submit_url(self) -> Endpoint:
        path = f"{self.prefix}/scan/url"
        if self.version.is_legacy:
            return Endpoint("POST", path, LegacyScanQueued, _legacy_scan_queued)
        return Endpoint("POST", path, ScanQueued)

    def scan_status(self, scan_id: str) -> Endpoint:
        path = f"{self.prefix}/scan/{_segment(scan_id)}/status"
        if self.version.is_legacy:
            return Endpoint("GET", path, LegacyScanStatus, _legacy_scan_status)
        return Endpoint("GET", path, ScanStatus)

    def report(self, slug: str) -> Endpoint:
        path = f"{self.prefix}/report/{_segment(slug)}"
        if self.version.is_legacy:
            return Endpoint("GET", path, LegacyReport, _legacy_report)
        return Endpoint("GET", path, Report)

    def recent_reports(self) -> Endpoint:
        path = f"{self.prefix}/reports/recent"
        if self.version.is_legacy:
            return Endpoint("GET", path, LegacyRecentReports, _legacy_recent_reports)
        return Endpoint("GET", path, RecentReports)

    def finish(self, endpoint: Endpoint, wire: Any) -> Any:
        """Translate an already validated wire object."""
        try:
            return endpoint.translate(wire)
        except ValidationError as e:
            raise SchemaError(
                f"{self.version.value} response for {endpoint.path} "
                f"does not translate: {e.error_count()} error(s)",
                payload=wire
            ) from e

    def decode(self, endpoint: Endpoint, payload: Any) -> Any:
        """Validate a raw decoded body against the endpoint and translate it."""
        try:
            wire = endpoint.wire_model.model_validate(payload)
        except ValidationError as e:
            raise SchemaError(
                f"{self.version.value} response for {endpoint.path} "
                f"does not match {endpoint.wire_model.__name__}",
                payload=payload
            ) from e
        return self.finish(endpoint, wire)

    def parse_scan_queued(self, payload: Any) -> ScanQueued:
        return self.decode(self.submit_url(), payload)

    def parse_scan_status(self, payload: Any, scan_id: str = "_") -> ScanStatus:
        return self.decode(self.scan_status(scan_id), payload)

    def parse_report(self, payload: Any, slug: str = "_") -> Report:
        return self.decode(self.report(slug), payload)

    def parse_recent_reports(self, payload: Any) -> RecentReports:
        return self.decode(self.recent_reports(), payload)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


def _legacy_scan_queued(legacy: LegacyScanQueued) -> ScanQueued:
    return ScanQueued(
        scan_id=legacy.scan_id,
        slug=legacy.report_slug,
        deduped=legacy.deduped,
    )


def _legacy_scan_status(legacy: LegacyScanStatus) -> ScanStatus:
    return ScanStatus(
        status=legacy.status,
        progress=legacy.progress,
        score=legacy.score,
        label=legacy.label,
        slug=legacy.report_slug,
        updated_at=legacy.updated_at,
    )


def _legacy_report(legacy: LegacyReport) -> Report:
    fields = legacy.scan.model_dump(exclude={"slug", "report_slug"})
    scan = Scan(
        **fields,
        slug=legacy.scan.slug or legacy.scan.report_slug or legacy.scan.id,
    )

    evidence = tuple(
        Evidence(
            id=item.id,
            scan_id=item.scan_id,
            kind=item.type,
            severity=item.severity,
            title=item.title,
            details=item.details,
            created_at=item.created_at,
        )
        for item in legacy.evidence
    )

    meta = None
    if legacy.meta is not None:
        try:
            meta = ReportMeta.model_validate(legacy.meta)
        except ValidationError:
            logger.debug("Dropping invalid legacy report meta block")

    return Report(scan=scan, evidence=evidence, issues=(), top_fixes=(), meta=meta)


def _legacy_recent_reports(legacy: LegacyRecentReports) -> RecentReports:
    items = tuple(
        RecentReportItem(
            slug=item.report_slug,
            score=item.score,
            label=item.label,
            domain=item.domain,
            created_at=item.created_at,
            evidence_count=0,
        )
        for item in legacy.items
    )
    return RecentReports(items=items)
