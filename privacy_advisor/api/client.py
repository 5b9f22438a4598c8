"""Scan service client: envelope + schema adapter."""
import logging
from typing import Any, Optional

from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from .adapter import Endpoint, SchemaAdapter
from .http import EnvelopeClient
from .models import ApiVersion, is_transient
from .schemas import RecentReports, Report, ScanQueued, ScanStatus, UrlScanRequest

logger = logging.getLogger(__name__)


class ScanApiClient:
    """High level operations against the scan service."""

    def __init__(self, http: EnvelopeClient, adapter: SchemaAdapter):
        self.http = http
        self.adapter = adapter

    @classmethod
    def from_settings(cls, settings, transport: Any = None) -> "ScanApiClient":
        """Build the client pipeline from settings."""
        http = EnvelopeClient(
            base_url=settings.api_origin,
            timeout=settings.request_timeout,
            transport=transport,
        )
        return cls(http, SchemaAdapter(settings.api_version))

    @property
    def version(self) -> ApiVersion:
        return self.adapter.version

    async def _call(self, endpoint: Endpoint, json_body: Optional[Any] = None) -> Any:
        wire = await self.http.request(
            endpoint.path,
            endpoint.wire_model,
            method=endpoint.method,
            json_body=json_body,
        )
        return self.adapter.finish(endpoint, wire)

    async def start_url_scan(self, url: str, force: Optional[bool] = None) -> ScanQueued:
        """Submit a URL for scanning."""
        body = UrlScanRequest(url=url, force=force)
        queued = await self._call(
            self.adapter.submit_url(),
            json_body=body.model_dump(by_alias=True, exclude_none=True),
        )
        logger.info(f"Scan queued: {queued.scan_id} (slug={queued.slug}, deduped={queued.deduped})")
        return queued

    async def get_scan_status(self, scan_id: str) -> ScanStatus:
        """Fetch the current status of a scan job."""
        return await self._call(self.adapter.scan_status(scan_id))

    @retry(
        retry=retry_if_exception(is_transient),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True
    )
    async def get_report(self, slug: str) -> Report:
        """Fetch a finished report; transient failures are retried."""
        report = await self._call(self.adapter.report(slug))
        logger.info(f"Report {slug}: {len(report.evidence)} evidence item(s)")
        return report

    async def get_recent_reports(self) -> RecentReports:
        """Fetch the public list of recent reports."""
        return await self._call(self.adapter.recent_reports())

    async def close(self) -> None:
        await self.http.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
