"""End-to-end tests for ScanApiClient over a mock transport."""
import asyncio
import json

import httpx
import pytest
from pydantic import ValidationError
from tenacity import wait_none

from privacy_advisor.api import HttpFailure, NetworkError, NotFoundError, ScanApiClient, SchemaError
from privacy_advisor.polling import PollingController
from privacy_advisor.utils import ClientSettings


def make_client(handler, use_api_v2=True) -> ScanApiClient:
    settings = ClientSettings(api_origin="http://scan.test", use_api_v2=use_api_v2)
    return ScanApiClient.from_settings(settings, transport=httpx.MockTransport(handler))


def run(coro_factory, handler, use_api_v2=True):
    async def go():
        async with make_client(handler, use_api_v2) as api:
            return await coro_factory(api)
    return asyncio.run(go())


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(ScanApiClient.get_report.retry, "wait", wait_none())


def sequence(*responses):
    """Route serving the given responses in order, repeating the last one."""
    served = []

    def route(request):
        response = responses[min(len(served), len(responses) - 1)]
        served.append(request)
        if isinstance(response, Exception):
            raise response
        return response
    return route


class TestCurrentApi:
    def test_start_url_scan(self, recorder, respond):
        seen = {}

        def submit(request):
            seen["body"] = json.loads(request.content)
            return respond(202, {"scanId": "s1", "slug": "abc", "deduped": True})

        handler = recorder({"/api/v2/scan/url": submit})
        queued = run(lambda api: api.start_url_scan("https://a.example/", force=True), handler)

        assert queued.scan_id == "s1"
        assert queued.deduped is True
        assert seen["body"] == {"url": "https://a.example/", "force": True}
        assert handler.calls == [("POST", "/api/v2/scan/url")]

    def test_force_omitted_when_unset(self, recorder, respond):
        seen = {}

        def submit(request):
            seen["body"] = json.loads(request.content)
            return respond(202, {"scanId": "s1", "slug": "abc"})

        run(lambda api: api.start_url_scan("https://a.example/"), recorder({"/api/v2/scan/url": submit}))
        assert seen["body"] == {"url": "https://a.example/"}

    def test_invalid_url_rejected_before_request(self, recorder):
        handler = recorder({})
        with pytest.raises(ValidationError):
            run(lambda api: api.start_url_scan("ftp://a.example/"), handler)
        assert handler.calls == []

    def test_report(self, recorder, respond, current_report):
        handler = recorder({"/api/v2/report/shop-example": respond(200, current_report)})
        report = run(lambda api: api.get_report("shop-example"), handler)
        assert report.scan.slug == "shop-example"
        assert len(report.evidence) == 3

    def test_missing_report_is_not_retried(self, recorder, respond):
        handler = recorder({"/api/v2/report/gone": respond(404, {"detail": "Report not found"})})
        with pytest.raises(NotFoundError):
            run(lambda api: api.get_report("gone"), handler)
        assert len(handler.calls) == 1

    def test_schema_error_is_not_retried(self, recorder, respond):
        handler = recorder({"/api/v2/report/bad": respond(200, {"scan": {}})})
        with pytest.raises(SchemaError):
            run(lambda api: api.get_report("bad"), handler)
        assert len(handler.calls) == 1


class TestLegacyApi:
    def test_status_and_report(self, recorder, respond, legacy_report):
        handler = recorder({
            "/api/v1/scan/s1/status": respond(200, {"status": "done", "reportSlug": "shop-example"}),
            "/api/v1/report/shop-example": respond(200, legacy_report),
        })

        async def flow(api):
            status = await api.get_scan_status("s1")
            report = await api.get_report(status.slug)
            return status, report

        status, report = run(flow, handler, use_api_v2=False)
        assert status.slug == "shop-example"
        assert report.evidence[1].kind == "tls"
        assert report.issues == ()

    def test_recent_reports(self, recorder, respond):
        handler = recorder({
            "/api/v1/reports/recent": respond(200, {"items": [{
                "reportSlug": "abc",
                "score": 91,
                "label": "Safe",
                "domain": "a.example",
                "createdAt": "2024-05-01T10:00:00Z",
            }]}),
        })
        recent = run(lambda api: api.get_recent_reports(), handler, use_api_v2=False)
        assert recent.items[0].slug == "abc"
        assert recent.items[0].evidence_count == 0


class TestReportRetries:
    def test_server_error_then_success(self, recorder, respond, current_report, no_retry_wait):
        handler = recorder({"/api/v2/report/shop-example": sequence(
            respond(503, {"detail": "Warming up"}),
            respond(200, current_report),
        )})
        report = run(lambda api: api.get_report("shop-example"), handler)
        assert report.scan.slug == "shop-example"
        assert len(handler.calls) == 2

    def test_gives_up_after_three_server_errors(self, recorder, respond, no_retry_wait):
        handler = recorder({"/api/v2/report/shop-example": lambda r: respond(500, {"detail": "Boom"})})
        with pytest.raises(HttpFailure) as info:
            run(lambda api: api.get_report("shop-example"), handler)
        assert info.value.status == 500
        assert len(handler.calls) == 3

    def test_network_error_is_retried(self, recorder, respond, current_report, no_retry_wait):
        handler = recorder({"/api/v2/report/shop-example": sequence(
            httpx.ConnectError("connection reset"),
            respond(200, current_report),
        )})
        run(lambda api: api.get_report("shop-example"), handler)
        assert len(handler.calls) == 2

    def test_rate_limit_is_not_retried(self, recorder, respond, no_retry_wait):
        handler = recorder({"/api/v2/report/shop-example": respond(429, {"error": "Slow down"})})
        with pytest.raises(HttpFailure):
            run(lambda api: api.get_report("shop-example"), handler)
        assert len(handler.calls) == 1


class TestPollingOverHttp:
    def test_undecodable_status_is_retried_then_typed(self, recorder):
        def undecodable(request):
            return httpx.Response(
                200,
                content=b"not gzip",
                headers={"content-type": "application/json", "content-encoding": "gzip"},
            )

        handler = recorder({"/api/v2/scan/s1/status": undecodable})
        sleeps = []

        async def no_sleep(seconds):
            sleeps.append(seconds)

        async def poll(api):
            return await PollingController(api.get_scan_status, "s1", sleep=no_sleep).run()

        with pytest.raises(NetworkError):
            run(poll, handler)
        assert len(handler.calls) == 3
        assert sleeps == [1.0, 2.0]
