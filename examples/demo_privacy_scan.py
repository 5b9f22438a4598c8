"""Offline walkthrough of the scan client against a mock service."""
import asyncio
import itertools

import httpx

from privacy_advisor.api import ApiVersion, EnvelopeClient, ScanApiClient, SchemaAdapter
from privacy_advisor.polling import PollingController
from privacy_advisor.scoring import build_report_view, grading

REPORT = {
    "scan": {
        "id": "scan-42",
        "targetType": "url",
        "input": "https://news.example.com",
        "status": "done",
        "score": 64,
        "label": "Caution",
        "reportSlug": "news-example",
    },
    "evidence": [
        {"id": "e1", "scanId": "scan-42", "type": "tracker", "severity": 4,
         "title": "DoubleClick", "details": {"domain": "doubleclick.net"}, "createdAt": "2024-05-01T10:00:00Z"},
        {"id": "e2", "scanId": "scan-42", "type": "tracker", "severity": 4,
         "title": "Facebook Pixel", "details": {"domain": "facebook.net"}, "createdAt": "2024-05-01T10:00:00Z"},
        {"id": "e3", "scanId": "scan-42", "type": "tls", "severity": 3,
         "title": "TLS configuration", "details": {"grade": "C"}, "createdAt": "2024-05-01T10:00:00Z"},
        {"id": "e4", "scanId": "scan-42", "type": "header", "severity": 2,
         "title": "Missing Content-Security-Policy", "details": {"name": "content-security-policy"},
         "createdAt": "2024-05-01T10:00:00Z"},
        {"id": "e5", "scanId": "scan-42", "type": "beacon", "severity": 1,
         "title": "Analytics beacon", "details": "malformed", "createdAt": "2024-05-01T10:00:00Z"},
    ],
}

STATUSES = itertools.chain(
    [
        {"status": "queued"},
        {"status": "running", "progress": 20},
        (429, {"error": "Slow down"}),
        {"status": "running", "progress": 65},
    ],
    itertools.repeat({"status": "done", "progress": 100, "reportSlug": "news-example"}),
)


def handler(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path == "/api/v1/scan/url":
        return httpx.Response(202, json={"scanId": "scan-42", "reportSlug": "news-example"})
    if path == "/api/v1/scan/scan-42/status":
        status = next(STATUSES)
        if isinstance(status, tuple):
            return httpx.Response(status[0], json=status[1], headers={"Retry-After": "1"})
        return httpx.Response(200, json=status)
    if path == "/api/v1/report/news-example":
        return httpx.Response(200, json=REPORT)
    return httpx.Response(404, json={"detail": "Not found"})


async def no_wait(seconds: float) -> None:
    print(f"  (next poll in {seconds:.1f}s)")


async def demo_scan():
    """Submit, poll and score against the legacy contract."""
    print("=== Scan ===")

    http = EnvelopeClient("http://scan.local", transport=httpx.MockTransport(handler))
    async with ScanApiClient(http, SchemaAdapter(ApiVersion.V1)) as api:
        queued = await api.start_url_scan("https://news.example.com")
        print(f"Queued {queued.scan_id} -> {queued.slug}")

        controller = PollingController(api.get_scan_status, queued.scan_id, sleep=no_wait)
        job = await controller.run(lambda j: print(f"  {j.state.value:<8} {j.progress}%"))
        print(f"Finished: {job.state.value}")

        report = await api.get_report(job.slug)

    view = build_report_view(report, app_origin="https://privacy-advisor.example")
    print("\n=== Report ===")
    print(f"{view.domain}: {grading.grade_description(view.score)}")
    print(f"Data sharing: {view.data_sharing.value}")
    print(f"TLS/HTTPS: {view.tls.display}")
    for row in view.breakdown:
        print(f"  {row.category:<14} {row.points:+d}  {row.finding}")
    for group in view.categories:
        print(f"  {group.name}: {len(group)} finding(s), {group.high} high")
    print(f"Share: {view.share_url}")


async def main():
    await demo_scan()


if __name__ == "__main__":
    asyncio.run(main())
