"""Shared payloads for the scan service tests."""
import copy
import json

import httpx
import pytest


CURRENT_REPORT = {
    "scan": {
        "id": "scan-1",
        "targetType": "url",
        "input": "https://shop.example.com/cart",
        "normalizedInput": "https://shop.example.com/cart",
        "status": "done",
        "score": 72,
        "label": "Caution",
        "summary": "Several trackers found",
        "slug": "shop-example",
        "createdAt": "2024-05-01T10:00:00Z",
    },
    "evidence": [
        {
            "id": "ev-1",
            "scanId": "scan-1",
            "kind": "tracker",
            "severity": 4,
            "title": "Google Analytics",
            "details": {"domain": "google-analytics.com"},
            "createdAt": "2024-05-01T10:00:01Z",
        },
        {
            "id": "ev-2",
            "scanId": "scan-1",
            "kind": "tls",
            "severity": 2,
            "title": "TLS grade",
            "details": {"grade": "b"},
            "createdAt": "2024-05-01T10:00:02Z",
        },
        {
            "id": "ev-3",
            "scanId": "scan-1",
            "kind": "cookie",
            "severity": 3,
            "title": "Session cookie without Secure",
            "details": {"name": "sid"},
            "createdAt": "2024-05-01T10:00:03Z",
        },
    ],
    "meta": {"domain": "shop.example.com"},
}

LEGACY_REPORT = {
    "scan": {
        "id": "scan-1",
        "targetType": "url",
        "input": "https://shop.example.com/cart",
        "normalizedInput": "https://shop.example.com/cart",
        "status": "done",
        "score": 72,
        "label": "Caution",
        "summary": "Several trackers found",
        "reportSlug": "shop-example",
        "createdAt": "2024-05-01T10:00:00Z",
    },
    "evidence": [
        {
            "id": "ev-1",
            "scanId": "scan-1",
            "type": "tracker",
            "severity": 4,
            "title": "Google Analytics",
            "details": {"domain": "google-analytics.com"},
            "createdAt": "2024-05-01T10:00:01Z",
        },
        {
            "id": "ev-2",
            "scanId": "scan-1",
            "type": "tls",
            "severity": 2,
            "title": "TLS grade",
            "details": {"grade": "b"},
            "createdAt": "2024-05-01T10:00:02Z",
        },
        {
            "id": "ev-3",
            "scanId": "scan-1",
            "type": "cookie",
            "severity": 3,
            "title": "Session cookie without Secure",
            "details": {"name": "sid"},
            "createdAt": "2024-05-01T10:00:03Z",
        },
    ],
    "meta": {"domain": "shop.example.com"},
}


@pytest.fixture
def current_report():
    return copy.deepcopy(CURRENT_REPORT)


@pytest.fixture
def legacy_report():
    return copy.deepcopy(LEGACY_REPORT)


def json_response(status: int, body, headers=None) -> httpx.Response:
    """Response with a JSON body and content type."""
    return httpx.Response(
        status,
        content=json.dumps(body).encode(),
        headers={"content-type": "application/json", **(headers or {})},
    )


class Recorder:
    """MockTransport handler that serves canned responses by path and records calls."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append((request.method, request.url.raw_path.decode()))
        route = self.routes[request.url.raw_path.decode()]
        return route(request) if callable(route) else route


@pytest.fixture
def respond():
    return json_response


@pytest.fixture
def recorder():
    def make(routes):
        return Recorder(routes)
    return make
