"""HTTP envelope client: request, decode, validate, raise uniformly."""
import json
import logging
import re
from typing import Any, Dict, Optional, Tuple

import httpx
from pydantic import TypeAdapter, ValidationError

from .models import HttpFailure, NetworkError, SchemaError, failure_class_for

logger = logging.getLogger(__name__)

JSON_MIME = re.compile(r"application/json", re.IGNORECASE)

# Ordered extraction rules for the human readable message of an error body.
MESSAGE_FIELDS = ("detail", "title", "error", "message")

_NO_PAYLOAD = object()
_INVALID_JSON = object()


class EnvelopeClient:
    """Thin wrapper over ``httpx.AsyncClient``. Performs no retries."""

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        self._adapters: Dict[Any, TypeAdapter] = {}

    async def request(
        self,
        path: str,
        shape: Any,
        method: str = "GET",
        json_body: Optional[Any] = None
    ) -> Any:
        """
        Issue a request and return the body validated against ``shape``.

        Args:
            path: request path, segments already percent-encoded
            shape: any type pydantic can validate (model, Optional[...], etc.)
            method: HTTP method
            json_body: JSON request body

        Raises:
            HttpFailure: non-2xx status (NotFoundError / RateLimitedError by status)
            SchemaError: body does not match ``shape``
            NetworkError: no usable response (transport, redirect or content decoding failure)
        """
        if not path.startswith("/"):
            path = f"/{path}"

        logger.debug(f"{method} {path}")
        try:
            response = await self._client.request(method, path, json=json_body)
        except httpx.RequestError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise NetworkError(f"Network error for {method} {path}: {e}") from e

        payload, raw_text = _decode_body(response)

        if payload is _INVALID_JSON and response.is_success:
            raise SchemaError(f"Response for {path} is not valid JSON", payload=response.content)

        if not response.is_success:
            failure = build_failure(response, payload, raw_text)
            logger.warning(f"{method} {path} -> {failure.status}: {failure.message}")
            raise failure

        return self._validate(shape, None if payload is _NO_PAYLOAD else payload, path)

    def _validate(self, shape: Any, payload: Any, path: str) -> Any:
        adapter = self._adapters.get(shape)
        if adapter is None:
            adapter = TypeAdapter(shape)
            self._adapters[shape] = adapter

        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            if payload is None:
                raise SchemaError("Unexpected empty response body") from e
            raise SchemaError(
                f"Response for {path} failed validation: {e.error_count()} error(s)",
                payload=payload
            ) from e

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


def _decode_body(response: httpx.Response) -> Tuple[Any, Optional[str]]:
    """
    Return (payload, raw_text).

    payload is ``_NO_PAYLOAD`` for empty bodies and ``_INVALID_JSON`` when a
    JSON content type carries an undecodable body.
    """
    content_type = response.headers.get("content-type", "")

    if JSON_MIME.search(content_type):
        if not response.content:
            return _NO_PAYLOAD, None
        try:
            return response.json(), None
        except ValueError:
            return _INVALID_JSON, response.text

    if response.status_code == 204:
        return _NO_PAYLOAD, None

    raw_text = response.text
    if not raw_text:
        return _NO_PAYLOAD, raw_text
    try:
        return json.loads(raw_text), raw_text
    except ValueError:
        return raw_text, raw_text


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """``Retry-After`` seconds to milliseconds; HTTP dates are ignored."""
    if not value:
        return None
    try:
        return int(value.strip()) * 1000
    except ValueError:
        return None


def extract_message(payload: Any) -> Optional[str]:
    """First non-empty string among ``MESSAGE_FIELDS`` of an error body."""
    if not isinstance(payload, dict):
        return None
    for key in MESSAGE_FIELDS:
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def build_failure(response: httpx.Response, payload: Any, raw_text: Optional[str]) -> HttpFailure:
    """Build the typed failure for a non-2xx response."""
    status = response.status_code
    body = None if payload is _NO_PAYLOAD or payload is _INVALID_JSON else payload

    retry_after_ms = parse_retry_after(response.headers.get("retry-after"))
    if retry_after_ms is None and isinstance(body, dict):
        hint = body.get("retryAfterMs")
        if isinstance(hint, (int, float)) and not isinstance(hint, bool):
            retry_after_ms = int(hint)

    message = extract_message(body)
    if message is None and not isinstance(body, dict) and raw_text and raw_text.strip():
        message = raw_text.strip()
    if message is None:
        message = f"Request failed with status {status}"

    cls = failure_class_for(status)
    return cls(message, status=status, body=body if body is not None else raw_text, retry_after_ms=retry_after_ms)
