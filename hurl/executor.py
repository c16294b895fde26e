"""hurl executor - HTTP request execution."""

import json
import logging
import time
from typing import Any

import requests

from hurl.errors import ClientOther, ClientTimeout, ClientWithStatus
from hurl.request import BODY_FORM, BODY_JSON, BODY_MULTIPART, RequestDescriptor

logger = logging.getLogger(__name__)

HTTP_VERSIONS = {10: "1.0", 11: "1.1", 20: "2"}


class RequestResult:
    """Result of an HTTP request."""

    def __init__(self):
        self.status_code: int = 0
        self.reason: str = ""
        self.http_version: str = "1.1"
        self.headers: dict[str, str] = {}
        self.cookies: list[tuple[str, str]] = []
        self.body: Any = None  # parsed JSON or raw text
        self.elapsed_ms: float = 0
        self.raw_text: str = ""


def _request_kwargs(descriptor: RequestDescriptor, timeout: float) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "method": descriptor.method,
        "url": descriptor.url,
        "headers": dict(descriptor.headers),
        "timeout": timeout,
        "allow_redirects": True,
    }
    if descriptor.body_kind in (BODY_JSON, BODY_FORM):
        kwargs["data"] = descriptor.body.encode("utf-8")
    elif descriptor.body_kind == BODY_MULTIPART:
        # Let requests set the Content-Type boundary
        kwargs["headers"] = {
            k: v for k, v in kwargs["headers"].items() if k.lower() != "content-type"
        }
        kwargs["data"] = descriptor.body or []
        kwargs["files"] = descriptor.files
    return kwargs


def execute_request(
    descriptor: RequestDescriptor,
    timeout: float = 30,
    check_status: bool = False,
) -> RequestResult:
    """Send the request and return a structured result.

    - Attempts to parse response as JSON, falls back to raw text
    - Captures timing and any cookies the server set
    - Raises ClientTimeout, ClientWithStatus (only with check_status)
      or ClientOther; never retries
    """
    kwargs = _request_kwargs(descriptor, timeout)
    logger.info("%s %s", descriptor.method, descriptor.url)
    logger.debug("request headers: %s", kwargs["headers"])

    try:
        start = time.monotonic()
        resp = requests.request(**kwargs)
        elapsed_ms = (time.monotonic() - start) * 1000
        if check_status:
            resp.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise ClientTimeout() from e
    except requests.exceptions.HTTPError as e:
        raise ClientWithStatus(e.response.status_code) from e
    except requests.exceptions.RequestException as e:
        logger.debug("request failed: %s", e)
        raise ClientOther(f"Request failed: {e}") from e

    result = RequestResult()
    result.elapsed_ms = elapsed_ms
    result.status_code = resp.status_code
    result.reason = resp.reason or ""
    result.http_version = _http_version(resp)
    result.headers = dict(resp.headers)
    result.cookies = list(resp.cookies.items())
    result.raw_text = resp.text
    logger.info("%s %s (%dms)", resp.status_code, result.reason, elapsed_ms)

    try:
        result.body = resp.json()
    except (json.JSONDecodeError, ValueError):
        result.body = resp.text

    return result


def _http_version(resp) -> str:
    raw = getattr(resp, "raw", None)
    return HTTP_VERSIONS.get(getattr(raw, "version", 11), "1.1")
