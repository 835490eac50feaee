"""kuiper executor - send a resolved request over HTTP."""

import json
import time
from typing import Any

import requests
import structlog

from kuiper.core import DEFAULT_TIMEOUT
from kuiper.models import ResolvedRequest

logger = structlog.get_logger(__name__)


class RequestResult:
    """Result of an HTTP request."""

    def __init__(self):
        self.status_code: int = 0
        self.headers: dict[str, str] = {}
        self.body: Any = None  # parsed JSON or raw text
        self.elapsed_ms: float = 0
        self.error: str | None = None
        self.raw_text: str = ""


def execute_request(
    request: ResolvedRequest,
    timeout: int = DEFAULT_TIMEOUT,
) -> RequestResult:
    """Execute a resolved request and return structured result.

    - Null headers are not sent
    - params go on the query string, body is sent as JSON
    - Never raises - always returns RequestResult with error field set
    """
    result = RequestResult()

    try:
        kwargs: dict[str, Any] = {
            "method": request.method.upper(),
            "url": request.uri,
            "headers": request.sendable_headers(),
            "params": dict(request.params),
            "timeout": timeout,
            "allow_redirects": True,
        }
        if request.body is not None:
            kwargs["json"] = request.body

        logger.debug("sending request", method=kwargs["method"], url=request.uri)
        start = time.monotonic()
        resp = requests.request(**kwargs)
        result.elapsed_ms = (time.monotonic() - start) * 1000

        result.status_code = resp.status_code
        result.headers = dict(resp.headers)
        result.raw_text = resp.text

        try:
            result.body = resp.json()
        except (json.JSONDecodeError, ValueError):
            result.body = resp.text

    except requests.exceptions.Timeout:
        result.error = f"Request timed out after {timeout}s"
    except requests.exceptions.ConnectionError as e:
        result.error = f"Connection error: {e}"
    except requests.exceptions.RequestException as e:
        result.error = f"Request failed: {e}"
    except Exception as e:
        result.error = f"Unexpected error: {e}"

    return result
