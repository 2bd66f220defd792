"""HTTP client for the remote compiler service."""

import socket
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin, urlparse
from urllib.request import Request, urlopen

import orjson
import structlog

from .base import CompilerResponse, CompilerService

logger = structlog.get_logger(__name__)


class HttpCompilerClient(CompilerService):
    """
    Talks to a compiler service over plain request/response HTTP.

    Both endpoints take ``{"code": source}`` and answer
    ``{"success": bool, "url": str?, "error": str?}``. Transport failures
    come back as failed responses; the pipeline treats them like any
    other diagnostic.
    """

    def __init__(self, base_url: str, timeout_seconds: float = 30.0):
        parsed = urlparse(base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Invalid compiler URL: {base_url}")

        self.base_url = base_url.rstrip("/") + "/"
        self.timeout_seconds = timeout_seconds
        self.logger = logger

    def compile(self, source: str) -> CompilerResponse:
        body = self._post("compile", source)
        if isinstance(body, CompilerResponse):
            return body

        if body.get("success"):
            url = body.get("url")
            if not url:
                return CompilerResponse.failed("compiler reported success without an artifact url")
            return CompilerResponse.compiled(urljoin(self.base_url, url))

        return CompilerResponse.failed(str(body.get("error") or "compilation failed"))

    def validate(self, source: str) -> CompilerResponse:
        body = self._post("validate", source)
        if isinstance(body, CompilerResponse):
            return body

        if body.get("success"):
            return CompilerResponse.validated()
        return CompilerResponse.failed(str(body.get("error") or "validation failed"))

    def _post(self, endpoint: str, source: str) -> Any:
        """POST the source; returns the decoded body or a failed response."""
        url = urljoin(self.base_url, endpoint)
        data = orjson.dumps({"code": source})
        headers = {
            'Content-Type': 'application/json',
            'Content-Length': str(len(data)),
            'User-Agent': 'swapbot/1.0'
        }

        try:
            req = Request(url, data=data, headers=headers, method="POST")
            with urlopen(req, timeout=self.timeout_seconds) as response:
                raw = response.read()
        except HTTPError as e:
            self.logger.warning(
                "Compiler service HTTP error",
                endpoint=endpoint,
                error_code=e.code,
                error_reason=e.reason
            )
            return CompilerResponse.failed(f"HTTP {e.code}: {e.reason}")
        except (socket.timeout, TimeoutError) as e:
            self.logger.warning("Compiler service timed out", endpoint=endpoint, error=str(e))
            return CompilerResponse.failed(f"timeout after {self.timeout_seconds}s")
        except (OSError, URLError) as e:
            self.logger.warning("Compiler service network error", endpoint=endpoint, error=str(e))
            return CompilerResponse.failed(f"Network error: {e}")

        try:
            body = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            self.logger.error("Compiler service returned invalid JSON", endpoint=endpoint, error=str(e))
            return CompilerResponse.failed(f"Invalid compiler response: {e}")

        if not isinstance(body, dict):
            return CompilerResponse.failed("Invalid compiler response: expected an object")
        return body
