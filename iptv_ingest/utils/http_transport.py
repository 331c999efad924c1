"""
HTTP transport utilities

The ingestion core never opens connections itself: it is handed a Transport that
returns a (succeeded, status line, body) triple. HttpxTransport is the default
implementation and enforces the response size cap while reading.
"""
import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from iptv_ingest.config import DEFAULT_MAX_RESPONSE_BYTES
from iptv_ingest.errors import TransportError
from iptv_ingest.utils.provider_urls import redact_url_credentials


logger = logging.getLogger(__name__)

BODY_TOO_LARGE = "Body too large"


@dataclass(slots=True)
class HttpResult:
    ok: bool = False
    protocol: str = ""
    body: bytes = b""


class Transport(Protocol):
    def get(self, url: str, user_agent: str = "", timeout_seconds: int = 0) -> HttpResult:
        ...


def is_http_status_ok(protocol: str) -> bool:
    """
    Check a status line such as 'HTTP/1.1 200 OK' for a 2xx code.

    Args:
        protocol: Status line, possibly empty

    Returns:
        True for 200-299, False for anything else including malformed lines
    """
    parts = protocol.split(" ", 2)
    if len(parts) < 3 or not parts[1]:
        return False
    code = parts[1]
    if not code.isascii() or not code.isdigit():
        return False
    return 200 <= int(code) < 300


def status_line(response: httpx.Response) -> str:
    """Render an httpx response status as 'HTTP/1.1 200 OK'."""
    reason = response.reason_phrase or httpx.codes.get_reason_phrase(response.status_code)
    return f"{response.http_version} {response.status_code} {reason}"


class HttpxTransport:
    """
    Blocking GET transport built on httpx.

    Redirects are followed. The body is streamed and the request is abandoned as
    soon as it exceeds max_bytes, so an oversized guide never reaches a parser.
    """

    def __init__(
        self,
        max_bytes: int = DEFAULT_MAX_RESPONSE_BYTES,
        client: httpx.Client | None = None,
    ):
        self.max_bytes = max_bytes
        self._client = client

    def get(self, url: str, user_agent: str = "", timeout_seconds: int = 0) -> HttpResult:
        redacted = redact_url_credentials(url)
        logger.info(f"HTTP GET {redacted}")

        headers = {"User-Agent": user_agent} if user_agent else {}
        timeout = httpx.Timeout(timeout_seconds) if timeout_seconds > 0 else httpx.Timeout(None)

        client = self._client or httpx.Client()
        try:
            with client.stream(
                "GET", url, headers=headers, timeout=timeout, follow_redirects=True
            ) as response:
                result = HttpResult(protocol=status_line(response))
                declared = response.headers.get("content-length", "")
                if declared.isdigit() and int(declared) > self.max_bytes:
                    logger.error(
                        f"HTTP response declares {declared} bytes, over the {self.max_bytes} byte cap for {redacted}"
                    )
                    return HttpResult(protocol=BODY_TOO_LARGE)

                chunks: list[bytes] = []
                received = 0
                for chunk in response.iter_bytes():
                    received += len(chunk)
                    if received > self.max_bytes:
                        logger.error(
                            f"HTTP response exceeded {self.max_bytes} bytes for {redacted}"
                        )
                        return HttpResult(protocol=BODY_TOO_LARGE)
                    chunks.append(chunk)
                result.body = b"".join(chunks)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"HTTP GET failed for {redacted}: {type(e).__name__}: {e}")
            return HttpResult()
        finally:
            if self._client is None:
                client.close()

        result.ok = is_http_status_ok(result.protocol)
        if not result.ok and not result.protocol:
            result.protocol = "Unexpected response" if result.body else "Empty response"

        logger.debug(f"Received {len(result.body) / 1024:.1f} KB ({result.protocol}) from {redacted}")
        return result


def fetch_body(
    transport: Transport,
    url: str,
    *,
    user_agent: str = "",
    timeout_seconds: int = 0,
    failure_reason: str = "Request failed",
    max_bytes: int | None = None,
) -> HttpResult:
    """
    Perform a GET and raise TransportError unless it succeeded.

    Args:
        transport: Transport to use
        url: Full request URL
        failure_reason: Details used when the transport returned no status line
        max_bytes: Largest body accepted, whatever cap the transport applies

    Returns:
        The successful HttpResult

    Raises:
        TransportError: With the status line, failure_reason when there is none,
            or "Body too large" when the body exceeds max_bytes
    """
    result = transport.get(url, user_agent, timeout_seconds)
    if not result.ok:
        raise TransportError(result.protocol or failure_reason)
    if max_bytes is not None and len(result.body) > max_bytes:
        logger.error(
            f"Response body of {len(result.body)} bytes exceeds the {max_bytes} byte cap for "
            f"{redact_url_credentials(url)}"
        )
        raise TransportError(BODY_TOO_LARGE)
    return result
