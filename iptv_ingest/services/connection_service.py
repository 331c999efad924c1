"""
Connection check against the provider's player API.
"""
import logging

from iptv_ingest.config import ProviderSettings, settings
from iptv_ingest.errors import IngestError
from iptv_ingest.services.fetch_types import FetchResult
from iptv_ingest.utils.http_transport import Transport, fetch_body
from iptv_ingest.utils.provider_urls import build_player_api_url, effective_user_agent


logger = logging.getLogger(__name__)

_XTREAM_MARKERS = ('"user_info"', '"server_info"', '"auth":1')


def _validate(provider: ProviderSettings) -> str | None:
    if not provider.server.strip():
        return "Server is empty"
    if provider.port <= 0 or provider.port > 65535:
        return "Port is invalid"
    if not provider.username.strip():
        return "Username is empty"
    if not provider.password.strip():
        return "Password is empty"
    return None


def check_connection(transport: Transport, provider: ProviderSettings | None = None) -> FetchResult:
    """
    Check that the configured provider answers like an Xtream player API.

    Succeeds when the body carries user_info/server_info/auth markers or the
    status line reports 200 or 201.
    """
    provider = provider or settings

    problem = _validate(provider)
    if problem:
        logger.warning("Connection test skipped: %s", problem)
        return FetchResult(ok=False, details=problem)

    url = build_player_api_url(provider)
    if not url:
        return FetchResult(ok=False, details="Failed to build API URL")

    try:
        http = fetch_body(
            transport,
            url,
            user_agent=effective_user_agent(provider),
            timeout_seconds=provider.timeout_seconds,
            failure_reason="Failed to open URL",
            max_bytes=provider.max_response_bytes,
        )
    except IngestError as exc:
        logger.error("Connection test failed: %s", exc)
        return FetchResult(ok=False, details=str(exc))

    body = http.body.decode("utf-8", errors="replace").lower()
    looks_xtream = any(marker in body for marker in _XTREAM_MARKERS)
    looks_http_ok = " 200 " in http.protocol or " 201 " in http.protocol

    if looks_xtream or looks_http_ok:
        logger.info("Connection test succeeded (%s)", http.protocol or "OK")
        return FetchResult(ok=True, details=http.protocol or "OK")

    if http.protocol:
        details = http.protocol
    elif http.body:
        details = "Unexpected response"
    else:
        details = "Empty response"
    logger.error("Connection test failed: %s", details)
    return FetchResult(ok=False, details=details)

