"""
Provider URL construction

Builds Xtream-Codes style API, guide and playback URLs from provider settings, and
redacts credentials before URLs reach the logs.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING
from urllib.parse import quote

if TYPE_CHECKING:
    from iptv_ingest.config import ProviderSettings


DEFAULT_USER_AGENT = "XtreamCodesKodiAddon"

_CREDENTIAL_PARAM = re.compile(r"((?:username|password)=)[^&]*")


def url_encode(value: str) -> str:
    """Percent-encode everything except RFC 3986 unreserved characters."""
    return quote(value, safe="")


def normalize_server(raw: str) -> str:
    return raw.strip().rstrip("/")


def build_base_url(provider: ProviderSettings) -> str:
    """
    Build 'scheme://host[:port]' for the provider.

    An explicit http:// or https:// scheme is kept. The configured port is only
    appended when the host part carries none and the port is positive.
    """
    server = normalize_server(provider.server)
    if not server:
        return ""

    if server.startswith(("http://", "https://")):
        host_part = server.split("://", 1)[1]
        if ":" in host_part:
            return server
        base = server
    else:
        base = f"http://{server}"

    if provider.port > 0:
        base += f":{provider.port}"
    return base


def build_player_api_url(provider: ProviderSettings) -> str:
    base = build_base_url(provider)
    if not base:
        return ""
    return (
        f"{base}/player_api.php?username={url_encode(provider.username)}"
        f"&password={url_encode(provider.password)}"
    )


def build_player_api_url_with_action(provider: ProviderSettings, action: str) -> str:
    base = build_player_api_url(provider)
    if not base:
        return ""
    return f"{base}&action={url_encode(action)}"


def build_xmltv_url(provider: ProviderSettings) -> str:
    base = build_base_url(provider)
    if not base:
        return ""
    return (
        f"{base}/xmltv.php?username={url_encode(provider.username)}"
        f"&password={url_encode(provider.password)}"
    )


def build_live_stream_url(provider: ProviderSettings, stream_id: int, stream_format: str | None = None) -> str:
    """Playback URL for a live stream: .m3u8 for HLS, .ts otherwise."""
    base = build_base_url(provider)
    if not base or stream_id <= 0:
        return ""

    fmt = (stream_format or provider.stream_format).lower()
    extension = ".m3u8" if fmt == "hls" else ".ts"
    return (
        f"{base}/live/{url_encode(provider.username)}/{url_encode(provider.password)}"
        f"/{stream_id}{extension}"
    )


def effective_user_agent(provider: ProviderSettings) -> str:
    """User agent override, or an empty string to keep the transport default."""
    if not provider.enable_user_agent_spoofing:
        return ""
    return provider.custom_user_agent.strip() or DEFAULT_USER_AGENT


def redact_url_credentials(url: str) -> str:
    """Replace username/password query values with '***' for logging."""
    return _CREDENTIAL_PARAM.sub(r"\1***", url)
