"""
Guide Service

Fetches the provider's XMLTV guide and turns it into per-channel schedules aligned
with the stream catalog.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from iptv_ingest.config import ProviderSettings, settings
from iptv_ingest.errors import IngestError
from iptv_ingest.services.channel_matcher_service import ChannelMatcher
from iptv_ingest.services.epg_assembler_service import assemble_epg
from iptv_ingest.services.fetch_types import ChannelEpg, FetchResult, Stream
from iptv_ingest.services.xmltv_parser_service import parse_xmltv
from iptv_ingest.utils.http_transport import Transport, fetch_body
from iptv_ingest.utils.logging_helpers import (
    log_fetch_end,
    log_fetch_start,
    log_guide_summary,
    log_section_end,
    log_section_start,
)
from iptv_ingest.utils.provider_urls import build_xmltv_url, effective_user_agent


logger = logging.getLogger(__name__)


def looks_like_xml(body: bytes) -> bool:
    return b"<?xml" in body or b"<tv" in body


def fetch_xmltv(
    transport: Transport,
    provider: ProviderSettings | None = None,
) -> FetchResult[bytes]:
    """
    Download the XMLTV document

    Returns:
        FetchResult whose single record is the raw document body
    """
    provider = provider or settings
    log_fetch_start(logger, "XMLTV")

    url = build_xmltv_url(provider)
    if not url:
        return FetchResult(ok=False, details="Failed to build base URL")

    try:
        http = fetch_body(
            transport,
            url,
            user_agent=effective_user_agent(provider),
            timeout_seconds=provider.timeout_seconds,
            failure_reason="Failed to fetch XMLTV",
            max_bytes=provider.max_response_bytes,
        )
    except IngestError as exc:
        log_fetch_end(logger, "XMLTV", False, str(exc))
        return FetchResult(ok=False, details=str(exc))

    if not http.body:
        log_fetch_end(logger, "XMLTV", False, "empty body")
        return FetchResult(ok=False, details="XMLTV response is empty")

    if not looks_like_xml(http.body):
        log_fetch_end(logger, "XMLTV", False, "body is not XML")
        return FetchResult(ok=False, details="XMLTV response doesn't appear to be XML")

    log_fetch_end(logger, "XMLTV", True, f"{len(http.body) / 1024 / 1024:.2f} MB")
    return FetchResult(ok=True, details=http.protocol or "OK", records=[http.body])


def parse_guide(
    xmltv: bytes | str,
    streams: Sequence[Stream],
    *,
    apply_offsets: bool = False,
) -> FetchResult[ChannelEpg]:
    """
    Parse an XMLTV document and build schedules matched against the stream catalog

    Args:
        xmltv: Complete XMLTV document
        streams: Current stream catalog, used only for matching within this call
        apply_offsets: Honour XMLTV '+HHMM' suffixes instead of ignoring them

    Returns:
        FetchResult with one ChannelEpg per channel that has at least one entry
    """
    if not xmltv:
        return FetchResult(ok=False, details="XMLTV response is empty")

    log_section_start(logger, "XMLTV parsing")
    try:
        document = parse_xmltv(xmltv, apply_offsets=apply_offsets)
    except IngestError as exc:
        return FetchResult(ok=False, details=str(exc))

    matches = ChannelMatcher(streams).match_all(document.channels)
    guide = assemble_epg(document, matches)
    log_guide_summary(logger, len(guide.channels), guide.programme_count)
    log_section_end(logger, "XMLTV parsing")

    if not guide.channels:
        logger.warning(
            "XMLTV contained %s channels but none with valid programmes",
            len(document.channels),
        )
        return FetchResult(ok=False, details="No EPG channels parsed")

    return FetchResult(
        ok=True,
        details=f"{len(guide.channels)} channels, {guide.programme_count} programmes",
        records=guide.channels,
    )


def fetch_guide(
    transport: Transport,
    streams: Sequence[Stream],
    provider: ProviderSettings | None = None,
) -> FetchResult[ChannelEpg]:
    """Download the XMLTV guide and parse it against the stream catalog."""
    provider = provider or settings

    downloaded = fetch_xmltv(transport, provider)
    if not downloaded.ok:
        return FetchResult(ok=False, details=downloaded.details)

    return parse_guide(
        downloaded.records[0],
        streams,
        apply_offsets=provider.apply_xmltv_offsets,
    )
