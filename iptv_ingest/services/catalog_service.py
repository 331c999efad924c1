"""
Catalog Service

Decodes the provider's live category and stream listings and fetches them through
a Transport. Decoding is split from fetching so responses can be decoded from any
source.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from iptv_ingest.config import ProviderSettings, settings
from iptv_ingest.errors import IngestError, JsonShapeError
from iptv_ingest.services.fetch_types import CatalogResult, Category, FetchResult, Stream
from iptv_ingest.utils.http_transport import Transport, fetch_body
from iptv_ingest.utils.json_scanner import (
    ArrayScanner,
    ScanStatus,
    Span,
    decode_text,
    extract_int,
    extract_string,
)
from iptv_ingest.utils.logging_helpers import log_catalog_summary, log_fetch_end, log_fetch_start
from iptv_ingest.utils.provider_urls import (
    build_player_api_url_with_action,
    effective_user_agent,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class DecodeResult(Generic[T]):
    status: ScanStatus
    records: list[T] = field(default_factory=list)


def _decode_array(
    body: bytes | str,
    decode_object: Callable[[str, Span], T | None],
) -> DecodeResult[T]:
    text = decode_text(body)
    scanner = ArrayScanner(text)
    records = []
    for span in scanner:
        record = decode_object(text, span)
        if record is not None:
            records.append(record)

    if scanner.status is ScanStatus.NOT_AN_ARRAY:
        logger.debug("Response body is not a JSON array (%s bytes)", len(text))
    elif scanner.status is ScanStatus.EMPTY:
        logger.debug("JSON array contained no objects")
    elif len(records) < scanner.objects_found:
        logger.debug(
            "Skipped %s of %s objects without an identifier",
            scanner.objects_found - len(records),
            scanner.objects_found,
        )
    return DecodeResult(status=scanner.status, records=records)


def decode_categories(body: bytes | str, *, strict: bool = True) -> DecodeResult[Category]:
    """
    Decode a get_live_categories response.

    Objects without a category_id are skipped. When an id repeats, the last
    object wins and keeps the position where the id first appeared.
    """
    def decode_object(text: str, span: Span) -> Category | None:
        category_id = extract_int(text, "category_id", span, strict=strict)
        if not category_id.ok:
            return None
        name = extract_string(text, "category_name", span, strict=strict)
        return Category(id=category_id.value, name=name.get(""))

    result = _decode_array(body, decode_object)
    by_id: dict[int, Category] = {}
    for category in result.records:
        by_id[category.id] = category
    if len(by_id) != len(result.records):
        logger.debug("Collapsed %s duplicate category ids", len(result.records) - len(by_id))
        result.records = list(by_id.values())
    return result


def decode_streams(body: bytes | str, *, strict: bool = True) -> DecodeResult[Stream]:
    """Decode a get_live_streams response. Objects without a stream_id are skipped."""
    def decode_object(text: str, span: Span) -> Stream | None:
        stream_id = extract_int(text, "stream_id", span, strict=strict)
        if not stream_id.ok:
            return None
        icon = extract_string(text, "stream_icon", span, strict=strict)
        return Stream(
            id=stream_id.value,
            category_id=extract_int(text, "category_id", span, strict=strict).get(0),
            number=extract_int(text, "num", span, strict=strict).get(0),
            name=extract_string(text, "name", span, strict=strict).get(""),
            icon=icon.value if icon.ok and icon.value else None,
        )

    return _decode_array(body, decode_object)


def _shape_check(result: DecodeResult, what: str) -> None:
    if result.status is ScanStatus.NOT_AN_ARRAY:
        raise JsonShapeError(f"{what} response was not a JSON array")


def fetch_live_categories(
    transport: Transport,
    provider: ProviderSettings | None = None,
) -> FetchResult[Category]:
    """
    Fetch and decode the live category list

    Returns:
        FetchResult with the categories; ok is False on transport or shape
        failure, or when no category could be decoded
    """
    provider = provider or settings
    log_fetch_start(logger, "Categories")

    url = build_player_api_url_with_action(provider, "get_live_categories")
    if not url:
        return FetchResult(ok=False, details="Failed to build categories URL")

    try:
        http = fetch_body(
            transport,
            url,
            user_agent=effective_user_agent(provider),
            timeout_seconds=provider.timeout_seconds,
            failure_reason="Failed to fetch categories",
            max_bytes=provider.max_response_bytes,
        )
        decoded = decode_categories(http.body, strict=provider.strict_json_keys)
        _shape_check(decoded, "Categories")
    except IngestError as exc:
        log_fetch_end(logger, "Categories", False, str(exc))
        return FetchResult(ok=False, details=str(exc))

    if not decoded.records:
        logger.warning("Categories response contained no usable objects")
        return FetchResult(ok=False, details="No categories parsed")

    details = http.protocol or "OK"
    log_fetch_end(logger, "Categories", True, f"{len(decoded.records)} categories")
    return FetchResult(ok=True, details=details, records=decoded.records)


def fetch_live_streams(
    transport: Transport,
    provider: ProviderSettings | None = None,
    category_id: int = 0,
) -> FetchResult[Stream]:
    """
    Fetch and decode live streams, for one category when category_id > 0

    Returns:
        FetchResult with the streams; ok is False on transport or shape failure,
        or when no stream could be decoded
    """
    provider = provider or settings
    log_fetch_start(logger, f"Streams (category {category_id})" if category_id > 0 else "Streams")

    url = build_player_api_url_with_action(provider, "get_live_streams")
    if not url:
        return FetchResult(ok=False, details="Failed to build streams URL")
    if category_id > 0:
        url += f"&category_id={category_id}"

    try:
        http = fetch_body(
            transport,
            url,
            user_agent=effective_user_agent(provider),
            timeout_seconds=provider.timeout_seconds,
            failure_reason="Failed to fetch streams",
            max_bytes=provider.max_response_bytes,
        )
        decoded = decode_streams(http.body, strict=provider.strict_json_keys)
        _shape_check(decoded, "Streams")
    except IngestError as exc:
        log_fetch_end(logger, "Streams", False, str(exc))
        return FetchResult(ok=False, details=str(exc))

    if not decoded.records:
        logger.warning("Streams response contained no usable objects")
        return FetchResult(ok=False, details="No streams parsed")

    log_fetch_end(logger, "Streams", True, f"{len(decoded.records)} streams")
    return FetchResult(ok=True, details=http.protocol or "OK", records=decoded.records)


def fetch_all_live_streams(
    transport: Transport,
    provider: ProviderSettings | None = None,
) -> CatalogResult:
    """
    Fetch the full live catalog

    Categories are fetched first. Streams come from a single unfiltered call when
    the provider supports it, otherwise from one call per category; the first
    failing category aborts the whole fetch.
    """
    provider = provider or settings

    categories = fetch_live_categories(transport, provider)
    if not categories.ok:
        return CatalogResult(ok=False, details=categories.details)

    all_streams = fetch_live_streams(transport, provider)
    if all_streams.ok:
        log_catalog_summary(logger, len(categories.records), len(all_streams.records))
        return CatalogResult(
            ok=True,
            details=all_streams.details,
            categories=categories.records,
            streams=all_streams.records,
        )

    logger.warning(
        "Unfiltered stream listing failed (%s), falling back to %s per-category requests",
        all_streams.details,
        len(categories.records),
    )
    streams: list[Stream] = []
    for category in categories.records:
        per_category = fetch_live_streams(transport, provider, category.id)
        if not per_category.ok:
            return CatalogResult(ok=False, details=per_category.details)
        streams.extend(per_category.records)

    log_catalog_summary(logger, len(categories.records), len(streams))
    return CatalogResult(
        ok=True,
        details=categories.details,
        categories=categories.records,
        streams=streams,
    )
