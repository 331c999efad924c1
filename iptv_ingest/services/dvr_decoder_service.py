"""
DVR Decoder Service

Read-side decoding of a Dispatcharr-style DVR API: access tokens, series rules,
recurring recording rules and recordings. Nested payloads such as
custom_properties are decoded by a second pass over their raw span.
"""
from __future__ import annotations

import logging
import re

from iptv_ingest.errors import JsonShapeError
from iptv_ingest.services.fetch_types import Recording, RecurringRule, SeriesRule
from iptv_ingest.utils.json_scanner import (
    ArrayScanner,
    ScanStatus,
    Span,
    decode_text,
    extract_bool,
    extract_int,
    extract_raw,
    extract_string,
)
from iptv_ingest.utils.timezone import DateFormatError, parse_iso8601_to_utc


logger = logging.getLogger(__name__)

_DAY_NUMBER = re.compile(r"-?[0-9]+")


def decode_access_token(body: bytes | str) -> str | None:
    """Return the 'access' token from an authentication response, if present."""
    token = extract_string(decode_text(body), "access")
    return token.value or None


def _require_array(scanner: ArrayScanner, what: str) -> None:
    if not scanner.is_array:
        raise JsonShapeError(f"{what} response was not a JSON array")


def decode_series_rules(body: bytes | str) -> list[SeriesRule]:
    """
    Decode a {"rules": [...]} series rule listing.

    Raises:
        JsonShapeError: If the rules array is missing
    """
    text = decode_text(body)
    rules_span = extract_raw(text, "rules")
    if not rules_span.ok:
        raise JsonShapeError("Series rules response has no rules array")

    scanner = ArrayScanner(text, rules_span.value)
    _require_array(scanner, "Series rules")

    rules = []
    for span in scanner:
        tvg_id = extract_string(text, "tvg_id", span)
        if not tvg_id.ok:
            continue
        rules.append(SeriesRule(
            tvg_id=tvg_id.value,
            title=extract_string(text, "title", span).get(""),
            mode=extract_string(text, "mode", span).get(""),
        ))

    logger.debug("Decoded %s series rules", len(rules))
    return rules


def _decode_days(text: str, span: Span) -> list[int]:
    days_span = extract_raw(text, "days_of_week", span)
    if not days_span.ok:
        return []
    start, end = days_span.value
    days = []
    for match in _DAY_NUMBER.finditer(text, start, end):
        day = int(match.group())
        if 0 <= day <= 6:
            days.append(day)
    return days


def decode_recurring_rules(body: bytes | str) -> list[RecurringRule]:
    """
    Decode a recurring rule listing. Rules without an id are skipped.

    Raises:
        JsonShapeError: If the body is not a JSON array
    """
    text = decode_text(body)
    scanner = ArrayScanner(text)
    _require_array(scanner, "Recurring rules")

    rules = []
    for span in scanner:
        rule_id = extract_int(text, "id", span)
        if not rule_id.ok:
            continue
        rules.append(RecurringRule(
            id=rule_id.value,
            channel_id=extract_int(text, "channel", span).get(0),
            days_of_week=_decode_days(text, span),
            start_time=extract_string(text, "start_time", span).get(""),
            end_time=extract_string(text, "end_time", span).get(""),
            start_date=extract_string(text, "start_date", span).get(""),
            end_date=extract_string(text, "end_date", span).get(""),
            name=extract_string(text, "name", span).get(""),
            enabled=extract_bool(text, "enabled", span).get(True),
        ))

    if scanner.status is ScanStatus.EMPTY:
        logger.debug("Recurring rules response was an empty array")
    return rules


def _parse_optional_time(value: str | None):
    if not value:
        return None
    try:
        return parse_iso8601_to_utc(value)
    except DateFormatError:
        logger.debug("Ignoring unparseable recording time: %s", value)
        return None


def decode_recordings(body: bytes | str, base_url: str) -> list[Recording]:
    """
    Decode a recordings listing.

    Title and plot come from custom_properties.program. Each recording gets a
    download URL under base_url.

    Raises:
        JsonShapeError: If the body is not a JSON array
    """
    text = decode_text(body)
    scanner = ArrayScanner(text)
    _require_array(scanner, "Recordings")

    base_url = base_url.rstrip("/")
    recordings = []
    for span in scanner:
        recording_id = extract_int(text, "id", span)
        if not recording_id.ok:
            continue

        recording = Recording(
            id=recording_id.value,
            channel_id=extract_int(text, "channel", span).get(0),
            start_time=_parse_optional_time(extract_string(text, "start_time", span).value),
            end_time=_parse_optional_time(extract_string(text, "end_time", span).value),
            stream_url=f"{base_url}/api/channels/recordings/{recording_id.value}/file/",
        )

        properties = extract_raw(text, "custom_properties", span)
        if properties.ok:
            program = extract_raw(text, "program", properties.value)
            if program.ok:
                recording.title = extract_string(text, "title", program.value).get("")
                recording.plot = extract_string(text, "description", program.value).get("")

        recordings.append(recording)

    logger.debug("Decoded %s recordings", len(recordings))
    return recordings
