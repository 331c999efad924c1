"""
Tests for the DVR read-side decoders.
"""
from datetime import datetime, timezone

import pytest

from iptv_ingest.errors import JsonShapeError
from iptv_ingest.services.dvr_decoder_service import (
    decode_access_token,
    decode_recordings,
    decode_recurring_rules,
    decode_series_rules,
)
from iptv_ingest.services.fetch_types import RecurringRule, SeriesRule


class TestAccessToken:
    """Token responses."""

    def test_access_present(self):
        assert decode_access_token(b'{"refresh":"r1","access":"a.b.c"}') == "a.b.c"

    def test_missing_or_empty(self):
        assert decode_access_token(b'{"detail":"No active account"}') is None
        assert decode_access_token(b'{"access":""}') is None


class TestSeriesRules:
    """Series rule listings."""

    def test_rules(self):
        body = (
            b'{"rules":[{"tvg_id":"bbc1.uk","title":"News","mode":"all"},'
            b'{"title":"no id"},{"tvg_id":"itv.uk","mode":"new"}]}'
        )
        assert decode_series_rules(body) == [
            SeriesRule(tvg_id="bbc1.uk", title="News", mode="all"),
            SeriesRule(tvg_id="itv.uk", title="", mode="new"),
        ]

    def test_missing_rules_array(self):
        with pytest.raises(JsonShapeError, match="no rules array"):
            decode_series_rules(b'{"detail":"forbidden"}')

    def test_rules_not_an_array(self):
        with pytest.raises(JsonShapeError):
            decode_series_rules(b'{"rules":{"tvg_id":"x"}}')


class TestRecurringRules:
    """Recurring rule listings."""

    def test_full_rule(self):
        body = (
            b'[{"id":3,"channel":12,"days_of_week":[0,2,4,9],"start_time":"20:00:00",'
            b'"end_time":"21:00:00","start_date":"2026-01-01","end_date":"2026-03-01",'
            b'"name":"Evening","enabled":false}]'
        )
        assert decode_recurring_rules(body) == [
            RecurringRule(
                id=3,
                channel_id=12,
                days_of_week=[0, 2, 4],
                start_time="20:00:00",
                end_time="21:00:00",
                start_date="2026-01-01",
                end_date="2026-03-01",
                name="Evening",
                enabled=False,
            )
        ]

    def test_defaults(self):
        (rule,) = decode_recurring_rules(b'[{"id":"8"}]')
        assert rule.id == 8
        assert rule.days_of_week == []
        assert rule.enabled is True

    def test_rules_without_id_skipped(self):
        assert decode_recurring_rules(b'[{"name":"orphan"}]') == []

    def test_empty_array(self):
        assert decode_recurring_rules(b"[]") == []

    def test_not_an_array(self):
        with pytest.raises(JsonShapeError, match="Recurring rules response was not a JSON array"):
            decode_recurring_rules(b'{"detail":"error"}')


class TestRecordings:
    """Recording listings with nested custom_properties."""

    BODY = (
        b'[{"id":17,"channel":5,"start_time":"2026-01-23T10:00:00Z","end_time":"2026-01-23T11:00:00+01:00",'
        b'"custom_properties":{"program":{"title":"Match of the Day","description":"Highlights {and} more"}},'
        b'"title":"outer"},'
        b'{"id":18,"start_time":"not a date"}]'
    )

    def test_recording_fields(self):
        first, second = decode_recordings(self.BODY, "http://dvr.example:9191/")
        assert first.id == 17
        assert first.channel_id == 5
        assert first.title == "Match of the Day"
        assert first.plot == "Highlights {and} more"
        assert first.stream_url == "http://dvr.example:9191/api/channels/recordings/17/file/"
        assert first.start_time == datetime(2026, 1, 23, 10, 0, tzinfo=timezone.utc)
        assert first.end_time == datetime(2026, 1, 23, 10, 0, tzinfo=timezone.utc)

        assert second.title == ""
        assert second.start_time is None

    def test_not_an_array(self):
        with pytest.raises(JsonShapeError, match="Recordings"):
            decode_recordings(b'{"detail":"x"}', "http://dvr.example")
