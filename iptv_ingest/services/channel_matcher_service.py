"""
Channel Matcher

Resolves XMLTV channel identifiers against the provider's stream catalog.

Matching is a per-channel heuristic with three outcomes, tried in order:

1. exact id: the XMLTV id is a positive integer equal to a stream id;
2. name fallback: the display name equals a stream name, ignoring case;
3. unmatched: the XMLTV id is kept verbatim as the join key.

There is no global assignment step, so one stream can be claimed by several guide
channels when the provider's guide is inconsistent.
"""
import logging
from collections.abc import Iterable

from iptv_ingest.services.fetch_types import ChannelMatch, GuideChannel, MatchKind, Stream
from iptv_ingest.utils.json_scanner import parse_int_text


logger = logging.getLogger(__name__)


class ChannelMatcher:
    """Index of a stream catalog used to resolve guide channel join keys."""

    def __init__(self, streams: Iterable[Stream]):
        self._stream_ids: set[int] = set()
        self._ids_by_name: dict[str, int] = {}
        for stream in streams:
            if stream.id <= 0:
                continue
            self._stream_ids.add(stream.id)
            # Last stream wins when names collide.
            self._ids_by_name[stream.name.casefold()] = stream.id

        logger.debug(
            "Channel matcher indexed %s stream ids and %s names",
            len(self._stream_ids),
            len(self._ids_by_name),
        )

    def match(self, channel: GuideChannel) -> ChannelMatch:
        numeric = parse_int_text(channel.xmltv_id)
        if numeric.ok and numeric.value > 0 and numeric.value in self._stream_ids:
            return ChannelMatch(
                xmltv_id=channel.xmltv_id,
                join_key=str(numeric.value),
                kind=MatchKind.EXACT_ID,
                stream_id=numeric.value,
            )

        if channel.display_name:
            stream_id = self._ids_by_name.get(channel.display_name.casefold())
            if stream_id is not None:
                return ChannelMatch(
                    xmltv_id=channel.xmltv_id,
                    join_key=str(stream_id),
                    kind=MatchKind.NAME_FALLBACK,
                    stream_id=stream_id,
                )

        return ChannelMatch(
            xmltv_id=channel.xmltv_id,
            join_key=channel.xmltv_id,
            kind=MatchKind.UNMATCHED,
        )

    def match_all(self, channels: Iterable[GuideChannel]) -> dict[str, ChannelMatch]:
        """Match every channel, keyed by XMLTV id. A repeated id keeps its last match."""
        matches: dict[str, ChannelMatch] = {}
        counts = {kind: 0 for kind in MatchKind}
        for channel in channels:
            result = self.match(channel)
            matches[channel.xmltv_id] = result
            counts[result.kind] += 1

        logger.info(
            "Channel matching: %s by id, %s by name, %s unmatched",
            counts[MatchKind.EXACT_ID],
            counts[MatchKind.NAME_FALLBACK],
            counts[MatchKind.UNMATCHED],
        )
        return matches
