"""
EPG Assembler

Builds per-channel schedules from parsed XMLTV programmes and channel matches.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from iptv_ingest.services.fetch_types import (
    EPOCH,
    ChannelEpg,
    ChannelMatch,
    EpgEntry,
    GuideChannel,
    GuideProgramme,
    MatchKind,
)
from iptv_ingest.services.xmltv_parser_service import XmltvDocument


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AssembledGuide:
    channels: list[ChannelEpg] = field(default_factory=list)
    programme_count: int = 0
    rejected_count: int = 0


def _has_valid_window(programme: GuideProgramme) -> bool:
    start, end = programme.start_time, programme.end_time
    return start is not None and end is not None and end > start > EPOCH


def _new_schedule(channel: GuideChannel, match: ChannelMatch | None) -> ChannelEpg:
    return ChannelEpg(
        id=match.join_key if match else channel.xmltv_id,
        xmltv_id=channel.xmltv_id,
        display_name=channel.display_name,
        icon_path=channel.icon_path,
        match_kind=match.kind if match else MatchKind.UNMATCHED,
    )


def assemble_epg(
    document: XmltvDocument,
    matches: Mapping[str, ChannelMatch],
) -> AssembledGuide:
    """
    Merge programmes into time-ordered schedules.

    Entries are keyed by start time; a later programme with the same start
    replaces the earlier one. Programmes without a valid start < stop window are
    dropped and not counted. Overlapping entries with different starts are kept.
    Channels left without entries are omitted from the result.
    """
    schedules: dict[str, ChannelEpg] = {}
    for channel in document.channels:
        schedules[channel.xmltv_id] = _new_schedule(channel, matches.get(channel.xmltv_id))

    rejected = 0
    for programme in document.programmes:
        schedule = schedules.get(programme.channel)
        if schedule is None:
            continue
        if not _has_valid_window(programme):
            rejected += 1
            continue

        schedule.entries[programme.start_time] = EpgEntry(
            channel_id=schedule.id,
            start_time=programme.start_time,
            end_time=programme.end_time,
            title=programme.title,
            description=programme.description,
            episode_name=programme.episode_name,
            icon_path=programme.icon_path,
            genre_string=programme.genre,
        )

    channels = []
    for schedule in schedules.values():
        if not schedule.entries:
            continue
        schedule.entries = dict(sorted(schedule.entries.items()))
        channels.append(schedule)

    programme_count = sum(len(schedule.entries) for schedule in channels)

    if rejected:
        logger.debug("Dropped %s programmes with missing or inverted times", rejected)
    logger.debug(
        "Assembled %s of %s channels with %s programmes",
        len(channels),
        len(schedules),
        programme_count,
    )
    return AssembledGuide(channels=channels, programme_count=programme_count, rejected_count=rejected)
