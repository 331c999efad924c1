"""
Services package for the ingestion core

This package contains the catalog, guide and DVR decoding services.
"""
from iptv_ingest.services.catalog_service import (
    decode_categories,
    decode_streams,
    fetch_all_live_streams,
    fetch_live_categories,
    fetch_live_streams,
)
from iptv_ingest.services.channel_matcher_service import ChannelMatcher
from iptv_ingest.services.connection_service import check_connection
from iptv_ingest.services.epg_assembler_service import assemble_epg
from iptv_ingest.services.guide_service import fetch_guide, fetch_xmltv, parse_guide
from iptv_ingest.services.xmltv_parser_service import parse_xmltv

__all__ = [
    'decode_categories',
    'decode_streams',
    'fetch_all_live_streams',
    'fetch_live_categories',
    'fetch_live_streams',
    'ChannelMatcher',
    'check_connection',
    'assemble_epg',
    'fetch_guide',
    'fetch_xmltv',
    'parse_guide',
    'parse_xmltv',
]
