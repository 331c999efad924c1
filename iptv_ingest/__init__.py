"""
IPTV provider ingestion core

Decodes Xtream-style catalog listings and XMLTV guides into typed catalog and
schedule records.
"""
__version__ = "0.1.0"
