from dataclasses import dataclass, field
from typing import Optional
import codecs
import logging
import re

from lxml import etree # type: ignore

from iptv_ingest.errors import XmltvShapeError
from iptv_ingest.services.fetch_types import GuideChannel, GuideProgramme
from iptv_ingest.utils.timezone import parse_xmltv_time

logger = logging.getLogger(__name__)

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


@dataclass(slots=True)
class XmltvDocument:
    """Output of both parsing passes, in document order."""
    channels: list[GuideChannel] = field(default_factory=list)
    programmes: list[GuideProgramme] = field(default_factory=list)


def parse_xmltv(data: bytes | str, *, apply_offsets: bool = False) -> XmltvDocument:
    """
    Parse an in-memory XMLTV document into channel and programme declarations

    Args:
        data: Complete XMLTV document
        apply_offsets: Shift times by their '+HHMM' suffix instead of ignoring it

    Returns:
        XmltvDocument with channels, then programmes whose channel was declared

    Raises:
        XmltvShapeError: If XML is malformed or the root element is not <tv>
    """
    data = _prepare_document(data)

    parser = etree.XMLParser(
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
        remove_comments=True,
    )
    try:
        logger.debug("  Loading XML document...")
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as e:
        logger.error(f"  XML parsing error: {e}")
        raise XmltvShapeError(f"Failed to parse XMLTV: {e}") from e

    if root is None or root.tag != 'tv':
        tag = None if root is None else root.tag
        logger.error(f"XMLTV missing <tv> root element (found {tag})")
        raise XmltvShapeError("XMLTV missing <tv> root element")

    logger.debug("  Extracting channels...")
    channels = _parse_channels(root)
    logger.debug(f"    Found {len(channels)} valid channels")

    known_ids = {channel.xmltv_id for channel in channels}
    logger.debug("  Extracting programmes...")
    programmes = _parse_programmes(root, known_ids, apply_offsets)
    logger.debug(f"    Found {len(programmes)} programmes for declared channels")

    return XmltvDocument(channels=channels, programmes=programmes)


def _prepare_document(data: bytes | str) -> bytes:
    """
    Normalise a guide body for lxml

    Text input is already decoded, so its encoding declaration no longer applies
    and is dropped before re-encoding as UTF-8. Leading whitespace and a UTF-8 BOM
    are removed so a declaration emitted after a stray newline still parses.
    """
    if isinstance(data, str):
        text = _XML_DECLARATION.sub("", data.lstrip("\ufeff \t\r\n"), count=1)
        data = text.encode("utf-8")

    data = data.lstrip()
    if data.startswith(codecs.BOM_UTF8):
        data = data[len(codecs.BOM_UTF8):].lstrip()
    return data


def _parse_channels(root: etree._Element) -> list[GuideChannel]:
    """Extract channels from XMLTV root element"""
    channels = []

    for channel in root.iterchildren('channel'):
        xmltv_id = channel.get('id')
        if not xmltv_id:
            logger.debug("Skipping channel with missing ID attribute")
            continue

        channels.append(GuideChannel(
            xmltv_id=xmltv_id,
            display_name=_get_text(channel, 'display-name'),
            icon_path=_get_icon(channel),
        ))

    return channels


def _parse_programmes(
    root: etree._Element,
    known_ids: set[str],
    apply_offsets: bool,
) -> list[GuideProgramme]:
    """Extract programmes that reference a declared channel"""
    programmes = []
    skipped = 0

    for programme in root.iterchildren('programme'):
        channel_id = programme.get('channel')
        if not channel_id or channel_id not in known_ids:
            skipped += 1
            continue

        programmes.append(GuideProgramme(
            channel=channel_id,
            start_time=parse_xmltv_time(programme.get('start'), apply_offset=apply_offsets),
            end_time=parse_xmltv_time(programme.get('stop'), apply_offset=apply_offsets),
            title=_get_text(programme, 'title'),
            description=_get_text(programme, 'desc'),
            episode_name=_get_text(programme, 'sub-title'),
            icon_path=_get_icon(programme),
            genre=_get_text(programme, 'category'),
        ))

    if skipped:
        logger.debug(f"    Skipped {skipped} programmes for undeclared channels")

    return programmes


def _get_icon(element: etree._Element) -> Optional[str]:
    icon_elem = element.find('icon')
    if icon_elem is None:
        return None
    return icon_elem.get('src') or None


def _get_text(element: etree._Element, tag: str, default: Optional[str] = None) -> Optional[str]:
    """Safely extract text from XML element"""
    child = element.find(tag)
    if child is None or not child.text:
        return default
    return child.text.strip() or default
