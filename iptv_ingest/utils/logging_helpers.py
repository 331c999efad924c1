"""
Structured logging helpers for consistent log formatting.

Provides utilities for structured, clean logging without excessive decorative separators.
"""
import logging
from datetime import datetime, timezone


def log_section_start(logger: logging.Logger, section_name: str) -> None:
    """
    Log the start of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being started
    """
    logger.info(f"Starting: {section_name}")


def log_section_end(logger: logging.Logger, section_name: str) -> None:
    """
    Log the end of a processing section.

    Args:
        logger: Logger instance
        section_name: Name of the section being ended
    """
    logger.info(f"Completed: {section_name}")


def log_fetch_start(logger: logging.Logger, what: str) -> None:
    """Log fetch operation start."""
    logger.info(f"{what} fetch started at {datetime.now(timezone.utc).isoformat()}")


def log_fetch_end(logger: logging.Logger, what: str, ok: bool, details: str) -> None:
    """Log fetch operation outcome."""
    if ok:
        logger.info(f"{what} fetch completed at {datetime.now(timezone.utc).isoformat()} ({details})")
    else:
        logger.error(f"{what} fetch failed: {details}")


def log_catalog_summary(
    logger: logging.Logger,
    categories_count: int,
    streams_count: int
) -> None:
    """
    Log catalog decode summary.

    Args:
        logger: Logger instance
        categories_count: Number of decoded categories
        streams_count: Number of decoded streams
    """
    logger.info(f"Catalog summary - Categories: {categories_count}, Streams: {streams_count}")


def log_guide_summary(
    logger: logging.Logger,
    channels_count: int,
    programmes_count: int
) -> None:
    """
    Log guide assembly summary.

    Args:
        logger: Logger instance
        channels_count: Channels with at least one entry
        programmes_count: Programme entries retained
    """
    logger.info(f"Parsed XMLTV - {channels_count} channels, {programmes_count} programmes")
