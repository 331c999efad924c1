"""
Exception types raised inside the ingestion core.

Service entry points convert these into a failed FetchResult; they never escape
to the caller.
"""


class IngestError(Exception):
    """Base class for recoverable ingestion failures"""
    pass


class TransportError(IngestError):
    """Raised when the transport produced no usable response"""
    pass


class JsonShapeError(IngestError, ValueError):
    """Raised when a JSON body does not have the expected top-level shape"""
    pass


class XmltvShapeError(IngestError, ValueError):
    """Raised when an XMLTV document is malformed or lacks a <tv> root"""
    pass
