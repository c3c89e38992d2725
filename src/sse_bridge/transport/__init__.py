"""Transport layer - SSE framing and the per-client stream.

Requests travel server to client as ``data: <json>`` records on a
long-lived event stream; responses come back as discrete HTTP POSTs.
"""

from .sse import (
    CLIENT_ID_HEADER,
    HEARTBEAT_RECORD,
    RECORD_PREFIX,
    SSE_HEADERS,
    format_record,
    parse_record,
    session_stream,
)

__all__ = [
    "CLIENT_ID_HEADER",
    "HEARTBEAT_RECORD",
    "RECORD_PREFIX",
    "SSE_HEADERS",
    "format_record",
    "parse_record",
    "session_stream",
]
