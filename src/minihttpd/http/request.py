"""
=============================================================================
REQUEST READING
=============================================================================

Reads the opening lines of a request: the request line and the header
lines, up to the blank line that separates headers from the body.

    GET / HTTP/1.1\r\n          ──►  "GET / HTTP/1.1"
    Host: localhost\r\n         ──►  "Host: localhost"
    \r\n                        ──►  (stop)
    <body, never read>

Lines are kept RAW. Header names and values are not split apart and no
request line parsing happens here.

=============================================================================
READ WHAT YOU CAN, STOP SILENTLY
=============================================================================

Reading stops, without raising, at the first of:

    - an empty line (the header/body separator)
    - end of stream (client closed or half-closed)
    - a line that is not valid UTF-8
    - an OSError from the socket (e.g. connection reset)

Lines read before the stop are always kept. A client that closes early
and a client that sends garbage therefore look the same: a short (or
empty) list. Telling them apart is not this module's job.

=============================================================================
"""

import logging
from typing import BinaryIO, List


logger = logging.getLogger(__name__)


def read_request_lines(stream: BinaryIO) -> List[str]:
    """
    Read request lines from a binary stream.

    Args:
        stream: Buffered binary stream (Connection.stream).

    Returns:
        Lines in arrival order, without line terminators. May be empty.
    """
    lines: List[str] = []

    while True:
        try:
            raw = stream.readline()
        except OSError as e:
            logger.debug(f"Read stopped after {len(lines)} lines: {e}")
            break

        if not raw:
            break  # End of stream

        try:
            line = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.debug(f"Read stopped after {len(lines)} lines: {e}")
            break

        # "\r\n" and bare "\n" both end a line
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]

        if not line:
            break  # Header/body separator

        lines.append(line)

    return lines
