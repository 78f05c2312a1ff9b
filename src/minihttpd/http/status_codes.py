"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server can send, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  200   │ OK           - a request line arrived, content follows    │
    │  400   │ Bad Request  - nothing readable arrived                   │
    └────────┴───────────────────────────────────────────────────────────┘

There is no routing, so no 404/405, and content-provider failures are not
turned into a 500 (the connection is dropped instead).

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    IntEnum, so members compare equal to their integer codes:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.BAD_REQUEST.phrase
        'Bad Request'
    """

    OK = 200
    BAD_REQUEST = 400

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 200 OK
                     ─── ──
                      │   └── Reason phrase
                      └────── Status code
        """
        return _STATUS_PHRASES[self]

    @property
    def is_error(self) -> bool:
        """Check if this is an error status code (4xx or 5xx)."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.BAD_REQUEST: "Bad Request",
}
