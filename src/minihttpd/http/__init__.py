"""
=============================================================================
HTTP PROTOCOL HANDLING
=============================================================================

The (very small) application layer: read a request's opening lines, decide
on a status, serialize the response.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    Request-Response Cycle                           │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   CLIENT                                         SERVER              │
    │      │   GET / HTTP/1.1                             │                │
    │      │   Host: example.com                          │                │
    │      │  ─────────────────────────────────────────►  │                │
    │      │                              read_request_lines()             │
    │      │                              ResponseBuilder.build()          │
    │      │               HTTP/1.1 200 OK                │                │
    │      │               Content-Length: 13             │                │
    │      │  ◄─────────────────────────────────────────  │                │
    │      │                                    connection closed          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import read_request_lines
from .response import HTTPResponse, ResponseBuilder, ok, bad_request
from .status_codes import HTTPStatus

__all__ = [
    "read_request_lines",
    "HTTPResponse",
    "ResponseBuilder",
    "ok",
    "bad_request",
    "HTTPStatus",
]
