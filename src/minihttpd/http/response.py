"""
=============================================================================
HTTP RESPONSE BUILDING
=============================================================================

Decides what to send back for a request and serializes it.

=============================================================================
DECISION
=============================================================================

    request lines
         │
         ├── empty ──────► 400 Bad Request, empty body
         │
         └── non-empty ──► 200 OK, body = content_provider.default_content()

The request line is only logged. There is no method or path dispatch: every
request that produced at least one line gets the same default content.

=============================================================================
WIRE FORMAT
=============================================================================

Exactly one header is sent:

    HTTP/1.1 200 OK\r\n
    Content-Length: 13\r\n
    \r\n
    Hello, World!

No Date, no Server, no Content-Type, no chunking. Content-Length lets the
client know where the body ends even before the connection closes.

=============================================================================
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List

from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


@dataclass
class HTTPResponse:
    """
    An HTTP response to be sent to the client.

    Created fresh for every connection and never reused.
    """

    status: HTTPStatus = HTTPStatus.OK
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = "HTTP/1.1"

    def __post_init__(self):
        # Content-Length is mandatory and always matches the body
        self.headers["Content-Length"] = str(len(self.body))

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"
        """
        return f"{self.version} {self.status.value} {self.status.phrase}"

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

            STATUS-LINE\r\n
            Name: value\r\n     (one per header)
            \r\n
            BODY
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


def ok(body: bytes) -> HTTPResponse:
    """200 OK with the given body."""
    return HTTPResponse(status=HTTPStatus.OK, body=body)


def bad_request() -> HTTPResponse:
    """400 Bad Request with an empty body."""
    return HTTPResponse(status=HTTPStatus.BAD_REQUEST)


class ResponseBuilder:
    """
    Builds the response for one connection from its request lines.

    The content provider is any object with a default_content() method
    returning bytes (see handlers.static.StaticFileProvider). Its errors
    are NOT caught here.

    Usage:
        builder = ResponseBuilder(StaticFileProvider("./public"))
        response = builder.build(["GET / HTTP/1.1"])
        conn.send_response(response.to_bytes())
    """

    def __init__(self, content_provider):
        self.content_provider = content_provider

    def build(self, request_lines: List[str]) -> HTTPResponse:
        """
        Build a response.

        Args:
            request_lines: Output of read_request_lines().

        Returns:
            400 for an empty request, 200 with the default content otherwise.

        Raises:
            Whatever the content provider raises (e.g. ContentNotFoundError).
        """
        if not request_lines:
            return bad_request()

        logger.debug(f"Request: {request_lines[0]}")
        return ok(self.content_provider.default_content())
