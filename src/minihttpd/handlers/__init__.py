"""
=============================================================================
CONTENT PROVIDERS
=============================================================================

Where response bodies come from. A content provider is any object with a
default_content() method returning bytes:

    from minihttpd.handlers import StaticFileProvider

    provider = StaticFileProvider("/var/www", index_file="index.html")
    builder = ResponseBuilder(provider)

=============================================================================
"""

from .static import StaticFileProvider, ContentNotFoundError

__all__ = [
    "StaticFileProvider",
    "ContentNotFoundError",
]
