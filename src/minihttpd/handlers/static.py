"""
=============================================================================
STATIC CONTENT PROVIDER
=============================================================================

Supplies the body of every 200 response: the bytes of a single default
file (index.html unless configured otherwise) inside a content root.

=============================================================================
FAILURE MODES
=============================================================================

    file missing / is a directory  ──►  ContentNotFoundError
    file outside root_dir          ──►  ContentNotFoundError (+ warning log)
    file unreadable                ──►  OSError (PermissionError, ...)

ContentNotFoundError is a LookupError, NOT an OSError, so a missing
resource can always be told apart from a genuine I/O failure.

Neither is handled here. The server loop lets the error abort the one
connection that triggered it.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

The index file name comes from configuration (INDEX_FILE / --index), so it
could be "../../etc/passwd". We resolve the full path (following .. and
symlinks) and refuse anything that ends up outside root_dir:

    full_path = (root_dir / index_file).resolve()
    full_path.relative_to(root_dir)  # Raises if outside root!

=============================================================================
"""

import logging
from pathlib import Path


logger = logging.getLogger(__name__)


class ContentNotFoundError(LookupError):
    """The default resource does not exist (or is not servable)."""

    def __init__(self, path: Path):
        super().__init__(f"Content not found: {path}")
        self.path = path


class StaticFileProvider:
    """
    Serves the default file from a content directory.

    The file is read from disk on every call, so edits show up without a
    restart.

    Usage:
        provider = StaticFileProvider("./public")
        body = provider.default_content()   # bytes of ./public/index.html
    """

    def __init__(self, root_dir: str, index_file: str = "index.html"):
        """
        Args:
            root_dir: Directory to serve from. Must exist.
            index_file: Default resource, relative to root_dir.

        Raises:
            ValueError: If root_dir is not a directory.
        """
        # Resolve to absolute path (needed for the traversal check)
        self.root_dir = Path(root_dir).resolve()
        self.index_file = index_file

        if not self.root_dir.is_dir():
            raise ValueError(f"Content root directory does not exist: {root_dir}")

    @property
    def default_path(self) -> Path:
        return (self.root_dir / self.index_file).resolve()

    def default_content(self) -> bytes:
        """
        Read the default resource.

        Raises:
            ContentNotFoundError: Missing, not a file, or outside root_dir.
            OSError: The file exists but cannot be read.
        """
        full_path = self.default_path

        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {self.index_file}")
            raise ContentNotFoundError(full_path) from None

        if not full_path.is_file():
            raise ContentNotFoundError(full_path)

        return full_path.read_bytes()
