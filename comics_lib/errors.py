"""Error types raised by the comics downloader.

Every failure that belongs to a single comic derives from `ComicsError` so the
coordinator can turn it into a failed outcome without touching sibling work.
"""


class ComicsError(Exception):
    """Base class for all downloader errors."""


class FetchError(ComicsError):
    """Transport failure or non-success HTTP status on a GET."""


class ExtractionError(ComicsError):
    """The listing response did not contain the expected structure."""


class NotFound(ExtractionError):
    """No qualifying image element was found in a markup page."""


class MalformedFeed(ExtractionError):
    """A JSON feed did not parse as the expected record."""


class UnknownFormat(ComicsError):
    """Downloaded bytes match no known image signature."""


class WriteError(ComicsError):
    """The strip could not be written to disk."""


class ConfigError(ComicsError):
    """Configuration file or source definition is invalid."""
