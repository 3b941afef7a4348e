"""Error types raised by chronos.

Only configuration mistakes surface as exceptions. Missing clock support and
unmatched stops are reported through boolean returns so instrumentation can
never break the host.
"""

ERROR_MISSING_STORE = "Missing storing method"


class ChronosError(Exception):
    """Base class for all chronos errors."""


class MissingSinkError(ChronosError):
    """Raised when records would be delivered but no sink is configured."""

    def __init__(self, message: str = ERROR_MISSING_STORE):
        super().__init__(message)


class InvalidSinkError(ChronosError, TypeError):
    """Raised when a configured sink is not callable."""


class InvalidActionError(ChronosError, ValueError):
    """Raised by the dispatch adapter for malformed measure actions."""
