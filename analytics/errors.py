"""Error types raised by the analytics engine."""


class AnalyticsError(Exception):
    """Base class for analytics errors."""


class QueryError(AnalyticsError):
    """The mention store could not be queried (unreachable, timeout, bad query)."""


class ValidationError(AnalyticsError):
    """Caller supplied a malformed window, unknown widget type, unknown brand, etc."""
