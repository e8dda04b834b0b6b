"""
Fault hierarchy for market-data acquisition.

Nothing here is retried: every fault aborts the fetch in progress and
surfaces to the caller, which decides whether to try again. An empty
result is not a fault.
"""


class MarketDataError(Exception):
    """Base class for acquisition faults."""


class ConfigurationError(MarketDataError):
    """No usable vendor for the run configuration (e.g. missing credentials)."""


class TransportError(MarketDataError):
    """Non-success HTTP status, connection failure, or SDK request failure."""


class PaginationLimitExceeded(TransportError):
    """The vendor kept returning continuation tokens past the page guard."""


class MalformedResponseError(MarketDataError):
    """Body could not be parsed, or records lack required fields or ordering."""
