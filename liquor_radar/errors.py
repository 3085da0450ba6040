"""Error taxonomy shared by the scheduler, search, and notification layers."""


class LiquorRadarError(Exception):
    """Base class for all liquor-radar errors."""


class ConfigurationError(LiquorRadarError):
    """Invalid or incomplete configuration. Fatal at construction, never retried."""


class SearchError(LiquorRadarError):
    """A catalog search failed (network or parse failure). Retried on the next tick."""


class SearchTermError(SearchError):
    """A single search term failed within a pass."""

    def __init__(self, term: str, message: str) -> None:
        super().__init__(f"search for '{term}' failed: {message}")
        self.term = term


class DispatchError(LiquorRadarError):
    """A notification sink failed to deliver a message."""


class CancellationError(LiquorRadarError):
    """A search pass was halted by a stop request or upstream cancellation."""


class ShutdownTimeoutError(LiquorRadarError):
    """Subscriber runners did not finish within the shutdown bound."""
