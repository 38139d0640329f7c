"""Custom exceptions for the cheapest flight search service."""


class ScheduleProviderError(RuntimeError):
    """Raised when the flight schedule provider cannot return departures."""

    pass


class ScheduleNotFoundError(ScheduleProviderError):
    """Raised when the provider has no schedule data for the requested airport."""

    pass


class UpstreamRateLimitedError(ScheduleProviderError):
    """Raised when the schedule provider throttles us; aborts the whole search."""

    pass


class SearchThrottledError(Exception):
    """Raised when a client exceeds the local search request budget."""

    def __init__(self, retry_after: float):
        super().__init__(f"Too many searches. Retry in {retry_after:.0f} seconds.")
        self.retry_after = retry_after
