"""Error hierarchy for backend call retry classification.

This hierarchy lets tenacity retry decorators tell transient failures
(should retry) from permanent ones (should not retry). The reconciliation
pipeline itself never raises for bad data; these errors only cross the
network and import-file boundaries.

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    def list_sessions(event_id: str):
        ...
"""


class PlannerError(Exception):
    """Base exception for all planner errors."""

    pass


class TransientError(PlannerError):
    """Temporary failure that may succeed on retry.

    Examples: network timeouts, 503 Service Unavailable, dropped connections.
    """

    pass


class RateLimitError(TransientError):
    """Rate limit exceeded - needs longer backoff.

    Inherits from TransientError so tenacity will retry it.
    """

    pass


class PermanentError(PlannerError):
    """Failure that won't succeed on retry.

    Examples: 404 for an unknown event, malformed request, invalid payload.
    """

    pass


class AuthenticationError(PermanentError):
    """Token expired or rejected - needs new credentials, not a retry."""

    pass


class ImportFormatError(PermanentError):
    """Uploaded sheet lacks the columns needed to build import mappings."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(f"Missing required import columns: {', '.join(missing)}")
