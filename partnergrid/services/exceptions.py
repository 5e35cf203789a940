"""Domain-specific exceptions."""


class ServiceError(Exception):
    pass


class RateLimitExceeded(ServiceError):
    """Provider refused the call because the hourly budget is spent."""

    def __init__(self, message: str, reset_at: int | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class RequestFailed(ServiceError):
    """Any other non-success exchange; ``status`` is None for transport errors."""

    def __init__(self, status: int | None, status_text: str) -> None:
        label = status if status is not None else "network"
        super().__init__(f"GitHub API error: {label} {status_text}".rstrip())
        self.status = status
        self.status_text = status_text


class DecodeFailure(ServiceError):
    pass


class CacheWriteFailure(ServiceError):
    pass


class CacheReadCorruption(ServiceError):
    pass
