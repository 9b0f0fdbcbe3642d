"""
Exception taxonomy for category sync and promotion handling.

Provider errors are split by whether a retry can help:

- TransientProviderError: network failures, timeouts, throttling, 5xx.
  Retried per RetryPolicy, then recorded as failed without aborting the batch.
- PermanentProviderError: the provider rejected the payload. Never retried.

Validation errors are raised before anything is written.
"""


class CategoryProviderError(Exception):
    """Base exception for category provider failures."""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TransientProviderError(CategoryProviderError):
    """Failure that may succeed if the same call is retried."""
    pass


class PermanentProviderError(CategoryProviderError):
    """Failure the provider will keep returning for the same payload."""
    pass


class PromotionValidationError(ValueError):
    """Base exception for rejected promotion requests."""
    pass


class InvalidTierError(PromotionValidationError):
    """Raised when a promotion tier is not one of the configured tiers."""

    def __init__(self, tier: object, allowed: list[str]):
        super().__init__(
            f"Invalid promotion tier {tier!r}. Allowed tiers: {', '.join(allowed)}"
        )
        self.tier = tier
        self.allowed = allowed


class InvalidDurationError(PromotionValidationError):
    """Raised when a promotion duration is zero or negative."""

    def __init__(self, duration: object):
        super().__init__(f"Promotion duration must be positive, got {duration!r}")
        self.duration = duration


class ListingNotFoundError(LookupError):
    """Raised when a directory listing (tenant) does not exist."""

    def __init__(self, listing_id: int):
        super().__init__(f"Listing {listing_id} not found")
        self.listing_id = listing_id
