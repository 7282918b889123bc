"""Failover exception hierarchy.

All exceptions raised by the dispatch layer itself inherit from
``FailoverError``.  Failures classified as non-recoverable or unknown are
*not* wrapped: the provider's original exception reaches the caller.
"""

from __future__ import annotations


class FailoverError(Exception):
    """Base class for all dispatch-layer errors."""

    def __init__(self, message: str, *, code: str = "FAILOVER_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class ProviderError(FailoverError):
    """A provider failure carrying an explicit type identifier.

    Provider implementations may raise this instead of an SDK exception
    when they want to control what the classifier sees as the type name.
    """

    def __init__(self, message: str, *, type_name: str | None = None) -> None:
        super().__init__(message, code="PROVIDER_ERROR")
        self.type_name = type_name or type(self).__name__


class AllProvidersFailedError(FailoverError):
    """Raised when every provider in the chain was exhausted or refused."""

    def __init__(
        self,
        *,
        providers_count: int,
        providers_tried: int,
        errors: dict[str, str] | None = None,
        breakers_enabled: bool = False,
    ) -> None:
        message = (
            "All providers failed or unavailable"
            if breakers_enabled
            else "All providers failed"
        )
        super().__init__(message, code="ALL_PROVIDERS_FAILED")
        self.providers_count = providers_count
        self.providers_tried = providers_tried
        self.errors = dict(errors or {})
