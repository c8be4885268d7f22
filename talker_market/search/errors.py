from __future__ import annotations

from typing import Optional


class SearchError(Exception):
    """Base class for every failure of the product search pipeline."""

    user_message = "could not complete the search"

    def __init__(self, detail: str = "", user_message: Optional[str] = None):
        super().__init__(detail or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class ConfigurationError(SearchError):
    user_message = "translation service not configured"


class GatewayUnavailable(ConfigurationError):
    """No model credential is configured; raised before any network call."""


class GatewayError(SearchError):
    user_message = "translation service unavailable"


class MalformedResponse(SearchError):
    user_message = "invalid response from translation service"


class DomainRejection(SearchError):
    """The model classified the request as out of domain; its reason is shown as-is."""

    def __init__(self, reason: str):
        super().__init__(reason, user_message=reason)


class UnsafeStatement(SearchError):
    user_message = "operation not permitted"


class ExecutionError(SearchError):
    user_message = "could not fetch products"
