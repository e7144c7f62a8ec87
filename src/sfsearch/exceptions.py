from __future__ import annotations

from typing import Optional

# Upper bound on how much of a raw response body we keep on an error.
MAX_BODY_SNIPPET = 500


def truncate_body(body: Optional[str], limit: int = MAX_BODY_SNIPPET) -> str:
    """Return at most `limit` characters of a response body for error reports."""
    if not body:
        return ""
    if len(body) <= limit:
        return body
    return body[:limit] + "...[truncated]"


class SalesforceError(RuntimeError):
    """Base class for every error raised by sfsearch."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class ConfigError(SalesforceError):
    """Startup configuration is unusable."""


class MissingCredentialsError(ConfigError):
    """Raised when the required Salesforce env vars are not present."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__("Missing required environment variables: " + ", ".join(missing))


class TransportError(SalesforceError):
    """The HTTP request could not be completed (DNS, connect, timeout, ...)."""

    def __init__(self, url: str, cause: BaseException):
        self.url = url
        self.cause = cause
        super().__init__(f"request to {url} failed: {cause}")


class AuthError(SalesforceError):
    """Token acquisition against the OAuth endpoint failed."""


class AuthRejected(AuthError):
    def __init__(self, status_code: int, body: Optional[str]):
        self.status_code = status_code
        self.body = truncate_body(body)
        super().__init__(f"token request rejected ({status_code}): {self.body}")


class MalformedAuthResponse(AuthError):
    def __init__(self, body: Optional[str]):
        self.body = truncate_body(body)
        super().__init__(f"token response has no usable access_token: {self.body}")


class QueryError(SalesforceError):
    """A SOQL query could not be answered."""


class QueryRejected(QueryError):
    def __init__(self, status_code: int, body: Optional[str]):
        self.status_code = status_code
        self.body = truncate_body(body)
        super().__init__(f"query rejected ({status_code}): {self.body}")


class DecodeError(QueryError):
    """The response body did not decode into the expected envelope."""

    def __init__(self, reason: str, body: Optional[str] = None, status_code: Optional[int] = None):
        self.reason = reason
        self.status_code = status_code
        self.body = truncate_body(body)
        message = reason if status_code is None else f"{reason} (HTTP {status_code})"
        if self.body:
            message = f"{message}: {self.body}"
        super().__init__(message)
