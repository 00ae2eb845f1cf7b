"""Sentry API errors."""

from __future__ import annotations


class SentryAPIError(RuntimeError):
    """Base class for failed calls against the Sentry API."""


class SentryTransportError(SentryAPIError):
    """Raised when a request fails before a usable response arrives."""

    @classmethod
    def for_path(cls, path: str, cause: BaseException) -> SentryTransportError:
        """Return an error for a connection failure, timeout or refused redirect."""
        return cls(f"Error for HTTP request to {path}: {cause}")

    @classmethod
    def refused_redirect(cls, path: str, status_code: int) -> SentryTransportError:
        """Return an error for a redirect the client declined to follow."""
        return cls(f"Refused redirect ({status_code}) for HTTP request to {path}")


class SentryStatusError(SentryAPIError):
    """Raised when Sentry answers with a status code that is not accepted."""

    def __init__(self, message: str, *, status_code: int) -> None:
        """Initialise with a message and the rejected HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def invalid_status(cls, status_code: int) -> SentryStatusError:
        """Return an error for a response outside the accepted status codes."""
        return cls(
            f"Invalid response from Sentry API: {status_code}",
            status_code=status_code,
        )


class SentryDecodeError(SentryAPIError):
    """Raised when a response body does not match the expected shape."""

    @classmethod
    def for_shape(cls, shape: str, cause: BaseException) -> SentryDecodeError:
        """Return an error for a body that could not be decoded as ``shape``."""
        return cls(f"Sentry API returned a malformed {shape}: {cause}")

    @classmethod
    def invalid_count(cls, issue_id: str, value: object) -> SentryDecodeError:
        """Return an error for a non-numeric issue count."""
        return cls(f"Sentry API returned non-numeric count {value!r} for {issue_id}")
