"""
Custom exceptions for the tubescope application.

This module defines the typed failures raised by the extraction engine:
network failures, undecodable bodies or cache payloads, malformed embedded
JSON, missing entities, and errors from the optional official API client.
"""

from __future__ import annotations


class TubescopeError(Exception):
    """Base exception for all tubescope errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize TubescopeError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class NetworkError(TubescopeError):
    """
    Exception raised for transport or HTTP failures.

    Raised by the document fetcher on non-2xx responses, connection
    failures and timeouts. The engine never retries; callers may retry
    with backoff.

    Attributes
    ----------
    message : str
        Human-readable error message.
    original_error : Exception | None
        The original exception that caused this error.
    status_code : int | None
        HTTP status code, when a response was received.
    url : str | None
        The URL that was being fetched.

    Examples
    --------
    >>> try:
    ...     document = await fetcher.fetch(url, locale)
    ... except NetworkError as e:
    ...     print(f"Fetch failed ({e.status_code}): {e.message}")
    """

    def __init__(
        self,
        message: str = "Network error occurred",
        original_error: Exception | None = None,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        """
        Initialize NetworkError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Network error occurred").
        original_error : Exception | None, optional
            The original exception that caused this error (default: None).
        status_code : int | None, optional
            HTTP status code of the failed response (default: None).
        url : str | None, optional
            URL of the failed request (default: None).
        """
        self.original_error = original_error
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class DecodeError(TubescopeError):
    """
    Exception raised when bytes cannot be interpreted.

    Covers response bodies that are not valid text (or not valid JSON for
    JSON endpoints) and corrupt cache payloads.

    Attributes
    ----------
    message : str
        Human-readable error message.
    key : str | None
        Cache key or URL whose payload could not be decoded.
    """

    def __init__(
        self,
        message: str = "Payload could not be decoded",
        key: str | None = None,
    ) -> None:
        """
        Initialize DecodeError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message.
        key : str | None, optional
            Cache key or URL of the payload (default: None).
        """
        self.key = key
        super().__init__(message)


class MalformedDataError(TubescopeError):
    """
    Exception raised when a located JSON span does not parse.

    Attributes
    ----------
    message : str
        Human-readable error message.
    snippet : str | None
        The first characters of the offending span, for logging.
    """

    def __init__(
        self,
        message: str = "Embedded JSON could not be parsed",
        snippet: str | None = None,
    ) -> None:
        """
        Initialize MalformedDataError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message.
        snippet : str | None, optional
            Leading excerpt of the span that failed to parse (default: None).
        """
        self.snippet = snippet
        super().__init__(message)


class NotFoundError(TubescopeError):
    """
    Exception raised when no recognizable entity could be resolved.

    Attributes
    ----------
    message : str
        Human-readable error message.
    kind : str | None
        Entity or collection kind that was requested.
    identifier : str | None
        The requested id or query.
    """

    def __init__(
        self,
        message: str = "Entity not found",
        kind: str | None = None,
        identifier: str | None = None,
    ) -> None:
        """
        Initialize NotFoundError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Entity not found").
        kind : str | None, optional
            Requested kind (default: None).
        identifier : str | None, optional
            Requested id or query (default: None).
        """
        self.kind = kind
        self.identifier = identifier
        super().__init__(message)


class EnrichmentError(TubescopeError):
    """
    Exception raised by the official statistics API client.

    Attributes
    ----------
    message : str
        Human-readable error message.
    status_code : int | None
        HTTP status code returned by the API, if any.
    """

    def __init__(
        self,
        message: str = "Official API request failed",
        status_code: int | None = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(message)


class ConfigurationError(TubescopeError):
    """Exception raised for invalid or missing configuration."""

    pass


__all__ = [
    "TubescopeError",
    "NetworkError",
    "DecodeError",
    "MalformedDataError",
    "NotFoundError",
    "EnrichmentError",
    "ConfigurationError",
]
