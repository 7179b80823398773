"""Exception classes for the Hoodie SDK."""

from __future__ import annotations

from typing import Any
from typing import Dict
from typing import Optional


class HoodieError(Exception):
    """Base exception for all Hoodie SDK errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize Hoodie error.

        Args:
            message: Error message
            error_code: Optional error code
            details: Optional error details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        """String representation of the error."""
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message

    def __repr__(self) -> str:
        """Detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class HoodieRequestError(HoodieError):
    """A request to the Hoodie server was rejected.

    ``payload`` always holds a structured error: either the JSON body the
    server answered with, or ``{"error": <text>}`` when there was no usable
    body.
    """

    def __init__(
        self,
        payload: Any,
        status_code: int = 0,
        error_code: Optional[str] = None,
    ) -> None:
        """Initialize request error.

        Args:
            payload: Structured error value
            status_code: HTTP status code (0 when no response was received)
            error_code: Optional error code
        """
        super().__init__(_describe_payload(payload), error_code)
        self.payload = payload
        self.status_code = status_code


class HoodieHTTPError(HoodieRequestError):
    """The server responded with an error status."""

    def __init__(
        self,
        payload: Any,
        status_code: int,
        response_text: Optional[str] = None,
    ) -> None:
        """Initialize HTTP error.

        Args:
            payload: Parsed error body, or ``{"error": <text>}``
            status_code: HTTP status code
            response_text: Raw response text
        """
        super().__init__(payload, status_code, error_code="HTTP_ERROR")
        self.response_text = response_text

    def __str__(self) -> str:
        """String representation of the HTTP error."""
        base = super().__str__()
        return f"HTTP {self.status_code}: {base}"


class HoodieConnectionError(HoodieRequestError):
    """The Hoodie server could not be reached at all."""

    def __init__(self, base_url: str, error_code: str = "CONNECTION_ERROR") -> None:
        """Initialize connection error.

        Args:
            base_url: Base URL that could not be reached
            error_code: Error code
        """
        super().__init__(unreachable_payload(base_url), 0, error_code=error_code)
        self.base_url = base_url


class HoodieTimeoutError(HoodieConnectionError):
    """Request timeout error."""

    def __init__(self, base_url: str, timeout: Optional[float] = None) -> None:
        """Initialize timeout error.

        Args:
            base_url: Base URL of the server
            timeout: Timeout value in seconds
        """
        super().__init__(base_url, error_code="TIMEOUT")
        self.timeout = timeout

    def __str__(self) -> str:
        """String representation of the timeout error."""
        base = super().__str__()
        if self.timeout:
            return f"{base} (timeout: {self.timeout}s)"
        return base


class HoodieExtensionError(HoodieError):
    """An extension could not be mounted on a client."""

    def __init__(
        self,
        name: str,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize extension error.

        Args:
            name: Extension name
            message: Error message
            details: Optional error details
        """
        super().__init__(
            message or f"Failed to mount extension {name!r}",
            "EXTENSION_ERROR",
            details,
        )
        self.name = name


class HoodieConfigurationError(HoodieError):
    """Configuration error."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            details: Optional error details
        """
        super().__init__(message, "CONFIGURATION_ERROR", details)


def unreachable_payload(base_url: str) -> Dict[str, str]:
    """Error payload used when the server gave us nothing to parse."""
    return {"error": f"Cannot connect to Hoodie server at {base_url}"}


def _describe_payload(payload: Any) -> str:
    if isinstance(payload, dict):
        error = payload.get("error")
        reason = payload.get("reason")
        if error and reason:
            return f"{error}: {reason}"
        if error:
            return str(error)
    return str(payload)
