"""Exception hierarchy shared by the loader and the front-ends.

Load errors never leave the loader: they are turned into a ``LoadOutcome``
and the caller carries on with an empty store. Request errors are rendered by
the web app's exception handlers as ``{"error": message}``.
"""

from __future__ import annotations


class ClientFinderError(Exception):
    """Base exception for all ClientFinder errors."""

    http_status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict[str, str]:
        return {"error": self.message}


class SourceNotFound(ClientFinderError):
    """The data file does not exist."""

    http_status = 404

    def __init__(self, path: object) -> None:
        super().__init__(f"File not found: {path}")
        self.path = path


class MalformedSource(ClientFinderError):
    """The data file exists but does not hold a JSON array of objects."""

    http_status = 422


class MissingQueryParameter(ClientFinderError):
    http_status = 400

    def __init__(self, message: str = "Missing field or query parameter") -> None:
        super().__init__(message)


class InvalidFieldSelection(ClientFinderError):
    """The terminal user picked a field number outside the offered range."""

    http_status = 400

    def __init__(self, field_count: int) -> None:
        super().__init__(
            f"Invalid field selection. Please enter a number between 1 and {field_count}."
        )
        self.field_count = field_count
