"""Exception types shared across the pipeline."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for pipeline errors."""


class ConfigurationError(PipelineError):
    """Fatal misconfiguration: nothing should be retried."""


class PlacesAPIError(PipelineError):
    """Raised when the Places API returns a non-2xx response."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Places API error {status_code}: {body[:200]}")


class CopyGenerationError(PipelineError):
    """Raised when generated copy cannot be parsed."""


class IncompleteSearchError(PlacesAPIError):
    """A text search page after the first failed; ``places`` holds the earlier pages."""

    def __init__(self, status_code: int, body: str = "", places: list | None = None):
        super().__init__(status_code, body)
        self.places = places or []
