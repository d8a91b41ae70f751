"""Error taxonomy shared by the upstream clients, parsers and routes."""

from __future__ import annotations


class NflHubError(RuntimeError):
    pass


class ConfigurationError(NflHubError):
    """A required setting (usually an API key) is missing."""


class UpstreamError(NflHubError):
    """An upstream provider answered with a non-2xx status or not at all."""

    def __init__(self, message: str, status: int | None = None, url: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.url = url

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (status={self.status})"


class NormalizationError(NflHubError):
    """A provider record did not have the shape the parser expects."""

    def __init__(self, field: str, detail: str | None = None):
        message = f"Unrecognized provider record: field '{field}'"
        if detail:
            message = f"{message} {detail}"
        super().__init__(message)
        self.field = field
