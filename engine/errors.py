"""Error taxonomy shared by the analysis pipeline, the clients and the routes.

Every error carries the HTTP status it maps to; ``main.py`` renders them as
``{"error": message}``.
"""

from __future__ import annotations


class BiasScopeError(Exception):
    """Base class for errors that surface to the caller."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(BiasScopeError):
    """Client-caused: blank text, nothing to segment, empty chat history."""

    status_code = 400


class ConfigurationError(BiasScopeError):
    """Deployment-caused: a required credential is missing."""

    status_code = 500


class UpstreamError(BiasScopeError):
    """An external model endpoint failed or returned an unusable body."""

    status_code = 502


class AnalysisFailedError(BiasScopeError):
    """Every sentence failed analysis; nothing usable came back."""

    status_code = 502


class InternalError(BiasScopeError):
    status_code = 500
