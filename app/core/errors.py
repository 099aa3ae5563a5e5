"""Error kinds raised while handling a finance chat request.

Each error carries ``code`` (the HTTP status the API layer answers with) and
``message`` (the text placed in the ``error`` field of the response body).
"""

from __future__ import annotations


class FinanceError(Exception):
    code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FinanceError):
    """A required request field is missing or has the wrong shape."""

    code = 400


class AttachmentError(FinanceError):
    """The attached file could not be turned into conversation text."""

    code = 400

    def __init__(self, message: str = "Failed to process file content"):
        super().__init__(message)


class UpstreamError(FinanceError):
    """The completion call to the model provider failed."""

    code = 500


class ResponseShapeError(FinanceError):
    """The model answered with something other than the expected JSON object.

    Raised and caught inside the response parser, which swaps in
    ``fallback`` as the explanation of a normal success payload. It never
    reaches the HTTP layer.
    """

    def __init__(self, message: str, fallback: str):
        super().__init__(message)
        self.fallback = fallback


class ConfigurationError(FinanceError):
    """The service is missing settings it needs to reach the provider."""

    code = 500
