from __future__ import annotations

from typing import Optional

OVERLOADED_MESSAGE = "AI service is temporarily overloaded. Please try again."
MALFORMED_RESPONSE_MESSAGE = "AI returned a malformed validation response"
VALIDATION_FAILED_MESSAGE = "AI-based design validation failed"


class UpstreamError(Exception):
    """Raised by the generation client when the provider call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_overloaded(self) -> bool:
        return self.status_code == 503


class DesignValidationError(Exception):
    status_code = 500
    message = VALIDATION_FAILED_MESSAGE

    def __init__(self, message: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class UpstreamOverloadedError(DesignValidationError):
    status_code = 503
    message = OVERLOADED_MESSAGE


class MalformedUpstreamResponseError(DesignValidationError):
    status_code = 502
    message = MALFORMED_RESPONSE_MESSAGE


class DesignValidationFailedError(DesignValidationError):
    status_code = 500
    message = VALIDATION_FAILED_MESSAGE
