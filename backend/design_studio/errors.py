"""Error types surfaced by the design generation service.

Every request-level failure carries the HTTP status it maps to and a fixed
message that is safe to show to the client. Upstream error detail stays in
the logs.
"""

GENERIC_FAILURE_MESSAGE = "Failed to generate designs. Please try again."
MISSING_FIELDS_MESSAGE = "Prompt and use case are required"


class DesignStudioError(Exception):
    status_code = 500
    public_message = GENERIC_FAILURE_MESSAGE

    def __init__(self, detail: str = "", public_message: str = None):
        super().__init__(detail or self.public_message)
        self.detail = detail
        if public_message is not None:
            self.public_message = public_message


class InvalidRequest(DesignStudioError):
    """Client input is missing or malformed."""

    status_code = 400
    public_message = MISSING_FIELDS_MESSAGE


class UpstreamTextFailure(DesignStudioError):
    """The text backend could not be reached or rejected the call."""


class EmptyGenerationResult(DesignStudioError):
    """The text backend returned valid JSON without any concepts."""


class InternalFailure(DesignStudioError):
    """Catch-all for anything unexpected during orchestration."""


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing or invalid."""
