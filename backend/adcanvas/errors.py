"""Error taxonomy shared by the pipelines and the HTTP layer.

Only ``ConfigError`` and ``WorkflowStateError`` are allowed to escape a
pipeline. ``ExternalServiceError`` is always caught at the model call site and
replaced by that stage's fallback.
"""


class AdCanvasError(Exception):
    """Base class for all application errors."""

    status_code = 500
    error = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(AdCanvasError):
    """A platform profile or workflow configuration source is missing or malformed."""

    error = "config_error"


class ValidationInputError(AdCanvasError, ValueError):
    """A request is missing fields or carries invalid values.

    Also a ``ValueError`` so pydantic field validators report it as a schema error.
    """

    status_code = 400
    error = "validation_input_error"


class ExternalServiceError(AdCanvasError):
    """The generative-model capability failed, timed out or returned a non-conforming value."""

    status_code = 502
    error = "external_service_error"


class WorkflowStateError(AdCanvasError):
    """A workflow operation was invoked from a state that cannot honour it."""

    error = "workflow_state_error"
