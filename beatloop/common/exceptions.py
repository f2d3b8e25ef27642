"""Error taxonomy for render jobs.

Every error is terminal for the job it occurs in. The API layer maps
``http_status`` onto the response status code.
"""


class RenderError(Exception):
    """Base class for render job failures."""

    http_status: int = 500

    def __init__(self, message: str, log_message: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.log_message = log_message  # Extra detail for the server log only.


class MissingInputError(RenderError):
    """Raised when the animation or the audio payload is absent."""

    http_status = 400


class DecodeError(RenderError):
    """Raised when the animation is malformed or has no frames."""

    http_status = 422


class InvalidTimelineError(RenderError):
    """Raised when the beat parameters cannot produce a timeline."""

    http_status = 400


class EncodeError(RenderError):
    """Raised when an encoder stage exits unsuccessfully."""

    http_status = 500

    def __init__(self, stage: int, exit_code: int | None, log_message: str | None = None) -> None:
        if exit_code is None:
            message = f"Encoder stage {stage} could not be started"
        else:
            message = f"Encoder stage {stage} failed with exit code {exit_code}"
        super().__init__(message, log_message=log_message)
        self.stage = stage
        self.exit_code = exit_code


class DeliveryError(RenderError):
    """Raised when the finished video cannot be sent to the caller."""

    http_status = 500
