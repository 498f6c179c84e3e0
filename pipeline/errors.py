"""Error taxonomy shared by the extraction pipeline and the HTTP layer.

Each ``PipelineError`` carries the HTTP status the web layer answers with.
``ExtractionError`` and ``ShapeError`` never reach a client from the
generation stages: they trigger the fallback synthesizer instead.
"""


class PipelineError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ---- Input errors ----------------------------------------------------------

class InputError(PipelineError):
    """A required request field is missing or empty."""
    status_code = 400


class DocumentTooLargeError(InputError):
    status_code = 413


class DocumentDecodeError(InputError):
    """The upload is not valid base64."""


class InsufficientTextError(PipelineError):
    """The document decoded fine but holds too little readable text."""
    status_code = 422


class UpstreamFetchError(PipelineError):
    """The user-supplied URL answered with a non-2xx status or not at all."""
    status_code = 502


# ---- Model-side errors -----------------------------------------------------

class LLMError(PipelineError):
    """The completion endpoint returned an error or an empty message."""
    status_code = 502


class LLMTimeoutError(LLMError):
    status_code = 504


class PipelineTimeoutError(PipelineError):
    """An outer processing deadline fired."""
    status_code = 504


# ---- Extraction/shape errors -----------------------------------------------

class ExtractionError(PipelineError):
    """No JSON object could be located in the model output."""
    status_code = 502


class ShapeError(PipelineError):
    """A JSON object was found but does not match the artifact schema."""
    status_code = 502
