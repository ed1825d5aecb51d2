"""Error hierarchy for the video Q&A pipeline.

Each error carries the HTTP status the API shell answers with when the error
escapes the pipeline before a streamed response has started.
"""


class VideoQAError(Exception):
    """Base class for all pipeline errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidVideoUrl(VideoQAError):
    """The video URL does not carry a video identifier."""

    status_code = 400


class TranscriptUnavailable(VideoQAError):
    """Captions could not be fetched for the video."""

    status_code = 422


class EmptyTranscript(VideoQAError):
    """The transcript is empty or whitespace only."""

    status_code = 422


class IngestionFailed(VideoQAError):
    """Writing chunks to the vector store failed on every attempt."""


class LLMUnavailable(VideoQAError):
    """No language model could be initialised."""


class NoFallbackConfigured(LLMUnavailable):
    """The primary model failed and there is no fallback provider to try."""
