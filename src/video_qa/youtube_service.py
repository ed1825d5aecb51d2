"""YouTube transcript loading via caller-supplied text or the Supadata API."""

from urllib.parse import parse_qs, urlparse

from supadata import Supadata

from src.utils.logging import get_logger

from .config import VideoQAConfig
from .errors import EmptyTranscript, TranscriptUnavailable
from .schemas import TranscriptDocument

logger = get_logger(__name__)

NAMESPACE_PREFIX = "yt-"


def extract_video_id(video_url: str) -> str | None:
    """Extract the video ID from the ``v`` query parameter of a watch URL.

    Args:
        video_url: YouTube watch URL.

    Returns:
        The video ID, or None when the URL carries no ``v`` parameter.

    Examples:
        >>> extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42")
        "dQw4w9WgXcQ"
        >>> extract_video_id("https://youtu.be/dQw4w9WgXcQ") is None
        True
    """
    try:
        query = urlparse(video_url).query
    except (TypeError, ValueError):
        return None

    values = parse_qs(query).get("v")
    if not values or not values[0].strip():
        return None
    return values[0].strip()


def namespace_for(video_id: str) -> str:
    """Vector store namespace holding the chunks of one video."""
    return f"{NAMESPACE_PREFIX}{video_id}"


class YouTubeService:
    """Service for loading video transcripts.

    A transcript supplied by the caller is used as-is. Otherwise captions and
    basic video information are fetched through the Supadata API.
    """

    def __init__(self, config: VideoQAConfig):
        """Initialize YouTube service with configuration.

        Args:
            config: Configuration object with Supadata API key and language.
        """
        self.config = config
        self.client = Supadata(api_key=config.supadata_api_key)
        logger.info(
            "youtube_service_initialized",
            api_key_present=bool(config.supadata_api_key),
            language=config.transcript_language,
        )

    async def load_transcript(
        self, video_url: str, supplied_transcript: str | None = None
    ) -> TranscriptDocument:
        """Load the transcript of a video.

        Args:
            video_url: YouTube watch URL, recorded as the document source.
            supplied_transcript: Transcript text sent by the caller, if any.

        Returns:
            TranscriptDocument with the transcript text and source metadata.

        Raises:
            TranscriptUnavailable: If captions cannot be fetched.
            EmptyTranscript: If the transcript text is empty.
        """
        if supplied_transcript:
            logger.info(
                "using_supplied_transcript",
                source=video_url,
                text_length=len(supplied_transcript),
            )
            document = TranscriptDocument(
                text=supplied_transcript, metadata={"source": video_url}
            )
        else:
            document = await self.fetch_transcript(video_url)

        if not document.text.strip():
            logger.warning("transcript_empty", source=video_url)
            raise EmptyTranscript("Transcript not found or is empty.")

        return document

    async def fetch_transcript(self, video_url: str) -> TranscriptDocument:
        """Fetch captions and video information from Supadata.

        Args:
            video_url: YouTube watch URL.

        Returns:
            TranscriptDocument with plain caption text and video metadata.

        Raises:
            TranscriptUnavailable: If the API call fails or returns no captions.
        """
        video_id = extract_video_id(video_url) or video_url
        language = self.config.transcript_language

        logger.info("fetching_transcript", video_id=video_id, language=language)

        try:
            response = self.client.youtube.transcript(
                video_id=video_id,
                lang=language,
                text=True,
            )
            video = self.client.youtube.video(id=video_id)
        except Exception as e:
            logger.exception(
                "transcript_fetch_failed",
                video_id=video_id,
                error_type=type(e).__name__,
            )
            raise TranscriptUnavailable(
                "Could not retrieve transcript. Please ensure the video has captions."
            ) from e

        content = response.content
        if isinstance(content, list):
            # Segment lists come back when the API ignores text=True
            content = " ".join(getattr(segment, "text", "") for segment in content)

        if not content:
            logger.warning("transcript_unavailable", video_id=video_id)
            raise TranscriptUnavailable(
                "Could not retrieve transcript. Please ensure the video has captions."
            )

        metadata = {
            "source": video_url,
            "video_id": video_id,
            "lang": getattr(response, "lang", language),
            "title": getattr(video, "title", None) or "",
            "description": getattr(video, "description", None) or "",
        }

        logger.info(
            "transcript_fetched",
            video_id=video_id,
            text_length=len(content),
            lang=metadata["lang"],
        )
        return TranscriptDocument(text=content, metadata=metadata)
