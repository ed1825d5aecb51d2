"""Chunking service for separator-aware transcript segmentation."""

from datetime import UTC, datetime

from langchain_text_splitters import RecursiveCharacterTextSplitter

from src.utils.logging import get_logger

from .config import VideoQAConfig
from .schemas import Chunk, TranscriptDocument

logger = get_logger(__name__)

# Paragraph, line, sentence, word, character
DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", "! ", "? ", " ", ""]


class ChunkingService:
    """Service for splitting transcripts into overlapping passages.

    Wraps a recursive character splitter: text is split on the first separator
    (in priority order) that occurs in it, long pieces are split again with
    the remaining separators, and short pieces are merged back up to the chunk
    size with a character overlap between neighbours. Separators stay attached
    to the start of the following piece and whitespace is not stripped, so
    every chunk is an exact substring of the transcript.
    """

    def __init__(
        self,
        config: VideoQAConfig,
        separators: list[str] | None = None,
    ):
        """Initialize chunking service with configuration.

        Args:
            config: Configuration object with chunk size and overlap.
            separators: Separator priority list (defaults to DEFAULT_SEPARATORS).

        Raises:
            ValueError: If the chunk size or overlap is out of range.
        """
        if config.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {config.chunk_size}")
        if not 0 <= config.chunk_overlap < config.chunk_size:
            raise ValueError(
                f"chunk_overlap ({config.chunk_overlap}) must be between 0 and "
                f"chunk_size ({config.chunk_size})"
            )

        self.config = config
        self.chunk_size = config.chunk_size
        self.chunk_overlap = config.chunk_overlap
        self.separators = separators or list(DEFAULT_SEPARATORS)
        self.splitter = RecursiveCharacterTextSplitter(
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
            separators=self.separators,
            keep_separator="start",
            strip_whitespace=False,
        )
        logger.info(
            "chunking_service_initialized",
            chunk_size=self.chunk_size,
            chunk_overlap=self.chunk_overlap,
        )

    def chunk_transcript(
        self, document: TranscriptDocument, video_id: str
    ) -> list[Chunk]:
        """Split a transcript document into ordered chunks.

        Args:
            document: Transcript to split.
            video_id: Video the transcript belongs to.

        Returns:
            Chunks numbered from 0 in transcript order.
        """
        logger.info(
            "chunking_started",
            video_id=video_id,
            text_length=len(document.text),
        )

        created_at = datetime.now(UTC)
        source = document.metadata.get("source", "")
        title = document.metadata.get("title") or None
        description = document.metadata.get("description") or None
        chunks = [
            Chunk(
                video_id=video_id,
                chunk_index=index,
                text_content=text,
                source=source,
                created_at=created_at,
                title=title,
                description=description,
            )
            for index, text in enumerate(self.split_text(document.text))
        ]

        logger.info("chunking_completed", video_id=video_id, chunks_created=len(chunks))
        return chunks

    def split_text(self, text: str) -> list[str]:
        """Split raw text into overlapping passages.

        Args:
            text: Text to split.

        Returns:
            Passages of at most chunk_size characters, whitespace-only
            passages dropped.
        """
        return [piece for piece in self.splitter.split_text(text) if piece.strip()]

