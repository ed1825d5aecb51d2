"""Pydantic schemas for the video Q&A pipeline."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class VideoContext(BaseModel):
    """Per-request context sent along with a question.

    Nothing in here is persisted. The transcript, when present, replaces the
    caption fetch during ingestion.
    """

    title: str | None = None
    description: str | None = None
    timestamp: float | None = None  # Playback position in seconds
    transcript: str | None = None


class TranscriptDocument(BaseModel):
    """Full transcript text of one video plus its source metadata."""

    model_config = ConfigDict(frozen=True)

    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class Chunk(BaseModel):
    """Contiguous slice of a transcript.

    The chunk index follows transcript order so that a passage's position in
    the video can be estimated later.
    """

    model_config = ConfigDict(frozen=True)

    video_id: str
    chunk_index: int
    text_content: str
    source: str
    created_at: datetime
    title: str | None = None
    description: str | None = None

    def to_metadata(self) -> dict[str, Any]:
        """Metadata stored next to the chunk's embedding."""
        metadata: dict[str, Any] = {
            "source": self.source,
            "video_id": self.video_id,
            "chunk_index": self.chunk_index,
            "timestamp": self.created_at.isoformat(),
        }
        if self.title:
            metadata["title"] = self.title
        if self.description:
            metadata["description"] = self.description
        return metadata


class ChunkWithEmbedding(Chunk):
    """Chunk with its embedding vector, ready to be written to the store."""

    embedding: list[float]


class RetrievedChunk(BaseModel):
    """Stored chunk returned by a similarity search."""

    text_content: str
    chunk_index: int | None = None
    similarity: float = 0.0
    metadata: dict[str, Any] = Field(default_factory=dict)
