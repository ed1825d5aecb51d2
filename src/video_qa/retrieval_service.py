"""Retrieval service for top-K similarity search within a video namespace."""

from src.utils.logging import get_logger

from .embedding_service import EmbeddingService
from .schemas import RetrievedChunk
from .storage_service import StorageService

logger = get_logger(__name__)


class RetrievalService:
    """Fetches the stored chunks most similar to a question."""

    def __init__(
        self, embedding_service: EmbeddingService, storage_service: StorageService
    ):
        self.embedding_service = embedding_service
        self.storage_service = storage_service

    async def retrieve(
        self, namespace: str, query: str, top_k: int = 6
    ) -> list[RetrievedChunk]:
        """Return up to ``top_k`` chunks of a namespace, most similar first.

        An empty list means the namespace holds nothing relevant.

        Args:
            namespace: Namespace to search.
            query: User question.
            top_k: Maximum number of chunks to return.

        Returns:
            Retrieved chunks ordered by descending similarity.
        """
        if top_k <= 0:
            return []

        query_embedding = await self.embedding_service.embed_text(query)
        rows = await self.storage_service.search_chunks(
            query_embedding, namespace=namespace, match_count=top_k
        )

        results = [
            RetrievedChunk(
                text_content=row.get("text_content", ""),
                chunk_index=row.get("chunk_index"),
                similarity=row.get("similarity") or 0.0,
                metadata=row.get("metadata") or {},
            )
            for row in rows
            if row.get("text_content")
        ]
        results.sort(key=lambda chunk: chunk.similarity, reverse=True)
        results = results[:top_k]

        logger.info(
            "retrieval_completed",
            namespace=namespace,
            results=len(results),
            top_similarity=results[0].similarity if results else None,
        )
        return results
