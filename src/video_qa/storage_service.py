"""Storage service for namespaced transcript chunks in the Supabase vector store."""

import asyncio
import uuid
from typing import Any

from supabase import Client, create_client

from src.utils.logging import get_logger

from .config import VideoQAConfig
from .schemas import ChunkWithEmbedding

logger = get_logger(__name__)


def chunk_row_id(namespace: str, chunk_index: int) -> str:
    """Deterministic row ID, so re-upserting a chunk overwrites it."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{namespace}::{chunk_index}"))


class StorageService:
    """Service for storing and searching transcript chunks in Supabase.

    Every row belongs to one namespace (one per video). The namespace is both
    a column, used for statistics, and a metadata key, used by the
    similarity search filter.
    """

    def __init__(self, config: VideoQAConfig):
        """Initialize storage service with configuration.

        Args:
            config: Configuration object with Supabase credentials.
        """
        self.config = config
        self.table = config.chunks_table
        self.client: Client = create_client(
            config.supabase_url,
            config.supabase_key,
        )
        logger.info(
            "storage_service_initialized",
            supabase_url=config.supabase_url,
            table=self.table,
        )

    async def count_namespace_entries(self, namespace: str) -> int:
        """Count the chunks stored under a namespace.

        Args:
            namespace: Namespace to inspect.

        Returns:
            Number of stored rows for the namespace.

        Raises:
            Exception: If the database query fails.
        """
        try:
            response = (
                self.client.table(self.table)
                .select("id", count="exact")
                .eq("namespace", namespace)
                .limit(1)
                .execute()
            )
            count = response.count or 0
            logger.debug("namespace_stats_fetched", namespace=namespace, count=count)
            return count

        except Exception as e:
            logger.exception(
                "namespace_stats_failed",
                namespace=namespace,
                error_type=type(e).__name__,
            )
            raise

    async def upsert_chunks(
        self, namespace: str, chunks: list[ChunkWithEmbedding]
    ) -> None:
        """Upsert chunks with embeddings under a namespace.

        The blocking Supabase call runs in a worker thread so that several
        batches can be written concurrently.

        Args:
            namespace: Namespace the chunks belong to.
            chunks: Chunks with embeddings to write.

        Raises:
            Exception: If the database operation fails.
        """
        rows = [
            {
                "id": chunk_row_id(namespace, chunk.chunk_index),
                "namespace": namespace,
                "video_id": chunk.video_id,
                "chunk_index": chunk.chunk_index,
                "text_content": chunk.text_content,
                "embedding": chunk.embedding,
                "metadata": {**chunk.to_metadata(), "namespace": namespace},
            }
            for chunk in chunks
        ]

        try:
            await asyncio.to_thread(self.client.table(self.table).upsert(rows).execute)
            logger.info("chunks_upserted", namespace=namespace, count=len(rows))

        except Exception as e:
            logger.exception(
                "chunks_upsert_failed",
                namespace=namespace,
                count=len(rows),
                error_type=type(e).__name__,
            )
            raise

    async def search_chunks(
        self,
        query_embedding: list[float],
        namespace: str,
        match_count: int = 6,
    ) -> list[dict[str, Any]]:
        """Search a namespace for chunks similar to a query embedding.

        Args:
            query_embedding: Query embedding vector.
            namespace: Namespace to restrict the search to.
            match_count: Number of results to return.

        Returns:
            Matching rows with a ``similarity`` score.

        Raises:
            Exception: If the search operation fails.
        """
        try:
            response = self.client.rpc(
                self.config.match_function,
                {
                    "query_embedding": query_embedding,
                    "match_count": match_count,
                    "filter": {"namespace": namespace},
                },
            ).execute()

            results: list[dict[str, Any]] = response.data or []
            logger.info(
                "vector_search_completed",
                namespace=namespace,
                results=len(results),
                match_count=match_count,
            )
            return results

        except Exception as e:
            logger.exception(
                "vector_search_failed",
                namespace=namespace,
                error_type=type(e).__name__,
            )
            raise
