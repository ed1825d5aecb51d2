"""Indexing service that embeds chunks and writes them to a namespace."""

import asyncio

from src.utils.logging import get_logger

from .config import VideoQAConfig
from .embedding_service import EmbeddingService
from .errors import IngestionFailed
from .namespace_cache import NamespaceCache
from .schemas import Chunk, ChunkWithEmbedding
from .storage_service import StorageService

logger = get_logger(__name__)


class IndexingService:
    """Service for writing a video's chunks into its vector store namespace.

    Embedding requests and upserts both run with at most ``max_concurrency``
    operations in flight. A failed attempt is retried after
    ``retry_delay_ms * attempt`` milliseconds, up to ``max_retries`` attempts
    in total. Only a fully successful attempt marks the namespace as cached.
    """

    def __init__(
        self,
        config: VideoQAConfig,
        embedding_service: EmbeddingService,
        storage_service: StorageService,
        namespace_cache: NamespaceCache,
    ):
        """Initialize indexing service.

        Args:
            config: Configuration object with retry and concurrency settings.
            embedding_service: Service used to embed chunk texts.
            storage_service: Vector store adapter.
            namespace_cache: Cache refreshed after a successful ingestion.
        """
        self.config = config
        self.embedding_service = embedding_service
        self.storage_service = storage_service
        self.namespace_cache = namespace_cache

    async def ingest(self, namespace: str, chunks: list[Chunk]) -> None:
        """Embed and upsert chunks under a namespace, with retries.

        Args:
            namespace: Target namespace.
            chunks: Chunks to index.

        Raises:
            IngestionFailed: If every attempt failed. Chained from the last error.
        """
        if not chunks:
            logger.warning("ingestion_skipped_no_chunks", namespace=namespace)
            return

        max_retries = max(1, self.config.max_retries)
        logger.info(
            "ingestion_started",
            namespace=namespace,
            chunks=len(chunks),
            max_retries=max_retries,
        )

        for attempt in range(1, max_retries + 1):
            try:
                await self._write_chunks(namespace, chunks)
            except Exception as e:
                logger.warning(
                    "ingestion_attempt_failed",
                    namespace=namespace,
                    attempt=attempt,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                if attempt == max_retries:
                    logger.error(
                        "ingestion_failed",
                        namespace=namespace,
                        attempts=attempt,
                        error=str(e),
                    )
                    raise IngestionFailed(
                        f"Failed to index {len(chunks)} chunks for {namespace} "
                        f"after {attempt} attempts: {e}"
                    ) from e

                await asyncio.sleep(self.config.retry_delay_ms * attempt / 1000)
                continue

            self.namespace_cache.mark_fresh(namespace)
            logger.info(
                "ingestion_completed",
                namespace=namespace,
                chunks=len(chunks),
                attempts=attempt,
            )
            return

    async def _write_chunks(self, namespace: str, chunks: list[Chunk]) -> None:
        concurrency = max(1, self.config.max_concurrency)

        embeddings = await self.embedding_service.embed_batch(
            [chunk.text_content for chunk in chunks], batch_size=concurrency
        )
        records = [
            ChunkWithEmbedding(**chunk.model_dump(), embedding=embedding)
            for chunk, embedding in zip(chunks, embeddings, strict=True)
        ]

        batch_size = max(1, self.config.upsert_batch_size)
        batches = [
            records[i : i + batch_size] for i in range(0, len(records), batch_size)
        ]
        semaphore = asyncio.Semaphore(concurrency)

        async def upsert(batch: list[ChunkWithEmbedding]) -> None:
            async with semaphore:
                await self.storage_service.upsert_chunks(namespace, batch)

        await asyncio.gather(*[upsert(batch) for batch in batches])
