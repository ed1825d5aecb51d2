"""Main pipeline orchestrator for answering questions about a video."""

import asyncio

from src.utils.logging import get_logger

from .answer_service import Answer, AnswerService
from .chunking_service import ChunkingService
from .config import VideoQAConfig, get_config
from .embedding_service import EmbeddingService
from .errors import InvalidVideoUrl
from .indexing_service import IndexingService
from .namespace_cache import CacheBackend, NamespaceCache
from .retrieval_service import RetrievalService
from .schemas import VideoContext
from .storage_service import StorageService
from .youtube_service import YouTubeService, extract_video_id, namespace_for

logger = get_logger(__name__)


class VideoQAPipeline:
    """Orchestrates question answering for a single video.

    Each question goes through: resolve the video ID, check whether its
    namespace is already indexed, ingest the transcript if it is not,
    retrieve the most similar chunks and compose the answer. Concurrent
    questions about the same unindexed video share one ingestion.
    """

    def __init__(
        self,
        config: VideoQAConfig | None = None,
        cache_backend: CacheBackend | None = None,
    ):
        """Initialize pipeline with all required services.

        Args:
            config: Configuration object. If None, loads from environment.
            cache_backend: Namespace cache storage. Defaults to the
                process-wide in-memory backend.
        """
        self.config = config or get_config()
        self.youtube_service = YouTubeService(self.config)
        self.chunking_service = ChunkingService(self.config)
        self.embedding_service = EmbeddingService(self.config)
        self.storage_service = StorageService(self.config)
        self.namespace_cache = NamespaceCache(
            self.storage_service,
            ttl_seconds=self.config.cache_ttl_seconds,
            backend=cache_backend,
        )
        self.indexing_service = IndexingService(
            self.config,
            self.embedding_service,
            self.storage_service,
            self.namespace_cache,
        )
        self.retrieval_service = RetrievalService(
            self.embedding_service, self.storage_service
        )
        self.answer_service = AnswerService(self.config)
        self._inflight: dict[str, asyncio.Task[None]] = {}

        logger.info(
            "pipeline_initialized",
            chunk_size=self.config.chunk_size,
            top_k=self.config.top_k,
        )

    async def ask(
        self,
        video_url: str,
        query: str,
        context: VideoContext | None = None,
        stream: bool = True,
    ) -> Answer:
        """Answer a question about a video.

        Args:
            video_url: YouTube watch URL.
            query: User question.
            context: Title, description, playback position and optional
                transcript sent by the caller.
            stream: Return a StreamingAnswer (default) or a single-shot
                LiteralAnswer.

        Returns:
            LiteralAnswer or StreamingAnswer.

        Raises:
            InvalidVideoUrl: If no video ID can be extracted from the URL.
            TranscriptUnavailable: If captions cannot be fetched.
            EmptyTranscript: If the transcript is empty.
            IngestionFailed: If indexing failed on every attempt.
            LLMUnavailable: If no language model can be initialised.
        """
        context = context or VideoContext()

        video_id = extract_video_id(video_url)
        if not video_id:
            logger.warning("invalid_video_url", video_url=video_url)
            raise InvalidVideoUrl("Invalid YouTube URL - no video ID found")

        namespace = namespace_for(video_id)
        logger.info("question_received", video_id=video_id, query_length=len(query))

        if not await self.namespace_cache.exists(namespace):
            await self._ingest_once(namespace, video_id, video_url, context.transcript)

        chunks = await self.retrieval_service.retrieve(
            namespace, query, top_k=self.config.top_k
        )

        if stream:
            return self.answer_service.compose(query, context, chunks)
        return await self.answer_service.complete(query, context, chunks)

    async def _ingest_once(
        self,
        namespace: str,
        video_id: str,
        video_url: str,
        supplied_transcript: str | None,
    ) -> None:
        task = self._inflight.get(namespace)
        if task is not None:
            logger.info("ingestion_already_running", namespace=namespace)
            await asyncio.shield(task)
            return

        task = asyncio.ensure_future(
            self._ingest(namespace, video_id, video_url, supplied_transcript)
        )
        self._inflight[namespace] = task
        task.add_done_callback(lambda done: self._forget_ingestion(namespace, done))
        await asyncio.shield(task)

    def _forget_ingestion(self, namespace: str, task: asyncio.Task[None]) -> None:
        self._inflight.pop(namespace, None)
        # Mark the error retrieved; every waiter may have been cancelled
        if not task.cancelled():
            task.exception()

    async def _ingest(
        self,
        namespace: str,
        video_id: str,
        video_url: str,
        supplied_transcript: str | None,
    ) -> None:
        logger.info("processing_new_video", video_id=video_id, namespace=namespace)

        document = await self.youtube_service.load_transcript(
            video_url, supplied_transcript
        )
        chunks = self.chunking_service.chunk_transcript(document, video_id)
        await self.indexing_service.ingest(namespace, chunks)

        logger.info("video_ingested", video_id=video_id, chunks=len(chunks))
