"""Embeddings for transcript chunks and questions via OpenAI-compatible APIs."""

import asyncio

from openai import AsyncOpenAI

from src.utils.logging import get_logger

from .config import VideoQAConfig

logger = get_logger(__name__)


def create_embedding_client(config: VideoQAConfig) -> AsyncOpenAI:
    """Build the async client for the configured embedding provider.

    Ollama exposes the same API but ignores the key, so a placeholder is sent.
    """
    api_key = "ollama" if config.embedding_provider == "ollama" else config.embedding_api_key
    return AsyncOpenAI(base_url=config.embedding_base_url, api_key=api_key)


def normalize_input(text: str) -> str:
    # Newlines degrade embedding quality for OpenAI models
    return text.replace("\n", " ")


class EmbeddingService:
    """Service turning texts into embedding vectors.

    Chunks and questions go through the same model so their vectors are
    comparable. Many texts are embedded with few requests: each request
    carries up to ``embedding_request_size`` inputs.
    """

    def __init__(self, config: VideoQAConfig):
        """Initialize embedding service.

        Args:
            config: Configuration object with embedding provider settings.
        """
        self.config = config
        self.client = create_embedding_client(config)
        logger.info(
            "embedding_service_initialized",
            provider=config.embedding_provider,
            model=config.embedding_model,
            request_size=config.embedding_request_size,
        )

    async def embed_text(self, text: str) -> list[float]:
        """Embed a single text, typically a user question."""
        vectors = await self._request([text])
        return vectors[0]

    async def embed_batch(
        self, texts: list[str], batch_size: int = 5
    ) -> list[list[float]]:
        """Embed many texts, keeping their order.

        Args:
            texts: Texts to embed.
            batch_size: Maximum number of embedding requests in flight.

        Returns:
            One vector per input text, in input order.

        Raises:
            Exception: If any request fails.
        """
        if not texts:
            return []

        request_size = max(1, self.config.embedding_request_size)
        groups = [texts[i : i + request_size] for i in range(0, len(texts), request_size)]
        semaphore = asyncio.Semaphore(max(1, batch_size))

        async def embed_group(group: list[str]) -> list[list[float]]:
            async with semaphore:
                return await self._request(group)

        results = await asyncio.gather(*[embed_group(group) for group in groups])
        vectors = [vector for group_vectors in results for vector in group_vectors]

        logger.info(
            "batch_embedding_completed",
            texts=len(texts),
            requests=len(groups),
        )
        return vectors

    async def _request(self, texts: list[str]) -> list[list[float]]:
        try:
            response = await self.client.embeddings.create(
                input=[normalize_input(text) for text in texts],
                model=self.config.embedding_model,
            )
        except Exception as e:
            logger.exception(
                "embedding_request_failed",
                inputs=len(texts),
                error_type=type(e).__name__,
            )
            raise

        # Items carry the index of their input and may arrive out of order
        vectors = [item.embedding for item in sorted(response.data, key=lambda item: item.index)]
        if len(vectors) != len(texts):
            raise ValueError(
                f"Embedding response has {len(vectors)} vectors for {len(texts)} inputs"
            )

        logger.debug("embeddings_generated", inputs=len(texts), dim=len(vectors[0]))
        return vectors
