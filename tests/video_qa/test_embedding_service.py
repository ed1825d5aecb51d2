"""Unit tests for embedding service."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.video_qa.config import VideoQAConfig
from src.video_qa.embedding_service import EmbeddingService, create_embedding_client


def mock_response(*vectors: list[float], reverse: bool = False) -> MagicMock:
    items = [MagicMock(embedding=vector, index=index) for index, vector in enumerate(vectors)]
    if reverse:
        items.reverse()
    return MagicMock(data=items)


def echo_lengths(input: list[str], model: str) -> MagicMock:
    """Embedding stub whose vector is the length of each input."""
    return mock_response(*[[float(len(text))] for text in input])


@pytest.mark.unit
class TestCreateEmbeddingClient:
    """Test provider-specific client construction."""

    def test_openai_client(self) -> None:
        """Test the configured key is used for OpenAI."""
        config = VideoQAConfig(
            embedding_provider="openai",
            embedding_base_url="https://api.openai.com/v1",
            embedding_api_key="test_api_key",
        )

        with patch("src.video_qa.embedding_service.AsyncOpenAI") as mock_openai:
            create_embedding_client(config)

        mock_openai.assert_called_once_with(
            base_url="https://api.openai.com/v1", api_key="test_api_key"
        )

    def test_ollama_client(self) -> None:
        """Test Ollama gets a placeholder key."""
        config = VideoQAConfig(
            embedding_provider="ollama",
            embedding_base_url="http://localhost:11434/v1",
            embedding_api_key="",
        )

        with patch("src.video_qa.embedding_service.AsyncOpenAI") as mock_openai:
            create_embedding_client(config)

        mock_openai.assert_called_once_with(
            base_url="http://localhost:11434/v1", api_key="ollama"
        )


@pytest.mark.unit
class TestEmbeddingService:
    """Test suite for EmbeddingService class."""

    @pytest.fixture
    def config(self) -> VideoQAConfig:
        """Create test configuration with small requests."""
        return VideoQAConfig(
            embedding_provider="openai",
            embedding_api_key="test_api_key",
            embedding_model="text-embedding-3-small",
            embedding_request_size=2,
        )

    @pytest.fixture
    def mock_client(self) -> MagicMock:
        client = MagicMock()
        client.embeddings.create = AsyncMock(side_effect=echo_lengths)
        return client

    @pytest.fixture
    def service(self, config: VideoQAConfig, mock_client: MagicMock) -> EmbeddingService:
        with patch("src.video_qa.embedding_service.AsyncOpenAI", return_value=mock_client):
            return EmbeddingService(config)

    @pytest.mark.asyncio
    async def test_embed_text(self, service: EmbeddingService, mock_client: MagicMock) -> None:
        """Test a question is embedded in one request."""
        mock_client.embeddings.create.side_effect = None
        mock_client.embeddings.create.return_value = mock_response([0.1, 0.2, 0.3])

        embedding = await service.embed_text("What is the main topic?")

        assert embedding == [0.1, 0.2, 0.3]
        mock_client.embeddings.create.assert_awaited_once_with(
            input=["What is the main topic?"],
            model="text-embedding-3-small",
        )

    @pytest.mark.asyncio
    async def test_newlines_are_flattened(
        self, service: EmbeddingService, mock_client: MagicMock
    ) -> None:
        """Test newlines are replaced before embedding."""
        await service.embed_text("Hello\nworld")

        assert mock_client.embeddings.create.await_args.kwargs["input"] == ["Hello world"]

    @pytest.mark.asyncio
    async def test_embed_text_failure(
        self, service: EmbeddingService, mock_client: MagicMock
    ) -> None:
        """Test embedding errors propagate."""
        mock_client.embeddings.create.side_effect = Exception("API Error")

        with pytest.raises(Exception, match="API Error"):
            await service.embed_text("Test text")

    @pytest.mark.asyncio
    async def test_response_reordered_by_index(
        self, service: EmbeddingService, mock_client: MagicMock
    ) -> None:
        """Test vectors are matched to inputs by their index."""
        mock_client.embeddings.create.side_effect = None
        mock_client.embeddings.create.return_value = mock_response([1.0], [2.0], reverse=True)

        assert await service.embed_batch(["a", "b"]) == [[1.0], [2.0]]

    @pytest.mark.asyncio
    async def test_response_size_mismatch(
        self, service: EmbeddingService, mock_client: MagicMock
    ) -> None:
        """Test a short response is rejected."""
        mock_client.embeddings.create.side_effect = None
        mock_client.embeddings.create.return_value = mock_response([1.0])

        with pytest.raises(ValueError, match="1 vectors for 2 inputs"):
            await service.embed_batch(["a", "b"])

    @pytest.mark.asyncio
    async def test_embed_batch_groups_and_preserves_order(
        self, service: EmbeddingService, mock_client: MagicMock
    ) -> None:
        """Test texts are sent in groups of request size and come back in order."""
        embeddings = await service.embed_batch(["a", "bbb", "cc", "dddd", "e"], batch_size=3)

        assert embeddings == [[1.0], [3.0], [2.0], [4.0], [1.0]]
        sent = [call.kwargs["input"] for call in mock_client.embeddings.create.await_args_list]
        assert sent == [["a", "bbb"], ["cc", "dddd"], ["e"]]

    @pytest.mark.asyncio
    async def test_embed_batch_empty_list(
        self, service: EmbeddingService, mock_client: MagicMock
    ) -> None:
        """Test batch embedding with empty list makes no API calls."""
        assert await service.embed_batch([]) == []
        mock_client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_batch_bounds_concurrency(
        self, service: EmbeddingService, mock_client: MagicMock
    ) -> None:
        """Test no more than batch_size requests are in flight at once."""
        in_flight = 0
        peak = 0

        async def slow_embed(input: list[str], model: str) -> MagicMock:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return echo_lengths(input, model)

        mock_client.embeddings.create = slow_embed

        embeddings = await service.embed_batch([f"Text {i}" for i in range(12)], batch_size=2)

        assert len(embeddings) == 12
        assert peak == 2

    @pytest.mark.asyncio
    async def test_embed_batch_handles_error(
        self, service: EmbeddingService, mock_client: MagicMock
    ) -> None:
        """Test a failing request fails the whole batch."""
        mock_client.embeddings.create.side_effect = [
            echo_lengths(["a", "b"], "m"),
            Exception("Batch processing error"),
            echo_lengths(["e"], "m"),
        ]

        with pytest.raises(Exception, match="Batch processing error"):
            await service.embed_batch(["a", "b", "c", "d", "e"], batch_size=1)
