"""Unit tests for video Q&A configuration."""

import pytest

from src.video_qa.config import VideoQAConfig, get_config

ENV_VARS = [
    "LLM_CHOICE",
    "LLM_BASE_URL",
    "LLM_API_KEY",
    "LLM_TEMPERATURE",
    "FALLBACK_LLM_CHOICE",
    "EMBEDDING_PROVIDER",
    "EMBEDDING_MODEL_CHOICE",
    "EMBEDDING_REQUEST_SIZE",
    "TRANSCRIPT_LANGUAGE",
    "CHUNKS_TABLE",
    "MATCH_FUNCTION",
    "CHUNK_SIZE",
    "CHUNK_OVERLAP",
    "INGEST_MAX_RETRIES",
    "INGEST_RETRY_DELAY_MS",
    "INGEST_MAX_CONCURRENCY",
    "UPSERT_BATCH_SIZE",
    "RETRIEVAL_TOP_K",
    "NAMESPACE_CACHE_TTL_SECONDS",
]


@pytest.mark.unit
class TestVideoQAConfig:
    """Test suite for VideoQAConfig class."""

    def test_config_with_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test config creation with default values."""
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)

        config = VideoQAConfig()

        assert config.llm_choice == "gpt-3.5-turbo"
        assert config.llm_temperature == 0.2
        assert config.fallback_llm_choice == ""
        assert config.embedding_provider == "openai"
        assert config.embedding_model == "text-embedding-3-small"
        assert config.embedding_request_size == 512
        assert config.transcript_language == "en"
        assert config.chunks_table == "transcript_chunks"
        assert config.match_function == "match_transcript_chunks"
        assert config.chunk_size == 1000
        assert config.chunk_overlap == 150
        assert config.max_retries == 3
        assert config.retry_delay_ms == 2000
        assert config.max_concurrency == 5
        assert config.upsert_batch_size == 100
        assert config.top_k == 6
        assert config.cache_ttl_seconds == 24 * 60 * 60

    def test_config_with_explicit_values(self) -> None:
        """Test config creation with explicit parameter values."""
        config = VideoQAConfig(
            llm_choice="gpt-4o-mini",
            llm_api_key="test_llm_key",
            chunk_size=500,
            chunk_overlap=75,
            max_retries=5,
            top_k=3,
            supabase_url="https://test.supabase.co",
            supabase_key="test_key",
        )

        assert config.llm_choice == "gpt-4o-mini"
        assert config.llm_api_key == "test_llm_key"
        assert config.chunk_size == 500
        assert config.chunk_overlap == 75
        assert config.max_retries == 5
        assert config.top_k == 3
        assert config.supabase_url == "https://test.supabase.co"
        assert config.supabase_key == "test_key"

    def test_config_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test config loads from environment variables."""
        monkeypatch.setenv("LLM_CHOICE", "gpt-4o")
        monkeypatch.setenv("LLM_TEMPERATURE", "0.7")
        monkeypatch.setenv("FALLBACK_LLM_CHOICE", "meta-llama/Llama-3-70b-chat-hf")
        monkeypatch.setenv("CHUNK_SIZE", "800")
        monkeypatch.setenv("CHUNK_OVERLAP", "120")
        monkeypatch.setenv("INGEST_MAX_RETRIES", "4")
        monkeypatch.setenv("INGEST_RETRY_DELAY_MS", "500")
        monkeypatch.setenv("INGEST_MAX_CONCURRENCY", "2")
        monkeypatch.setenv("RETRIEVAL_TOP_K", "10")
        monkeypatch.setenv("NAMESPACE_CACHE_TTL_SECONDS", "60")

        config = VideoQAConfig()

        assert config.llm_choice == "gpt-4o"
        assert config.llm_temperature == 0.7
        assert config.fallback_llm_choice == "meta-llama/Llama-3-70b-chat-hf"
        assert config.chunk_size == 800
        assert config.chunk_overlap == 120
        assert config.max_retries == 4
        assert config.retry_delay_ms == 500
        assert config.max_concurrency == 2
        assert config.top_k == 10
        assert config.cache_ttl_seconds == 60

    def test_invalid_integer_environment_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that a non-numeric value fails loudly."""
        monkeypatch.setenv("CHUNK_SIZE", "large")

        with pytest.raises(ValueError):
            VideoQAConfig()

    def test_get_config_returns_fresh_instance(self) -> None:
        """Test get_config returns a validated config object."""
        first = get_config()
        second = get_config()

        assert isinstance(first, VideoQAConfig)
        assert first is not second
