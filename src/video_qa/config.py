"""Configuration module for the video Q&A pipeline."""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


class VideoQAConfig(BaseModel):
    """Configuration for the video Q&A pipeline.

    Covers transcript fetching, chunking, embedding, vector storage, retrieval
    and answer generation. Every setting can be overridden via environment
    variables.
    """

    # Language model settings
    llm_choice: str = Field(
        default_factory=lambda: os.getenv("LLM_CHOICE", "gpt-3.5-turbo")
    )
    llm_base_url: str = Field(
        default_factory=lambda: os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
    )
    llm_api_key: str = Field(default_factory=lambda: os.getenv("LLM_API_KEY", ""))
    llm_temperature: float = Field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2"))
    )

    # Optional fallback model (any OpenAI-compatible endpoint, e.g. TogetherAI)
    fallback_llm_choice: str = Field(
        default_factory=lambda: os.getenv("FALLBACK_LLM_CHOICE", "")
    )
    fallback_llm_base_url: str = Field(
        default_factory=lambda: os.getenv("FALLBACK_LLM_BASE_URL", "")
    )
    fallback_llm_api_key: str = Field(
        default_factory=lambda: os.getenv("FALLBACK_LLM_API_KEY", "")
    )

    # Embedding settings
    embedding_provider: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_PROVIDER", "openai")
    )
    embedding_base_url: str = Field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_BASE_URL", "https://api.openai.com/v1"
        )
    )
    embedding_api_key: str = Field(
        default_factory=lambda: os.getenv("EMBEDDING_API_KEY", "")
    )
    embedding_model: str = Field(
        default_factory=lambda: os.getenv(
            "EMBEDDING_MODEL_CHOICE", "text-embedding-3-small"
        )
    )
    embedding_request_size: int = Field(
        default_factory=lambda: int(os.getenv("EMBEDDING_REQUEST_SIZE", "512"))
    )

    # Supadata transcript API settings
    supadata_api_key: str = Field(
        default_factory=lambda: os.getenv("SUPADATA_API_KEY", "")
    )
    transcript_language: str = Field(
        default_factory=lambda: os.getenv("TRANSCRIPT_LANGUAGE", "en")
    )

    # Vector store settings
    supabase_url: str = Field(default_factory=lambda: os.getenv("SUPABASE_URL", ""))
    supabase_key: str = Field(
        default_factory=lambda: os.getenv("SUPABASE_SERVICE_KEY", "")
    )
    chunks_table: str = Field(
        default_factory=lambda: os.getenv("CHUNKS_TABLE", "transcript_chunks")
    )
    match_function: str = Field(
        default_factory=lambda: os.getenv("MATCH_FUNCTION", "match_transcript_chunks")
    )

    # Chunking settings (characters)
    chunk_size: int = Field(default_factory=lambda: int(os.getenv("CHUNK_SIZE", "1000")))
    chunk_overlap: int = Field(
        default_factory=lambda: int(os.getenv("CHUNK_OVERLAP", "150"))
    )

    # Ingestion settings
    max_retries: int = Field(
        default_factory=lambda: int(os.getenv("INGEST_MAX_RETRIES", "3"))
    )
    retry_delay_ms: int = Field(
        default_factory=lambda: int(os.getenv("INGEST_RETRY_DELAY_MS", "2000"))
    )
    max_concurrency: int = Field(
        default_factory=lambda: int(os.getenv("INGEST_MAX_CONCURRENCY", "5"))
    )
    upsert_batch_size: int = Field(
        default_factory=lambda: int(os.getenv("UPSERT_BATCH_SIZE", "100"))
    )

    # Retrieval and caching
    top_k: int = Field(default_factory=lambda: int(os.getenv("RETRIEVAL_TOP_K", "6")))
    cache_ttl_seconds: float = Field(
        default_factory=lambda: float(
            os.getenv("NAMESPACE_CACHE_TTL_SECONDS", str(24 * 60 * 60))
        )
    )

    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))


def get_config() -> VideoQAConfig:
    """Get validated configuration instance.

    Returns:
        VideoQAConfig: Validated configuration object with all settings.

    Raises:
        ValidationError: If environment variables hold invalid values.
    """
    return VideoQAConfig()
