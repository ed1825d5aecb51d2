"""Answer service: grounded prompt construction and model invocation."""

import math
from collections.abc import AsyncGenerator, AsyncIterator
from dataclasses import dataclass

from pydantic_ai import Agent
from pydantic_ai.models import Model

from src.utils.logging import get_logger

from .config import VideoQAConfig
from .model_providers import ModelProvider, get_model_providers, resolve_model
from .schemas import RetrievedChunk, VideoContext

logger = get_logger(__name__)

NO_RESULTS_MESSAGE = (
    "I couldn't find any relevant information in the video to answer your question."
)
CONTEXT_MARKER = "[Context Chunk]: "
STREAM_ERROR_MARKER = "\n\nError: {error}"

SYSTEM_PROMPT_TEMPLATE = """You are an expert YouTube video assistant.

VIDEO CONTEXT:
Title: {title}
Description: {description}
Current User Timestamp: {timestamp}

INSTRUCTIONS:
1. Answer the user's question based STRICTLY on the provided video context chunks.
2. If the answer is not in the context, say "I cannot find the answer in this video."
3. Use a friendly, helpful tone.
4. If relevant, mention if the user is currently at a part of the video related to the topic (based on timestamp).
5. Format your answer with Markdown.
6. CITE YOUR SOURCES: When using information, try to estimate the timestamp if possible (e.g., [05:30]) based on the context flow, or at least quote the specific phrase.

CONTEXT CHUNKS:
{context_chunks}"""


@dataclass(frozen=True)
class LiteralAnswer:
    """Complete answer text, sent to the caller in one piece."""

    text: str


class StreamingAnswer:
    """Answer produced incrementally by the language model.

    Iterating yields text fragments as the model emits them. The model is
    only contacted once iteration starts; ``aclose()`` stops generation and
    releases the model connection.
    """

    def __init__(self, fragments: AsyncGenerator[str, None]):
        self._fragments = fragments
        self.error: Exception | None = None

    def __aiter__(self) -> AsyncIterator[str]:
        return self._fragments

    async def aclose(self) -> None:
        await self._fragments.aclose()

    async def read(self) -> str:
        """Consume the whole stream and return the joined text."""
        return "".join([fragment async for fragment in self._fragments])

    async def fragments_with_error_marker(self) -> AsyncGenerator[str, None]:
        """Yield fragments, ending with an error marker if generation fails.

        A failure is reported in-band and kept on ``error`` instead of being
        raised.
        """
        try:
            async for fragment in self._fragments:
                yield fragment
        except Exception as e:
            self.error = e
            logger.warning(
                "answer_stream_interrupted",
                error_type=type(e).__name__,
                error=str(e),
            )
            yield STREAM_ERROR_MARKER.format(error=e)


Answer = LiteralAnswer | StreamingAnswer


def format_timestamp(timestamp: float | None) -> str:
    """Format the playback position as whole seconds, or "Start" when unknown.

    Examples:
        >>> format_timestamp(10.7)
        "10s"
        >>> format_timestamp(None)
        "Start"
    """
    if timestamp is None:
        return "Start"
    return f"{math.floor(timestamp)}s"


def build_system_prompt(context: VideoContext, chunks: list[RetrievedChunk]) -> str:
    """Build the grounded system prompt for a question.

    Args:
        context: Video title, description and playback position.
        chunks: Retrieved transcript passages, most relevant first.

    Returns:
        System prompt restricting the model to the given passages.
    """
    # Video details fetched at ingestion fill in for missing caller context
    stored = chunks[0].metadata if chunks else {}
    context_chunks = "\n\n".join(
        f"{CONTEXT_MARKER}{chunk.text_content}" for chunk in chunks
    )
    return SYSTEM_PROMPT_TEMPLATE.format(
        title=context.title or stored.get("title") or "Unknown",
        description=context.description or stored.get("description") or "None",
        timestamp=format_timestamp(context.timestamp),
        context_chunks=context_chunks,
    )


class AnswerService:
    """Service for answering a question from retrieved transcript passages.

    The language model is resolved from an ordered provider list the first
    time it is needed and reused afterwards.
    """

    def __init__(
        self,
        config: VideoQAConfig,
        providers: list[ModelProvider] | None = None,
    ):
        """Initialize answer service.

        Args:
            config: Configuration object with LLM settings.
            providers: Model providers in priority order. Built from the
                configuration when omitted.
        """
        self.config = config
        self.providers = providers if providers is not None else get_model_providers(config)
        self._model: Model | None = None
        logger.info(
            "answer_service_initialized",
            providers=[provider.name for provider in self.providers],
            temperature=config.llm_temperature,
        )

    def get_model(self) -> Model:
        """Return the resolved language model.

        Raises:
            LLMUnavailable: If no provider can build a model.
        """
        if self._model is None:
            self._model = resolve_model(self.providers)
        return self._model

    def build_agent(self, system_prompt: str) -> Agent:
        return Agent(
            self.get_model(),
            system_prompt=system_prompt,
            model_settings={"temperature": self.config.llm_temperature},
        )

    def compose(
        self,
        query: str,
        context: VideoContext,
        chunks: list[RetrievedChunk],
    ) -> Answer:
        """Build a streaming answer, or the fixed message when nothing was found.

        Args:
            query: User question, sent as its own turn.
            context: Video context for the system prompt.
            chunks: Retrieved passages.

        Returns:
            LiteralAnswer if ``chunks`` is empty, otherwise a StreamingAnswer.

        Raises:
            LLMUnavailable: If no model can be initialised.
        """
        if not chunks:
            logger.info("answer_no_context", query_length=len(query))
            return LiteralAnswer(NO_RESULTS_MESSAGE)

        agent = self.build_agent(build_system_prompt(context, chunks))
        return StreamingAnswer(self._stream(agent, query))

    async def complete(
        self,
        query: str,
        context: VideoContext,
        chunks: list[RetrievedChunk],
    ) -> LiteralAnswer:
        """Answer in a single model call, without streaming.

        Raises:
            LLMUnavailable: If no model can be initialised.
        """
        if not chunks:
            logger.info("answer_no_context", query_length=len(query))
            return LiteralAnswer(NO_RESULTS_MESSAGE)

        agent = self.build_agent(build_system_prompt(context, chunks))
        try:
            result = await agent.run(query)
        except Exception as e:
            logger.exception("answer_generation_failed", error_type=type(e).__name__)
            raise

        logger.info("answer_generated", answer_length=len(result.output))
        return LiteralAnswer(result.output)

    async def _stream(self, agent: Agent, query: str) -> AsyncGenerator[str, None]:
        total = 0
        try:
            async with agent.run_stream(query) as result:
                async for fragment in result.stream_text(delta=True):
                    total += len(fragment)
                    yield fragment
        except Exception as e:
            logger.exception(
                "answer_stream_failed",
                streamed_chars=total,
                error_type=type(e).__name__,
            )
            raise

        logger.info("answer_stream_completed", streamed_chars=total)
