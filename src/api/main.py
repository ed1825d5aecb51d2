"""FastAPI application for the YouTube video Q&A service.

Exposes the question endpoint used by the browser extension. Literal answers
are returned as JSON, model answers are streamed back as plain text.
"""

import os
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from src.utils.logging import configure_logging, get_logger
from src.video_qa.answer_service import LiteralAnswer, StreamingAnswer
from src.video_qa.config import get_config
from src.video_qa.errors import VideoQAError
from src.video_qa.pipeline import VideoQAPipeline
from src.video_qa.schemas import VideoContext

logger = get_logger(__name__)

# Check if we're in production
is_production = os.getenv("ENVIRONMENT") == "production"

if not is_production:
    # Development: prioritize .env file
    project_root = Path(__file__).resolve().parent.parent.parent
    dotenv_path = project_root / ".env"
    load_dotenv(dotenv_path, override=True)
else:
    # Production: use cloud platform env vars only
    load_dotenv()

# Global pipeline initialized in lifespan
pipeline: VideoQAPipeline | None = None


# ==============================================================================
# Lifespan Management
# ==============================================================================


async def lifespan(app: FastAPI):  # type: ignore[misc]
    """Create the pipeline on startup."""
    global pipeline

    logger.info("application_startup_started")

    try:
        config = get_config()
        configure_logging(config.log_level)
        pipeline = VideoQAPipeline(config)
        logger.info("application_startup_completed")
    except Exception:
        logger.exception("application_startup_failed")
        raise

    yield

    logger.info("application_shutdown_completed")


# ==============================================================================
# FastAPI Application Setup
# ==============================================================================

app = FastAPI(
    title="YouTube Video Q&A API",
    description="Answers questions about YouTube videos from their transcripts",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==============================================================================
# Request Models
# ==============================================================================


class AskYoutubeRequest(BaseModel):
    """Question about a video, as sent by the extension."""

    model_config = ConfigDict(populate_by_name=True)

    video_url: str | None = Field(default=None, alias="videoUrl")
    query: str | None = None
    title: str | None = None
    description: str | None = None
    timestamp: float | None = None
    transcript: str | None = None


# ==============================================================================
# Helper Functions
# ==============================================================================


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def stream_answer(answer: StreamingAnswer, request: Request) -> AsyncIterator[str]:
    """Forward answer fragments until the stream ends or the client leaves.

    A failure mid-stream arrives as a trailing error marker fragment.
    """
    fragments = answer.fragments_with_error_marker()
    try:
        async for fragment in fragments:
            if await request.is_disconnected():
                logger.info("client_disconnected")
                break
            yield fragment
    finally:
        await fragments.aclose()
        await answer.aclose()


# ==============================================================================
# API Endpoints
# ==============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(UTC).isoformat(),
        "services": {"pipeline": pipeline is not None},
    }


@app.post("/ask-youtube")
async def ask_youtube(payload: AskYoutubeRequest, request: Request):
    """Answer a question about a video.

    Returns:
        JSON ``{"answer": ...}`` for literal answers, otherwise a streamed
        plain-text answer. Errors before streaming starts are returned as
        ``{"error": ...}`` with a 4xx/5xx status.
    """
    if not payload.video_url or not payload.query:
        logger.warning("ask_request_rejected", reason="missing_fields")
        return error_response(400, "Missing videoUrl or query")

    if pipeline is None:
        logger.error("ask_request_failed", reason="pipeline_not_initialized")
        return error_response(500, "Pipeline not initialized")

    context = VideoContext(
        title=payload.title,
        description=payload.description,
        timestamp=payload.timestamp,
        transcript=payload.transcript,
    )

    try:
        answer = await pipeline.ask(payload.video_url, payload.query, context)
    except VideoQAError as e:
        logger.warning(
            "ask_request_failed",
            error_type=type(e).__name__,
            status_code=e.status_code,
            error=e.message,
        )
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.exception("ask_request_failed", error_type=type(e).__name__)
        return error_response(500, str(e) or "Server error")

    if isinstance(answer, LiteralAnswer):
        return {"answer": answer.text}

    return StreamingResponse(
        stream_answer(answer, request),
        media_type="text/plain; charset=utf-8",
    )
