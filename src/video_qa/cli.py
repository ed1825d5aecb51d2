"""Command-line interface for asking a question about a YouTube video."""

import argparse
import asyncio
import sys
from pathlib import Path

from src.utils.logging import configure_logging, get_logger

from .answer_service import LiteralAnswer
from .config import get_config
from .errors import VideoQAError
from .pipeline import VideoQAPipeline
from .schemas import VideoContext

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ask a question about a YouTube video",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ask about a video (captions fetched via Supadata)
  python -m src.video_qa.cli --url "https://www.youtube.com/watch?v=dQw4w9WgXcQ" \\
      --query "What is this video about?"

  # Use a local transcript file instead of fetching captions
  python -m src.video_qa.cli --url "https://www.youtube.com/watch?v=dQw4w9WgXcQ" \\
      --query "What is this video about?" --transcript-file transcript.txt

  # Wait for the complete answer instead of streaming it
  python -m src.video_qa.cli --url "..." --query "..." --no-stream
        """,
    )

    parser.add_argument("--url", required=True, help="YouTube watch URL")
    parser.add_argument("--query", required=True, help="Question about the video")
    parser.add_argument("--title", help="Video title")
    parser.add_argument("--description", help="Video description")
    parser.add_argument(
        "--timestamp",
        type=float,
        help="Current playback position in seconds",
    )
    parser.add_argument(
        "--transcript-file",
        type=Path,
        help="Read the transcript from this file instead of fetching captions",
    )
    parser.add_argument(
        "--no-stream",
        action="store_true",
        help="Print the answer once generation has finished",
    )
    return parser


async def main(argv: list[str] | None = None) -> int:
    """CLI entry point.

    Returns:
        Process exit code.
    """
    args = build_parser().parse_args(argv)

    transcript = None
    if args.transcript_file:
        transcript = args.transcript_file.read_text(encoding="utf-8")

    context = VideoContext(
        title=args.title,
        description=args.description,
        timestamp=args.timestamp,
        transcript=transcript,
    )

    config = get_config()
    configure_logging(config.log_level)
    logger.info("cli_started", video_url=args.url, stream=not args.no_stream)

    pipeline = VideoQAPipeline(config)

    try:
        answer = await pipeline.ask(
            args.url, args.query, context, stream=not args.no_stream
        )

        if isinstance(answer, LiteralAnswer):
            print(answer.text)
        else:
            async for fragment in answer.fragments_with_error_marker():
                sys.stdout.write(fragment)
                sys.stdout.flush()
            print()

            if answer.error is not None:
                logger.error(
                    "cli_stream_failed",
                    error_type=type(answer.error).__name__,
                )
                return 1

    except VideoQAError as e:
        logger.exception("cli_question_failed", error_type=type(e).__name__)
        print(f"\n❌ {e.message}", file=sys.stderr)
        return 1

    logger.info("cli_completed", video_url=args.url)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
