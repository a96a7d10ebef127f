"""
SENTIMENT PULSE — Main Entry Point
Runs one collection-and-scoring pass and writes the output documents.
"""
import asyncio
import sys

from sentiment_pulse.config.settings import get_settings
from sentiment_pulse.data.errors import OutputWriteError
from sentiment_pulse.engines.pipeline import SentimentPipeline
from sentiment_pulse.utils.logger import setup_logging, get_logger

logger = get_logger("main")


def main() -> int:
    settings = get_settings()
    setup_logging()
    logger.info("starting_sentiment_pulse", version=settings.version, strategy=settings.scoring.strategy)
    try:
        asyncio.run(SentimentPipeline(settings).run())
    except OutputWriteError as e:
        logger.error("output_write_failed", error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
