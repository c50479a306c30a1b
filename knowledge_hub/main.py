"""Main entry point for the AWS Knowledge Hub API."""

import asyncio
import logging
import sys

from dotenv import load_dotenv

from knowledge_hub.config import get_settings
from knowledge_hub.pipeline import build_pipeline
from knowledge_hub.session import SessionStore
from knowledge_hub.web_server import WebServer

# Load environment variables
load_dotenv()

# Configure logging (use INFO as default)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def cleanup_sessions_periodically(store: SessionStore, interval: float) -> None:
    """Remove expired sessions every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        try:
            await store.cleanup_expired_sessions()
        except Exception as e:
            logger.error(f"Session cleanup failed: {e}", exc_info=True)


async def main() -> None:
    """Main application entry point."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info(f"Starting AWS Knowledge Hub in {settings.environment.value} mode")
    logger.info(f"Using documentation client: {settings.docs_client.value}")

    # Validate configuration
    try:
        settings.validate_docs_client_config()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    pipeline = build_pipeline(settings)
    web_server = WebServer(pipeline, host=settings.server_host, port=settings.server_port)
    web_runner = await web_server.start()
    cleanup_task = asyncio.create_task(
        cleanup_sessions_periodically(pipeline.session_store, settings.session_cleanup_interval)
    )

    try:
        await asyncio.Event().wait()
    finally:
        logger.info("Shutting down...")
        cleanup_task.cancel()
        await web_server.stop(web_runner)
        await pipeline.close()


def run() -> None:
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Stopped")


if __name__ == "__main__":
    run()
