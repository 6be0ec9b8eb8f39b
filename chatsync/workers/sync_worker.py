"""Headless worker that keeps a chat engine polling against the HTTP backend."""

import asyncio
import logging

from chatsync.config import settings
from chatsync.core.telemetry import setup_all_instrumentation
from chatsync.db import create_engine, create_session_maker, init_db
from chatsync.services import BackendClient, ChatEngine, SqlPreferenceStore

logger = logging.getLogger(__name__)


async def main() -> None:
    """Main entry point for the sync worker."""
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    setup_all_instrumentation()

    logger.info("Starting sync worker...")
    logger.info(f"Polling {settings.BACKEND_API_URL} every {settings.POLL_INTERVAL_SECONDS} seconds")

    db_engine = create_engine()
    await init_db(db_engine)

    engine = ChatEngine(
        backend=BackendClient(),
        store=SqlPreferenceStore(create_session_maker(db_engine)),
    )

    try:
        await engine.start()
        await asyncio.Event().wait()
    except (KeyboardInterrupt, asyncio.CancelledError):
        logger.info("Shutting down sync worker...")
    finally:
        await engine.close()
        await db_engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
