import asyncio
import signal

from clinicqueue.api.deps import get_token_repository
from clinicqueue.app import init_database
from clinicqueue.application.use_cases.expire_stale_tokens import ExpireStaleTokensUseCase
from clinicqueue.core.config import get_settings
from clinicqueue.core.structured_logger import configure_logging, get_logger
from clinicqueue.workers.token_expiry_sweeper import run_expiry_sweeper_forever

logger = get_logger("clinicqueue.sweeper_startup")


async def main() -> None:
    """
    Entry point for the token expiry sweeper.

    This process is intended to be run separately from the API:
        PYTHONPATH=./src python3 sweeper_startup.py
    """
    settings = get_settings()
    configure_logging(settings.logging)
    if not settings.expiry_sweeper.enabled:
        logger.info("Token expiry sweeper is disabled. Set EXPIRY_SWEEPER_ENABLED=true to enable.")
        return
    if settings.uses_memory_backend:
        logger.error("The standalone sweeper needs DATABASE_BACKEND=mongo")
        return

    logger.info(
        "Starting token expiry sweeper",
        interval_seconds=settings.expiry_sweeper.interval_seconds,
        timezone=settings.queue.timezone,
    )

    client = await init_database(settings)

    # Graceful shutdown via signals
    stop_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received for sweeper, stopping gracefully")
        stop_event.set()

    loop = asyncio.get_running_loop()
    if hasattr(signal, "SIGTERM"):
        loop.add_signal_handler(signal.SIGTERM, _signal_handler)
    if hasattr(signal, "SIGINT"):
        loop.add_signal_handler(signal.SIGINT, _signal_handler)

    try:
        use_case = ExpireStaleTokensUseCase(get_token_repository())
        sweeper_task = asyncio.create_task(
            run_expiry_sweeper_forever(use_case, settings.expiry_sweeper)
        )
        await stop_event.wait()
        sweeper_task.cancel()
        try:
            await sweeper_task
        except asyncio.CancelledError:
            logger.info("Sweeper task cancelled")
    finally:
        client.close()
        logger.info("Sweeper MongoDB client closed")


if __name__ == "__main__":
    # Allow running as: PYTHONPATH=./src python3 sweeper_startup.py
    asyncio.run(main())
