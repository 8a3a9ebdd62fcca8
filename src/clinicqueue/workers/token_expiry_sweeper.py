import asyncio
from typing import Optional

from clinicqueue.application.use_cases.expire_stale_tokens import (
    ExpireStaleTokensRequest,
    ExpireStaleTokensResponse,
    ExpireStaleTokensUseCase,
)
from clinicqueue.core.config import ExpirySweeperSettings, get_settings
from clinicqueue.core.structured_logger import get_logger

logger = get_logger("clinicqueue.workers.expiry_sweeper")


async def sweep_once(use_case: ExpireStaleTokensUseCase, batch_size: int = 500) -> ExpireStaleTokensResponse:
    """
    Expire tokens past their clinic day until no stale batch remains.
    """
    total_examined = total_expired = total_skipped = 0
    while True:
        result = await use_case.execute(ExpireStaleTokensRequest(limit=batch_size))
        total_examined += result.examined
        total_expired += result.expired
        total_skipped += result.skipped
        # A short batch, or one where nothing moved, means we are done for this pass.
        if result.examined < batch_size or result.expired == 0:
            break
    return ExpireStaleTokensResponse(
        examined=total_examined, expired=total_expired, skipped=total_skipped
    )


async def run_expiry_sweeper_forever(
    use_case: ExpireStaleTokensUseCase,
    settings: Optional[ExpirySweeperSettings] = None,
) -> None:
    """
    Run the expiry sweeper in a loop, controlled by EXPIRY_SWEEPER_* settings.
    """
    settings = settings or get_settings().expiry_sweeper
    if not settings.enabled:
        logger.info("Expiry sweeper disabled via EXPIRY_SWEEPER_ENABLED")
        return

    interval = max(30, settings.interval_seconds)
    logger.info("Expiry sweeper starting", interval_seconds=interval)

    while True:
        try:
            result = await sweep_once(use_case)
            if result.expired:
                logger.info(
                    "Expiry sweep finished",
                    examined=result.examined,
                    expired=result.expired,
                    skipped=result.skipped,
                )
        except asyncio.CancelledError:
            raise
        except Exception as e:  # noqa: BLE001
            logger.error("Expiry sweep iteration failed", error=str(e), error_type=type(e).__name__)
        await asyncio.sleep(interval)
