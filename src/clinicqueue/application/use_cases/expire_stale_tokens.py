"""Expire Stale Tokens use case: closes tokens left open past their clinic day."""

from datetime import datetime
from typing import Optional

from clinicqueue.application.ports.repositories.token_repo import TokenRepository
from clinicqueue.core.structured_logger import get_logger
from clinicqueue.core.utils.datetime_utils import Clock, get_current_timestamp
from clinicqueue.domain.enums.token_status import TokenStatus, can_transition

logger = get_logger(__name__)


class ExpireStaleTokensRequest:
    """Request for an expiry pass."""
    def __init__(self, now: Optional[datetime] = None, limit: int = 500):
        self.now = now
        self.limit = limit


class ExpireStaleTokensResponse:
    """Response for an expiry pass."""
    def __init__(self, examined: int, expired: int, skipped: int):
        self.examined = examined
        self.expired = expired
        self.skipped = skipped


class ExpireStaleTokensUseCase:
    """Moves WAITING, CALLED and IN_CONSULTATION tokens past ``expires_at`` to EXPIRED."""

    def __init__(self, token_repository: TokenRepository, clock: Clock = get_current_timestamp):
        self._token_repository = token_repository
        self._clock = clock

    async def execute(self, request: Optional[ExpireStaleTokensRequest] = None) -> ExpireStaleTokensResponse:
        """Execute the expiry pass."""
        request = request or ExpireStaleTokensRequest()
        now = request.now or self._clock()

        candidates = await self._token_repository.find_open_expired(now, limit=request.limit)
        expired = 0
        skipped = 0
        for token in candidates:
            if not can_transition(token.status, TokenStatus.EXPIRED):
                skipped += 1
                continue
            # Staff may have moved the token since it was read; their change wins.
            updated = await self._token_repository.compare_and_set_status(
                token.tenant_id, token.id, token.status, TokenStatus.EXPIRED
            )
            if updated is None:
                skipped += 1
                continue
            expired += 1

        if candidates:
            logger.info(
                "Expiry pass finished",
                examined=len(candidates),
                expired=expired,
                skipped=skipped,
            )
        return ExpireStaleTokensResponse(examined=len(candidates), expired=expired, skipped=skipped)
