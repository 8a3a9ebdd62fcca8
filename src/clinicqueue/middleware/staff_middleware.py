"""Staff middleware to extract and validate X-Tenant-ID and X-Staff-ID on staff routes."""

import re

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from clinicqueue.api.utils.responses import fail
from clinicqueue.core.structured_logger import get_logger

logger = get_logger(__name__)


class StaffMiddleware(BaseHTTPMiddleware):
    """Binds the caller's tenant claim and staff id for ``/tenants/`` paths.

    Both headers are set by the upstream auth gateway after verifying the
    staff session; public and health routes are left untouched.
    """

    STAFF_PATH_PREFIX = "/tenants/"

    def is_staff_endpoint(self, path: str) -> bool:
        return path.startswith(self.STAFF_PATH_PREFIX)

    def _validate_id(self, value: str) -> bool:
        if not value or len(value) > 100:
            return False
        return bool(re.match(r"^[A-Za-z0-9_-]+$", value))

    async def dispatch(self, request: Request, call_next):
        if not self.is_staff_endpoint(request.url.path):
            return await call_next(request)

        tenant_id = request.headers.get("X-Tenant-ID")
        staff_id = request.headers.get("X-Staff-ID")

        if not tenant_id or not staff_id:
            logger.warning(
                "Missing staff identity headers",
                method=request.method,
                path=request.url.path,
            )
            return fail(
                request,
                401,
                "UNAUTHORIZED",
                "X-Tenant-ID and X-Staff-ID headers are required",
                {"path": request.url.path, "method": request.method},
            )

        if not self._validate_id(tenant_id) or not self._validate_id(staff_id):
            logger.warning("Invalid staff identity headers", path=request.url.path)
            return fail(
                request,
                400,
                "INVALID_STAFF_IDENTITY",
                "X-Tenant-ID and X-Staff-ID must be 1-100 chars, alphanumeric, hyphen or underscore",
            )

        request.state.tenant_id = tenant_id
        request.state.staff_id = staff_id
        return await call_next(request)
