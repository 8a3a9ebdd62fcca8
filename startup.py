import os
import sys
import traceback

import uvicorn

# Add the src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

from clinicqueue.core.config import get_settings  # noqa: E402
from clinicqueue.core.structured_logger import configure_logging, get_logger  # noqa: E402

logger = get_logger("clinicqueue.startup")


if __name__ == "__main__":
    try:
        settings = get_settings()
        configure_logging(settings.logging)
        port = int(os.environ.get("PORT", settings.port))
        host = os.environ.get("HOST", settings.host)

        logger.info(
            "Starting application",
            host=host,
            port=port,
            environment=settings.app_env,
            database_backend=settings.database_backend,
            mongo_uri_set=bool(settings.database.uri),
            queue_timezone=settings.queue.timezone,
        )

        uvicorn.run(
            "clinicqueue.app:app",
            host=host,
            port=port,
            workers=1,
            log_level=settings.logging.level.lower(),
            access_log=True,
            timeout_keep_alive=75,
            timeout_graceful_shutdown=30,
        )
    except KeyboardInterrupt:
        logger.info("Shutting down due to keyboard interrupt")
        sys.exit(0)
    except Exception as e:
        logger.error(
            "Failed to start application",
            error=str(e),
            error_type=type(e).__name__,
            traceback=traceback.format_exc(),
        )
        sys.exit(1)
