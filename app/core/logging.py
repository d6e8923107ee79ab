import sys
from loguru import logger
from app.core.config import APP_ENV, LOG_LEVEL, LOG_FILE

FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"

def setup_logging() -> None:
    logger.remove()

    # structured lines outside local dev; diagnose would leak request data into tracebacks
    local = APP_ENV == "local"

    logger.add(
        sys.stdout,
        level=LOG_LEVEL,
        format=FORMAT,
        serialize=not local,
        diagnose=local,
    )

    logger.add(
        LOG_FILE,
        rotation="10 MB",
        retention="14 days",
        level=LOG_LEVEL,
        format=FORMAT,
        diagnose=local,
    )

    logger.info(f"Logging initialized env={APP_ENV} level={LOG_LEVEL}")
