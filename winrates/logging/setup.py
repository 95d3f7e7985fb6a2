import sys
import logging

from loguru import logger

from winrates.config.settings import settings


def setup_logging() -> None:
    """Configures Loguru logger based on application settings."""
    logger.remove()  # Remove default handler

    # Basic console logging
    logger.add(
        sys.stderr,  # Output to standard error
        level=settings.log_level.upper(),
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level>"
        ),
        colorize=True,
        backtrace=True,  # Better tracebacks
        diagnose=True,  # More detailed error info
    )

    if settings.log_file:
        logger.add(
            settings.log_file,
            level="DEBUG",  # Log everything to file
            rotation="10 MB",  # Rotate log file when it reaches 10 MB
            retention="7 days",
            compression="zip",
            enqueue=True,  # Workers log from threads
        )

    logger.info(f"Logging initialized with level: {settings.log_level}")

    # Intercept standard logging messages
    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            # Get corresponding Loguru level if it exists
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            # Find caller from where originated the logged message
            frame, depth = logging.currentframe(), 2
            while frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(
                level, record.getMessage()
            )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    logger.debug("Standard logging intercepted.")
