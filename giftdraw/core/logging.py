import sys
from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {module}:{function}:{line} | {message} | {extra}"


def setup_logging(level: str, log_path: str) -> None:
    """Console plus rotating file sink.

    ``diagnose`` stays off so tracebacks never print local variables, which
    may hold reveal tokens.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=LOG_FORMAT,
        diagnose=False,
    )
    logger.add(
        log_path,
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="1 MB",
        retention=10,
        compression="zip",
        enqueue=True,
        diagnose=False,
    )
