import sys

from loguru import logger


def setup_logger(*, json_logs: bool = False, level: str = "INFO") -> None:
    """Configure loguru for the sniper.

    Console level comes from `level` (Settings.log_level, env LOG_LEVEL).
    File always captures DEBUG so per-instruction decode failures are kept.
    """
    console_level = level.upper()
    logger.remove()

    if json_logs:
        logger.add(sys.stdout, serialize=True, level=console_level)
    else:
        logger.add(
            sys.stdout,
            format=(
                "<green>{time:HH:mm:ss.SSS}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
                "<level>{message}</level>"
            ),
            level=console_level,
            colorize=True,
        )

    logger.add(
        "logs/sniper_{time:YYYY-MM-DD}.log",
        rotation="50 MB",
        retention="3 days",
        compression="gz",
        level="DEBUG",
        serialize=json_logs,
        enqueue=True,
    )
