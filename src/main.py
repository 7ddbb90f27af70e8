"""Entry point for the bonk.fun launch sniper."""

import asyncio
import signal

from loguru import logger

from config.settings import Settings
from src.parsers.worker import run_sniper
from src.utils.logger import setup_logger


async def main() -> None:
    settings = Settings()
    setup_logger(json_logs=settings.json_logs, level=settings.log_level)
    logger.info("Starting bonk.fun sniper...")

    # Graceful shutdown on SIGINT/SIGTERM
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    sniper_task = asyncio.create_task(run_sniper(settings), name="sniper")

    # Wait for either the sniper to finish or shutdown signal
    done, pending = await asyncio.wait(
        [sniper_task, asyncio.create_task(shutdown_event.wait())],
        return_when=asyncio.FIRST_COMPLETED,
    )

    for task in pending:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    for task in done:
        if task is sniper_task and task.exception() is not None:
            logger.error(f"Sniper stopped with error: {task.exception()}")

    logger.info("Shutdown complete")


def main_cli() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    main_cli()
