"""Main sniper worker — stream loop and opportunity worker pool.

The stream loop pulls one update at a time and decodes it synchronously.
Every extracted opportunity goes onto a bounded queue served by a fixed
pool of workers, so a slow social-filter fetch never stalls ingestion.
When the queue is full new opportunities are dropped, not awaited.
"""

import asyncio
from collections.abc import AsyncIterable, Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from config.settings import Settings
from src.parsers.geyser.update import extract_transaction_data
from src.parsers.launchpad.constants import MONITORED_VENUES, RAYDIUM_LAUNCHPAD, Venue
from src.parsers.launchpad.extractor import extract_opportunity
from src.parsers.launchpad.models import Opportunity

STATS_EVERY_UPDATES = 100
ERROR_RATE_WARN_EVERY = 10


@dataclass
class StreamStats:
    processed: int = 0
    errors: int = 0
    opportunities: int = 0
    dropped: int = 0


class OpportunityWorkerPool:
    """Fixed number of workers consuming opportunities from a bounded queue."""

    def __init__(
        self,
        handler: Callable[[Opportunity], Awaitable[Any]],
        *,
        workers: int = 8,
        queue_size: int = 256,
        timeout: float = 15.0,
    ) -> None:
        self._handler = handler
        self._num_workers = max(1, workers)
        self._queue: asyncio.Queue[Opportunity] = asyncio.Queue(maxsize=max(1, queue_size))
        self._timeout = timeout
        self._tasks: list[asyncio.Task] = []
        self.completed = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        for worker_idx in range(self._num_workers):
            self._tasks.append(
                asyncio.create_task(self._worker(), name=f"opportunity_{worker_idx}")
            )
        logger.info(f"[STREAM] Opportunity workers started: {self._num_workers} parallel consumers")

    def submit(self, opportunity: Opportunity) -> bool:
        """Enqueue without waiting. False if the queue is full."""
        try:
            self._queue.put_nowait(opportunity)
        except asyncio.QueueFull:
            logger.warning(f"[STREAM] Worker queue full, dropping TX {opportunity.tx_id[:16]}")
            return False
        return True

    async def _worker(self) -> None:
        while True:
            opportunity = await self._queue.get()
            try:
                await asyncio.wait_for(self._handler(opportunity), timeout=self._timeout)
                self.completed += 1
            except asyncio.TimeoutError:
                self.failed += 1
                logger.error(f"[STREAM] Opportunity timeout after {self._timeout}s: TX {opportunity.tx_id[:16]}")
            except Exception as e:
                self.failed += 1
                logger.error(f"[STREAM] Trading execution failed for TX {opportunity.tx_id}: {e}")
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued opportunity has been handled."""
        await self._queue.join()

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()


def process_update(update: Any, venue: Venue = RAYDIUM_LAUNCHPAD) -> Opportunity | None:
    """Decode one stream update into an opportunity, if it carries one."""
    tx_data = extract_transaction_data(update)
    if tx_data is None:
        return None
    return extract_opportunity(tx_data.instructions, tx_data.account_keys, tx_data.tx_id, venue)


async def process_updates(
    stream: AsyncIterable[Any],
    pool: OpportunityWorkerPool,
    venue: Venue = RAYDIUM_LAUNCHPAD,
) -> StreamStats:
    """Pull updates until the stream ends.

    Stream errors and per-update failures are logged and counted; the loop
    keeps pulling. An async-generator source is finished once it raises, so
    GeyserStreamClient.updates() recovers from its own failures internally.
    """
    stats = StreamStats()
    iterator = stream.__aiter__()
    logger.info("[STREAM] Starting transaction processing loop")

    while True:
        try:
            update = await iterator.__anext__()
        except StopAsyncIteration:
            break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            stats.errors += 1
            logger.error(f"[STREAM] Stream error: {e}")
            if stats.errors % ERROR_RATE_WARN_EVERY == 0:
                logger.warning(
                    f"[STREAM] High error rate: {stats.errors} errors in {stats.processed} updates"
                )
            continue

        stats.processed += 1
        try:
            opportunity = process_update(update, venue)
        except Exception as e:
            logger.error(f"[STREAM] Failed to process update #{stats.processed}: {e}")
            opportunity = None

        if opportunity is not None:
            stats.opportunities += 1
            if not pool.submit(opportunity):
                stats.dropped += 1

        if stats.processed % STATS_EVERY_UPDATES == 0:
            logger.info(
                f"[STREAM] Stats: {stats.processed} updates, {stats.opportunities} opportunities, "
                f"{stats.dropped} dropped, {stats.errors} errors"
            )

    logger.info(
        f"[STREAM] Processing loop ended. Total processed: {stats.processed}, errors: {stats.errors}"
    )
    return stats


async def run_sniper(settings: Settings) -> None:
    """Wire wallet, filters, dispatcher, worker pool and gRPC stream together."""
    from src.parsers.geyser.grpc_client import GeyserStreamClient
    from src.trading.dispatcher import ExecutionDispatcher
    from src.trading.filters import OpportunityFilter
    from src.trading.submitter import DryRunSubmitter
    from src.trading.wallet import SolanaWallet

    wallet = SolanaWallet(settings.wallet.private_key)
    opportunity_filter = OpportunityFilter(
        settings.filter,
        fetch_timeout=settings.pipeline.social_fetch_timeout_sec,
    )
    dispatcher = ExecutionDispatcher(
        settings=settings,
        wallet=wallet,
        opportunity_filter=opportunity_filter,
        submitter=DryRunSubmitter(settings.services.confirm_service),
    )
    pool = OpportunityWorkerPool(
        dispatcher.handle,
        workers=settings.pipeline.opportunity_workers,
        queue_size=settings.pipeline.opportunity_queue_size,
        timeout=settings.pipeline.opportunity_timeout_sec,
    )
    grpc_client = GeyserStreamClient(
        settings.grpc.endpoint,
        settings.grpc.token,
        [str(venue.program_id) for venue in MONITORED_VENUES],
    )

    pool.start()
    try:
        await process_updates(grpc_client.updates(), pool)
    finally:
        grpc_client.stop()
        await pool.stop()
        await opportunity_filter.close()
