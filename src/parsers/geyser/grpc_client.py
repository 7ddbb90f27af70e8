"""Yellowstone Geyser gRPC client streaming LaunchLab transactions.

Yields raw SubscribeUpdate messages; decoding happens in the stream loop.
Reconnects with exponential backoff when the stream drops.

Stubs are generated by scripts/generate_protos.sh.
"""

import asyncio
from collections.abc import AsyncIterator, Sequence
from urllib.parse import urlparse

import grpc
from loguru import logger

from src.parsers.geyser.proto import geyser_pb2, geyser_pb2_grpc


def _channel_target(endpoint: str) -> str:
    """Accept both `https://host:port` and bare `host:port`."""
    if "://" not in endpoint:
        return endpoint
    parsed = urlparse(endpoint)
    port = parsed.port or 443
    return f"{parsed.hostname}:{port}"


class GeyserStreamClient:
    """Subscribes to transactions touching the given programs."""

    def __init__(
        self,
        endpoint: str,
        token: str,
        program_ids: Sequence[str],
    ) -> None:
        if not endpoint:
            raise ValueError("gRPC endpoint is empty")
        if not token:
            raise ValueError("gRPC token is empty")
        if not program_ids:
            raise ValueError("No programs specified for monitoring")

        self._endpoint = endpoint
        self._token = token
        self._program_ids = list(program_ids)
        self._running = False
        self._base_reconnect_delay = 3.0
        self._reconnect_delay = self._base_reconnect_delay
        self._max_reconnect_delay = 60.0
        self._reconnect_count = 0

    def _create_channel(self) -> grpc.aio.Channel:
        """Create authenticated gRPC channel with keepalive."""
        auth = grpc.metadata_call_credentials(
            lambda _, callback: callback(
                (("x-token", self._token),),
                None,
            )
        )
        creds = grpc.composite_channel_credentials(
            grpc.ssl_channel_credentials(),
            auth,
        )
        options = [
            ("grpc.keepalive_time_ms", 30_000),
            ("grpc.keepalive_timeout_ms", 10_000),
            ("grpc.keepalive_permit_without_calls", True),
            ("grpc.http2.min_time_between_pings_ms", 10_000),
            ("grpc.max_receive_message_length", 64 * 1024 * 1024),  # 64MB
        ]
        return grpc.aio.secure_channel(_channel_target(self._endpoint), creds, options=options)

    def build_subscribe_request(self) -> geyser_pb2.SubscribeRequest:
        """Transactions filter on the monitored programs, PROCESSED commitment."""
        request = geyser_pb2.SubscribeRequest()

        tx_filter = request.transactions["account_monitor"]
        tx_filter.account_include.extend(self._program_ids)
        tx_filter.vote = False
        tx_filter.failed = False

        request.commitment = geyser_pb2.CommitmentLevel.PROCESSED
        return request

    async def updates(self) -> AsyncIterator[geyser_pb2.SubscribeUpdate]:
        """Yield updates until stop() is called.

        Every failure, gRPC or not, ends in a reconnect; only cancellation
        and stop() end the generator.
        """
        self._running = True
        while self._running:
            channel: grpc.aio.Channel | None = None
            try:
                channel = self._create_channel()
                stub = geyser_pb2_grpc.GeyserStub(channel)
                self._reconnect_delay = self._base_reconnect_delay
                logger.info(f"[GRPC] Connected to {self._endpoint}")

                request = self.build_subscribe_request()
                for i, program in enumerate(self._program_ids, start=1):
                    logger.info(f"[GRPC] Monitoring program {i}. {program}")

                async for update in stub.Subscribe(iter([request])):
                    if not self._running:
                        break
                    yield update

            except grpc.RpcError as e:
                logger.warning(f"[GRPC] Connection error: {e.code()} — {e.details()}")
            except Exception as e:
                # any other failure would close this generator for good
                logger.error(f"[GRPC] Stream failed: {e!r}")
            finally:
                if channel is not None:
                    try:
                        await asyncio.wait_for(channel.close(), timeout=5.0)
                    except asyncio.TimeoutError:
                        logger.warning("[GRPC] Channel close timeout")

            if self._running:
                self._reconnect_count += 1
                logger.info(
                    f"[GRPC] Reconnecting in {self._reconnect_delay:.0f}s "
                    f"(reconnect #{self._reconnect_count})"
                )
                await asyncio.sleep(self._reconnect_delay)
                self._reconnect_delay = min(
                    self._reconnect_delay * 2, self._max_reconnect_delay
                )

    def stop(self) -> None:
        self._running = False
        logger.info(f"[GRPC] Stopped after {self._reconnect_count} reconnects")
