"""Submission boundary — hands a built order to a confirmation service.

Signing, blockhash, transmission and retries belong to the service behind
this boundary. DryRunSubmitter only logs.
"""

from __future__ import annotations

from typing import Protocol

from loguru import logger
from solders.keypair import Keypair  # type: ignore[import-untyped]

from config.settings import LAMPORTS_PER_SOL
from src.trading.order_builder import BuyOrder


class OrderSubmitter(Protocol):
    async def submit(self, order: BuyOrder, signer: Keypair) -> bool: ...


class DryRunSubmitter:
    """Logs the order that would be sent through `service` and reports success."""

    def __init__(self, service: str = "NOZOMI") -> None:
        self._service = service
        self.submitted: list[BuyOrder] = []

    async def submit(self, order: BuyOrder, signer: Keypair) -> bool:
        self.submitted.append(order)
        logger.info(
            f"[SUBMIT] {self._service} (dry run): {len(order.instructions)} instructions, "
            f"buy {order.params.amount_in / LAMPORTS_PER_SOL:.4f} SOL of "
            f"{order.accounts.base_token_mint} signer={signer.pubkey()} src_tx={order.tx_id[:16]}"
        )
        return True
