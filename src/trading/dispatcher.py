"""Execution dispatcher — filter, build, submit one opportunity."""

from __future__ import annotations

from loguru import logger

from config.settings import LAMPORTS_PER_SOL, Settings
from src.parsers.launchpad.models import Opportunity
from src.trading.filters import OpportunityFilter
from src.trading.order_builder import BuyOrder, build_order
from src.trading.submitter import OrderSubmitter
from src.trading.wallet import SolanaWallet


class ExecutionDispatcher:
    """Runs the filters and, if they pass, hands our buy to the submitter."""

    def __init__(
        self,
        *,
        settings: Settings,
        wallet: SolanaWallet,
        opportunity_filter: OpportunityFilter,
        submitter: OrderSubmitter,
    ) -> None:
        self._settings = settings
        self._wallet = wallet
        self._filter = opportunity_filter
        self._submitter = submitter
        self._buy_lamports = settings.trade.buy_lamports

    async def handle(self, opportunity: Opportunity) -> BuyOrder | None:
        """Returns the submitted order, or None if filtered out or rejected."""
        tx_id = opportunity.tx_id
        logger.info(f"[DISPATCH] Processing opportunity for TX {tx_id}")

        if not await self._filter.evaluate(opportunity):
            logger.info(f"[DISPATCH] Filtered out TX {tx_id}")
            return None

        self._log_opportunity(opportunity)

        order = build_order(
            opportunity,
            self._wallet.pubkey,
            self._buy_lamports,
            self._settings.priority_fee,
        )
        total_cost = self._settings.calculate_total_cost(self._buy_lamports)
        logger.info(
            f"[DISPATCH] Order ready: {len(order.instructions)} instructions, "
            f"est. cost {total_cost / LAMPORTS_PER_SOL:.6f} SOL"
        )

        if not await self._submitter.submit(order, self._wallet.keypair):
            logger.warning(f"[DISPATCH] Submission failed for TX {tx_id}")
            return None

        logger.info(f"[DISPATCH] Buy submitted for TX {tx_id}")
        return order

    @staticmethod
    def _log_opportunity(opportunity: Opportunity) -> None:
        mint = opportunity.mint_event
        logger.info(
            f"[DISPATCH] Launch: {mint.name} ({mint.symbol}) "
            f"mint={opportunity.buy_accounts.base_token_mint} "
            f"dev_buy={opportunity.buy_params.amount_in / LAMPORTS_PER_SOL:.4f} SOL "
            f"uri={mint.uri}"
        )
