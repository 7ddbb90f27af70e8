"""Opportunity filters — social presence, token name, developer buy size.

Evaluated in that fixed order; the first rejection short-circuits.
Each filter is a no-op when disabled in FilterSettings.
"""

from __future__ import annotations

from decimal import Decimal

import httpx
from loguru import logger

from config.settings import LAMPORTS_PER_SOL, FilterSettings
from src.parsers.launchpad.models import Opportunity


def dev_buy_limit_lamports(limit_sol: float) -> int:
    return int(Decimal(str(limit_sol)) * LAMPORTS_PER_SOL)


class OpportunityFilter:
    """Applies the configured acceptance criteria to one opportunity."""

    def __init__(
        self,
        settings: FilterSettings,
        *,
        http_client: httpx.AsyncClient | None = None,
        fetch_timeout: float = 5.0,
    ) -> None:
        self._settings = settings
        self._http = http_client or httpx.AsyncClient(
            timeout=fetch_timeout,
            follow_redirects=True,
        )
        self._dev_buy_limit = dev_buy_limit_lamports(settings.dev_buy_limit)

    async def evaluate(self, opportunity: Opportunity) -> bool:
        """True if the opportunity passes every enabled filter."""
        if self._settings.x_check and not await self.check_social(opportunity):
            return False
        if self._settings.token_name_check and not self.check_token_name(opportunity):
            return False
        if self._settings.dev_buy_check and not self.check_dev_buy(opportunity):
            return False
        return True

    async def check_social(self, opportunity: Opportunity) -> bool:
        """Fetch the metadata URI; pass if the body mentions an allowed handle.

        Any fetch failure rejects, including hostnames that fail IDNA
        encoding (UnicodeError) while httpx builds the request.
        """
        tx_id = opportunity.tx_id
        uri = opportunity.mint_event.uri
        try:
            resp = await self._http.get(uri)
            body = resp.text
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as e:
            logger.warning(f"[FILTER] Social fetch failed for {tx_id[:16]} ({uri}): {e!r}")
            return False

        if any(needle in body for needle in self._settings.x_filter_list):
            return True

        logger.info(f"[FILTER] Social check failed for {tx_id[:16]}")
        return False

    def check_token_name(self, opportunity: Opportunity) -> bool:
        name = opportunity.mint_event.name
        if name in self._settings.token_name_filter_list:
            return True
        logger.info(f"[FILTER] Token name check failed: {name!r}")
        return False

    def check_dev_buy(self, opportunity: Opportunity) -> bool:
        """Strictly greater than the limit passes; equal is rejected."""
        amount_in = opportunity.buy_params.amount_in
        if amount_in > self._dev_buy_limit:
            return True
        logger.info(
            f"[FILTER] Dev buy check failed for {opportunity.tx_id[:16]} "
            f"(limit: {self._settings.dev_buy_limit} SOL, "
            f"current: {amount_in / LAMPORTS_PER_SOL:.9f} SOL)"
        )
        return False

    async def close(self) -> None:
        await self._http.aclose()
