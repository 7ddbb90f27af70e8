"""Find a LaunchLab launch + dev buy pair inside one transaction."""

from collections.abc import Sequence
from typing import Any

from loguru import logger
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.launchpad.constants import DISCRIMINATOR_SIZE, RAYDIUM_LAUNCHPAD, Venue
from src.parsers.launchpad.decoder import (
    decode_buy_params,
    decode_initialize,
    is_buy,
    is_initialize,
    resolve_buy_accounts,
)
from src.parsers.launchpad.exceptions import DecodeError
from src.parsers.launchpad.models import BuyAccounts, BuyParams, MintEvent, Opportunity


def extract_opportunity(
    instructions: Sequence[Any],
    account_keys: Sequence[Pubkey],
    tx_id: str,
    venue: Venue = RAYDIUM_LAUNCHPAD,
) -> Opportunity | None:
    """Scan compiled instructions in order for an initialize and a buy.

    Instructions are CompiledInstruction-like: program_id_index, accounts
    (index list or bytes), data. When several initialize or buy instructions
    are present the last decodable one wins. A failed instruction never stops
    the scan. Returns None unless both halves were found.
    """
    mint_event: MintEvent | None = None
    buy: tuple[BuyAccounts, BuyParams] | None = None

    for ix_index, ix in enumerate(instructions):
        ix_data = bytes(ix.data)
        if len(ix_data) < DISCRIMINATOR_SIZE:
            continue

        program_idx = ix.program_id_index
        if program_idx >= len(account_keys):
            logger.debug(f"[DECODE] {tx_id[:16]} ix#{ix_index}: program index {program_idx} out of bounds")
            continue
        program_id = account_keys[program_idx]

        if is_initialize(ix_data, program_id, venue):
            try:
                mint_event = decode_initialize(ix_data)
            except DecodeError as e:
                logger.warning(f"[DECODE] {tx_id[:16]} ix#{ix_index}: bad {venue.name} initialize: {e}")
                continue
            logger.debug(f"[DECODE] {tx_id[:16]} ix#{ix_index}: {venue.name} launch {mint_event.symbol}")

        elif is_buy(ix_data, program_id, venue):
            try:
                accounts = resolve_buy_accounts(list(ix.accounts), account_keys)
                params = decode_buy_params(ix_data)
            except DecodeError as e:
                logger.warning(f"[DECODE] {tx_id[:16]} ix#{ix_index}: bad {venue.name} buy: {e}")
                continue
            buy = (accounts, params)
            logger.debug(f"[DECODE] {tx_id[:16]} ix#{ix_index}: {venue.name} buy amount_in={params.amount_in}")

    if mint_event is None or buy is None:
        return None

    buy_accounts, buy_params = buy
    return Opportunity(
        tx_id=tx_id,
        mint_event=mint_event,
        buy_accounts=buy_accounts,
        buy_params=buy_params,
    )
