"""Turn a detected launch into our own LaunchLab buy.

The observed dev buy supplies the pool accounts; we swap in our wallet as
payer, derive our own token accounts, wrap SOL into the quote ATA and buy
with the configured amount. Pure: no RPC calls, no signing.

Instruction order:
  [compute budget]  set_compute_unit_limit, set_compute_unit_price (optional)
  create_associated_token_account_idempotent(base)
  create_associated_token_account_idempotent(quote)
  system transfer wallet -> quote ATA
  spl-token sync_native(quote ATA)
  launchlab buy_exact_in
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price  # type: ignore[import-untyped]
from solders.instruction import AccountMeta, Instruction  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]
from solders.system_program import TransferParams, transfer  # type: ignore[import-untyped]

from config.settings import PriorityFeeSettings
from src.parsers.launchpad.constants import BONK_BUY_IN_DISC
from src.parsers.launchpad.cursor import ByteWriter
from src.parsers.launchpad.models import BuyAccounts, BuyParams, Opportunity
from src.trading.wallet import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    get_associated_token_address,
)

# spl-associated-token-account instruction index
_CREATE_IDEMPOTENT = 1
# spl-token instruction index
_SYNC_NATIVE = 17

# (is_signer, is_writable) per buy_exact_in slot, same order as BuyAccounts
_BUY_ACCOUNT_FLAGS: tuple[tuple[bool, bool], ...] = (
    (True, True),    # payer
    (False, False),  # authority
    (False, False),  # global_config
    (False, False),  # platform_config
    (False, True),   # pool_state
    (False, True),   # user_base_token
    (False, True),   # user_quote_token
    (False, True),   # base_vault
    (False, True),   # quote_vault
    (False, False),  # base_token_mint
    (False, False),  # quote_token_mint
    (False, False),  # base_token_program
    (False, False),  # quote_token_program
    (False, False),  # event_authority
    (False, False),  # program
)


@dataclass
class BuyOrder:
    """Locally parameterized buy, ready for signing by the submitter."""

    tx_id: str
    accounts: BuyAccounts
    params: BuyParams
    setup_instructions: list[Instruction]
    buy_instruction: Instruction
    compute_budget_instructions: list[Instruction] = field(default_factory=list)

    @property
    def payer(self) -> Pubkey:
        return self.accounts.payer

    @property
    def instructions(self) -> list[Instruction]:
        return [*self.compute_budget_instructions, *self.setup_instructions, self.buy_instruction]


def encode_buy_params(params: BuyParams) -> bytes:
    return (
        ByteWriter(BONK_BUY_IN_DISC)
        .write_u64(params.amount_in)
        .write_u64(params.minimum_amount_out)
        .write_u64(params.share_fee_rate)
        .to_bytes()
    )


def create_associated_token_account_idempotent(
    funder: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
    token_program: Pubkey,
) -> Instruction:
    ata = get_associated_token_address(owner, mint, token_program)
    accounts = [
        AccountMeta(pubkey=funder, is_signer=True, is_writable=True),
        AccountMeta(pubkey=ata, is_signer=False, is_writable=True),
        AccountMeta(pubkey=owner, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=token_program, is_signer=False, is_writable=False),
    ]
    return Instruction(ASSOCIATED_TOKEN_PROGRAM_ID, bytes([_CREATE_IDEMPOTENT]), accounts)


def sync_native(account: Pubkey) -> Instruction:
    return Instruction(
        TOKEN_PROGRAM_ID,
        bytes([_SYNC_NATIVE]),
        [AccountMeta(pubkey=account, is_signer=False, is_writable=True)],
    )


def build_buy_instruction(accounts: BuyAccounts, params: BuyParams) -> Instruction:
    metas = [
        AccountMeta(pubkey=key, is_signer=is_signer, is_writable=is_writable)
        for key, (is_signer, is_writable) in zip(accounts.as_list(), _BUY_ACCOUNT_FLAGS)
    ]
    return Instruction(accounts.program, encode_buy_params(params), metas)


def prepare_buy_accounts(observed: BuyAccounts, wallet: Pubkey) -> BuyAccounts:
    """Replace payer and user token accounts with our wallet's."""
    return replace(
        observed,
        payer=wallet,
        user_base_token=get_associated_token_address(
            wallet, observed.base_token_mint, observed.base_token_program
        ),
        user_quote_token=get_associated_token_address(
            wallet, observed.quote_token_mint, observed.quote_token_program
        ),
    )


def build_order(
    opportunity: Opportunity,
    wallet: Pubkey,
    buy_lamports: int,
    priority_fee: PriorityFeeSettings | None = None,
) -> BuyOrder:
    """Build our buy for an accepted opportunity.

    minimum_amount_out and share_fee_rate are zero: no slippage guard is
    encoded here.
    """
    accounts = prepare_buy_accounts(opportunity.buy_accounts, wallet)

    setup = [
        create_associated_token_account_idempotent(
            wallet, wallet, accounts.base_token_mint, accounts.base_token_program
        ),
        create_associated_token_account_idempotent(
            wallet, wallet, accounts.quote_token_mint, accounts.quote_token_program
        ),
        transfer(
            TransferParams(
                from_pubkey=wallet,
                to_pubkey=accounts.user_quote_token,
                lamports=buy_lamports,
            )
        ),
        sync_native(accounts.user_quote_token),
    ]

    params = BuyParams(amount_in=buy_lamports, minimum_amount_out=0, share_fee_rate=0)

    compute_budget: list[Instruction] = []
    if priority_fee is not None:
        compute_budget = [
            set_compute_unit_limit(priority_fee.cu),
            set_compute_unit_price(priority_fee.priority_fee_micro_lamport),
        ]

    return BuyOrder(
        tx_id=opportunity.tx_id,
        accounts=accounts,
        params=params,
        setup_instructions=setup,
        buy_instruction=build_buy_instruction(accounts, params),
        compute_budget_instructions=compute_budget,
    )
