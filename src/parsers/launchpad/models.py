"""Decoded LaunchLab instruction data."""

from dataclasses import dataclass, fields

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.launchpad.constants import CURVE_CONSTANT, CURVE_FIXED, CURVE_LINEAR


@dataclass
class MintParams:
    decimals: int
    name: str
    symbol: str
    uri: str


@dataclass
class ConstantCurve:
    supply: int
    total_base_sell: int
    total_quote_fund_raising: int
    migrate_type: int

    tag = CURVE_CONSTANT


@dataclass
class FixedCurve:
    supply: int
    total_quote_fund_raising: int
    migrate_type: int

    tag = CURVE_FIXED


@dataclass
class LinearCurve:
    supply: int
    total_quote_fund_raising: int
    migrate_type: int

    tag = CURVE_LINEAR


CurveParams = ConstantCurve | FixedCurve | LinearCurve


@dataclass
class VestingParams:
    total_locked_amount: int
    cliff_period: int
    unlock_period: int


@dataclass
class MintEvent:
    """Token launch parameters from a LaunchLab `initialize` instruction."""

    mint_params: MintParams
    curve: CurveParams
    vesting: VestingParams

    @property
    def name(self) -> str:
        return self.mint_params.name

    @property
    def symbol(self) -> str:
        return self.mint_params.symbol

    @property
    def uri(self) -> str:
        return self.mint_params.uri


@dataclass
class BuyAccounts:
    """The 15 accounts of `buy_exact_in`, in instruction order."""

    payer: Pubkey
    authority: Pubkey
    global_config: Pubkey
    platform_config: Pubkey
    pool_state: Pubkey
    user_base_token: Pubkey
    user_quote_token: Pubkey
    base_vault: Pubkey
    quote_vault: Pubkey
    base_token_mint: Pubkey
    quote_token_mint: Pubkey
    base_token_program: Pubkey
    quote_token_program: Pubkey
    event_authority: Pubkey
    program: Pubkey

    def as_list(self) -> list[Pubkey]:
        return [getattr(self, f.name) for f in fields(self)]


@dataclass
class BuyParams:
    amount_in: int
    minimum_amount_out: int
    share_fee_rate: int


@dataclass
class Opportunity:
    """A mint + buy pair observed in the same transaction."""

    tx_id: str
    mint_event: MintEvent
    buy_accounts: BuyAccounts
    buy_params: BuyParams
