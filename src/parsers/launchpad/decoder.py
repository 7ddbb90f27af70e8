"""Raydium LaunchLab instruction decoder.

Decodes `initialize` (token launch) and `buy_exact_in` instructions from
raw compiled-instruction data streamed over gRPC.

initialize data layout (after the 8-byte discriminator):
  u8      decimals
  string  name, symbol, uri          (u32 LE length + UTF-8)
  u8      curve tag                  0=Constant, 1=Fixed, 2=Linear
  ...     curve fields               (see _CURVE_READERS)
  u64 x3  total_locked_amount, cliff_period, unlock_period

buy_exact_in data layout:
  u64 x3  amount_in, minimum_amount_out, share_fee_rate
"""

from collections.abc import Callable, Sequence

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.launchpad.constants import (
    BUY_ACCOUNTS_LEN,
    CURVE_CONSTANT,
    CURVE_FIXED,
    CURVE_LINEAR,
    DISCRIMINATOR_SIZE,
    RAYDIUM_LAUNCHPAD,
    Venue,
)
from src.parsers.launchpad.cursor import ByteCursor
from src.parsers.launchpad.exceptions import AccountResolutionError, UnknownCurveTypeError
from src.parsers.launchpad.models import (
    BuyAccounts,
    BuyParams,
    ConstantCurve,
    CurveParams,
    FixedCurve,
    LinearCurve,
    MintEvent,
    MintParams,
    VestingParams,
)


def is_initialize(ix_data: bytes, program_id: Pubkey, venue: Venue = RAYDIUM_LAUNCHPAD) -> bool:
    return (
        len(ix_data) >= DISCRIMINATOR_SIZE
        and ix_data.startswith(venue.init_discriminator)
        and program_id == venue.program_id
    )


def is_buy(ix_data: bytes, program_id: Pubkey, venue: Venue = RAYDIUM_LAUNCHPAD) -> bool:
    return ix_data.startswith(venue.buy_discriminator) and program_id == venue.program_id


def _read_mint_params(cursor: ByteCursor) -> MintParams:
    decimals = cursor.read_u8()
    name = cursor.read_string()
    symbol = cursor.read_string()
    uri = cursor.read_string()
    return MintParams(decimals=decimals, name=name, symbol=symbol, uri=uri)


def _read_constant_curve(cursor: ByteCursor) -> ConstantCurve:
    return ConstantCurve(
        supply=cursor.read_u64(),
        total_base_sell=cursor.read_u64(),
        total_quote_fund_raising=cursor.read_u64(),
        migrate_type=cursor.read_u8(),
    )


def _read_fixed_curve(cursor: ByteCursor) -> FixedCurve:
    return FixedCurve(
        supply=cursor.read_u64(),
        total_quote_fund_raising=cursor.read_u64(),
        migrate_type=cursor.read_u8(),
    )


def _read_linear_curve(cursor: ByteCursor) -> LinearCurve:
    return LinearCurve(
        supply=cursor.read_u64(),
        total_quote_fund_raising=cursor.read_u64(),
        migrate_type=cursor.read_u8(),
    )


_CURVE_READERS: dict[int, Callable[[ByteCursor], CurveParams]] = {
    CURVE_CONSTANT: _read_constant_curve,
    CURVE_FIXED: _read_fixed_curve,
    CURVE_LINEAR: _read_linear_curve,
}


def _read_curve(cursor: ByteCursor) -> CurveParams:
    curve_type = cursor.read_u8()
    reader = _CURVE_READERS.get(curve_type)
    if reader is None:
        raise UnknownCurveTypeError(f"Unknown curve type {curve_type} at offset {cursor.offset - 1}")
    return reader(cursor)


def _read_vesting(cursor: ByteCursor) -> VestingParams:
    return VestingParams(
        total_locked_amount=cursor.read_u64(),
        cliff_period=cursor.read_u64(),
        unlock_period=cursor.read_u64(),
    )


def decode_initialize(ix_data: bytes) -> MintEvent:
    """Decode LaunchLab initialize params.

    Raises DecodeError on truncated data, bad UTF-8 or an unknown curve tag.
    """
    cursor = ByteCursor(ix_data, offset=DISCRIMINATOR_SIZE)
    mint_params = _read_mint_params(cursor)
    curve = _read_curve(cursor)
    vesting = _read_vesting(cursor)
    return MintEvent(mint_params=mint_params, curve=curve, vesting=vesting)


def decode_buy_params(ix_data: bytes) -> BuyParams:
    """Decode buy_exact_in params. Raises DecodeError if shorter than 24 bytes."""
    cursor = ByteCursor(ix_data, offset=DISCRIMINATOR_SIZE)
    return BuyParams(
        amount_in=cursor.read_u64(),
        minimum_amount_out=cursor.read_u64(),
        share_fee_rate=cursor.read_u64(),
    )


def resolve_buy_accounts(ix_accounts: Sequence[int], account_keys: Sequence[Pubkey]) -> BuyAccounts:
    """Map buy_exact_in account indices onto the transaction's key table.

    Every index is bounds-checked before any role is resolved.
    """
    if len(ix_accounts) < BUY_ACCOUNTS_LEN:
        raise AccountResolutionError(
            f"expected {BUY_ACCOUNTS_LEN} accounts, got {len(ix_accounts)}"
        )
    for account_index in ix_accounts:
        if account_index >= len(account_keys):
            raise AccountResolutionError(
                f"account index {account_index} out of bounds (table size {len(account_keys)})"
            )

    keys = [account_keys[i] for i in ix_accounts[:BUY_ACCOUNTS_LEN]]
    return BuyAccounts(*keys)
