"""Raydium LaunchLab program constants (the program behind bonk.fun)."""

from dataclasses import dataclass

from solders.pubkey import Pubkey  # type: ignore[import-untyped]

RAYDIUM_LAUNCHPAD_PROGRAM_ID = Pubkey.from_string("LanMV9sAd7wArD4vJFi2qDdfnVhFxYSUg6eADduJ3uj")

# 8-byte Anchor discriminators
BONK_INIT_DISC = bytes([175, 175, 109, 31, 13, 152, 155, 237])
BONK_BUY_IN_DISC = bytes([250, 234, 13, 123, 213, 156, 19, 236])

DISCRIMINATOR_SIZE = 8

# buy_exact_in account layout is a fixed 15-slot positional contract
BUY_ACCOUNTS_LEN = 15

# Curve variant tags (single byte in initialize data)
CURVE_CONSTANT = 0
CURVE_FIXED = 1
CURVE_LINEAR = 2


@dataclass(frozen=True)
class Venue:
    """A launch venue: program identity plus its initialize/buy discriminators."""

    name: str
    program_id: Pubkey
    init_discriminator: bytes
    buy_discriminator: bytes


RAYDIUM_LAUNCHPAD = Venue(
    name="bonk.fun",
    program_id=RAYDIUM_LAUNCHPAD_PROGRAM_ID,
    init_discriminator=BONK_INIT_DISC,
    buy_discriminator=BONK_BUY_IN_DISC,
)

MONITORED_VENUES: tuple[Venue, ...] = (RAYDIUM_LAUNCHPAD,)
