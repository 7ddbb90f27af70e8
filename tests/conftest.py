"""Shared test fixtures."""

import pytest
from solders.keypair import Keypair  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from src.parsers.launchpad.constants import RAYDIUM_LAUNCHPAD_PROGRAM_ID


@pytest.fixture
def keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def account_keys() -> list[Pubkey]:
    """Key table: 20 unique keys with the LaunchLab program at index 0."""
    return [RAYDIUM_LAUNCHPAD_PROGRAM_ID] + [Pubkey.new_unique() for _ in range(19)]
