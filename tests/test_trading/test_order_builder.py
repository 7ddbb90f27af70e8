"""Tests for the LaunchLab buy order builder."""

import struct

from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price  # type: ignore[import-untyped]
from solders.pubkey import Pubkey  # type: ignore[import-untyped]

from config.settings import PriorityFeeSettings
from src.parsers.launchpad.constants import BONK_BUY_IN_DISC, BUY_ACCOUNTS_LEN
from src.parsers.launchpad.models import BuyParams
from src.trading.order_builder import (
    build_buy_instruction,
    build_order,
    encode_buy_params,
    prepare_buy_accounts,
    sync_native,
)
from src.trading.wallet import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    WSOL_MINT,
    get_associated_token_address,
)
from tests.factories import make_buy_accounts, make_opportunity

WALLET = Pubkey.new_unique()


class TestEncodeBuyParams:
    def test_layout(self):
        data = encode_buy_params(BuyParams(amount_in=10, minimum_amount_out=20, share_fee_rate=30))
        assert data[:8] == BONK_BUY_IN_DISC
        assert struct.unpack_from("<QQQ", data, 8) == (10, 20, 30)
        assert len(data) == 32


class TestPrepareBuyAccounts:
    def test_payer_and_user_accounts_replaced(self):
        observed = make_buy_accounts()
        ours = prepare_buy_accounts(observed, WALLET)

        assert ours.payer == WALLET
        assert ours.user_base_token == get_associated_token_address(
            WALLET, observed.base_token_mint, TOKEN_PROGRAM_ID
        )
        assert ours.user_quote_token == get_associated_token_address(WALLET, WSOL_MINT)
        assert ours.user_base_token != observed.user_base_token

    def test_pool_accounts_untouched(self):
        observed = make_buy_accounts()
        ours = prepare_buy_accounts(observed, WALLET)

        for name in ("authority", "global_config", "platform_config", "pool_state",
                     "base_vault", "quote_vault", "base_token_mint", "event_authority", "program"):
            assert getattr(ours, name) == getattr(observed, name)

    def test_observed_accounts_not_mutated(self):
        observed = make_buy_accounts()
        original_payer = observed.payer
        prepare_buy_accounts(observed, WALLET)
        assert observed.payer == original_payer


class TestBuyInstruction:
    def test_metas_follow_account_order(self):
        accounts = make_buy_accounts()
        ix = build_buy_instruction(accounts, BuyParams(amount_in=1, minimum_amount_out=0, share_fee_rate=0))

        assert ix.program_id == accounts.program
        assert len(ix.accounts) == BUY_ACCOUNTS_LEN
        assert [m.pubkey for m in ix.accounts] == accounts.as_list()

    def test_only_payer_signs(self):
        accounts = make_buy_accounts()
        ix = build_buy_instruction(accounts, BuyParams(amount_in=1, minimum_amount_out=0, share_fee_rate=0))

        signers = [m.pubkey for m in ix.accounts if m.is_signer]
        assert signers == [accounts.payer]
        assert ix.accounts[4].is_writable  # pool_state
        assert not ix.accounts[9].is_writable  # base_token_mint


class TestBuildOrder:
    def test_instruction_sequence(self):
        order = build_order(make_opportunity(), WALLET, 10_000_000)

        programs = [ix.program_id for ix in order.instructions]
        assert programs == [
            ASSOCIATED_TOKEN_PROGRAM_ID,
            ASSOCIATED_TOKEN_PROGRAM_ID,
            SYSTEM_PROGRAM_ID,
            TOKEN_PROGRAM_ID,
            order.accounts.program,
        ]
        assert order.compute_budget_instructions == []

    def test_ata_creation_is_idempotent_variant(self):
        order = build_order(make_opportunity(), WALLET, 10_000_000)
        base_ix, quote_ix = order.setup_instructions[:2]

        assert bytes(base_ix.data) == b"\x01"
        assert base_ix.accounts[1].pubkey == order.accounts.user_base_token
        assert quote_ix.accounts[1].pubkey == order.accounts.user_quote_token
        assert base_ix.accounts[0].pubkey == WALLET
        assert base_ix.accounts[0].is_signer

    def test_wraps_buy_amount(self):
        order = build_order(make_opportunity(), WALLET, 10_000_000)
        transfer_ix = order.setup_instructions[2]

        # system transfer: u32 index 2, u64 lamports
        assert struct.unpack("<IQ", bytes(transfer_ix.data)) == (2, 10_000_000)
        assert transfer_ix.accounts[0].pubkey == WALLET
        assert transfer_ix.accounts[1].pubkey == order.accounts.user_quote_token
        assert order.setup_instructions[3] == sync_native(order.accounts.user_quote_token)

    def test_buy_uses_configured_amount_not_dev_amount(self):
        order = build_order(make_opportunity(amount_in=7_000_000_000), WALLET, 10_000_000)

        assert order.params == BuyParams(amount_in=10_000_000, minimum_amount_out=0, share_fee_rate=0)
        assert bytes(order.buy_instruction.data) == BONK_BUY_IN_DISC + struct.pack("<QQQ", 10_000_000, 0, 0)
        assert order.payer == WALLET
        assert order.tx_id == make_opportunity().tx_id

    def test_priority_fee_prefix(self):
        fee = PriorityFeeSettings(cu=150_000, priority_fee_micro_lamport=5_000)
        order = build_order(make_opportunity(), WALLET, 10_000_000, fee)

        assert order.instructions[:2] == [set_compute_unit_limit(150_000), set_compute_unit_price(5_000)]
        assert len(order.instructions) == 7
        assert order.instructions[-1] == order.buy_instruction
