"""Unpack a Yellowstone SubscribeUpdate into key table, instructions, signature."""

from typing import Any, NamedTuple

import base58
from solders.pubkey import Pubkey  # type: ignore[import-untyped]


class TransactionData(NamedTuple):
    account_keys: list[Pubkey]
    instructions: list[Any]
    tx_id: str


def _to_pubkeys(raw_keys: Any) -> list[Pubkey] | None:
    keys = []
    for raw in raw_keys:
        raw = bytes(raw)
        if len(raw) != 32:
            return None
        keys.append(Pubkey.from_bytes(raw))
    return keys


def extract_transaction_data(update: Any) -> TransactionData | None:
    """Project one update onto (account_keys, instructions, tx_id).

    Key table order is static message keys, then loaded writable, then loaded
    readonly addresses; instruction account indices refer to this order.
    Returns None for non-transaction updates and for any missing or malformed
    nested message.
    """
    if update.WhichOneof("update_oneof") != "transaction":
        return None

    tx_update = update.transaction
    if not tx_update.HasField("transaction"):
        return None

    tx_info = tx_update.transaction
    if not tx_info.HasField("transaction") or not tx_info.HasField("meta"):
        return None

    tx = tx_info.transaction
    if not tx.HasField("message"):
        return None

    msg = tx.message
    meta = tx_info.meta

    static_keys = _to_pubkeys(msg.account_keys)
    writable = _to_pubkeys(meta.loaded_writable_addresses)
    readonly = _to_pubkeys(meta.loaded_readonly_addresses)
    if not static_keys or writable is None or readonly is None:
        return None

    tx_id = base58.b58encode(bytes(tx_info.signature)).decode()
    return TransactionData(
        account_keys=static_keys + writable + readonly,
        instructions=list(msg.instructions),
        tx_id=tx_id,
    )
