"""
Tests for stake record derivation and the program wire layout.
"""

from __future__ import annotations

import hashlib
import struct

import pytest
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID

from stake_hub.config.env import DEFAULT_PROGRAM_ID
from stake_hub.core.exceptions import DerivationError
from stake_hub.program.derivation import derive
from stake_hub.program.layout import (
    IX_CLAIM_REWARD,
    IX_INITIALIZE,
    IX_STAKE,
    IX_UNSTAKE,
    STAKE_ACCOUNT_DISCRIMINATOR,
    STAKE_ACCOUNT_LEN,
    build_instruction,
    encode_instruction_data,
    parse_stake_account_data,
)

PROGRAM_ID = Pubkey.from_string(DEFAULT_PROGRAM_ID)
USER = Pubkey.from_string("9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka")
USER_2 = Pubkey.from_string("7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ")


# --- derivation ---


def test_derive_is_pure():
    assert derive(USER, PROGRAM_ID) == derive(USER, PROGRAM_ID)
    assert derive(str(USER), DEFAULT_PROGRAM_ID) == derive(USER, PROGRAM_ID)


def test_derive_matches_program_seeds():
    expected, bump = Pubkey.find_program_address([b"stake", bytes(USER)], PROGRAM_ID)
    account = derive(USER, PROGRAM_ID)
    assert account.address == expected
    assert account.bump == bump
    assert account.owner_address == USER
    assert account.seed == "stake"
    assert not account.address.is_on_curve()


def test_derive_differs_per_user():
    assert derive(USER, PROGRAM_ID).address != derive(USER_2, PROGRAM_ID).address


def test_derive_rejects_malformed_address():
    with pytest.raises(DerivationError, match="user address"):
        derive("not-a-pubkey", PROGRAM_ID)
    with pytest.raises(DerivationError, match="program id"):
        derive(USER, "bad")


# --- instruction data ---


def test_instruction_discriminators():
    for name in (IX_INITIALIZE, IX_STAKE, IX_UNSTAKE, IX_CLAIM_REWARD):
        expected = hashlib.sha256(f"global:{name}".encode()).digest()[:8]
        amount = 1 if name in (IX_STAKE, IX_UNSTAKE) else None
        assert encode_instruction_data(name, amount)[:8] == expected


def test_stake_data_carries_u64_amount():
    data = encode_instruction_data(IX_STAKE, 2_500_000_000)
    assert len(data) == 16
    assert struct.unpack("<Q", data[8:])[0] == 2_500_000_000
    assert len(encode_instruction_data(IX_CLAIM_REWARD)) == 8


def test_amount_argument_rules():
    with pytest.raises(ValueError):
        encode_instruction_data(IX_STAKE)
    with pytest.raises(ValueError):
        encode_instruction_data(IX_UNSTAKE, 0)
    with pytest.raises(ValueError):
        encode_instruction_data(IX_CLAIM_REWARD, 5)
    with pytest.raises(ValueError):
        encode_instruction_data("close_account")


def test_initialize_accounts():
    record = derive(USER, PROGRAM_ID).address
    ix = build_instruction(IX_INITIALIZE, PROGRAM_ID, record, USER)
    assert ix.program_id == PROGRAM_ID
    metas = [(m.pubkey, m.is_signer, m.is_writable) for m in ix.accounts]
    assert metas == [
        (record, False, True),
        (USER, True, True),
        (SYS_PROGRAM_ID, False, False),
    ]


def test_unstake_accounts():
    record = derive(USER, PROGRAM_ID).address
    ix = build_instruction(IX_UNSTAKE, PROGRAM_ID, record, USER, amount=10)
    metas = [(m.pubkey, m.is_signer, m.is_writable) for m in ix.accounts]
    assert metas == [(record, False, True), (USER, True, False)]


# --- account data ---


def _account_bytes(owner: Pubkey, *values: int) -> bytes:
    return STAKE_ACCOUNT_DISCRIMINATOR + bytes(owner) + struct.pack("<QQQqQQQ", *values)


def test_parse_stake_account():
    data = _account_bytes(USER, 5_000_000_000, 1_200, 300, 1_735_689_600, 6_000_000_000, 1_000_000_000, 1_500)
    assert len(data) == STAKE_ACCOUNT_LEN
    raw = parse_stake_account_data(data)
    assert raw.owner == USER
    assert raw.amount == 5_000_000_000
    assert raw.reward == 1_200
    assert raw.claimed_reward == 300
    assert raw.last_stake_time == 1_735_689_600
    assert raw.total_deposited == 6_000_000_000
    assert raw.total_withdrawn == 1_000_000_000
    assert raw.total_rewards_earned == 1_500


def test_parse_rejects_short_or_foreign_data():
    with pytest.raises(ValueError, match="too short"):
        parse_stake_account_data(b"\x00" * 40)
    foreign = b"\x01" * 8 + bytes(USER) + b"\x00" * 56
    with pytest.raises(ValueError, match="discriminator"):
        parse_stake_account_data(foreign)
