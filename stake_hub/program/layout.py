"""
Wire layout of the Anchor stake program: instruction data and StakeAccount data.

Instruction discriminator = first 8 bytes of sha256("global:<instruction_name>").
Account discriminator = first 8 bytes of sha256("account:StakeAccount").
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID


def _ix_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


IX_INITIALIZE = "initialize"
IX_STAKE = "stake"
IX_UNSTAKE = "unstake"
IX_CLAIM_REWARD = "claim_reward"

INSTRUCTION_DISCRIMINATORS = {
    name: _ix_discriminator(name)
    for name in (IX_INITIALIZE, IX_STAKE, IX_UNSTAKE, IX_CLAIM_REWARD)
}
# Instructions that take a single u64 amount argument
AMOUNT_INSTRUCTIONS = frozenset({IX_STAKE, IX_UNSTAKE})

STAKE_ACCOUNT_DISCRIMINATOR = hashlib.sha256(b"account:StakeAccount").digest()[:8]

# StakeAccount layout after the discriminator:
# owner 32 | amount u64 | reward u64 | claimed_reward u64 | last_stake_time i64
# | total_deposited u64 | total_withdrawn u64 | total_rewards_earned u64
DISCRIMINATOR_LEN = 8
OWNER_LEN = 32
_FIELDS = struct.Struct("<QQQqQQQ")
STAKE_ACCOUNT_LEN = DISCRIMINATOR_LEN + OWNER_LEN + _FIELDS.size  # 96

U64_MAX = 2**64 - 1


@dataclass(frozen=True)
class RawStakeAccount:
    """Decoded StakeAccount; every monetary field is in lamports."""

    owner: Pubkey
    amount: int
    reward: int
    claimed_reward: int
    last_stake_time: int
    total_deposited: int
    total_withdrawn: int
    total_rewards_earned: int


def encode_instruction_data(name: str, amount: int | None = None) -> bytes:
    """Return discriminator plus little-endian args for instruction `name`."""
    try:
        data = bytearray(INSTRUCTION_DISCRIMINATORS[name])
    except KeyError:
        raise ValueError(f"Unknown stake program instruction: {name}") from None
    if name in AMOUNT_INSTRUCTIONS:
        if amount is None or not 0 < amount <= U64_MAX:
            raise ValueError(f"{name} requires a u64 amount > 0, got {amount!r}")
        data += struct.pack("<Q", amount)
    elif amount is not None:
        raise ValueError(f"{name} takes no amount")
    return bytes(data)


def build_instruction(
    name: str,
    program_id: Pubkey,
    stake_account: Pubkey,
    owner: Pubkey,
    amount: int | None = None,
) -> Instruction:
    """
    Build a stake program instruction.

    initialize: stake_account (w), user (signer, w, payer), system_program.
    stake / unstake / claim_reward: stake_account (w), owner (signer).
    """
    data = encode_instruction_data(name, amount)
    if name == IX_INITIALIZE:
        accounts = [
            AccountMeta(pubkey=stake_account, is_signer=False, is_writable=True),
            AccountMeta(pubkey=owner, is_signer=True, is_writable=True),
            AccountMeta(pubkey=SYS_PROGRAM_ID, is_signer=False, is_writable=False),
        ]
    else:
        accounts = [
            AccountMeta(pubkey=stake_account, is_signer=False, is_writable=True),
            AccountMeta(pubkey=owner, is_signer=True, is_writable=False),
        ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def parse_stake_account_data(data: bytes) -> RawStakeAccount:
    """
    Decode StakeAccount data. Raises ValueError if the buffer is short or the
    discriminator does not match.
    """
    if data is None or len(data) < STAKE_ACCOUNT_LEN:
        raise ValueError(
            f"StakeAccount data too short: need {STAKE_ACCOUNT_LEN} bytes, got {0 if data is None else len(data)}"
        )
    if data[:DISCRIMINATOR_LEN] != STAKE_ACCOUNT_DISCRIMINATOR:
        raise ValueError("Account is not a StakeAccount (discriminator mismatch)")
    owner_end = DISCRIMINATOR_LEN + OWNER_LEN
    owner = Pubkey(bytes(data[DISCRIMINATOR_LEN:owner_end]))
    (
        amount,
        reward,
        claimed_reward,
        last_stake_time,
        total_deposited,
        total_withdrawn,
        total_rewards_earned,
    ) = _FIELDS.unpack_from(data, owner_end)
    return RawStakeAccount(
        owner=owner,
        amount=amount,
        reward=reward,
        claimed_reward=claimed_reward,
        last_stake_time=last_stake_time,
        total_deposited=total_deposited,
        total_withdrawn=total_withdrawn,
        total_rewards_earned=total_rewards_earned,
    )
