"""
Stake record address derivation.

The stake program keeps one StakeAccount per user at the PDA with seeds
[b"stake", user.key()]. derive() is pure: no RPC, no caching across users.
"""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey

from stake_hub.core.exceptions import DerivationError

STAKE_SEED = b"stake"


@dataclass(frozen=True)
class DerivedAccount:
    """Stake record address for one user under one program."""

    address: Pubkey
    owner_address: Pubkey
    bump: int
    seed: str = STAKE_SEED.decode()

    def __str__(self) -> str:
        return str(self.address)


def _as_pubkey(value: Pubkey | str, what: str) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    try:
        return Pubkey.from_string(str(value).strip())
    except Exception as e:
        raise DerivationError(f"Invalid {what}: {value!r}") from e


def derive(user_address: Pubkey | str, program_id: Pubkey | str) -> DerivedAccount:
    """
    Derive the stake record PDA for user_address.

    Matches the program's account constraint:
        seeds = [b"stake", user.key().as_ref()], bump
    Raises DerivationError for a malformed address or program id.
    """
    owner = _as_pubkey(user_address, "user address")
    program = _as_pubkey(program_id, "program id")
    address, bump = Pubkey.find_program_address([STAKE_SEED, bytes(owner)], program)
    return DerivedAccount(address=address, owner_address=owner, bump=bump)
