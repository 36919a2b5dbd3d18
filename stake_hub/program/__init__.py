"""
Stake program bindings: record address derivation and wire layout.
"""

from stake_hub.program.derivation import STAKE_SEED, DerivedAccount, derive
from stake_hub.program.layout import (
    RawStakeAccount,
    build_instruction,
    encode_instruction_data,
    parse_stake_account_data,
)

__all__ = [
    "STAKE_SEED",
    "DerivedAccount",
    "RawStakeAccount",
    "build_instruction",
    "derive",
    "encode_instruction_data",
    "parse_stake_account_data",
]
