"""
Display snapshot of the stake record.

Holds integral lamports exactly as read from chain; conversion to SOL
(scale 10^9, 4 decimal places) happens only in to_display().
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from stake_hub.ledger.models import LAMPORTS_PER_SOL
from stake_hub.program.layout import RawStakeAccount

DISPLAY_DECIMALS = 4
_QUANT = Decimal(1).scaleb(-DISPLAY_DECIMALS)

# Field labels shown to the user, in display order
DISPLAY_LABELS = (
    ("owner", "Owner"),
    ("staked_amount", "Staked Amount (SOL)"),
    ("claimed_reward", "Claimed Reward (SOL)"),
    ("unclaimed_reward", "Unclaimed Reward (SOL)"),
    ("total_rewards_earned", "Total Rewards Earned (SOL)"),
    ("total_deposited", "Total Deposited (SOL)"),
    ("total_withdrawn", "Total Withdrawn (SOL)"),
    ("last_activity_time", "Last Activity"),
)


def lamports_to_sol(lamports: int) -> Decimal:
    """Lamports -> SOL rounded to DISPLAY_DECIMALS places."""
    return (Decimal(lamports) / LAMPORTS_PER_SOL).quantize(_QUANT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class StakePositionSnapshot:
    owner: str
    staked_amount: int
    unclaimed_reward: int
    claimed_reward: int
    total_deposited: int
    total_withdrawn: int
    total_rewards_earned: int
    last_activity_time: int  # unix seconds

    @classmethod
    def from_raw(cls, raw: RawStakeAccount) -> "StakePositionSnapshot":
        return cls(
            owner=str(raw.owner),
            staked_amount=raw.amount,
            unclaimed_reward=raw.reward,
            claimed_reward=raw.claimed_reward,
            total_deposited=raw.total_deposited,
            total_withdrawn=raw.total_withdrawn,
            total_rewards_earned=raw.total_rewards_earned,
            last_activity_time=raw.last_stake_time,
        )

    def to_display(self) -> dict[str, str]:
        """Labelled, presentation-ready values (SOL with 4 decimals, local time)."""
        values: dict[str, str] = {}
        for attr, label in DISPLAY_LABELS:
            value = getattr(self, attr)
            if attr == "owner":
                values[label] = value
            elif attr == "last_activity_time":
                when = datetime.fromtimestamp(value, tz=timezone.utc).astimezone()
                values[label] = when.strftime("%Y-%m-%d %H:%M:%S")
            else:
                values[label] = f"{lamports_to_sol(value):.{DISPLAY_DECIMALS}f}"
        return values
