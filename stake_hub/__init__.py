"""
Stake Hub: client for a single Solana stake position.

Derives the user's stake record address, submits setup / stake / unstake /
claim operations to the stake program, and reconciles the local snapshot,
rolling history and notification with the authoritative on-chain state.
"""

__version__ = "0.1.0"
