"""
Command-line surface for one stake session.

Usage:
  stake-hub status
  stake-hub history
  stake-hub setup
  stake-hub deposit 2.5
  stake-hub withdraw 1
  stake-hub claim

Env: SOLANA_RPC_URL, SOLANA_NETWORK, STAKE_PROGRAM_ID, STAKE_HUB_WALLET_KEY or
STAKE_HUB_WALLET_PATH, SOLANA_COMMITMENT, CONFIRM_TIMEOUT_SEC.
Exit codes: 0 success, 1 failed / ambiguous / no wallet, 2 invalid input.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Sequence

from stake_hub.config.env import load_stake_hub_env, mask_rpc_url
from stake_hub.config.settings import StakeHubSettings
from stake_hub.core.exceptions import InvalidAmount, WalletUnavailable
from stake_hub.hub import StakeHub
from stake_hub.hub_logging import get_logger, set_log_level
from stake_hub.tx.submitter import OperationResult, parse_amount

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stake-hub", description="Manage your Solana stake position.")
    parser.add_argument("--rpc-url", help="Override SOLANA_RPC_URL")
    parser.add_argument("--wallet", help="Path to a keypair file (overrides STAKE_HUB_WALLET_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug events to stderr")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="Show the stake account snapshot")
    sub.add_parser("history", help="Show recent stake record activity")
    sub.add_parser("setup", help="Create the stake account")
    for name, help_text in (("deposit", "Stake SOL"), ("withdraw", "Unstake SOL")):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("amount", help="Amount in SOL")
    sub.add_parser("claim", help="Claim accrued rewards")
    return parser


def _print_snapshot(hub: StakeHub) -> None:
    snapshot = hub.snapshot
    if snapshot is None:
        print("No data yet")
        return
    for label, value in snapshot.to_display().items():
        print(f"{label}: {value}")


def _print_history(hub: StakeHub, cluster: str) -> None:
    if not hub.history:
        print("No history")
        return
    for entry in hub.history:
        url = entry.explorer_url(cluster)
        print(entry.describe() + (f"  {url}" if url else ""))


def _print_notification(hub: StakeHub) -> None:
    if hub.notification is not None:
        print(hub.notification.message)


async def _run(args: argparse.Namespace, settings: StakeHubSettings) -> int:
    async with StakeHub(settings) as hub:
        try:
            account = await hub.connect()
        except WalletUnavailable as e:
            print(f"Connect error ❌ {e}", file=sys.stderr)
            return EXIT_FAILED
        print(f"Wallet: {hub.identity.user_address}")
        print(f"Stake PDA: {account.address}")

        if args.command == "status":
            await hub.refresh()
            _print_notification(hub)
            _print_snapshot(hub)
            return EXIT_OK
        if args.command == "history":
            _print_history(hub, settings.explorer_cluster)
            return EXIT_OK

        result: OperationResult
        if args.command == "setup":
            result = await hub.setup_account()
        elif args.command == "deposit":
            result = await hub.deposit(args.amount)
        elif args.command == "withdraw":
            result = await hub.withdraw(args.amount)
        else:
            result = await hub.claim_reward()

        _print_notification(hub)
        if result.signature:
            print(f"signature={result.signature}")
        if result.succeeded:
            _print_snapshot(hub)
            return EXIT_OK
        return EXIT_FAILED


def main(argv: Sequence[str] | None = None) -> int:
    load_stake_hub_env()
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_log_level("DEBUG")
    settings = StakeHubSettings()
    if args.rpc_url:
        settings.rpc_url = args.rpc_url
    if args.wallet:
        settings.wallet_key = ""
        settings.wallet_key_path = args.wallet
    logger.info(
        "cli_start",
        command=args.command,
        rpc_url=mask_rpc_url(settings.rpc_url),
        program_id=settings.program_id,
    )
    try:
        # reject bad input before touching the wallet or RPC
        if args.command in ("deposit", "withdraw"):
            args.amount = parse_amount(args.amount)
        return asyncio.run(_run(args, settings))
    except InvalidAmount as e:
        print(f"Invalid amount: {e}", file=sys.stderr)
        return EXIT_USAGE
    except KeyboardInterrupt:
        logger.info("cli_interrupted")
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
