"""
Main entrypoint: run one stake-hub command against the configured cluster.

Equivalent to the `stake-hub` console script:
  python main.py status
  python main.py deposit 2.5

Env: SOLANA_RPC_URL, SOLANA_NETWORK, STAKE_PROGRAM_ID, STAKE_HUB_WALLET_KEY, STAKE_HUB_WALLET_PATH.
"""

import sys

from stake_hub.cli import main

if __name__ == "__main__":
    sys.exit(main())
