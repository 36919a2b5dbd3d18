from stake_hub.session.identity import SessionIdentity, establish
from stake_hub.session.wallet import KeypairWallet, WalletConnection, WalletProvider, load_keypair

__all__ = [
    "KeypairWallet",
    "SessionIdentity",
    "WalletConnection",
    "WalletProvider",
    "establish",
    "load_keypair",
]
