"""Configuration constants for nftw-deployments library."""

from enum import Enum


class Network(Enum):
    """
    Target network selector.

    Value strings are what DEPLOY_NETWORK accepts.
    """

    PRODUCTION = "production"
    TEST = "test"


ESCROW_CONTRACT = "NFTWEscrow"
RENTAL_CONTRACT = "NFTWRental"

# Runtime selection and tuning knobs
NETWORK_ENV = "DEPLOY_NETWORK"
CONFIRMATION_TIMEOUT_ENV = "DEPLOY_CONFIRMATION_TIMEOUT"
POLL_INTERVAL_ENV = "DEPLOY_POLL_INTERVAL"
ARTIFACTS_DIR_ENV = "DEPLOY_ARTIFACTS_DIR"
RECORD_DIR_ENV = "DEPLOY_RECORD_DIR"

DEFAULT_NETWORK = Network.PRODUCTION
DEFAULT_POLL_INTERVAL = 4.0
DEFAULT_ARTIFACTS_DIR = "artifacts"

# requests speaks HTTP only
SUPPORTED_RPC_SCHEMES = ("http", "https")

NETWORK_ALIASES = {
    "production": Network.PRODUCTION,
    "mainnet": Network.PRODUCTION,
    "ethereum": Network.PRODUCTION,
    "test": Network.TEST,
    "testnet": Network.TEST,
    "rinkeby": Network.TEST,
}

# Network profile table. Token and NFT addresses are the pre-existing
# WRLD token and NFT Worlds collection on each chain.
NETWORK_CONFIG = {
    Network.PRODUCTION: {
        "chain_id": 1,
        "chain_name": "Ethereum Mainnet",
        "block_explorer_url": "https://etherscan.io",
        "rpc_url_env": "ETHEREUM_RPC_URL",
        "signer_secret_env": "ETHEREUM_ACCOUNT",
        "token_address": "0xD5d86FC8d5C0Ea1aC1Ac5Dfab6E529c9967a45E9",
        "nft_address": "0xBD4455dA5929D5639EE098ABFaa3241e9ae111Af",
        "confirmation_timeout": 600.0,
    },
    Network.TEST: {
        "chain_id": 4,
        "chain_name": "Rinkeby",
        "block_explorer_url": "https://rinkeby.etherscan.io",
        "rpc_url_env": "RINKEBY_RPC_URL",
        "signer_secret_env": "RINKEBY_ACCOUNT",
        "token_address": "0xa8f39f359c4045f3098eebcecfc966deb5b459c1",
        "nft_address": "0x4b84311fb82e348c3bfc48f3bc0117a3df1e88af",
        # Test networks are slow to mine under load
        "confirmation_timeout": 1800.0,
    },
}
