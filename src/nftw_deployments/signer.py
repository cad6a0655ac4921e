"""Transaction signer for nftw-deployments library."""

import logging
from typing import Any, Callable, Dict

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .exceptions import ConfigurationError
from .provider import JsonRpcProvider, connect
from .types import NetworkProfile

logger = logging.getLogger(__name__)


def load_account(private_key: str) -> LocalAccount:
    """
    Derive an account from a private key.

    Raises:
        ConfigurationError: If the key is not a valid secp256k1 private key
    """
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError):
        # Don't chain: the original message may contain key material
        raise ConfigurationError("Signer secret is not a valid private key") from None


class Signer:
    """An account bound to a provider; signs locally, submits via RPC."""

    def __init__(self, account: LocalAccount, provider: JsonRpcProvider, chain_id: int):
        """
        Initialize the signer.

        Args:
            account: Local account holding the private key
            provider: Connected provider used to submit transactions
            chain_id: Chain id embedded in every signed transaction
        """
        self._account = account
        self.provider = provider
        self.chain_id = chain_id

    @property
    def address(self) -> str:
        return self._account.address

    def build_transaction(self, data: str, value: int = 0) -> Dict[str, Any]:
        """
        Build a complete contract-creation transaction for this account.

        Nonce, gas price and gas limit are taken from the node.
        """
        gas = self.provider.estimate_gas(
            {"from": self.address, "data": data, "value": hex(value)}
        )
        return {
            "data": data,
            "value": value,
            "nonce": self.provider.get_transaction_count(self.address),
            "gas": gas,
            "gasPrice": self.provider.gas_price(),
            "chainId": self.chain_id,
        }

    def send_transaction(self, data: str, value: int = 0) -> str:
        """
        Sign and submit a contract-creation transaction.

        Returns:
            Transaction hash as reported by the node
        """
        transaction = self.build_transaction(data, value)
        signed = self._account.sign_transaction(transaction)
        return self.provider.send_raw_transaction(signed.raw_transaction.to_0x_hex())


def connect_signer(
    profile: NetworkProfile,
    connect: Callable[[NetworkProfile], JsonRpcProvider] = connect,
) -> Signer:
    """
    Bind the profile's secret to a provider for the profile's endpoint.

    The key is checked before the endpoint is contacted.

    Raises:
        ConfigurationError: If the secret is invalid or the chain is wrong
        ConnectivityError: If the endpoint cannot be reached
    """
    account = load_account(profile.signer_secret)
    provider = connect(profile)
    logger.debug("Signer ready: %s on %s", account.address, profile.chain_name)
    return Signer(account, provider, profile.chain_id)
