"""JSON-RPC provider for nftw-deployments library."""

import itertools
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests

from .constants import SUPPORTED_RPC_SCHEMES
from .exceptions import ConfigurationError, ConnectivityError, RpcError
from .types import NetworkProfile

logger = logging.getLogger(__name__)


class JsonRpcProvider:
    """Connection to an Ethereum node's JSON-RPC endpoint over HTTP."""

    def __init__(
        self,
        url: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the provider.

        Args:
            url: HTTP(S) endpoint URL
            timeout: Per-request timeout in seconds
            session: requests session to reuse (a new one is created if None)

        Raises:
            ConfigurationError: If the URL scheme is not supported
        """
        scheme = urlparse(url).scheme
        if scheme not in SUPPORTED_RPC_SCHEMES:
            raise ConfigurationError(
                f"Unsupported RPC endpoint scheme '{scheme}': use an http(s) URL"
            )

        self.url = url
        self.timeout = timeout
        self._session = session or requests.Session()
        self._ids = itertools.count(1)

    def request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Make a JSON-RPC call and return its result.

        Raises:
            ConnectivityError: If the endpoint is unreachable or answers non-200
            RpcError: If the node returns a JSON-RPC error object
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params or [],
            "id": next(self._ids),
        }

        try:
            response = self._session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ConnectivityError(f"Network error during RPC call {method}: {e}") from e

        # Check for HTTP errors
        if response.status_code != 200:
            raise ConnectivityError(
                f"RPC request {method} failed with status {response.status_code}"
            )

        try:
            result = response.json()
        except ValueError as e:
            raise ConnectivityError(f"Invalid JSON in RPC response to {method}") from e

        # Check for RPC errors
        if "error" in result:
            error = result["error"]
            if isinstance(error, dict):
                raise RpcError(
                    f"RPC error in {method}: {error.get('message')}",
                    code=error.get("code"),
                    data=error.get("data"),
                )
            raise RpcError(f"RPC error in {method}: {error}")

        return result.get("result")

    def chain_id(self) -> int:
        return int(self.request("eth_chainId"), 16)

    def gas_price(self) -> int:
        return int(self.request("eth_gasPrice"), 16)

    def get_transaction_count(self, address: str, block: str = "pending") -> int:
        return int(self.request("eth_getTransactionCount", [address, block]), 16)

    def estimate_gas(self, transaction: Dict[str, Any]) -> int:
        return int(self.request("eth_estimateGas", [transaction]), 16)

    def send_raw_transaction(self, raw_transaction: str) -> str:
        """Submit a signed transaction and return its hash."""
        return self.request("eth_sendRawTransaction", [raw_transaction])

    def get_transaction_receipt(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        """Return the receipt, or None while the transaction is pending."""
        return self.request("eth_getTransactionReceipt", [transaction_hash])


def connect(profile: NetworkProfile, timeout: float = 30) -> JsonRpcProvider:
    """
    Open a provider for a profile and check it reaches the expected chain.

    Args:
        profile: Selected network profile
        timeout: Per-request timeout in seconds

    Returns:
        Connected JsonRpcProvider

    Raises:
        ConnectivityError: If the endpoint cannot be reached
        ConfigurationError: If the endpoint serves a different chain
    """
    provider = JsonRpcProvider(profile.rpc_url, timeout=timeout)

    try:
        chain_id = provider.chain_id()
    except RpcError as e:
        raise ConnectivityError(f"Endpoint did not answer eth_chainId: {e}") from e

    if chain_id != profile.chain_id:
        raise ConfigurationError(
            f"Endpoint serves chain {chain_id}, expected {profile.chain_id} "
            f"({profile.chain_name})"
        )

    logger.debug("Connected to %s (chain %d)", profile.chain_name, chain_id)
    return provider
