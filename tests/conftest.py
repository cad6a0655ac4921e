"""Shared pytest fixtures for nftw-deployments tests."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

from nftw_deployments.constants import Network
from nftw_deployments.exceptions import ArtifactNotFoundError
from nftw_deployments.types import DeploymentConfig, NetworkProfile

PRIVATE_KEY = "0x" + "aa" * 32

ADDRESS_CONSTRUCTOR_ABI = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"internalType": "address", "name": "_token", "type": "address"},
            {"internalType": "address", "name": "_other", "type": "address"},
        ],
    },
    {
        "type": "function",
        "name": "owner",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
    },
]

FAKE_BYTECODE = "0x608060405234801561001057600080fd5b50"


class FakePendingDeployment:
    """Stands in for PendingDeployment; records when confirmation is awaited."""

    def __init__(self, factory: "FakeFactory", transaction_hash: str):
        self.factory = factory
        self.transaction_hash = transaction_hash

    def wait_for_confirmation(self, timeout: float, poll_interval: float = 4.0) -> str:
        self.factory.events.append(("confirm", self.factory.contract_name))
        self.factory.wait_args.append((timeout, poll_interval))
        if self.factory.confirm_error is not None:
            raise self.factory.confirm_error
        return self.factory.address


class FakeFactory:
    """Stands in for ContractFactory; records every deploy call in a shared log."""

    def __init__(
        self,
        contract_name: str,
        events: List[Tuple[Any, ...]],
        transaction_hash: str,
        address: str,
        deploy_error: Optional[Exception] = None,
        confirm_error: Optional[Exception] = None,
    ):
        self.contract_name = contract_name
        self.events = events
        self.transaction_hash = transaction_hash
        self.address = address
        self.deploy_error = deploy_error
        self.confirm_error = confirm_error
        self.wait_args: List[Tuple[float, float]] = []

    def deploy(self, *args: Any) -> FakePendingDeployment:
        self.events.append(("deploy", self.contract_name, args))
        if self.deploy_error is not None:
            raise self.deploy_error
        return FakePendingDeployment(self, self.transaction_hash)


class FakeNetwork:
    """Artifact loading, signer construction and factory lookup over fake factories."""

    def __init__(self, factories: Dict[str, FakeFactory], events: List[Tuple[Any, ...]]):
        self.factories = factories
        self.events = events
        self.signer = object()
        self.profiles: List[NetworkProfile] = []
        self.missing_artifacts: List[str] = []

    def connect_signer(self, profile: NetworkProfile) -> Any:
        self.events.append(("connect", profile.rpc_url))
        self.profiles.append(profile)
        return self.signer

    def load_artifact(self, contract_name: str, artifacts_dir: Any) -> Dict[str, Any]:
        if contract_name in self.missing_artifacts:
            raise ArtifactNotFoundError(f"{contract_name} not compiled")
        return {"contract_name": contract_name, "abi": [], "bytecode": FAKE_BYTECODE}

    def factory_for(self, artifact: Dict[str, Any], signer: Any) -> FakeFactory:
        assert signer is self.signer
        return self.factories[artifact["contract_name"]]

    def hooks(self) -> Dict[str, Any]:
        """Keyword arguments wiring an orchestrator to this network."""
        return {
            "connect_signer": self.connect_signer,
            "factory_for": self.factory_for,
            "load_artifact": self.load_artifact,
        }


@pytest.fixture
def events() -> List[Tuple[Any, ...]]:
    """Ordered log of calls made against the fake network."""
    return []


@pytest.fixture
def fake_network(events: List[Tuple[Any, ...]]) -> FakeNetwork:
    """Fake network that confirms both contracts."""
    factories = {
        "NFTWEscrow": FakeFactory("NFTWEscrow", events, "0xTX1", "0xEscrow1"),
        "NFTWRental": FakeFactory("NFTWRental", events, "0xTX2", "0xRental1"),
    }
    return FakeNetwork(factories, events)


@pytest.fixture
def mock_profile() -> NetworkProfile:
    """Profile pointing at a mock endpoint with placeholder addresses."""
    return NetworkProfile(
        label=Network.TEST,
        chain_id=4,
        chain_name="Rinkeby",
        block_explorer_url="https://rinkeby.etherscan.io",
        rpc_url="mock://net",
        signer_secret=PRIVATE_KEY,
        token_address="0xToken",
        nft_address="0xNFT",
        confirmation_timeout=30.0,
    )


@pytest.fixture
def mock_config(mock_profile: NetworkProfile, tmp_path: Path) -> DeploymentConfig:
    """Config around mock_profile writing records into a temp directory."""
    return DeploymentConfig(
        profile=mock_profile,
        artifacts_dir=tmp_path / "artifacts",
        poll_interval=0.5,
        record_dir=tmp_path / "records",
    )


@pytest.fixture
def base_environ(tmp_path: Path) -> Dict[str, str]:
    """Complete environment for both networks."""
    return {
        "ETHEREUM_RPC_URL": "https://mainnet.example.com/rpc",
        "ETHEREUM_ACCOUNT": "bb" * 32,
        "RINKEBY_RPC_URL": "https://rinkeby.example.com/rpc",
        "RINKEBY_ACCOUNT": "cc" * 32,
        "DEPLOY_RECORD_DIR": str(tmp_path / "records"),
        "DEPLOY_ARTIFACTS_DIR": str(tmp_path / "artifacts"),
    }


def write_artifact(
    artifacts_dir: Path,
    contract_name: str,
    abi: Optional[List[Dict[str, Any]]] = None,
    bytecode: str = FAKE_BYTECODE,
    source_name: Optional[str] = None,
) -> Path:
    """Write a Hardhat-style artifact file and return its path."""
    source_name = source_name or f"{contract_name}.sol"
    artifact_dir = artifacts_dir / "contracts" / source_name
    artifact_dir.mkdir(parents=True, exist_ok=True)
    path = artifact_dir / f"{contract_name}.json"
    with open(path, "w") as f:
        json.dump(
            {
                "_format": "hh-sol-artifact-1",
                "contractName": contract_name,
                "sourceName": f"contracts/{source_name}",
                "abi": ADDRESS_CONSTRUCTOR_ABI if abi is None else abi,
                "bytecode": bytecode,
                "deployedBytecode": bytecode,
                "linkReferences": {},
                "deployedLinkReferences": {},
            },
            f,
            indent=2,
        )
    return path


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Artifacts directory holding both compiled contracts."""
    directory = tmp_path / "artifacts"
    write_artifact(directory, "NFTWEscrow")
    write_artifact(directory, "NFTWRental")
    return directory


class FakeNode:
    """
    responses callback that answers JSON-RPC like a minimal Ethereum node.

    Each raw transaction sent gets the next entry of `deployments`
    (contract address, receipt status) as its receipt. `pending_polls`
    receipt lookups return null before the receipt appears.
    """

    def __init__(
        self,
        chain_id: int = 4,
        deployments: Optional[List[Tuple[Optional[str], str]]] = None,
        pending_polls: int = 0,
    ):
        self.chain_id = chain_id
        self.deployments = deployments or []
        self.pending_polls = pending_polls
        self.errors: Dict[str, Dict[str, Any]] = {}
        self.calls: List[Tuple[str, List[Any]]] = []
        self.sent: List[str] = []
        self.receipts: Dict[str, Dict[str, Any]] = {}

    def methods(self) -> List[str]:
        return [method for method, _ in self.calls]

    def _result(self, method: str, params: List[Any]) -> Any:
        if method == "eth_chainId":
            return hex(self.chain_id)
        if method == "eth_gasPrice":
            return hex(1_000_000_000)
        if method == "eth_getTransactionCount":
            return hex(len(self.sent))
        if method == "eth_estimateGas":
            return hex(3_000_000)
        if method == "eth_sendRawTransaction":
            self.sent.append(params[0])
            transaction_hash = "0x%064x" % len(self.sent)
            if len(self.sent) <= len(self.deployments):
                address, status = self.deployments[len(self.sent) - 1]
                self.receipts[transaction_hash] = {
                    "transactionHash": transaction_hash,
                    "blockNumber": hex(100 + len(self.sent)),
                    "contractAddress": address,
                    "status": status,
                }
            return transaction_hash
        if method == "eth_getTransactionReceipt":
            if self.pending_polls > 0:
                self.pending_polls -= 1
                return None
            return self.receipts.get(params[0])
        raise AssertionError(f"unexpected RPC method {method}")

    def __call__(self, request):
        body = json.loads(request.body)
        method, params = body["method"], body.get("params", [])
        self.calls.append((method, params))

        if method in self.errors:
            payload = {"jsonrpc": "2.0", "id": body["id"], "error": self.errors[method]}
        else:
            payload = {"jsonrpc": "2.0", "id": body["id"], "result": self._result(method, params)}
        return (200, {"Content-Type": "application/json"}, json.dumps(payload))
