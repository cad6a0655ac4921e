"""Compiled contract artifacts and the contract factory for nftw-deployments library."""

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import to_checksum_address

from .exceptions import (
    ArtifactNotFoundError,
    ConfirmationError,
    ConfirmationTimeoutError,
    RpcError,
    SubmissionError,
)
from .signer import Signer

logger = logging.getLogger(__name__)


def find_artifact(contract_name: str, artifacts_dir: Union[Path, str]) -> Path:
    """
    Locate the Hardhat artifact file for a contract.

    Assumption: Hardhat writes artifacts to
    {artifacts_dir}/contracts/{Name}.sol/{Name}.json; when the source file
    is named differently, the first {Name}.json found below artifacts_dir
    (debug files excluded) is used.

    Raises:
        ArtifactNotFoundError: If no artifact exists for the contract
    """
    artifacts_dir = Path(artifacts_dir)

    # Conventional layout first
    conventional = artifacts_dir / "contracts" / f"{contract_name}.sol" / f"{contract_name}.json"
    if conventional.exists():
        return conventional

    if artifacts_dir.exists():
        for candidate in sorted(artifacts_dir.rglob(f"{contract_name}.json")):
            if "build-info" not in candidate.parts:
                return candidate

    raise ArtifactNotFoundError(
        f"Compiled artifact for {contract_name} not found under {artifacts_dir}. "
        "Run `npx hardhat compile` first."
    )


def load_artifact(contract_name: str, artifacts_dir: Union[Path, str]) -> Dict[str, Any]:
    """
    Parse a Hardhat artifact JSON file.

    Args:
        contract_name: Contract name, e.g. "NFTWEscrow"
        artifacts_dir: Hardhat artifacts directory

    Returns:
        Dictionary with contract_name, abi and bytecode

    Raises:
        ArtifactNotFoundError: If the artifact is missing or has no bytecode
    """
    file_path = find_artifact(contract_name, artifacts_dir)
    with open(file_path) as f:
        data = json.load(f)

    bytecode = data.get("bytecode") or ""
    # Interfaces and abstract contracts compile to empty bytecode
    if bytecode in ("", "0x"):
        raise ArtifactNotFoundError(
            f"Artifact {file_path} has no deployable bytecode"
        )
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    logger.debug("Loaded %s artifact from %s", contract_name, file_path)
    return {
        "contract_name": data.get("contractName", contract_name),
        "abi": data["abi"],
        "bytecode": bytecode,
    }


def _abi_type(param: Dict[str, Any]) -> str:
    """Canonical type string for an ABI input, expanding tuples."""
    abi_type = param["type"]
    if abi_type.startswith("tuple"):
        inner = ",".join(_abi_type(c) for c in param.get("components", []))
        return f"({inner}){abi_type[len('tuple'):]}"
    return abi_type


def _constructor_inputs(abi: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    for item in abi:
        if item.get("type") == "constructor":
            return item.get("inputs", [])
    # No explicit constructor
    return []


def encode_constructor_args(abi: List[Dict[str, Any]], args: Sequence[Any]) -> str:
    """
    ABI-encode constructor arguments as hex (without 0x prefix).

    Raises:
        SubmissionError: If argument count or values don't fit the constructor
    """
    inputs = _constructor_inputs(abi)
    if len(inputs) != len(args):
        raise SubmissionError(
            f"Constructor expects {len(inputs)} arguments, got {len(args)}"
        )

    types = [_abi_type(param) for param in inputs]
    values = []
    for abi_type, value in zip(types, args):
        if abi_type == "address" and isinstance(value, str):
            try:
                value = to_checksum_address(value)
            except (ValueError, TypeError) as e:
                raise SubmissionError(f"Invalid address argument {value!r}") from e
        values.append(value)

    try:
        return encode(types, values).hex()
    except (EncodingError, ValueError, TypeError) as e:
        raise SubmissionError(f"Cannot encode constructor arguments: {e}") from e


class PendingDeployment:
    """A submitted contract-creation transaction awaiting confirmation."""

    def __init__(
        self,
        contract_name: str,
        transaction_hash: str,
        constructor_args: Sequence[Any],
        signer: Signer,
    ):
        self.contract_name = contract_name
        self.transaction_hash = transaction_hash
        self.constructor_args = list(constructor_args)
        self._provider = signer.provider

    def wait_for_confirmation(self, timeout: float, poll_interval: float = 4.0) -> str:
        """
        Block until the deployment is mined and return the contract address.

        Args:
            timeout: Maximum seconds to wait
            poll_interval: Seconds between receipt polls

        Returns:
            Checksummed deployed contract address

        Raises:
            ConfirmationError: If the transaction reverted or created no contract
            ConfirmationTimeoutError: If no receipt arrived within timeout
        """
        deadline = time.monotonic() + timeout

        while True:
            try:
                receipt = self._provider.get_transaction_receipt(self.transaction_hash)
            except RpcError as e:
                raise ConfirmationError(
                    f"{self.contract_name} receipt lookup failed: {e}"
                ) from e

            if receipt is not None:
                return self._address_from_receipt(receipt)
            logger.debug("%s deployment %s still pending", self.contract_name, self.transaction_hash)

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise ConfirmationTimeoutError(
                    f"{self.contract_name} deployment {self.transaction_hash} "
                    f"not confirmed within {timeout:g}s"
                )
            time.sleep(min(poll_interval, remaining))

    def _address_from_receipt(self, receipt: Dict[str, Any]) -> str:
        status = receipt.get("status")
        if status is not None and int(status, 16) == 0:
            raise ConfirmationError(
                f"{self.contract_name} deployment {self.transaction_hash} reverted "
                f"in block {receipt.get('blockNumber')}"
            )

        address: Optional[str] = receipt.get("contractAddress")
        if not address:
            raise ConfirmationError(
                f"{self.contract_name} deployment {self.transaction_hash} "
                "created no contract"
            )
        return to_checksum_address(address)


class ContractFactory:
    """Deploys one compiled contract through a signer."""

    def __init__(
        self,
        contract_name: str,
        abi: List[Dict[str, Any]],
        bytecode: str,
        signer: Signer,
    ):
        self.contract_name = contract_name
        self.abi = abi
        self.bytecode = bytecode
        self.signer = signer

    def deploy(self, *args: Any) -> PendingDeployment:
        """
        Submit the deployment transaction.

        Returns as soon as the node accepts the transaction.

        Raises:
            SubmissionError: If encoding fails or the node rejects the transaction
            ConnectivityError: If the endpoint cannot be reached
        """
        data = self.bytecode + encode_constructor_args(self.abi, args)

        try:
            transaction_hash = self.signer.send_transaction(data)
        except RpcError as e:
            raise SubmissionError(
                f"{self.contract_name} deployment rejected: {e}"
            ) from e

        return PendingDeployment(self.contract_name, transaction_hash, args, self.signer)


def bind_factory(artifact: Dict[str, Any], signer: Signer) -> ContractFactory:
    """Build a factory for an artifact already loaded with load_artifact."""
    return ContractFactory(artifact["contract_name"], artifact["abi"], artifact["bytecode"], signer)


def get_contract_factory(
    contract_name: str, signer: Signer, artifacts_dir: Union[Path, str]
) -> ContractFactory:
    """
    Build a factory for a compiled contract.

    Raises:
        ArtifactNotFoundError: If the contract has not been compiled
    """
    return bind_factory(load_artifact(contract_name, artifacts_dir), signer)
