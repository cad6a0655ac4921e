"""Data types and dataclasses for nftw-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from .constants import Network


@dataclass(frozen=True)
class NetworkProfile:
    """Immutable settings for the one network targeted by a run."""

    label: Network
    chain_id: int
    chain_name: str
    block_explorer_url: str
    rpc_url: str
    signer_secret: str = field(repr=False)  # 0x-prefixed private key
    token_address: str
    nft_address: str
    confirmation_timeout: float  # Seconds to wait for each confirmation


@dataclass(frozen=True)
class DeploymentConfig:
    """Validated configuration, built once at startup."""

    profile: NetworkProfile
    artifacts_dir: Path
    poll_interval: float
    record_dir: Optional[Path] = None


@dataclass
class DeploymentResult:
    """Outcome of deploying a single contract."""

    contract_name: str
    transaction_hash: str
    block_explorer_url: str
    constructor_args: List[Any]
    # Populated only after confirmation
    deployed_address: Optional[str] = None

    @property
    def url(self) -> Optional[str]:
        if self.deployed_address is None:
            return None
        return f"{self.block_explorer_url}/address/{self.deployed_address}"


class RunState(Enum):
    """Orchestrator states. No state is revisited; FAILED is terminal."""

    INIT = "init"
    PROFILE_SELECTED = "profile-selected"
    SIGNER_READY = "signer-ready"
    STAGE1_SUBMITTED = "stage1-submitted"
    STAGE1_CONFIRMED = "stage1-confirmed"
    STAGE2_SUBMITTED = "stage2-submitted"
    STAGE2_CONFIRMED = "stage2-confirmed"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunResult:
    """Structured outcome of an orchestrator run."""

    state: RunState
    escrow: Optional[DeploymentResult] = None
    rental: Optional[DeploymentResult] = None
    error: Optional[BaseException] = None
    # Last state reached before a failure
    failed_at: Optional[RunState] = None

    @property
    def ok(self) -> bool:
        return self.state is RunState.DONE

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1
