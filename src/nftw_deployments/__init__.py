"""
nftw-deployments: deploys the NFT Worlds escrow and rental contracts
"""

from importlib.metadata import PackageNotFoundError, version

from .artifacts import (
    ContractFactory,
    PendingDeployment,
    bind_factory,
    get_contract_factory,
    load_artifact,
)
from .config import load_config
from .constants import Network
from .exceptions import (
    ArtifactNotFoundError,
    ConfigurationError,
    ConfirmationError,
    ConfirmationTimeoutError,
    ConnectivityError,
    DeploymentError,
    RpcError,
    SubmissionError,
)
from .orchestrator import DeploymentOrchestrator, deploy_contracts
from .types import DeploymentConfig, DeploymentResult, NetworkProfile, RunResult, RunState

try:
    __version__ = version("nftw-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "DeploymentOrchestrator",
    "deploy_contracts",
    "load_config",
    "get_contract_factory",
    "load_artifact",
    "bind_factory",
    "ContractFactory",
    "PendingDeployment",
    "Network",
    "NetworkProfile",
    "DeploymentConfig",
    "DeploymentResult",
    "RunResult",
    "RunState",
    "DeploymentError",
    "ConfigurationError",
    "ArtifactNotFoundError",
    "ConnectivityError",
    "RpcError",
    "SubmissionError",
    "ConfirmationError",
    "ConfirmationTimeoutError",
]
