"""Two-stage escrow/rental deployment for nftw-deployments library."""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, Union

from .artifacts import bind_factory, load_artifact
from .constants import ESCROW_CONTRACT, RENTAL_CONTRACT
from .records import get_record_path, save_deployment_record
from .signer import Signer, connect_signer
from .types import DeploymentConfig, DeploymentResult, RunResult, RunState

logger = logging.getLogger(__name__)

ConnectSigner = Callable[[Any], Signer]
LoadArtifact = Callable[[str, Union[Path, str]], Dict[str, Any]]
FactoryFor = Callable[[Dict[str, Any], Any], Any]


class DeploymentOrchestrator:
    """
    Deploys NFTWEscrow, then NFTWRental pointing at the escrow.

    The rental deployment is only submitted once the escrow deployment is
    confirmed and its address is known. Nothing is retried and nothing is
    rolled back: a confirmed escrow stays deployed if a later step fails.
    """

    def __init__(
        self,
        config: DeploymentConfig,
        connect_signer: ConnectSigner = connect_signer,
        factory_for: FactoryFor = bind_factory,
        load_artifact: LoadArtifact = load_artifact,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Validated run configuration
            connect_signer: Builds a connected signer from a NetworkProfile
            factory_for: Returns a contract factory for (artifact, signer)
            load_artifact: Loads a compiled artifact for (name, artifacts_dir)
        """
        self.config = config
        self._connect_signer = connect_signer
        self._factory_for = factory_for
        self._load_artifact = load_artifact
        self.run_id = uuid.uuid4().hex
        self.started_at = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        self._record_path = get_record_path(config.record_dir, config.profile.label)
        self.state = RunState.INIT
        self._confirmed: List[DeploymentResult] = []

    def _advance(self, state: RunState) -> None:
        logger.debug("%s -> %s", self.state.value, state.value)
        self.state = state

    def run(self) -> RunResult:
        """
        Drive the deployment to completion or failure.

        Returns:
            RunResult; never raises for faults inside the run
        """
        result = RunResult(state=self.state)
        try:
            self._run(result)
        except Exception as e:
            logger.exception("Deployment failed during %s: %s", self.state.value, e)
            result.failed_at = self.state
            result.error = e
            self._advance(RunState.FAILED)
        result.state = self.state
        return result

    def _run(self, result: RunResult) -> None:
        profile = self.config.profile
        # The profile was chosen when the config was built
        self._advance(RunState.PROFILE_SELECTED)
        logger.info("Deploying to %s (chain %d)", profile.chain_name, profile.chain_id)

        # Local files are checked before the endpoint is contacted
        escrow_artifact = self._load_artifact(ESCROW_CONTRACT, self.config.artifacts_dir)
        rental_artifact = self._load_artifact(RENTAL_CONTRACT, self.config.artifacts_dir)

        signer = self._connect_signer(profile)
        escrow_factory = self._factory_for(escrow_artifact, signer)
        rental_factory = self._factory_for(rental_artifact, signer)
        self._advance(RunState.SIGNER_READY)

        pending, result.escrow = self._submit(
            escrow_factory,
            ESCROW_CONTRACT,
            [profile.token_address, profile.nft_address],
            RunState.STAGE1_SUBMITTED,
        )
        self._confirm(pending, result.escrow, RunState.STAGE1_CONFIRMED)

        pending, result.rental = self._submit(
            rental_factory,
            RENTAL_CONTRACT,
            [profile.token_address, result.escrow.deployed_address],
            RunState.STAGE2_SUBMITTED,
        )
        self._confirm(pending, result.rental, RunState.STAGE2_CONFIRMED)

        self._advance(RunState.DONE)

    def _submit(
        self,
        factory: Any,
        contract_name: str,
        constructor_args: List[Any],
        submitted: RunState,
    ) -> Tuple[Any, DeploymentResult]:
        pending = factory.deploy(*constructor_args)
        deployment = DeploymentResult(
            contract_name=contract_name,
            transaction_hash=pending.transaction_hash,
            block_explorer_url=self.config.profile.block_explorer_url,
            constructor_args=list(constructor_args),
        )
        self._advance(submitted)
        # Logged before waiting so a stalled confirmation can still be tracked
        logger.info("%s deploy TX hash: %s", contract_name, deployment.transaction_hash)
        return pending, deployment

    def _confirm(self, pending: Any, deployment: DeploymentResult, confirmed: RunState) -> None:
        profile = self.config.profile

        deployment.deployed_address = pending.wait_for_confirmation(
            profile.confirmation_timeout, self.config.poll_interval
        )
        self._advance(confirmed)
        logger.info("%s address: %s", deployment.contract_name, deployment.deployed_address)
        logger.debug("%s explorer link: %s", deployment.contract_name, deployment.url)

        self._confirmed.append(deployment)
        save_deployment_record(
            self._record_path,
            profile.label,
            profile.chain_id,
            self.run_id,
            self._confirmed,
            started_at=self.started_at,
        )


def deploy_contracts(
    config: DeploymentConfig,
    connect_signer: ConnectSigner = connect_signer,
    factory_for: FactoryFor = bind_factory,
    load_artifact: LoadArtifact = load_artifact,
) -> RunResult:
    """
    Run a full escrow/rental deployment.

    Args:
        config: Validated run configuration
        connect_signer: Builds a connected signer from a NetworkProfile
        factory_for: Returns a contract factory for (artifact, signer)
        load_artifact: Loads a compiled artifact for (name, artifacts_dir)

    Returns:
        RunResult
    """
    return DeploymentOrchestrator(config, connect_signer, factory_for, load_artifact).run()
