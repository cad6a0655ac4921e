"""Deployment record files for nftw-deployments library."""

import json
import os
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from .constants import Network
from .exceptions import ConfigurationError
from .types import DeploymentResult


def get_default_record_dir() -> Path:
    """
    Get default record directory.

    Returns:
        Path to ./.nftw-deployments
    """
    return Path.cwd() / ".nftw-deployments"


def get_record_path(record_dir: Optional[Union[Path, str]], network: Network) -> Path:
    """
    Get the record file path for a network.

    Args:
        record_dir: Custom record directory (defaults to ./.nftw-deployments)
        network: Target network

    Returns:
        Path to {record_dir}/{network}_deployments.json
    """
    if record_dir is None:
        record_dir = get_default_record_dir()
    else:
        record_dir = Path(record_dir).absolute()

    return record_dir / f"{network.value}_deployments.json"


def check_record_dir(record_dir: Optional[Union[Path, str]]) -> Path:
    """
    Check that records can be written under a directory, creating nothing.

    A missing directory is fine as long as its nearest existing ancestor is
    a writable directory, since saving creates it.

    Args:
        record_dir: Custom record directory (defaults to ./.nftw-deployments)

    Returns:
        Absolute record directory

    Raises:
        ConfigurationError: If the path is not a directory or is not writable
    """
    if record_dir is None:
        record_dir = get_default_record_dir()
    else:
        record_dir = Path(record_dir).absolute()

    existing = record_dir
    while not existing.exists() and existing.parent != existing:
        existing = existing.parent

    if not existing.is_dir():
        raise ConfigurationError(f"Record directory {record_dir}: {existing} is not a directory")
    if not os.access(existing, os.W_OK | os.X_OK):
        raise ConfigurationError(f"Record directory {record_dir}: {existing} is not writable")
    return record_dir


def load_deployment_record(record_path: Path) -> Dict[str, Any]:
    """
    Load an existing record or return empty dict.

    Args:
        record_path: Path to record file

    Returns:
        Record dictionary. Empty dict if file doesn't exist or is corrupted
    """
    try:
        with open(record_path) as f:
            return json.load(f)
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _utc_now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def save_deployment_record(
    record_path: Path,
    network: Network,
    chain_id: int,
    run_id: str,
    results: Iterable[DeploymentResult],
    started_at: Optional[str] = None,
) -> None:
    """
    Write the confirmed contracts of a run into the network's record file.

    Called after every confirmation, so a run that dies after Stage 1
    still leaves the escrow's address behind. Each run is kept as its own
    entry under "runs"; saving again with the same run_id replaces that
    entry, other runs are left untouched. The record is never read back
    to skip a stage.

    Args:
        record_path: Path to record file
        network: Target network
        chain_id: Chain id of the network
        run_id: Identifier of the current run
        results: Confirmed deployments, in deployment order
        started_at: When the run started (defaults to now)

    Creates parent directories if they don't exist.
    """
    record = load_deployment_record(record_path)
    runs = record.get("runs")
    # Corrupted or foreign files start a fresh history
    if not isinstance(runs, list):
        runs = []

    now = _utc_now()
    entry = {
        "run_id": run_id,
        "started_at": started_at or now,
        "updated_at": now,
        "contracts": {
            result.contract_name: {**asdict(result), "url": result.url}
            for result in results
        },
    }

    for i, existing in enumerate(runs):
        if isinstance(existing, dict) and existing.get("run_id") == run_id:
            entry["started_at"] = existing.get("started_at", entry["started_at"])
            runs[i] = entry
            break
    else:
        runs.append(entry)

    record = {"network": network.value, "chain_id": chain_id, "runs": runs}

    record_path.parent.mkdir(parents=True, exist_ok=True)
    with open(record_path, "w") as f:
        json.dump(record, f, indent=2)
