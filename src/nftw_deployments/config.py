"""Environment configuration loading and validation for nftw-deployments library."""

import logging
import os
import re
from pathlib import Path
from typing import Mapping, Optional, Union
from urllib.parse import urlparse

from dotenv import dotenv_values, find_dotenv

from .constants import (
    ARTIFACTS_DIR_ENV,
    CONFIRMATION_TIMEOUT_ENV,
    DEFAULT_ARTIFACTS_DIR,
    DEFAULT_NETWORK,
    DEFAULT_POLL_INTERVAL,
    NETWORK_ALIASES,
    NETWORK_CONFIG,
    NETWORK_ENV,
    POLL_INTERVAL_ENV,
    RECORD_DIR_ENV,
    SUPPORTED_RPC_SCHEMES,
    Network,
)
from .exceptions import ConfigurationError
from .records import check_record_dir
from .types import DeploymentConfig, NetworkProfile

logger = logging.getLogger(__name__)

_PRIVATE_KEY_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")


def parse_network(value: Union[str, Network, None]) -> Network:
    """
    Resolve a network selector to a Network.

    Args:
        value: Network, name or alias ("production", "mainnet", "test", ...).
               None selects the default (production).

    Returns:
        Network

    Raises:
        ConfigurationError: If the value names no known network
    """
    if value is None:
        return DEFAULT_NETWORK
    if isinstance(value, Network):
        return value

    key = value.strip().lower()
    if key not in NETWORK_ALIASES:
        raise ConfigurationError(
            f"Unknown network '{value}'. Expected one of: "
            f"{', '.join(sorted(NETWORK_ALIASES))}"
        )
    return NETWORK_ALIASES[key]


def validate_rpc_url(url: Optional[str], env_name: str) -> str:
    """
    Check that an endpoint URL is present, has a host and uses HTTP(S).

    Raises:
        ConfigurationError: If the URL is missing or malformed
    """
    if url is None or not url.strip():
        raise ConfigurationError(f"Missing RPC endpoint: set ${env_name}")

    url = url.strip()
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ConfigurationError(f"Malformed RPC endpoint in ${env_name}: {url!r}")
    if parsed.scheme not in SUPPORTED_RPC_SCHEMES:
        raise ConfigurationError(
            f"Unsupported RPC endpoint scheme '{parsed.scheme}' in ${env_name}: "
            "use an http(s) URL"
        )
    return url


def normalize_private_key(secret: Optional[str], env_name: str) -> str:
    """
    Convert a signer secret into 0x-prefixed private key form.

    The secret may be given with or without the 0x prefix.

    Raises:
        ConfigurationError: If the secret is missing or is not 32 bytes of hex
    """
    if secret is None or not secret.strip():
        raise ConfigurationError(f"Missing signer secret: set ${env_name}")

    secret = secret.strip()
    if not _PRIVATE_KEY_RE.match(secret):
        # Never echo the secret itself
        raise ConfigurationError(
            f"Malformed signer secret in ${env_name}: expected 64 hex characters"
        )
    if not secret.startswith("0x"):
        secret = "0x" + secret
    return secret.lower()


def _positive_float(environ: Mapping[str, str], env_name: str, default: float) -> float:
    raw = environ.get(env_name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"${env_name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"${env_name} must be positive, got {raw!r}")
    return value


def select_profile(network: Network, environ: Mapping[str, str]) -> NetworkProfile:
    """
    Build the profile for exactly one network.

    Only the selected network's environment variables are read; there is no
    fallback to the other network's values.

    Args:
        network: Network to target
        environ: Environment mapping to read secrets and URLs from

    Returns:
        NetworkProfile

    Raises:
        ConfigurationError: If a required value is missing or malformed
    """
    network_config = NETWORK_CONFIG[network]

    rpc_url = validate_rpc_url(
        environ.get(network_config["rpc_url_env"]), network_config["rpc_url_env"]
    )
    signer_secret = normalize_private_key(
        environ.get(network_config["signer_secret_env"]),
        network_config["signer_secret_env"],
    )
    confirmation_timeout = _positive_float(
        environ, CONFIRMATION_TIMEOUT_ENV, network_config["confirmation_timeout"]
    )

    return NetworkProfile(
        label=network,
        chain_id=network_config["chain_id"],
        chain_name=network_config["chain_name"],
        block_explorer_url=network_config["block_explorer_url"],
        rpc_url=rpc_url,
        signer_secret=signer_secret,
        token_address=network_config["token_address"],
        nft_address=network_config["nft_address"],
        confirmation_timeout=confirmation_timeout,
    )


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    network: Union[str, Network, None] = None,
    dotenv_path: Optional[Union[Path, str]] = None,
) -> DeploymentConfig:
    """
    Read and validate the whole run configuration.

    When environ is None, values come from a .env file (if any) overlaid by
    the process environment. Everything is validated here, before any
    network call is attempted.

    Args:
        environ: Explicit environment mapping (skips .env loading)
        network: Network override (defaults to $DEPLOY_NETWORK, then production)
        dotenv_path: .env file to load (defaults to searching from the cwd)

    Returns:
        DeploymentConfig

    Raises:
        ConfigurationError: If any value is missing or malformed, or the
            record directory cannot be written
    """
    if environ is None:
        dotenv_file = dotenv_path or find_dotenv(usecwd=True)
        environ = {
            **{k: v for k, v in dotenv_values(dotenv_file).items() if v is not None},
            **os.environ,
        }

    if network is None:
        network = environ.get(NETWORK_ENV)
    selected = parse_network(network)
    logger.debug("Selected network profile: %s", selected.value)

    profile = select_profile(selected, environ)

    record_dir = environ.get(RECORD_DIR_ENV) or None
    # Must be writable before anything is deployed
    check_record_dir(record_dir)

    return DeploymentConfig(
        profile=profile,
        artifacts_dir=Path(environ.get(ARTIFACTS_DIR_ENV) or DEFAULT_ARTIFACTS_DIR),
        poll_interval=_positive_float(environ, POLL_INTERVAL_ENV, DEFAULT_POLL_INTERVAL),
        record_dir=Path(record_dir) if record_dir else None,
    )
