"""Custom exception classes for nftw-deployments library."""

from typing import Any, Optional


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ConfigurationError(DeploymentError, ValueError):
    """Raised when a required environment value is absent or malformed."""

    pass


class ArtifactNotFoundError(ConfigurationError, FileNotFoundError):
    """Raised when a compiled contract artifact cannot be found."""

    pass


class ConnectivityError(DeploymentError, ConnectionError):
    """Raised when the provider cannot reach the configured endpoint."""

    pass


class RpcError(DeploymentError):
    """Raised when the node answers a JSON-RPC call with an error object."""

    def __init__(self, message: str, code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.code = code
        self.data = data


class SubmissionError(DeploymentError, RuntimeError):
    """Raised when a deployment transaction is rejected at submission time."""

    pass


class ConfirmationError(DeploymentError, RuntimeError):
    """Raised when a submitted deployment transaction fails to mine successfully."""

    pass


class ConfirmationTimeoutError(ConfirmationError, TimeoutError):
    """Raised when a deployment is not confirmed within the allowed wait."""

    pass
