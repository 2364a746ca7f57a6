"""Custom exception classes for proxy-deployments library."""


class DeploymentError(Exception):
    """Base exception for deployment-related errors."""

    pass


class ProxyKindUnsupportedError(DeploymentError, ValueError):
    """Raised when the requested proxy kind cannot be deployed."""

    pass


class BeaconProxyUnsupportedError(ProxyKindUnsupportedError):
    """Raised when a beacon proxy is requested.

    Beacon proxies need a separate beacon contract which this library
    does not provision.
    """

    def __init__(self, message: str = "Beacon proxy is not currently supported"):
        super().__init__(message)


class UnknownUnsafeAllowError(DeploymentError, ValueError):
    """Raised when an unsafe-allow identifier is not a known validation check."""

    pass


class InitializerError(DeploymentError, ValueError):
    """Raised when the initializer function is missing or ambiguous."""

    pass


class UpgradeSafetyError(DeploymentError, ValueError):
    """Raised when the implementation contract fails upgrade-safety validation."""

    def __init__(self, contract_name: str, violations: list[str]):
        self.contract_name = contract_name
        self.violations = list(violations)
        details = "\n".join(f"  - {violation}" for violation in self.violations)
        super().__init__(f"Contract '{contract_name}' is not upgrade safe\n{details}")


class ManifestFormatError(DeploymentError, ValueError):
    """Raised when a manifest file cannot be parsed."""

    pass


class ManifestConflictError(DeploymentError, ValueError):
    """Raised when a write would overwrite or duplicate a manifest entry."""

    pass


class ManifestLockError(DeploymentError, TimeoutError):
    """Raised when the manifest lock cannot be acquired."""

    pass


class DefectiveArtifactError(DeploymentError, ValueError):
    """Raised when a build artifact has no deployable bytecode."""

    pass


class ContractDeploymentFailed(DeploymentError):
    """Raised when a deployment transaction did not succeed."""

    def __init__(self, tx_hash: str, message: str):
        super().__init__(message)
        self.tx_hash = tx_hash
