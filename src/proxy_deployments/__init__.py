"""
proxy-deployments: deploy upgradeable proxies with a per-network deployment manifest
"""

from importlib.metadata import PackageNotFoundError, version

from .contracts import ContractFactory, Create2Factory, ProxyFactories
from .create2 import get_create2_address
from .deploy_proxy import deploy_proxy
from .exceptions import (
    BeaconProxyUnsupportedError,
    ContractDeploymentFailed,
    DefectiveArtifactError,
    DeploymentError,
    InitializerError,
    ManifestConflictError,
    ManifestFormatError,
    ManifestLockError,
    ProxyKindUnsupportedError,
    UnknownUnsafeAllowError,
    UpgradeSafetyError,
)
from .manifest import FileManifestStore, InMemoryManifestStore, Manifest
from .options import DeployProxyOptions
from .provisioning import (
    fetch_or_deploy_admin,
    fetch_or_deploy_deterministic_impl,
    fetch_or_deploy_impl,
)
from .types import Deployment, ProxyDeployment, ProxyKind, UnsafeAllow

try:
    __version__ = version("proxy-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "deploy_proxy",
    "get_create2_address",
    "fetch_or_deploy_admin",
    "fetch_or_deploy_impl",
    "fetch_or_deploy_deterministic_impl",
    "Manifest",
    "FileManifestStore",
    "InMemoryManifestStore",
    "ContractFactory",
    "Create2Factory",
    "ProxyFactories",
    "DeployProxyOptions",
    "Deployment",
    "ProxyDeployment",
    "ProxyKind",
    "UnsafeAllow",
    "DeploymentError",
    "ProxyKindUnsupportedError",
    "BeaconProxyUnsupportedError",
    "UnknownUnsafeAllowError",
    "InitializerError",
    "UpgradeSafetyError",
    "ManifestFormatError",
    "ManifestConflictError",
    "ManifestLockError",
    "DefectiveArtifactError",
    "ContractDeploymentFailed",
]
