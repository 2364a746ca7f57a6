"""Data types and dataclasses for proxy-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import MANIFEST_VERSION
from .exceptions import ManifestConflictError, ManifestFormatError


class ProxyKind(Enum):
    """
    Proxy deployment protocols.

    Values are the strings stored in the manifest.
    """

    TRANSPARENT = "transparent"
    UUPS = "uups"
    BEACON = "beacon"


class UnsafeAllow(Enum):
    """Upgrade-safety checks that a caller may suppress in the external validator."""

    STATE_VARIABLE_ASSIGNMENT = "state-variable-assignment"
    STATE_VARIABLE_IMMUTABLE = "state-variable-immutable"
    EXTERNAL_LIBRARY_LINKING = "external-library-linking"
    STRUCT_DEFINITION = "struct-definition"
    ENUM_DEFINITION = "enum-definition"
    CONSTRUCTOR = "constructor"
    DELEGATECALL = "delegatecall"
    SELFDESTRUCT = "selfdestruct"
    MISSING_PUBLIC_UPGRADETO = "missing-public-upgradeto"


@dataclass(frozen=True)
class Deployment:
    """A single on-chain contract creation."""

    address: str  # Checksummed address
    tx_hash: str  # 0x-prefixed transaction hash

    # Confirmation handle (tx receipt), only available in the deploying process
    transaction: Any = field(default=None, compare=False, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "txHash": self.tx_hash}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Deployment":
        return cls(address=data["address"], tx_hash=data["txHash"])


@dataclass(frozen=True, kw_only=True)
class ProxyDeployment(Deployment):
    """A proxy contract creation, tagged with its protocol."""

    kind: ProxyKind

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "txHash": self.tx_hash, "kind": self.kind.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProxyDeployment":
        return cls(
            address=data["address"],
            tx_hash=data["txHash"],
            kind=ProxyKind(data["kind"]),
        )


@dataclass
class ManifestData:
    """
    Working copy of a network manifest.

    Entries are append-only: the mutators below refuse to overwrite
    an admin or implementation, and refuse any address that is
    already recorded elsewhere in the manifest.
    """

    chain_id: int
    admin: Optional[Deployment] = None
    impls: Dict[str, Deployment] = field(default_factory=dict)
    proxies: List[ProxyDeployment] = field(default_factory=list)
    manifest_version: str = MANIFEST_VERSION

    def addresses(self) -> set[str]:
        """Return every address recorded in the manifest, lower-cased."""
        recorded = {proxy.address.lower() for proxy in self.proxies}
        recorded.update(impl.address.lower() for impl in self.impls.values())
        if self.admin is not None:
            recorded.add(self.admin.address.lower())
        return recorded

    def _check_address_clash(self, deployment: Deployment) -> None:
        if deployment.address.lower() in self.addresses():
            raise ManifestConflictError(
                f"Address {deployment.address} is already recorded in the manifest "
                f"for chain {self.chain_id}"
            )

    def set_admin(self, deployment: Deployment) -> None:
        if self.admin is not None:
            raise ManifestConflictError(
                f"Admin already deployed at {self.admin.address} on chain {self.chain_id}"
            )
        self._check_address_clash(deployment)
        self.admin = deployment

    def add_impl(self, bytecode_hash: str, deployment: Deployment) -> None:
        if bytecode_hash in self.impls:
            raise ManifestConflictError(
                f"Implementation {bytecode_hash} already deployed at "
                f"{self.impls[bytecode_hash].address}"
            )
        self._check_address_clash(deployment)
        self.impls[bytecode_hash] = deployment

    def add_proxy(self, deployment: ProxyDeployment) -> None:
        self._check_address_clash(deployment)
        self.proxies.append(deployment)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted JSON layout."""
        data: Dict[str, Any] = {
            "manifestVersion": self.manifest_version,
            "chainId": self.chain_id,
        }
        if self.admin is not None:
            data["admin"] = self.admin.to_dict()
        data["impls"] = {key: impl.to_dict() for key, impl in self.impls.items()}
        data["proxies"] = [proxy.to_dict() for proxy in self.proxies]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], chain_id: int) -> "ManifestData":
        """
        Parse the persisted JSON layout.

        Args:
            data: Decoded manifest file contents
            chain_id: Chain the manifest is opened for

        Returns:
            ManifestData instance

        Raises:
            ManifestFormatError: If required fields are missing or malformed,
                                 or the file belongs to another chain
            ManifestConflictError: If an address is recorded more than once
        """
        stored_chain_id = data.get("chainId", chain_id)
        if stored_chain_id != chain_id:
            raise ManifestFormatError(
                f"Manifest belongs to chain {stored_chain_id}, expected {chain_id}"
            )

        try:
            admin_data = data.get("admin")
            manifest = cls(
                chain_id=chain_id,
                admin=Deployment.from_dict(admin_data) if admin_data else None,
                impls={
                    key: Deployment.from_dict(impl)
                    for key, impl in data.get("impls", {}).items()
                },
                proxies=[ProxyDeployment.from_dict(proxy) for proxy in data.get("proxies", [])],
                manifest_version=data.get("manifestVersion", MANIFEST_VERSION),
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise ManifestFormatError(f"Malformed manifest entry: {e}") from e

        recorded = [proxy.address.lower() for proxy in manifest.proxies]
        recorded.extend(impl.address.lower() for impl in manifest.impls.values())
        if manifest.admin is not None:
            recorded.append(manifest.admin.address.lower())
        duplicates = sorted({address for address in recorded if recorded.count(address) > 1})
        if duplicates:
            raise ManifestConflictError(
                f"Manifest for chain {chain_id} records these addresses more than once: "
                f"{', '.join(duplicates)}"
            )

        return manifest
