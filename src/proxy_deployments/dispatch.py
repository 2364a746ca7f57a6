"""Proxy protocol selection.

Each proxy kind has its own ownership model:

- transparent: upgrades go through the network's shared ProxyAdmin contract
- uups: upgrades go through the implementation itself (``upgradeTo``)
- beacon: the implementation is looked up from a beacon contract, not supported
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple, assert_never

from .exceptions import BeaconProxyUnsupportedError
from .manifest import Manifest
from .provisioning import fetch_or_deploy_admin
from .types import Deployment, ProxyKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProxyPlan:
    """Everything needed to create one proxy."""

    kind: ProxyKind
    factory: Any  # ContractFactory of the proxy contract
    args: Tuple[Any, ...]
    arg_types: Tuple[str, ...]

    # Proxy admin, transparent proxies only
    admin: Optional[Deployment] = None


def check_proxy_kind(kind: ProxyKind) -> None:
    """
    Reject proxy kinds that cannot be deployed. Performs no I/O.

    Raises:
        BeaconProxyUnsupportedError: For beacon proxies
    """
    if kind is ProxyKind.BEACON:
        raise BeaconProxyUnsupportedError()


def plan_proxy(
    kind: ProxyKind,
    impl_address: str,
    init_data: bytes,
    manifest: Manifest,
    factories,
) -> ProxyPlan:
    """
    Select the proxy contract and constructor arguments for a proxy kind.

    For transparent proxies this deploys the network's proxy admin if
    the manifest does not have one yet.

    Args:
        kind: Proxy kind to deploy
        impl_address: Implementation contract address
        init_data: Initializer call data
        manifest: Manifest of the target network
        factories: ProxyFactories for the deploying account

    Returns:
        ProxyPlan for the executor

    Raises:
        BeaconProxyUnsupportedError: For beacon proxies
    """
    match kind:
        case ProxyKind.BEACON:
            raise BeaconProxyUnsupportedError()

        case ProxyKind.UUPS:
            existing_admin = manifest.get_admin()
            if existing_admin is not None:
                logger.warning(
                    "A proxy admin was previously deployed on this network at %s. "
                    "It is not used by the current kind of proxy ('uups'); "
                    "changes to the admin will have no effect on this new proxy.",
                    existing_admin.address,
                )
            return ProxyPlan(
                kind=kind,
                factory=factories.uups_proxy,
                args=(impl_address, init_data),
                arg_types=("address", "bytes"),
            )

        case ProxyKind.TRANSPARENT:
            admin = fetch_or_deploy_admin(manifest, factories.admin.deploy)
            return ProxyPlan(
                kind=kind,
                factory=factories.transparent_proxy,
                args=(impl_address, admin.address, init_data),
                arg_types=("address", "address", "bytes"),
                admin=admin,
            )

        case _:
            assert_never(kind)
