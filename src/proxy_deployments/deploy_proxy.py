"""Main API for proxy-deployments library."""

import logging
from typing import Any, Callable, Optional, Sequence

from .create2 import get_create2_address
from .dispatch import check_proxy_kind, plan_proxy
from .exceptions import UpgradeSafetyError
from .executor import deploy_contract, deploy_deterministic
from .initializer import get_initializer_data
from .manifest import Manifest
from .options import DeployProxyOptions
from .provisioning import fetch_or_deploy_deterministic_impl, fetch_or_deploy_impl
from .types import Deployment, ProxyDeployment, ProxyKind, UnsafeAllow

logger = logging.getLogger(__name__)

#: Upgrade-safety validator: (impl_factory, kind, unsafe_allow) -> list of violations
Validator = Callable[[Any, ProxyKind, frozenset[UnsafeAllow]], Sequence[str]]


def _deploy_impl(impl_factory, manifest: Manifest, options: DeployProxyOptions) -> Deployment:
    """Resolve the implementation from the manifest or deploy it."""
    if options.is_deterministic:
        address = get_create2_address(
            options.deploy_factory.address,
            options.deploy_factory_salt,
            impl_factory.bytecode,
        )

        def deploy_fn() -> Deployment:
            return deploy_deterministic(
                options.deploy_factory,
                options.deploy_factory_salt,
                impl_factory.bytecode,
            )

        return fetch_or_deploy_deterministic_impl(manifest, impl_factory.bytecode, address, deploy_fn)

    def deploy_fn() -> Deployment:
        return deploy_contract(impl_factory)

    return fetch_or_deploy_impl(manifest, impl_factory.bytecode, deploy_fn)


def deploy_proxy(
    impl_factory,
    args: Optional[Sequence[Any]] = None,
    options: Optional[DeployProxyOptions] = None,
    *,
    manifest: Manifest,
    proxy_factories,
    validator: Optional[Validator] = None,
):
    """
    Deploy an upgradeable proxy in front of an implementation contract.

    Steps, in order:

    1. Reject unsupported proxy kinds before touching the chain
    2. Run the upgrade-safety validator, if given
    3. Reuse the recorded implementation, or deploy it (at the CREATE2
       address when a factory is configured)
    4. Encode the initializer call
    5. Select the proxy contract (deploying the proxy admin for transparent proxies)
    6. Deploy the proxy, through the CREATE2 factory if one is configured
    7. Record the proxy in the manifest

    Example:

    .. code-block:: python

        manifest = Manifest.for_chain_id(web3.eth.chain_id)
        factories = ProxyFactories.from_artifacts(web3, deployer, "artifacts/proxy")
        box = ContractFactory.from_artifact(web3, "artifacts/Box.json", deployer)

        proxied_box = deploy_proxy(
            box,
            [42],
            DeployProxyOptions(kind="uups"),
            manifest=manifest,
            proxy_factories=factories,
        )

    Args:
        impl_factory: ContractFactory of the implementation contract
        args: Initializer arguments
        options: Deployment options (defaults to a transparent proxy)
        manifest: Manifest of the target network
        proxy_factories: ProxyFactories for the deploying account
        validator: Upgrade-safety validator returning a list of violations

    Returns:
        Implementation contract instance bound to the proxy address,
        with the proxy creation receipt as ``deploy_transaction``

    Raises:
        BeaconProxyUnsupportedError: If a beacon proxy was requested
        UpgradeSafetyError: If the validator reported violations
        InitializerError: If the initializer cannot be encoded
        ContractDeploymentFailed: If a deployment transaction reverted
    """
    if options is None:
        options = DeployProxyOptions()
    args = list(args or [])

    kind = options.resolve_kind()
    check_proxy_kind(kind)

    if validator is not None:
        violations = validator(impl_factory, kind, options.unsafe_allow)
        if violations:
            raise UpgradeSafetyError(getattr(impl_factory, "name", "Contract"), violations)

    impl = _deploy_impl(impl_factory, manifest, options)
    init_data = get_initializer_data(impl_factory.abi, args, options.initializer)
    plan = plan_proxy(kind, impl.address, init_data, manifest, proxy_factories)

    if options.is_deterministic:
        deployment = deploy_deterministic(
            options.deploy_factory,
            options.deploy_factory_salt,
            plan.factory.bytecode,
            plan.arg_types,
            plan.args,
        )
    else:
        deployment = deploy_contract(plan.factory, *plan.args)

    proxy = ProxyDeployment(
        address=deployment.address,
        tx_hash=deployment.tx_hash,
        transaction=deployment.transaction,
        kind=kind,
    )
    manifest.add_proxy(proxy)

    logger.info(
        "Deployed %s proxy %s for implementation %s",
        kind.value,
        proxy.address,
        impl.address,
    )

    instance = impl_factory.attach(proxy.address)
    instance.deploy_transaction = proxy.transaction
    return instance
