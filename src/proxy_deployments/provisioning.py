"""Fetch-or-deploy of shared infrastructure recorded in the manifest."""

import logging
from typing import Callable, Union

from eth_utils import encode_hex, keccak
from hexbytes import HexBytes

from .manifest import Manifest
from .types import Deployment

logger = logging.getLogger(__name__)


def bytecode_hash(bytecode: Union[str, bytes]) -> str:
    """Return the 0x-prefixed keccak256 of creation bytecode, the implementation key."""
    return encode_hex(keccak(HexBytes(bytecode)))


def fetch_or_deploy_admin(manifest: Manifest, deploy_fn: Callable[[], Deployment]) -> Deployment:
    """
    Get the network's proxy admin, deploying it on first use.

    The lookup, the deployment and the manifest write run under one
    manifest lock, so concurrent callers never deploy two admins.

    Args:
        manifest: Manifest of the target network
        deploy_fn: Deploys a new admin contract and waits for confirmation

    Returns:
        Stored or newly deployed admin
    """
    with manifest.transaction() as data:
        if data.admin is not None:
            logger.debug("Reusing proxy admin %s", data.admin.address)
            return data.admin

        admin = deploy_fn()
        data.set_admin(admin)

    logger.info("Deployed proxy admin %s on chain %d", admin.address, manifest.chain_id)
    return admin


def fetch_or_deploy_impl(
    manifest: Manifest, bytecode: Union[str, bytes], deploy_fn: Callable[[], Deployment]
) -> Deployment:
    """
    Get the implementation contract for some bytecode, deploying it on first use.

    Args:
        manifest: Manifest of the target network
        bytecode: Creation bytecode of the implementation
        deploy_fn: Deploys the implementation and waits for confirmation

    Returns:
        Stored or newly deployed implementation
    """
    key = bytecode_hash(bytecode)

    with manifest.transaction() as data:
        stored = data.impls.get(key)
        if stored is not None:
            logger.debug("Reusing implementation %s for %s", stored.address, key)
            return stored

        impl = deploy_fn()
        data.add_impl(key, impl)

    logger.info("Deployed implementation %s for %s", impl.address, key)
    return impl


def fetch_or_deploy_deterministic_impl(
    manifest: Manifest,
    bytecode: Union[str, bytes],
    address: str,
    deploy_fn: Callable[[], Deployment],
) -> Deployment:
    """
    Get the implementation at a CREATE2 address, deploying it on first use.

    Only an implementation recorded at exactly ``address`` is reused.
    New deployments are stored under :py:func:`deterministic_impl_key`
    so the plain bytecode hash entry is never touched.

    Args:
        manifest: Manifest of the target network
        bytecode: Creation bytecode of the implementation
        address: Predicted CREATE2 address of the implementation
        deploy_fn: Deploys the implementation through the factory

    Returns:
        Stored or newly deployed implementation
    """
    with manifest.transaction() as data:
        for stored in data.impls.values():
            if stored.address.lower() == address.lower():
                logger.debug("Reusing implementation %s", stored.address)
                return stored

        impl = deploy_fn()
        key = deterministic_impl_key(bytecode, impl.address)
        data.add_impl(key, impl)

    logger.info("Deployed implementation %s for %s", impl.address, key)
    return impl


def deterministic_impl_key(bytecode: Union[str, bytes], address: str) -> str:
    """Manifest key of an implementation created through a CREATE2 factory."""
    return f"{bytecode_hash(bytecode)}@{address}"
