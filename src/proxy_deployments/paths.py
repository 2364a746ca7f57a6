"""Path management utilities for proxy-deployments library."""

import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from .constants import DEFAULT_MANIFEST_DIRNAME, DEV_CHAIN_IDS, MANIFEST_DIR_ENV, NETWORK_NAMES


def network_name(chain_id: int) -> str:
    """
    Get the manifest file stem for a chain.

    Args:
        chain_id: EIP-155 chain id

    Returns:
        Known network name, or "unknown-{chain_id}"
    """
    return NETWORK_NAMES.get(chain_id, f"unknown-{chain_id}")


def get_default_manifest_dir() -> Path:
    """
    Get default manifest directory.

    Returns:
        $PROXY_DEPLOYMENTS_DIR if set, otherwise ./.openzeppelin
    """
    env_dir = os.environ.get(MANIFEST_DIR_ENV)
    if env_dir:
        return Path(env_dir).absolute()
    return Path.cwd() / DEFAULT_MANIFEST_DIRNAME


def get_manifest_path(
    chain_id: int,
    manifest_dir: Optional[Union[Path, str]] = None,
    instance_id: Optional[str] = None,
) -> Path:
    """
    Get manifest file path for a chain.

    Development chains identified by an instance id are kept in the
    system temp directory, one file per node instance.

    Args:
        chain_id: EIP-155 chain id
        manifest_dir: Custom manifest directory (defaults to get_default_manifest_dir())
        instance_id: Dev node instance id, see network.get_dev_instance_id()

    Returns:
        Absolute path to the manifest JSON file
    """
    if chain_id in DEV_CHAIN_IDS and instance_id is not None:
        return (
            Path(tempfile.gettempdir())
            / "openzeppelin-upgrades"
            / f"hardhat-{chain_id}-{instance_id}.json"
        )

    if manifest_dir is None:
        manifest_dir = get_default_manifest_dir()
    else:
        manifest_dir = Path(manifest_dir).absolute()

    return manifest_dir / f"{network_name(chain_id)}.json"


def get_lock_path(manifest_path: Path) -> Path:
    """Return the lock file guarding a manifest file."""
    return manifest_path.with_name(manifest_path.name + ".lock")
