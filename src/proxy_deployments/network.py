"""JSON-RPC network identification for proxy-deployments library."""

import logging
from typing import Any, List, Optional

import requests

logger = logging.getLogger(__name__)


def _rpc_call(rpc_url: str, method: str, params: Optional[List[Any]] = None) -> Any:
    """
    Make a single JSON-RPC call.

    Args:
        rpc_url: RPC endpoint URL
        method: JSON-RPC method name
        params: Method parameters

    Returns:
        The "result" member of the response

    Raises:
        KeyError: If RPC response is missing the result
        ValueError: If RPC returns an error
        RuntimeError: If network error occurs
    """
    try:
        response = requests.post(
            rpc_url,
            json={
                "jsonrpc": "2.0",
                "method": method,
                "params": params or [],
                "id": 1,
            },
            timeout=30,
        )

        # Check for HTTP errors
        if response.status_code != 200:
            raise RuntimeError(f"RPC request failed with status {response.status_code}")

        result = response.json()

        # Check for RPC errors
        if "error" in result:
            raise ValueError(f"RPC error: {result['error']}")

        return result["result"]

    except requests.RequestException as e:
        raise RuntimeError(f"Network error during RPC call: {e}") from e


def get_chain_id(rpc_url: str) -> int:
    """
    Get the chain id of the node behind an RPC endpoint.

    Args:
        rpc_url: RPC endpoint URL

    Returns:
        EIP-155 chain id
    """
    chain_id = int(_rpc_call(rpc_url, "eth_chainId"), 16)
    logger.debug("RPC %s reports chain id %d", rpc_url, chain_id)
    return chain_id


def get_dev_instance_id(rpc_url: str) -> Optional[str]:
    """
    Get the instance id of a local development node.

    Hardhat and Anvil generate a new instance id on every start, which
    lets us tell a restarted node from one that still holds our contracts.

    Args:
        rpc_url: RPC endpoint URL

    Returns:
        Instance id, or None if the node does not implement hardhat_metadata
    """
    try:
        metadata = _rpc_call(rpc_url, "hardhat_metadata")
    except ValueError:
        # Method not supported by this node
        return None

    instance_id = metadata.get("instanceId") if isinstance(metadata, dict) else None
    logger.debug("Dev node at %s has instance id %s", rpc_url, instance_id)
    return instance_id
