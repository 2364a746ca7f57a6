"""Submit contract creations and wait for them to land.

Creations are submitted once and never retried.
"""

import logging
from typing import Any, Sequence, Union

from web3 import Web3

from .create2 import Salt, build_create2_address, build_init_code, salt_to_bytes
from .types import Deployment

logger = logging.getLogger(__name__)


def deploy_contract(factory, *constructor_args) -> Deployment:
    """
    Deploy a contract with an ordinary creation transaction.

    Args:
        factory: ContractFactory of the contract
        constructor_args: Constructor argument values

    Returns:
        Confirmed deployment
    """
    return factory.deploy(*constructor_args)


def deploy_deterministic(
    factory,
    salt: Salt,
    bytecode: Union[str, bytes],
    constructor_types: Sequence[str] = (),
    constructor_args: Sequence[Any] = (),
) -> Deployment:
    """
    Deploy a contract through a CREATE2 factory.

    The address is computed locally before submission and is the address
    the factory creates the contract at. If that address already holds
    code, the factory reverts and the error propagates to the caller.

    Args:
        factory: Create2Factory, anything with ``address`` and ``submit(init_code, salt)``
        salt: Raw 32-byte salt, or a string/number identifier
        bytecode: Contract creation bytecode
        constructor_types: ABI types of the constructor parameters
        constructor_args: Constructor argument values

    Returns:
        Confirmed deployment at the predicted address
    """
    salt_bytes = salt_to_bytes(salt)
    init_code = build_init_code(bytecode, constructor_types, constructor_args)
    address = build_create2_address(factory.address, salt_bytes, init_code)

    logger.info(
        "Deploying to %s through CREATE2 factory %s, salt %s",
        address,
        factory.address,
        Web3.to_hex(salt_bytes),
    )

    tx_hash, receipt = factory.submit(init_code, salt_bytes)
    logger.info("Deployed %s, tx %s", address, tx_hash)
    return Deployment(address=address, tx_hash=tx_hash, transaction=receipt)
