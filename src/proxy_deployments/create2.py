"""Deterministic CREATE2 address computation for proxy-deployments library.

The address of a contract created through a CREATE2 factory is

    keccak256(0xff ++ factory_address ++ salt ++ keccak256(init_code))[12:]

See https://eips.ethereum.org/EIPS/eip-1014
"""

from typing import Any, Sequence, Union

import eth_abi
from eth_typing import ChecksumAddress
from eth_utils import keccak, to_canonical_address, to_checksum_address
from hexbytes import HexBytes

from .constants import CREATE2_PREFIX

Salt = Union[str, int, bytes]


def salt_to_bytes(salt: Salt) -> bytes:
    """
    Normalize a salt into the 32-byte value passed to CREATE2.

    Args:
        salt: Raw 32-byte salt, or a string/number identifier

    Returns:
        32-byte salt. Identifiers are hashed as keccak256 of their decimal
        or text form, so ``"7"`` and ``7`` give the same salt.

    Raises:
        ValueError: If a raw salt is not exactly 32 bytes
        TypeError: If salt has an unsupported type
    """
    if isinstance(salt, (bytes, bytearray)):
        if len(salt) != 32:
            raise ValueError(f"Raw salt must be 32 bytes, got {len(salt)}")
        return bytes(salt)

    # bool is an int subclass, but True/False is never a meaningful salt
    if isinstance(salt, bool) or not isinstance(salt, (str, int)):
        raise TypeError(f"Unsupported salt type: {type(salt).__name__}")

    return keccak(text=str(salt))


def build_init_code(
    bytecode: Union[str, bytes],
    constructor_types: Sequence[str] = (),
    constructor_args: Sequence[Any] = (),
) -> bytes:
    """
    Concatenate creation bytecode with ABI-encoded constructor arguments.

    Args:
        bytecode: Contract creation bytecode (hex string or bytes)
        constructor_types: ABI types of the constructor parameters
        constructor_args: Constructor argument values

    Returns:
        Init code as submitted to the factory
    """
    if len(constructor_types) != len(constructor_args):
        raise ValueError(
            f"Got {len(constructor_args)} constructor arguments "
            f"for {len(constructor_types)} types"
        )

    encoded_args = eth_abi.encode(list(constructor_types), list(constructor_args))
    return bytes(HexBytes(bytecode)) + encoded_args


def build_create2_address(factory_address: str, salt: bytes, init_code: bytes) -> ChecksumAddress:
    """
    Compute a CREATE2 address from already normalized inputs.

    Args:
        factory_address: Address of the deploying factory contract
        salt: 32-byte salt
        init_code: Full init code (bytecode plus encoded constructor args)

    Returns:
        Checksummed contract address
    """
    if len(salt) != 32:
        raise ValueError(f"Salt must be 32 bytes, got {len(salt)}")

    preimage = CREATE2_PREFIX + to_canonical_address(factory_address) + salt + keccak(init_code)
    return to_checksum_address(keccak(preimage)[12:])


def get_create2_address(
    factory_address: str,
    salt: Salt,
    bytecode: Union[str, bytes],
    constructor_types: Sequence[str] = (),
    constructor_args: Sequence[Any] = (),
) -> ChecksumAddress:
    """
    Predict the address a CREATE2 factory will deploy a contract to.

    Pure function: no network access, usable for pre-flight checks.

    Example:

        >>> get_create2_address(
        ...     "0x0000000000000000000000000000000000000000",
        ...     bytes(32),
        ...     "0x00",
        ... )
        '0x4D1A2e2bB4F88F0250f26Ffff098B0b30B26BF38'

    Args:
        factory_address: Address of the deploying factory contract
        salt: Raw 32-byte salt, or a string/number identifier
        bytecode: Contract creation bytecode
        constructor_types: ABI types of the constructor parameters
        constructor_args: Constructor argument values

    Returns:
        Checksummed contract address
    """
    init_code = build_init_code(bytecode, constructor_types, constructor_args)
    return build_create2_address(factory_address, salt_to_bytes(salt), init_code)
