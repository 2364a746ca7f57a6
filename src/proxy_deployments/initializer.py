"""Initializer call data for proxy constructors."""

from typing import Any, Dict, List, Literal, Optional, Sequence, Union

import eth_abi
from eth_utils import function_signature_to_4byte_selector
from eth_utils.abi import collapse_if_tuple

from .exceptions import InitializerError

DEFAULT_INITIALIZER = "initialize"


def _signature(fragment: Dict[str, Any]) -> str:
    types = ",".join(collapse_if_tuple(arg) for arg in fragment.get("inputs", []))
    return f"{fragment['name']}({types})"


def _find_initializer(
    abi: List[Dict[str, Any]], initializer: str, arg_count: int
) -> Optional[Dict[str, Any]]:
    """
    Find the initializer function in an ABI.

    Returns:
        Matching function fragment, or None if no function has that name

    Raises:
        InitializerError: If the function exists but no overload fits,
                          or several overloads fit
    """
    functions = [item for item in abi if item.get("type") == "function"]

    if "(" in initializer:
        # Full signature, e.g. "initialize(uint256,address)"
        wanted = initializer.replace(" ", "")
        for fragment in functions:
            if _signature(fragment) == wanted:
                return fragment
        return None

    candidates = [fragment for fragment in functions if fragment.get("name") == initializer]
    if not candidates:
        return None

    matching = [fragment for fragment in candidates if len(fragment.get("inputs", [])) == arg_count]
    if not matching:
        raise InitializerError(
            f"No overload of '{initializer}' takes {arg_count} arguments, "
            f"found: {', '.join(_signature(fragment) for fragment in candidates)}"
        )
    if len(matching) > 1:
        raise InitializerError(
            f"Ambiguous initializer '{initializer}', use one of: "
            f"{', '.join(_signature(fragment) for fragment in matching)}"
        )
    return matching[0]


def get_initializer_data(
    abi: List[Dict[str, Any]],
    args: Sequence[Any] = (),
    initializer: Union[str, Literal[False], None] = None,
) -> bytes:
    """
    Encode the call to the implementation's initializer.

    Args:
        abi: Implementation contract ABI
        args: Initializer arguments
        initializer: Function name or signature, None for "initialize",
                     False to skip initialization

    Returns:
        Call data (selector plus encoded arguments), empty if no initializer runs

    Raises:
        InitializerError: If the initializer cannot be found or is ambiguous
    """
    if initializer is False:
        return b""

    # Contracts without an initialize() function may be deployed without
    # arguments when no initializer was asked for
    allow_no_initialization = initializer is None and len(args) == 0
    name = initializer or DEFAULT_INITIALIZER

    fragment = _find_initializer(abi, name, len(args))
    if fragment is None:
        if allow_no_initialization:
            return b""
        raise InitializerError(f"Initializer function '{name}' not found in contract ABI")

    inputs = fragment.get("inputs", [])
    if len(inputs) != len(args):
        raise InitializerError(
            f"{_signature(fragment)} takes {len(inputs)} arguments, got {len(args)}"
        )

    selector = function_signature_to_4byte_selector(_signature(fragment))
    types = [collapse_if_tuple(arg) for arg in inputs]
    return selector + eth_abi.encode(types, list(args))
