"""Build artifact parsers for proxy-deployments library."""

import json
from pathlib import Path
from typing import Any, Dict, Union

from .exceptions import DefectiveArtifactError

# Solidity placeholder for an unlinked library address: __$<34 hex chars>$__
_LINK_PLACEHOLDER = "__$"


def load_artifact(file_path: Union[Path, str]) -> Dict[str, Any]:
    """
    Parse a Hardhat-style contract artifact JSON file.

    Args:
        file_path: Path to the artifact, e.g. artifacts/ERC1967Proxy.json

    Returns:
        Dictionary with:
        - contract_name: from "contractName", or the file stem
        - abi: contract ABI
        - bytecode: 0x-prefixed creation bytecode

    Raises:
        DefectiveArtifactError: If the artifact has no deployable bytecode
    """
    file_path = Path(file_path)
    with open(file_path) as f:
        data = json.load(f)

    if "abi" not in data:
        raise DefectiveArtifactError(f"Missing ABI in artifact: {file_path}")

    bytecode = data.get("bytecode")
    # Foundry nests bytecode under an object
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object")

    # Interfaces and abstract contracts compile to empty bytecode
    if not bytecode or bytecode in ("0x", "0x0"):
        raise DefectiveArtifactError(f"Missing bytecode in artifact: {file_path}")

    if _LINK_PLACEHOLDER in bytecode:
        raise DefectiveArtifactError(
            f"Artifact {file_path} needs external libraries linked before deployment"
        )

    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    return {
        "contract_name": data.get("contractName", file_path.stem),
        "abi": data["abi"],
        "bytecode": bytecode,
    }
