"""web3.py bindings used to submit deployments.

The rest of the library only relies on the small surface defined here:

- :py:class:`ContractFactory` deploys a contract and attaches to an address
- :py:class:`Create2Factory` submits init code to a CREATE2 deployer contract
- :py:class:`ProxyFactories` bundles the proxy contracts for one signer
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from eth_utils import to_checksum_address
from web3 import Web3
from web3.contract import Contract
from web3.types import TxReceipt

from .artifacts import load_artifact
from .constants import CREATE2_FACTORY_ABI, PROXY_ARTIFACTS
from .create2 import build_create2_address
from .exceptions import ContractDeploymentFailed
from .types import Deployment

logger = logging.getLogger(__name__)

#: Either an unlocked node account or a locally signing account
Deployer = Union[HexAddress, str, LocalAccount]


def send_transaction(web3: Web3, call, deployer: Deployer, gas: Optional[int] = None) -> str:
    """
    Sign and broadcast a constructor or function call.

    Args:
        web3: Web3 instance
        call: Result of ``Contract.constructor(...)`` or ``contract.functions.x(...)``
        deployer: Unlocked node account address or LocalAccount
        gas: Gas limit, estimated by the node if not set

    Returns:
        0x-prefixed transaction hash
    """
    if isinstance(deployer, LocalAccount):
        # Sign locally
        tx_params: Dict[str, Any] = {
            "from": deployer.address,
            "nonce": web3.eth.get_transaction_count(deployer.address),
            "chainId": web3.eth.chain_id,
        }
        if gas:
            tx_params["gas"] = gas
        tx_data = call.build_transaction(tx_params)
        signed_tx = deployer.sign_transaction(tx_data)
        tx_hash = web3.eth.send_raw_transaction(signed_tx.raw_transaction)
    else:
        # Delegate signing to the node
        tx_params = {"from": deployer}
        if gas:
            tx_params["gas"] = gas
        tx_hash = call.transact(tx_params)

    return Web3.to_hex(tx_hash)


def wait_for_confirmation(web3: Web3, tx_hash: str, description: str) -> TxReceipt:
    """
    Wait for a transaction receipt and check it succeeded.

    Timeouts follow the web3 provider defaults.

    Raises:
        ContractDeploymentFailed: If the transaction reverted
    """
    receipt = web3.eth.wait_for_transaction_receipt(tx_hash)
    if receipt["status"] != 1:
        raise ContractDeploymentFailed(
            tx_hash, f"{description} failed, tx hash is {tx_hash}"
        )
    return receipt


class ContractFactory:
    """Deploys one contract type with one signer."""

    def __init__(
        self,
        web3: Web3,
        abi: List[Dict[str, Any]],
        bytecode: str,
        deployer: Deployer,
        name: Optional[str] = None,
        gas: Optional[int] = None,
    ):
        self.web3 = web3
        self.abi = abi
        self.bytecode = bytecode
        self.deployer = deployer
        self.name = name or "Contract"
        self.gas = gas
        self.contract = web3.eth.contract(abi=abi, bytecode=bytecode)

    def __repr__(self) -> str:
        return f"<ContractFactory {self.name}>"

    @classmethod
    def from_artifact(
        cls, web3: Web3, file_path: Union[Path, str], deployer: Deployer, gas: Optional[int] = None
    ) -> "ContractFactory":
        """Create a factory from a Hardhat-style artifact JSON file."""
        artifact = load_artifact(file_path)
        return cls(
            web3,
            artifact["abi"],
            artifact["bytecode"],
            deployer,
            name=artifact["contract_name"],
            gas=gas,
        )

    def deploy(self, *constructor_args) -> Deployment:
        """
        Deploy a new instance and wait for confirmation.

        Raises:
            ContractDeploymentFailed: If the deployment transaction reverted
        """
        call = self.contract.constructor(*constructor_args)
        tx_hash = send_transaction(self.web3, call, self.deployer, gas=self.gas)
        logger.info("Deploying %s, tx %s", self.name, tx_hash)

        receipt = wait_for_confirmation(self.web3, tx_hash, f"{self.name} deployment")
        address = to_checksum_address(receipt["contractAddress"])
        logger.info("Deployed %s at %s", self.name, address)
        return Deployment(address=address, tx_hash=tx_hash, transaction=receipt)

    def attach(self, address: str) -> Contract:
        """Return a contract instance of this type bound to an address."""
        return self.web3.eth.contract(address=to_checksum_address(address), abi=self.abi)


class Create2Factory:
    """A deployed CREATE2 deployer contract exposing ``deploy(bytes,bytes32)``."""

    def __init__(self, web3: Web3, address: str, deployer: Deployer, gas: Optional[int] = None):
        self.web3 = web3
        self.address = to_checksum_address(address)
        self.deployer = deployer
        self.gas = gas
        self.contract = web3.eth.contract(address=self.address, abi=CREATE2_FACTORY_ABI)

    def __repr__(self) -> str:
        return f"<Create2Factory {self.address}>"

    def submit(self, init_code: bytes, salt: bytes) -> Tuple[str, TxReceipt]:
        """
        Submit init code to the factory and wait for confirmation.

        Returns:
            Tuple of (tx_hash, receipt)

        Raises:
            ContractDeploymentFailed: If the transaction reverted, e.g. the
                                      target address already holds code,
                                      or no code landed at the CREATE2 address
        """
        call = self.contract.functions.deploy(init_code, salt)
        tx_hash = send_transaction(self.web3, call, self.deployer, gas=self.gas)
        receipt = wait_for_confirmation(self.web3, tx_hash, f"CREATE2 deployment via {self.address}")

        # Some factories return address zero instead of reverting
        address = build_create2_address(self.address, salt, init_code)
        if not self.web3.eth.get_code(address):
            raise ContractDeploymentFailed(
                tx_hash, f"CREATE2 deployment via {self.address} left no code at {address}"
            )
        return tx_hash, receipt


@dataclass(frozen=True)
class ProxyFactories:
    """Factories for the contracts making up the proxy protocols."""

    admin: ContractFactory
    transparent_proxy: ContractFactory
    uups_proxy: ContractFactory

    @classmethod
    def from_artifacts(
        cls, web3: Web3, deployer: Deployer, artifacts_dir: Union[Path, str]
    ) -> "ProxyFactories":
        """
        Load the proxy contracts from a directory of artifacts.

        Expects ProxyAdmin.json, TransparentUpgradeableProxy.json
        and ERC1967Proxy.json.
        """
        artifacts_dir = Path(artifacts_dir)
        return cls(
            admin=ContractFactory.from_artifact(
                web3, artifacts_dir / PROXY_ARTIFACTS["admin"], deployer
            ),
            transparent_proxy=ContractFactory.from_artifact(
                web3, artifacts_dir / PROXY_ARTIFACTS["transparent"], deployer
            ),
            uups_proxy=ContractFactory.from_artifact(
                web3, artifacts_dir / PROXY_ARTIFACTS["uups"], deployer
            ),
        )
