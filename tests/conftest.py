"""Shared pytest fixtures for proxy-deployments tests.

The chain is replaced by in-process fakes that hand out addresses and
transaction hashes and record every submitted transaction.
"""

import itertools
import json
import threading
import time
from pathlib import Path
from typing import Any, Dict, List

import pytest
from eth_utils import keccak, to_canonical_address, to_checksum_address

from proxy_deployments import Deployment, InMemoryManifestStore, Manifest, ProxyFactories

CHAIN_ID = 31337


class FakeRevert(Exception):
    """Raised by the fake chain where a real node would revert."""

    pass


class FakeChain:
    """Hands out addresses and transaction hashes, records transactions."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counter = itertools.count(1)
        self.transactions: List[tuple] = []
        self.code: Dict[str, bytes] = {}

    def submit(self, description: tuple) -> int:
        with self._lock:
            number = next(self._counter)
            self.transactions.append(description)
            return number


class FakeContract:
    """Stand-in for a web3 contract instance."""

    def __init__(self, factory: "FakeContractFactory", address: str):
        self.factory = factory
        self.address = address
        self.abi = factory.abi


class FakeContractFactory:
    """Stand-in for ContractFactory deploying to the fake chain."""

    def __init__(self, chain: FakeChain, name: str, bytecode: str, abi=None, delay: float = 0):
        self.chain = chain
        self.name = name
        self.bytecode = bytecode
        self.abi = abi or []
        self.delay = delay
        self.deployed_args: List[tuple] = []

    def deploy(self, *constructor_args) -> Deployment:
        number = self.chain.submit(("create", self.name, constructor_args))
        # Widen race windows in concurrency tests
        if self.delay:
            time.sleep(self.delay)
        self.deployed_args.append(constructor_args)
        tx_hash = f"0x{number:064x}"
        return Deployment(
            address=to_checksum_address(f"0x{number:040x}"),
            tx_hash=tx_hash,
            transaction={"status": 1, "transactionHash": tx_hash},
        )

    def attach(self, address: str) -> FakeContract:
        return FakeContract(self, address)


class FailingContractFactory(FakeContractFactory):
    """Factory whose deployment transaction reverts."""

    def deploy(self, *constructor_args) -> Deployment:
        self.chain.submit(("create", self.name, constructor_args))
        raise FakeRevert(f"{self.name} constructor reverted")


class FakeCreate2Factory:
    """Stand-in for Create2Factory with EIP-1014 address semantics."""

    def __init__(self, chain: FakeChain, address: str):
        self.chain = chain
        self.address = to_checksum_address(address)
        self.created: List[str] = []

    def submit(self, init_code: bytes, salt: bytes):
        # What the CREATE2 opcode does on-chain
        address = to_checksum_address(
            keccak(b"\xff" + to_canonical_address(self.address) + salt + keccak(init_code))[12:]
        )
        if address in self.chain.code:
            self.chain.submit(("create2-reverted", address))
            raise FakeRevert(f"Contract already deployed at {address}")

        number = self.chain.submit(("create2", address))
        self.chain.code[address] = init_code
        self.created.append(address)
        tx_hash = f"0x{number:064x}"
        return tx_hash, {"status": 1, "transactionHash": tx_hash}


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def artifacts_dir(fixtures_dir: Path) -> Path:
    """Return the path to the artifact fixtures."""
    return fixtures_dir / "artifacts"


@pytest.fixture
def sample_manifest_json(fixtures_dir: Path) -> Dict[str, Any]:
    """Load and return the sample manifest fixture."""
    with open(fixtures_dir / "sample_manifest.json") as f:
        return json.load(f)


@pytest.fixture
def box_abi(artifacts_dir: Path) -> List[Dict[str, Any]]:
    """ABI of an implementation with initialize(uint256)."""
    with open(artifacts_dir / "Box.json") as f:
        return json.load(f)["abi"]


@pytest.fixture
def fake_chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def box_factory(fake_chain: FakeChain, box_abi) -> FakeContractFactory:
    """Implementation contract factory."""
    return FakeContractFactory(fake_chain, "Box", "0x6080604052600a", box_abi)


@pytest.fixture
def proxy_factories(fake_chain: FakeChain) -> ProxyFactories:
    """Proxy contracts deploying to the fake chain."""
    return ProxyFactories(
        admin=FakeContractFactory(fake_chain, "ProxyAdmin", "0x6080604052600b"),
        transparent_proxy=FakeContractFactory(
            fake_chain, "TransparentUpgradeableProxy", "0x6080604052600c"
        ),
        uups_proxy=FakeContractFactory(fake_chain, "ERC1967Proxy", "0x6080604052600d"),
    )


@pytest.fixture
def create2_factory(fake_chain: FakeChain) -> FakeCreate2Factory:
    return FakeCreate2Factory(fake_chain, "0x4e59b44847b379578588920ca78fbf26c0b4956c")


@pytest.fixture
def temp_manifest_dir(tmp_path: Path) -> Path:
    """Create a temporary manifest directory for tests."""
    manifest_dir = tmp_path / ".openzeppelin"
    manifest_dir.mkdir(parents=True, exist_ok=True)
    return manifest_dir


@pytest.fixture
def file_manifest(temp_manifest_dir: Path) -> Manifest:
    """Empty file-backed manifest."""
    return Manifest.for_chain_id(CHAIN_ID, manifest_dir=temp_manifest_dir)


@pytest.fixture
def memory_manifest() -> Manifest:
    """Empty in-memory manifest."""
    return Manifest(CHAIN_ID, InMemoryManifestStore())
