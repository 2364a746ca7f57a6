"""Per-network deployment manifest for proxy-deployments library.

The manifest records shared infrastructure (the proxy admin and
implementation contracts) and every proxy deployed on one network.
All read-modify-write sequences go through :py:meth:`Manifest.transaction`,
which holds an exclusive lock for the whole sequence.
"""

import json
import logging
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

from filelock import FileLock, Timeout

from .constants import DEV_CHAIN_IDS, RPC_URL_ENV
from .exceptions import ManifestFormatError, ManifestLockError
from .network import get_chain_id, get_dev_instance_id
from .paths import get_lock_path, get_manifest_path
from .types import Deployment, ManifestData, ProxyDeployment

logger = logging.getLogger(__name__)


class ManifestStore:
    """
    Storage backend of a manifest.

    Locking contract: :py:meth:`lock` returns a context manager granting
    exclusive access to the stored record. It must be reentrant within
    one thread and must be released on every exit path. :py:meth:`load`
    and :py:meth:`save` are only called while the lock is held.
    """

    def lock(self):
        raise NotImplementedError()

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the stored record, or None if nothing was stored yet."""
        raise NotImplementedError()

    def save(self, data: Dict[str, Any]) -> None:
        raise NotImplementedError()


class FileManifestStore(ManifestStore):
    """Manifest stored as a JSON file, locked with a sibling ``.lock`` file.

    The file lock serializes access across threads and processes.
    """

    def __init__(self, path: Union[Path, str], lock_timeout: float = -1):
        """
        Args:
            path: Manifest JSON file
            lock_timeout: Seconds to wait for the lock, -1 waits forever
        """
        self.path = Path(path).absolute()
        self.lock_timeout = lock_timeout
        self._file_lock = FileLock(get_lock_path(self.path), timeout=lock_timeout)

    @contextmanager
    def lock(self) -> Iterator[None]:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        if self._file_lock.is_locked:
            logger.info("Manifest %s is locked, waiting", self.path)

        try:
            self._file_lock.acquire()
        except Timeout as e:
            raise ManifestLockError(
                f"Could not lock manifest {self.path} within {self.lock_timeout} seconds"
            ) from e

        try:
            yield
        finally:
            self._file_lock.release()

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            with open(self.path) as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except json.JSONDecodeError as e:
            raise ManifestFormatError(f"Manifest {self.path} is not valid JSON: {e}") from e

    def save(self, data: Dict[str, Any]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, self.path)


class InMemoryManifestStore(ManifestStore):
    """Manifest kept in process memory, locked with a reentrant thread lock."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self._data = data
        self._lock = threading.RLock()

    @contextmanager
    def lock(self) -> Iterator[None]:
        with self._lock:
            yield

    def load(self) -> Optional[Dict[str, Any]]:
        # Round-trip through JSON so callers never share mutable state
        if self._data is None:
            return None
        return json.loads(json.dumps(self._data))

    def save(self, data: Dict[str, Any]) -> None:
        self._data = json.loads(json.dumps(data))


class Manifest:
    """Deployment manifest of a single network."""

    def __init__(self, chain_id: int, store: ManifestStore):
        """
        Initialize the manifest handle.

        Nothing is read until the first transaction.

        Args:
            chain_id: Chain the manifest belongs to
            store: Storage backend
        """
        self.chain_id = chain_id
        self.store = store

    def __repr__(self) -> str:
        return f"<Manifest chain_id={self.chain_id} store={self.store!r}>"

    @classmethod
    def for_chain_id(
        cls,
        chain_id: int,
        manifest_dir: Optional[Union[Path, str]] = None,
        instance_id: Optional[str] = None,
        lock_timeout: float = -1,
    ) -> "Manifest":
        """
        Open the file-backed manifest of a chain.

        Args:
            chain_id: EIP-155 chain id
            manifest_dir: Custom manifest directory (defaults to ./.openzeppelin)
            instance_id: Dev node instance id for local development chains
            lock_timeout: Seconds to wait for the manifest lock, -1 waits forever

        Returns:
            Manifest instance
        """
        path = get_manifest_path(chain_id, manifest_dir, instance_id)
        return cls(chain_id, FileManifestStore(path, lock_timeout=lock_timeout))

    @classmethod
    def for_network(
        cls,
        rpc_url: Optional[str] = None,
        manifest_dir: Optional[Union[Path, str]] = None,
        lock_timeout: float = -1,
    ) -> "Manifest":
        """
        Open the manifest of the network behind an RPC endpoint.

        Args:
            rpc_url: RPC endpoint URL (defaults to $JSON_RPC_URL)
            manifest_dir: Custom manifest directory (defaults to ./.openzeppelin)
            lock_timeout: Seconds to wait for the manifest lock, -1 waits forever

        Returns:
            Manifest instance

        Raises:
            ValueError: If no RPC URL is given or configured
            RuntimeError: If the RPC endpoint cannot be reached
        """
        if rpc_url is None:
            rpc_url = os.environ.get(RPC_URL_ENV)
        if rpc_url is None:
            raise ValueError(
                f"RPC URL required: set ${RPC_URL_ENV} environment variable "
                "or pass rpc_url parameter"
            )

        chain_id = get_chain_id(rpc_url)
        instance_id = None
        if chain_id in DEV_CHAIN_IDS:
            instance_id = get_dev_instance_id(rpc_url)

        return cls.for_chain_id(chain_id, manifest_dir, instance_id, lock_timeout)

    def _load(self) -> ManifestData:
        raw = self.store.load()
        if raw is None:
            return ManifestData(chain_id=self.chain_id)
        if not isinstance(raw, dict):
            raise ManifestFormatError(f"Manifest for chain {self.chain_id} is not an object")
        return ManifestData.from_dict(raw, self.chain_id)

    @contextmanager
    def transaction(self) -> Iterator[ManifestData]:
        """
        Run a read-modify-write sequence under the manifest lock.

        The yielded data is persisted when the block exits normally and
        something changed. If the block raises, nothing is written.
        The lock is released on every exit path.

        Example::

            with manifest.transaction() as data:
                if data.admin is None:
                    data.set_admin(deploy_admin())
        """
        with self.store.lock():
            data = self._load()
            before = data.to_dict()

            yield data

            after = data.to_dict()
            if after != before:
                self.store.save(after)
                logger.debug("Manifest for chain %d saved", self.chain_id)

    def read(self) -> ManifestData:
        """Return a snapshot of the manifest."""
        with self.store.lock():
            return self._load()

    def get_admin(self) -> Optional[Deployment]:
        return self.read().admin

    def add_proxy(self, deployment: ProxyDeployment) -> None:
        """
        Append a proxy to the manifest.

        Raises:
            ManifestConflictError: If the address is already recorded
        """
        with self.transaction() as data:
            data.add_proxy(deployment)

        logger.info(
            "Recorded %s proxy %s on chain %d",
            deployment.kind.value,
            deployment.address,
            self.chain_id,
        )
