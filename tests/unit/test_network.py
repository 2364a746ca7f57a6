"""Unit tests for JSON-RPC network identification."""

import json
import tempfile
from pathlib import Path

import pytest
import responses

from proxy_deployments.manifest import FileManifestStore, Manifest
from proxy_deployments.network import get_chain_id, get_dev_instance_id

RPC_URL = "http://test-rpc.example.com"


def _rpc_result(result):
    return {"jsonrpc": "2.0", "id": 1, "result": result}


def _rpc_error(message: str):
    return {"jsonrpc": "2.0", "id": 1, "error": {"code": -32601, "message": message}}


class TestGetChainId:
    """Test the get_chain_id function."""

    @responses.activate
    def test_parses_hex_chain_id(self):
        """Test that the hex chain id is decoded."""
        responses.add(responses.POST, RPC_URL, json=_rpc_result("0xaa36a7"), status=200)

        assert get_chain_id(RPC_URL) == 11155111

    @responses.activate
    def test_rpc_request_format(self):
        """Test that RPC request has correct format."""

        def request_callback(request):
            body = json.loads(request.body)
            assert body["jsonrpc"] == "2.0"
            assert body["method"] == "eth_chainId"
            assert body["params"] == []

            return (200, {}, json.dumps(_rpc_result("0x1")))

        responses.add_callback(
            responses.POST,
            RPC_URL,
            callback=request_callback,
            content_type="application/json",
        )

        assert get_chain_id(RPC_URL) == 1

    @responses.activate
    def test_http_error_raises_runtime_error(self):
        """Test that non-200 responses raise RuntimeError."""
        responses.add(responses.POST, RPC_URL, json={}, status=500)

        with pytest.raises(RuntimeError, match="status 500"):
            get_chain_id(RPC_URL)

    @responses.activate
    def test_rpc_error_raises_value_error(self):
        """Test that JSON-RPC errors raise ValueError."""
        responses.add(responses.POST, RPC_URL, json=_rpc_error("boom"), status=200)

        with pytest.raises(ValueError, match="RPC error"):
            get_chain_id(RPC_URL)

    @responses.activate
    def test_connection_error_raises_runtime_error(self):
        """Test that network errors raise RuntimeError."""
        import requests

        responses.add(
            responses.POST, RPC_URL, body=requests.ConnectionError("Connection refused")
        )

        with pytest.raises(RuntimeError, match="Network error"):
            get_chain_id(RPC_URL)


class TestGetDevInstanceId:
    """Test the get_dev_instance_id function."""

    @responses.activate
    def test_returns_instance_id(self):
        """Test reading the instance id from hardhat_metadata."""
        responses.add(
            responses.POST,
            RPC_URL,
            json=_rpc_result({"clientVersion": "HardhatNetwork/2.22.0", "instanceId": "0x1234"}),
            status=200,
        )

        assert get_dev_instance_id(RPC_URL) == "0x1234"

    @responses.activate
    def test_unsupported_method_returns_none(self):
        """Test that nodes without hardhat_metadata give no instance id."""
        responses.add(
            responses.POST, RPC_URL, json=_rpc_error("Method not found"), status=200
        )

        assert get_dev_instance_id(RPC_URL) is None


class TestManifestForNetwork:
    """Test opening a manifest from an RPC endpoint."""

    @responses.activate
    def test_public_chain_uses_manifest_dir(self, tmp_path: Path):
        """Test that public chains get a named file in the manifest dir."""
        responses.add(responses.POST, RPC_URL, json=_rpc_result("0x1"), status=200)

        manifest = Manifest.for_network(RPC_URL, manifest_dir=tmp_path)

        assert manifest.chain_id == 1
        assert isinstance(manifest.store, FileManifestStore)
        assert manifest.store.path == tmp_path / "mainnet.json"
        # No hardhat_metadata call for public chains
        assert len(responses.calls) == 1

    @responses.activate
    def test_dev_chain_uses_instance_file(self, tmp_path: Path):
        """Test that dev chains get one manifest per node instance."""
        responses.add(responses.POST, RPC_URL, json=_rpc_result("0x7a69"), status=200)
        responses.add(
            responses.POST, RPC_URL, json=_rpc_result({"instanceId": "0xfeed"}), status=200
        )

        manifest = Manifest.for_network(RPC_URL, manifest_dir=tmp_path)

        assert manifest.chain_id == 31337
        assert manifest.store.path == (
            Path(tempfile.gettempdir()) / "openzeppelin-upgrades" / "hardhat-31337-0xfeed.json"
        )

    @responses.activate
    def test_rpc_url_from_environment(self, tmp_path: Path, monkeypatch):
        """Test that $JSON_RPC_URL is used when no URL is passed."""
        monkeypatch.setenv("JSON_RPC_URL", RPC_URL)
        responses.add(responses.POST, RPC_URL, json=_rpc_result("0x89"), status=200)

        manifest = Manifest.for_network(manifest_dir=tmp_path)

        assert manifest.chain_id == 137

    def test_missing_rpc_url(self, monkeypatch):
        """Test that an RPC URL is required."""
        monkeypatch.delenv("JSON_RPC_URL", raising=False)

        with pytest.raises(ValueError, match="RPC URL required"):
            Manifest.for_network()
