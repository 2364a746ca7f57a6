"""Configuration constants for proxy-deployments library."""

# Version tag written into every manifest file
MANIFEST_VERSION = "3.2"

# Single-byte prefix of the CREATE2 address preimage (EIP-1014)
CREATE2_PREFIX = b"\xff"

# Local development chains whose state does not survive a node restart
DEV_CHAIN_IDS = frozenset({1337, 31337})

# Manifest file names for well-known chains
# Unknown chains are stored as "unknown-{chain_id}"
NETWORK_NAMES = {
    1: "mainnet",
    5: "goerli",
    10: "optimism",
    56: "bsc",
    100: "xdai",
    137: "polygon",
    8453: "base",
    42161: "arbitrum-one",
    43114: "avalanche",
    80002: "polygon-amoy",
    84532: "base-sepolia",
    11155111: "sepolia",
}

# Artifact file names of the proxy contracts, relative to an artifacts directory
PROXY_ARTIFACTS = {
    "admin": "ProxyAdmin.json",
    "transparent": "TransparentUpgradeableProxy.json",
    "uups": "ERC1967Proxy.json",
}

# Minimal ABI of a CREATE2 deployer contract: deploy(bytes code, bytes32 salt)
CREATE2_FACTORY_ABI = [
    {
        "inputs": [
            {"internalType": "bytes", "name": "code", "type": "bytes"},
            {"internalType": "bytes32", "name": "salt", "type": "bytes32"},
        ],
        "name": "deploy",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

# Environment variables
MANIFEST_DIR_ENV = "PROXY_DEPLOYMENTS_DIR"
RPC_URL_ENV = "JSON_RPC_URL"

# Default manifest directory name under the current working directory
DEFAULT_MANIFEST_DIRNAME = ".openzeppelin"
