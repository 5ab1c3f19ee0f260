"""
Shared constants for the Polymath client.

Wire widths, role codes, zero values and default limits used across all modules.
"""

# ---------------------------------------------------------------------------
# Wire Formats
# ---------------------------------------------------------------------------

BYTES32_WIDTH = 32
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# ---------------------------------------------------------------------------
# Customer Roles (Customers.sol uint8)
# ---------------------------------------------------------------------------

ROLE_CODES = {
    "investor": 1,
    "delegate": 2,  # Customers.sol requires role == 2 for delegates
    "issuer": 3,
    "marketmaker": 4,
}

# ---------------------------------------------------------------------------
# Block Ranges
# ---------------------------------------------------------------------------

EARLIEST_BLOCK = 0
LATEST_BLOCK = "latest"

# ---------------------------------------------------------------------------
# Template limits
# ---------------------------------------------------------------------------

MAX_QUORUM_PERCENT = 100

# ---------------------------------------------------------------------------
# Default Timing Values
# ---------------------------------------------------------------------------

DEFAULT_POLL_INTERVAL_SECONDS = 1.0
DEFAULT_CONFIRMATION_TIMEOUT_SECONDS = 120
DEFAULT_RECEIPT_POLL_LATENCY_SECONDS = 0.5

DEFAULT_RPC_URL = "http://localhost:8545"

# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------

PLATFORM_ARTIFACTS = (
    "PolyToken",
    "Customers",
    "Compliance",
    "SecurityToken",
    "SecurityTokenRegistrar",
    "STOContract",
    "Template",
    "SimpleCappedOffering",
    "SimpleCappedOfferingFactory",
)
ARTIFACT_KEYS = ("contractName", "abi", "networks", "bytecode")
