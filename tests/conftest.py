"""
Shared pytest configuration and fixtures for Polymath client tests.

Provides a mocked AsyncWeb3, a mocked ConfigLoader serving in-memory contract
descriptors, and helpers to stub contract calls, transactions and event logs.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest
from web3 import Web3

from shared.types import ContractDescriptor

# ---------------------------------------------------------------------------
# Sample addresses / network
# ---------------------------------------------------------------------------

NETWORK_ID = "5777"


def _addr(n: int) -> str:
    return Web3.to_checksum_address(f"0x{n:040x}")


OWNER = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
PROVIDER = _addr(0xA11CE)
CUSTOMER = _addr(0xB0B)
DELEGATE = _addr(0xDE1E)
HOST = _addr(0x4057)

DEPLOYED = {
    "PolyToken": _addr(0x1001),
    "Customers": _addr(0x1002),
    "Compliance": _addr(0x1003),
    "SecurityTokenRegistrar": _addr(0x1004),
}

SECURITY_TOKEN = _addr(0x2001)
TEMPLATE = _addr(0x2002)
OFFERING = _addr(0x2003)
OFFERING_FACTORY = _addr(0x2004)
STO = _addr(0x2005)

TX_HASH = b"\x12" * 32

STANDARD_TIMING_CONFIG = {
    "events": {"poll_interval_seconds": 0.01},
    "transaction": {"confirmation_timeout_seconds": 5, "receipt_poll_latency_seconds": 0.01},
}

STANDARD_GAS_DEFAULTS = {
    "Customers.newProvider": 300000,
    "Customers.verifyCustomer": 2500000,
    "Compliance.createTemplate": 1000000,
}


@pytest.fixture
def addresses():
    """Named sample addresses used across the suite."""
    return {
        "owner": OWNER,
        "provider": PROVIDER,
        "customer": CUSTOMER,
        "delegate": DELEGATE,
        "host": HOST,
        "security_token": SECURITY_TOKEN,
        "template": TEMPLATE,
        "offering": OFFERING,
        "offering_factory": OFFERING_FACTORY,
        "sto": STO,
        **DEPLOYED,
    }


# ---------------------------------------------------------------------------
# Config loader fixture
# ---------------------------------------------------------------------------


def _descriptor(name: str) -> ContractDescriptor:
    networks = {NETWORK_ID: {"address": DEPLOYED[name]}} if name in DEPLOYED else {}
    return ContractDescriptor(contract_name=name, abi=(), bytecode="0x6080", networks=networks)


@pytest.fixture
def mock_config_loader():
    """
    Provide a mock ConfigLoader with fast polling and in-memory artifacts.

    Usage in tests:
        def test_something(mock_config_loader):
            mock_config_loader.get_default_gas.side_effect = lambda c, m: None
    """
    loader = MagicMock()
    loader.get_timing_config.return_value = STANDARD_TIMING_CONFIG
    loader.get_default_gas.side_effect = lambda contract, method: STANDARD_GAS_DEFAULTS.get(
        f"{contract}.{method}"
    )
    loader.get_artifact.side_effect = _descriptor
    loader.get_app_config.return_value = {"logging": {"log_dir": "logs"}}
    loader.get_rpc_url.return_value = "http://localhost:8545"
    return loader


@pytest.fixture
def patched_config(mock_config_loader):
    """Route every get_config / setup_module_logger used by the wrappers to mocks."""
    with (
        patch("contracts.handle.get_config", return_value=mock_config_loader),
        patch("contracts.base.get_config", return_value=mock_config_loader),
        patch("contracts.handle.setup_module_logger", return_value=MagicMock()),
        patch("contracts.base.setup_module_logger", return_value=MagicMock()),
    ):
        yield mock_config_loader


# ---------------------------------------------------------------------------
# AsyncWeb3 fixture
# ---------------------------------------------------------------------------


async def _network_id_coro():
    return NETWORK_ID


def _make_contract(address: str, **kwargs) -> MagicMock:
    contract = MagicMock()
    contract.address = address
    return contract


@pytest.fixture
def mock_w3():
    """
    AsyncWeb3 double: every address has code, every tx mines with status 1.

    ``w3.eth.contract`` returns a fresh MagicMock per binding; reach it via
    ``wrapper.handle._contract``.
    """
    w3 = MagicMock()
    w3.eth = MagicMock()
    w3.net = MagicMock()
    # net.version is an awaitable property in AsyncWeb3
    type(w3.net).version = PropertyMock(side_effect=lambda: _network_id_coro())
    w3.eth.contract = MagicMock(side_effect=lambda **kw: _make_contract(**kw))
    w3.eth.get_code = AsyncMock(return_value=b"\x60\x80\x60\x40")
    w3.eth.wait_for_transaction_receipt = AsyncMock(
        return_value={"status": 1, "transactionHash": TX_HASH, "gasUsed": 21000, "logs": []}
    )
    w3.eth.uninstall_filter = AsyncMock(return_value=True)
    w3.is_connected = AsyncMock(return_value=True)
    return w3


# ---------------------------------------------------------------------------
# Contract stubbing helpers
# ---------------------------------------------------------------------------


def _stub_call(contract: MagicMock, method: str, value=None, side_effect=None) -> MagicMock:
    fn = getattr(contract.functions, method)
    fn.return_value.call = AsyncMock(return_value=value, side_effect=side_effect)
    return fn


def _stub_transact(contract: MagicMock, method: str, side_effect=None) -> MagicMock:
    fn = getattr(contract.functions, method)
    fn.return_value.transact = AsyncMock(return_value=TX_HASH, side_effect=side_effect)
    return fn


def _event_entry(
    event: str,
    args: dict,
    block_number: int = 1,
    log_index: int = 0,
    address: str = DEPLOYED["PolyToken"],
) -> dict:
    return {
        "event": event,
        "args": args,
        "address": address,
        "blockNumber": block_number,
        "blockHash": b"\xaa" * 32,
        "transactionHash": bytes([block_number % 256]) * 32,
        "transactionIndex": 0,
        "logIndex": log_index,
        "topics": [],
    }


def _stub_receipt_events(contract: MagicMock, event: str, entries: list[dict]) -> None:
    getattr(contract.events, event).return_value.process_receipt = MagicMock(return_value=entries)


def _stub_get_logs(contract: MagicMock, event: str, entries: list[dict]) -> AsyncMock:
    get_logs = AsyncMock(return_value=entries)
    getattr(contract.events, event).get_logs = get_logs
    return get_logs


def _stub_filter(contract: MagicMock, event: str, batches: list[list[dict]]) -> MagicMock:
    pending = list(batches)

    async def _get_new_entries():
        return pending.pop(0) if pending else []

    event_filter = MagicMock(filter_id=f"0x{event}")
    event_filter.get_new_entries = AsyncMock(side_effect=_get_new_entries)
    getattr(contract.events, event).create_filter = AsyncMock(return_value=event_filter)
    return event_filter


@pytest.fixture
def stub_call():
    """``stub_call(contract, "method", value)`` makes ``functions.method(...).call()`` return value."""
    return _stub_call


@pytest.fixture
def stub_transact():
    return _stub_transact


@pytest.fixture
def event_entry():
    """Factory for decoded web3 event entries."""
    return _event_entry


@pytest.fixture
def stub_receipt_events():
    return _stub_receipt_events


@pytest.fixture
def stub_get_logs():
    return _stub_get_logs


@pytest.fixture
def stub_filter():
    """``stub_filter(contract, "Event", [batch, ...])`` serves one batch per poll, then empty polls."""
    return _stub_filter
