"""
Shared data types for the Polymath client.

Centralized dataclasses and enums used across all modules.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from shared.constants import EARLIEST_BLOCK, LATEST_BLOCK

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class CustomerRole(str, Enum):
    INVESTOR = "investor"
    DELEGATE = "delegate"  # legal delegate, proposes templates
    ISSUER = "issuer"
    MARKETMAKER = "marketmaker"


class HandleState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"


# ---------------------------------------------------------------------------
# Artifact / Log Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContractDescriptor:
    """Trimmed build artifact: ABI, bytecode and known deployments per network id."""

    contract_name: str
    abi: tuple[dict[str, Any], ...]
    bytecode: str = ""
    networks: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    source_hash: str | None = None

    @classmethod
    def from_artifact(cls, data: Mapping[str, Any]) -> ContractDescriptor:
        return cls(
            contract_name=data["contractName"],
            abi=tuple(data.get("abi", [])),
            bytecode=data.get("bytecode", ""),
            networks=dict(data.get("networks") or {}),
            source_hash=data.get("sourceHash"),
        )

    def deployed_address(self, network_id: str | int) -> str | None:
        deployment = self.networks.get(str(network_id))
        if not deployment:
            return None
        return deployment.get("address")


@dataclass(frozen=True)
class BlockRange:
    from_block: int | str = EARLIEST_BLOCK
    to_block: int | str = LATEST_BLOCK


@dataclass(frozen=True)
class LogRecord:
    event: str
    args: dict[str, Any]
    address: str
    block_number: int | None
    block_hash: str | None
    transaction_hash: str | None
    transaction_index: int | None
    log_index: int | None
    topics: tuple[str, ...] = ()

    def with_args(self, args: dict[str, Any]) -> LogRecord:
        return LogRecord(
            event=self.event,
            args=args,
            address=self.address,
            block_number=self.block_number,
            block_hash=self.block_hash,
            transaction_hash=self.transaction_hash,
            transaction_index=self.transaction_index,
            log_index=self.log_index,
            topics=self.topics,
        )


# Error-first: callback(None, log) on delivery, callback(exc, None) on a failed poll
EventCallback = Callable[[Union[Exception, None], Union[LogRecord, None]], Union[Awaitable[None], None]]
IndexedFilterValues = Union[Mapping[str, Any], None]


# ---------------------------------------------------------------------------
# Customers Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KYCProvider:
    name: str
    joined: int  # Unix seconds
    details_hash: bytes
    verification_fee: int  # POLY base units


@dataclass(frozen=True)
class Customer:
    country_jurisdiction: str
    division_jurisdiction: str
    accredited: bool
    role: CustomerRole | None  # None for an unmapped on-chain role code
    verified: bool
    expires: int


# ---------------------------------------------------------------------------
# Compliance / Template Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TemplateReputation:
    owner: str
    total_raised: int
    times_used: int
    expires: int


@dataclass(frozen=True)
class TemplateDetails:
    details_hash: bytes
    finalized: bool


@dataclass(frozen=True)
class TemplateUsageDetails:
    fee: int
    quorum: int
    vesting_period: int
    owner: str
    kyc_provider: str


# ---------------------------------------------------------------------------
# Security Token Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TokenDetails:
    template_address: str
    delegate_address: str
    merkle_root: bytes
    sto_address: str
    kyc_address: str


@dataclass(frozen=True)
class Shareholder:
    verifier: str
    allowed: bool
    role: CustomerRole | None


@dataclass(frozen=True)
class PolyAllocation:
    amount: int
    vesting_period: int
    quorum: int
    yay_votes: int
    yay_percent: int
    frozen: bool


@dataclass(frozen=True)
class SecurityTokenData:
    total_supply: int
    owner: str
    ticker: str
    security_type: int


# ---------------------------------------------------------------------------
# Offering Types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FactoryUsageDetails:
    fee: int
    quorum: int
    vesting_period: int
    owner: str
    description: str
