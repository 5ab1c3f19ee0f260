"""
Contract handle: one contract descriptor bound to one on-chain address.

Owns the call/send surface for a single deployed contract and the registry of
live event filters opened through it. Every typed wrapper holds exactly one
handle; handles are never shared.

State machine:
    UNINITIALIZED -> INITIALIZING -> INITIALIZED

Usage:
    handle = ContractHandle(w3, get_config().get_artifact("PolyToken"))
    await handle.initialize()
    supply = await handle.call("totalSupply")
    receipt = await handle.send("transfer", to, amount, sender=owner)
    sub_id = await handle.subscribe("Transfer", {"to": owner}, on_transfer)
    await handle.unsubscribe(sub_id)
"""

from __future__ import annotations

import asyncio
import inspect
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, cast

from web3 import AsyncWeb3, Web3
from web3.logs import DISCARD
from web3.types import TxParams

from config.loader import get_config
from poly_logging.logger_manager import setup_module_logger
from shared.codecs import checksum
from shared.constants import (
    DEFAULT_CONFIRMATION_TIMEOUT_SECONDS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_RECEIPT_POLL_LATENCY_SECONDS,
)
from shared.errors import (
    ContractNotFoundError,
    DecodeMismatchError,
    NotInitializedError,
    OnChainRevertError,
    UnknownSubscriptionError,
    ValidationError,
)
from shared.types import (
    BlockRange,
    ContractDescriptor,
    EventCallback,
    HandleState,
    IndexedFilterValues,
    LogRecord,
)

# Applied to each decoded log before delivery; returning None drops the record
LogTransform = Callable[[LogRecord], "LogRecord | None"]


@dataclass
class _Subscription:
    event_name: str
    event_filter: Any
    task: asyncio.Task[None]


# ---------------------------------------------------------------------------
# Decoding helpers
# ---------------------------------------------------------------------------


def unpack(method: str, result: Any, fields: int) -> tuple[Any, ...]:
    """Check a returned tuple has exactly ``fields`` entries. Never truncates."""
    if not isinstance(result, (list, tuple)):
        raise DecodeMismatchError(method, fields, None)
    if len(result) != fields:
        raise DecodeMismatchError(method, fields, len(result))
    return tuple(result)


def _to_hex(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return Web3.to_hex(value)


def to_log_record(entry: Mapping[str, Any]) -> LogRecord:
    """Convert web3 EventData (AttributeDict) into a LogRecord."""
    return LogRecord(
        event=entry["event"],
        args=dict(entry["args"]),
        address=entry["address"],
        block_number=entry.get("blockNumber"),
        block_hash=_to_hex(entry.get("blockHash")),
        transaction_hash=_to_hex(entry.get("transactionHash")),
        transaction_index=entry.get("transactionIndex"),
        log_index=entry.get("logIndex"),
        topics=tuple(_to_hex(t) for t in entry.get("topics", ())),
    )


def _chain_order(record: LogRecord) -> tuple[int, int]:
    return (record.block_number or 0, record.log_index or 0)


def _same_value(actual: Any, expected: Any) -> bool:
    if isinstance(actual, str) and isinstance(expected, str):
        return actual.lower() == expected.lower()
    return actual == expected


def _matches(args: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    """A list/tuple filter value matches any of its members (topic OR semantics)."""
    for key, expected in filters.items():
        actual = args.get(key)
        if isinstance(expected, (list, tuple)):
            if not any(_same_value(actual, e) for e in expected):
                return False
        elif not _same_value(actual, expected):
            return False
    return True


def _prepare(
    entries: Any,
    argument_filters: Mapping[str, Any],
    transform: LogTransform | None,
) -> list[LogRecord]:
    """Decode, order, filter and transform a batch of raw event entries."""
    records = []
    for record in sorted((to_log_record(e) for e in entries), key=_chain_order):
        if not _matches(record.args, argument_filters):
            continue
        if transform is not None:
            record = transform(record)
            if record is None:
                continue
        records.append(record)
    return records


class ContractHandle:
    """
    Async binding of a ContractDescriptor to a deployed address.

    Operations before ``initialize()`` completes raise ``NotInitializedError``.
    Concurrent ``initialize()`` calls bind exactly once.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        descriptor: ContractDescriptor,
        address: str | None = None,
    ) -> None:
        self._w3 = w3
        self._descriptor = descriptor
        self._requested_address = checksum(address) if address is not None else None

        self._contract: Any = None
        self._state = HandleState.UNINITIALIZED
        self._init_lock = asyncio.Lock()
        self._subscriptions: dict[str, _Subscription] = {}

        self._cfg = get_config()
        timing_cfg = self._cfg.get_timing_config()

        # Timing
        events_timing = timing_cfg.get("events", {})
        tx_timing = timing_cfg.get("transaction", {})
        self._poll_interval: float = events_timing.get(
            "poll_interval_seconds", DEFAULT_POLL_INTERVAL_SECONDS
        )
        self._confirmation_timeout: float = tx_timing.get(
            "confirmation_timeout_seconds", DEFAULT_CONFIRMATION_TIMEOUT_SECONDS
        )
        self._receipt_poll_latency: float = tx_timing.get(
            "receipt_poll_latency_seconds", DEFAULT_RECEIPT_POLL_LATENCY_SECONDS
        )

        self._logger = setup_module_logger(
            "contract_handle", "contract_handle.log", module_folder="Contract_Logs"
        )
        self._sub_logger = setup_module_logger(
            "subscriptions", "subscriptions.log", module_folder="Subscription_Logs"
        )

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    @property
    def contract_name(self) -> str:
        return self._descriptor.contract_name

    @property
    def descriptor(self) -> ContractDescriptor:
        return self._descriptor

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is HandleState.INITIALIZED

    @property
    def address(self) -> str:
        return self._require_contract().address

    async def initialize(self) -> None:
        """
        Resolve the on-chain address and bind the contract.

        Uses the explicit address when one was given, otherwise the deployment
        recorded for the node's network id. Raises ``ContractNotFoundError`` when
        neither yields an address with code.
        """
        if self._state is HandleState.INITIALIZED:
            return
        async with self._init_lock:
            if self._state is HandleState.INITIALIZED:
                return
            self._state = HandleState.INITIALIZING
            try:
                address = await self._resolve_address()
                self._contract = self._w3.eth.contract(
                    address=address,
                    abi=list(self._descriptor.abi),
                    bytecode=self._descriptor.bytecode or None,
                )
            except BaseException:
                self._state = HandleState.UNINITIALIZED
                raise
            self._state = HandleState.INITIALIZED
            self._logger.info("%s bound at %s", self.contract_name, address)

    async def _resolve_address(self) -> str:
        if self._requested_address is not None:
            address = self._requested_address
        else:
            network_id = await self._w3.net.version
            deployed = self._descriptor.deployed_address(network_id)
            if deployed is None:
                self._logger.error(
                    "%s has no deployment for network %s", self.contract_name, network_id
                )
                raise ContractNotFoundError(contract_name=self.contract_name)
            address = checksum(deployed)

        code = await self._w3.eth.get_code(address)
        if not code:
            raise ContractNotFoundError(address=address, contract_name=self.contract_name)
        return address

    def _require_contract(self) -> Any:
        if self._state is not HandleState.INITIALIZED:
            raise NotInitializedError(self.contract_name)
        return self._contract

    # ------------------------------------------------------------------
    # Calls and transactions
    # ------------------------------------------------------------------

    async def call(self, method: str, *args: Any) -> Any:
        """Read-only contract call. Rejections raise ``OnChainRevertError``."""
        contract = self._require_contract()
        try:
            return await getattr(contract.functions, method)(*args).call()
        except Exception as exc:
            self._logger.error("%s.%s%r call failed: %s", self.contract_name, method, args, exc)
            raise OnChainRevertError(f"{self.contract_name}.{method}", args, str(exc)) from exc

    async def call_tuple(self, method: str, *args: Any, fields: int) -> tuple[Any, ...]:
        """Read-only call returning a tuple that must have exactly ``fields`` entries."""
        return unpack(f"{self.contract_name}.{method}", await self.call(method, *args), fields)

    async def send(
        self,
        method: str,
        *args: Any,
        sender: str,
        gas: int | None = None,
    ) -> dict[str, Any]:
        """
        Send a state-changing transaction and wait until it is mined.

        ``gas`` falls back to the configured default for this method; without
        one the node estimates. Returns the receipt. Any rejection, including a
        mined receipt with status 0, raises ``OnChainRevertError``. Never retried.
        """
        contract = self._require_contract()
        if gas is None:
            gas = self._cfg.get_default_gas(self.contract_name, method)
        tx_params: dict[str, Any] = {"from": checksum(sender)}
        if gas is not None:
            tx_params["gas"] = gas

        qualified = f"{self.contract_name}.{method}"
        try:
            tx_hash = await getattr(contract.functions, method)(*args).transact(
                cast(TxParams, tx_params)
            )
            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self._confirmation_timeout,
                poll_latency=self._receipt_poll_latency,
            )
        except Exception as exc:
            self._logger.error("%s%r from %s failed: %s", qualified, args, sender, exc)
            raise OnChainRevertError(qualified, args, str(exc)) from exc

        tx_hash_hex = _to_hex(tx_hash)
        if receipt.get("status") == 0:
            self._logger.error("%s reverted on-chain: %s", qualified, tx_hash_hex)
            raise OnChainRevertError(qualified, args, f"reverted on-chain in {tx_hash_hex}")

        self._logger.info(
            "TX mined: %s hash=%s from=%s gasUsed=%s",
            qualified,
            tx_hash_hex,
            tx_params["from"],
            receipt.get("gasUsed"),
        )
        return dict(receipt)

    def process_receipt(self, event_name: str, receipt: Mapping[str, Any]) -> list[LogRecord]:
        """Decode ``event_name`` logs emitted by this contract in a mined receipt."""
        contract = self._require_contract()
        event = getattr(contract.events, event_name)()
        return [to_log_record(e) for e in event.process_receipt(receipt, errors=DISCARD)]

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def subscribe(
        self,
        event_name: str,
        indexed_filter_values: IndexedFilterValues,
        callback: EventCallback,
        transform: LogTransform | None = None,
    ) -> str:
        """
        Open a live filter on ``event_name`` and deliver each new log to ``callback``.

        Callbacks are error-first: ``callback(None, log)`` per log,
        ``callback(exc, None)`` when a poll fails. Returns the subscription id.
        """
        contract = self._require_contract()
        argument_filters = dict(indexed_filter_values or {})
        event_filter = await getattr(contract.events, event_name).create_filter(
            from_block="latest", argument_filters=argument_filters
        )

        subscription_id = str(uuid.uuid4())
        task = asyncio.create_task(
            self._watch(subscription_id, event_filter, argument_filters, callback, transform),
            name=f"{self.contract_name}.{event_name}:{subscription_id}",
        )
        self._subscriptions[subscription_id] = _Subscription(event_name, event_filter, task)
        self._sub_logger.info(
            "Subscribed %s to %s.%s filter=%s",
            subscription_id,
            self.contract_name,
            event_name,
            argument_filters,
        )
        return subscription_id

    async def _watch(
        self,
        subscription_id: str,
        event_filter: Any,
        argument_filters: Mapping[str, Any],
        callback: EventCallback,
        transform: LogTransform | None,
    ) -> None:
        """Poll loop for one subscription. Runs until ``unsubscribe`` removes it."""
        while True:
            try:
                entries = await event_filter.get_new_entries()
                if subscription_id not in self._subscriptions:
                    return
                records = _prepare(entries, argument_filters, transform)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self._sub_logger.error("Poll failed for %s: %s", subscription_id, exc)
                if subscription_id not in self._subscriptions:
                    return
                await self._deliver(subscription_id, callback, exc, None)
            else:
                for record in records:
                    # A callback may have unsubscribed mid-batch
                    if subscription_id not in self._subscriptions:
                        return
                    await self._deliver(subscription_id, callback, None, record)
            await asyncio.sleep(self._poll_interval)

    async def _deliver(
        self,
        subscription_id: str,
        callback: EventCallback,
        error: Exception | None,
        record: LogRecord | None,
    ) -> None:
        try:
            result = callback(error, record)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            self._sub_logger.error(
                "Callback for %s raised: %s", subscription_id, exc, exc_info=exc
            )

    async def unsubscribe(self, subscription_id: str) -> None:
        """Stop and remove exactly one subscription. Unknown ids raise."""
        subscription = self._subscriptions.pop(subscription_id, None)
        if subscription is None:
            raise UnknownSubscriptionError(subscription_id)

        # A callback may unsubscribe its own subscription; cancel that task last
        own_task = subscription.task is asyncio.current_task()
        if not own_task:
            subscription.task.cancel()
            await asyncio.wait([subscription.task])

        filter_id = getattr(subscription.event_filter, "filter_id", None)
        if filter_id is not None:
            try:
                await self._w3.eth.uninstall_filter(filter_id)
            except Exception as exc:
                # Node-side filters expire on their own
                self._sub_logger.warning("Failed to uninstall filter %s: %s", filter_id, exc)
        self._sub_logger.info(
            "Unsubscribed %s from %s.%s",
            subscription_id,
            self.contract_name,
            subscription.event_name,
        )
        if own_task:
            subscription.task.cancel()

    async def unsubscribe_all(self) -> None:
        """Close every filter opened through this handle."""
        for subscription_id in list(self._subscriptions):
            await self.unsubscribe(subscription_id)

    @property
    def subscription_ids(self) -> list[str]:
        return list(self._subscriptions)

    async def get_logs(
        self,
        event_name: str,
        indexed_filter_values: IndexedFilterValues = None,
        block_range: BlockRange | None = None,
        transform: LogTransform | None = None,
    ) -> list[LogRecord]:
        """
        One-shot historical query over an inclusive block range.

        Defaults to the earliest block through the latest mined block. Results
        are in chain order (block number, then log index).
        """
        contract = self._require_contract()
        block_range = block_range or BlockRange()
        if (
            isinstance(block_range.from_block, int)
            and isinstance(block_range.to_block, int)
            and block_range.from_block > block_range.to_block
        ):
            raise ValidationError(
                f"from_block {block_range.from_block} is after to_block {block_range.to_block}"
            )

        argument_filters = dict(indexed_filter_values or {})
        try:
            entries = await getattr(contract.events, event_name).get_logs(
                argument_filters=argument_filters,
                from_block=block_range.from_block,
                to_block=block_range.to_block,
            )
        except Exception as exc:
            self._logger.error(
                "get_logs %s.%s %s failed: %s", self.contract_name, event_name, block_range, exc
            )
            raise

        return _prepare(entries, argument_filters, transform)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Release every open filter."""
        await self.unsubscribe_all()

    async def __aenter__(self) -> ContractHandle:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
