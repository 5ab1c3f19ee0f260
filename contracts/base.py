"""
Base façade for the typed contract wrappers.

A wrapper composes one ContractHandle (never inherits from it) and narrows its
event surface to the events the contract declares. Event-bearing wrappers map
uint8 role codes in decoded log args to role names; a log whose role code is
unmapped is dropped.
"""

from __future__ import annotations

from typing import Any, ClassVar

from web3 import AsyncWeb3

from config.loader import get_config
from contracts.handle import ContractHandle
from poly_logging.logger_manager import setup_module_logger
from shared.codecs import number_to_role
from shared.errors import ValidationError
from shared.types import BlockRange, EventCallback, IndexedFilterValues, LogRecord


class ContractWrapper:
    # Artifact file name under the artifacts directory
    ARTIFACT: ClassVar[str] = ""
    EVENTS: ClassVar[tuple[str, ...]] = ()
    # event name -> arg holding a uint8 role code
    ROLE_FIELDS: ClassVar[dict[str, str]] = {}

    def __init__(self, w3: AsyncWeb3, address: str | None = None) -> None:
        cfg = get_config()
        self._handle = ContractHandle(w3, cfg.get_artifact(self.ARTIFACT), address)
        self._logger = setup_module_logger(
            "contract_wrappers", "contract_wrappers.log", module_folder="Contract_Logs"
        )

    def __repr__(self) -> str:
        bound = self._handle.address if self._handle.is_initialized else "unbound"
        return f"<{type(self).__name__} {bound}>"

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    @property
    def handle(self) -> ContractHandle:
        return self._handle

    @property
    def address(self) -> str:
        return self._handle.address

    @property
    def is_initialized(self) -> bool:
        return self._handle.is_initialized

    async def initialize(self) -> None:
        await self._handle.initialize()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _check_event(self, event_name: str) -> None:
        if event_name not in self.EVENTS:
            raise ValidationError(
                f"{type(self).__name__} has no event {event_name!r}; expected one of {self.EVENTS}"
            )

    def _translate(self, record: LogRecord) -> LogRecord | None:
        role_field = self.ROLE_FIELDS.get(record.event)
        if role_field is None:
            return record

        role = number_to_role(record.args.get(role_field))
        if role is None:
            self._logger.debug(
                "Dropping %s log %s with unmapped role %r",
                record.event,
                record.transaction_hash,
                record.args.get(role_field),
            )
            return None
        return record.with_args({**record.args, role_field: role})

    async def subscribe(
        self,
        event_name: str,
        indexed_filter_values: IndexedFilterValues,
        callback: EventCallback,
    ) -> str:
        """Watch ``event_name``; returns the id to pass to ``unsubscribe``."""
        self._check_event(event_name)
        return await self._handle.subscribe(
            event_name, indexed_filter_values, callback, transform=self._translate
        )

    async def get_logs(
        self,
        event_name: str,
        indexed_filter_values: IndexedFilterValues = None,
        block_range: BlockRange | None = None,
    ) -> list[LogRecord]:
        """Historical ``event_name`` logs in chain order. Defaults to the whole chain."""
        self._check_event(event_name)
        return await self._handle.get_logs(
            event_name, indexed_filter_values, block_range, transform=self._translate
        )

    async def unsubscribe(self, subscription_id: str) -> None:
        await self._handle.unsubscribe(subscription_id)

    async def unsubscribe_all(self) -> None:
        await self._handle.unsubscribe_all()

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    async def close(self) -> None:
        await self._handle.close()

    async def __aenter__(self) -> Any:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
