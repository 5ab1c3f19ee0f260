"""
Polymath client entry point.

Builds the four platform-wide wrappers on one shared AsyncWeb3 connection and
hands out initialized per-address wrappers for tokens, templates and offerings.
Every wrapper created here is closed (all event filters released) by ``close()``.

Usage:
    async with Polymath.from_rpc_url() as polymath:
        fee = await polymath.customers.get_new_provider_fee()
        token = await polymath.security_token(token_address)
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any, TypeVar

from web3 import AsyncWeb3
from web3.providers import AsyncHTTPProvider

from config.loader import get_config
from contracts.base import ContractWrapper
from contracts.compliance import Compliance
from contracts.customers import Customers
from contracts.offering import Offering
from contracts.offering_factory import OfferingFactory
from contracts.poly_token import PolyToken
from contracts.registrar import SecurityTokenRegistrar
from contracts.security_token import SecurityToken
from contracts.sto_contract import STOContract
from contracts.template import Template
from poly_logging.logger_manager import setup_module_logger

_W = TypeVar("_W", bound=ContractWrapper)


class Polymath:
    """
    Platform client over one AsyncWeb3 connection.

    ``addresses`` may pin any of ``PolyToken``, ``Customers``, ``Compliance`` and
    ``SecurityTokenRegistrar``; the rest resolve to their latest deployment on
    the connected network.
    """

    def __init__(self, w3: AsyncWeb3, addresses: Mapping[str, str] | None = None) -> None:
        self._w3 = w3
        addresses = dict(addresses or {})

        self.poly_token = PolyToken(w3, addresses.get("PolyToken"))
        self.customers = Customers(w3, self.poly_token, addresses.get("Customers"))
        self.compliance = Compliance(w3, addresses.get("Compliance"))
        self.registrar = SecurityTokenRegistrar(
            w3, self.poly_token, addresses.get("SecurityTokenRegistrar")
        )
        self._platform: list[ContractWrapper] = [
            self.poly_token,
            self.customers,
            self.compliance,
            self.registrar,
        ]
        self._created: list[ContractWrapper] = []

        self._logger = setup_module_logger("polymath", "polymath.log", module_folder="Client_Logs")

    @classmethod
    def from_rpc_url(
        cls, rpc_url: str | None = None, addresses: Mapping[str, str] | None = None
    ) -> Polymath:
        """Connect over HTTP; ``rpc_url`` defaults to the configured endpoint."""
        url = rpc_url or get_config().get_rpc_url()
        return cls(AsyncWeb3(AsyncHTTPProvider(url)), addresses)

    @property
    def w3(self) -> AsyncWeb3:
        return self._w3

    async def initialize(self) -> None:
        """Bind all platform contracts concurrently."""
        await asyncio.gather(*(wrapper.initialize() for wrapper in self._platform))
        for wrapper in self._platform:
            self._logger.info("%s at %s", type(wrapper).__name__, wrapper.address)

    # ------------------------------------------------------------------
    # Per-address wrappers
    # ------------------------------------------------------------------

    async def _bind(self, wrapper: _W) -> _W:
        await wrapper.initialize()
        self._created.append(wrapper)
        return wrapper

    async def security_token(self, address: str) -> SecurityToken:
        return await self._bind(SecurityToken(self._w3, address))

    async def template(self, address: str) -> Template:
        return await self._bind(Template(self._w3, address))

    async def offering(self, address: str) -> Offering:
        return await self._bind(Offering(self._w3, address, self.poly_token))

    async def offering_factory(self, address: str) -> OfferingFactory:
        return await self._bind(OfferingFactory(self._w3, address))

    async def sto_contract(self, address: str) -> STOContract:
        return await self._bind(STOContract(self._w3, address))

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Release every subscription opened through any wrapper created here."""
        for wrapper in [*self._created, *self._platform]:
            await wrapper.close()
        self._created.clear()

    async def __aenter__(self) -> Polymath:
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
