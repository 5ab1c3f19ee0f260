"""
SimpleCappedOffering wrapper: a POLY-denominated, time-boxed, capped STO.
"""

from __future__ import annotations

from typing import Any

from web3 import AsyncWeb3

from contracts.base import ContractWrapper
from contracts.poly_token import PolyToken
from shared.codecs import as_uint


class Offering(ContractWrapper):
    ARTIFACT = "SimpleCappedOffering"
    EVENTS = ("LogBoughtSecurityToken",)

    def __init__(
        self,
        w3: AsyncWeb3,
        address: str,
        poly_token: PolyToken | None = None,
    ) -> None:
        super().__init__(w3, address)
        self.poly_token = poly_token

    async def get_poly_raised(self) -> int:
        return await self._handle.call("polyRaised")

    async def get_max_poly(self) -> int:
        return await self._handle.call("maxPoly")

    async def get_start_time(self) -> int:
        return await self._handle.call("startTime")

    async def get_end_time(self) -> int:
        return await self._handle.call("endTime")

    async def get_fx_poly_token_rate(self) -> int:
        """Security tokens issued per POLY contributed."""
        return await self._handle.call("fxPolyToken")

    async def buy(self, contributor: str, poly_contributed: int) -> dict[str, Any]:
        """Contribute POLY; checked against balance and allowance when a PolyToken is attached."""
        amount = as_uint(poly_contributed, "poly_contributed")
        if self.poly_token is not None:
            await self.poly_token.assert_can_spend(contributor, self.address, amount)
        return await self._handle.send("buy", amount, sender=contributor)
