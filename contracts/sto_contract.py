"""
STOContract wrapper: the earlier single-contract offering, sold for POLY at a
fixed rate between a start and end time.
"""

from __future__ import annotations

from typing import Any

from contracts.base import ContractWrapper
from shared.codecs import as_uint, checksum
from shared.errors import ValidationError


class STOContract(ContractWrapper):
    ARTIFACT = "STOContract"
    EVENTS = ("LogBoughtSecurityToken",)

    async def get_start_time(self) -> int:
        return await self._handle.call("startTime")

    async def get_end_time(self) -> int:
        return await self._handle.call("endTime")

    async def get_owner(self) -> str:
        return await self._handle.call("owner")

    async def get_rate_in_poly(self) -> int:
        return await self._handle.call("rateInPoly")

    async def get_security_token_address(self) -> str:
        return await self._handle.call("securityTokenAddress")

    async def security_token_offering(
        self, owner: str, security_token: str, start_time: int, end_time: int
    ) -> dict[str, Any]:
        """Attach the offering to ``security_token`` for the given window."""
        start_time = as_uint(start_time, "start_time")
        end_time = as_uint(end_time, "end_time")
        if end_time <= start_time:
            raise ValidationError(f"end_time {end_time} must be after start_time {start_time}")
        return await self._handle.send(
            "securityTokenOffering", checksum(security_token), start_time, end_time, sender=owner
        )

    async def buy_security_token_with_poly(
        self, contributor: str, poly_contributed: int
    ) -> dict[str, Any]:
        return await self._handle.send(
            "buySecurityTokenWithPoly",
            as_uint(poly_contributed, "poly_contributed"),
            sender=contributor,
        )
