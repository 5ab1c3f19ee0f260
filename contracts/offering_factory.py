"""
SimpleCappedOfferingFactory wrapper: deploys SimpleCappedOffering contracts
for a security token once the factory's proposal is selected.
"""

from __future__ import annotations

from typing import Any

from contracts.base import ContractWrapper
from shared.codecs import as_uint, bytes_to_text, checksum
from shared.errors import ValidationError
from shared.types import FactoryUsageDetails


class OfferingFactory(ContractWrapper):
    ARTIFACT = "SimpleCappedOfferingFactory"

    async def get_description(self) -> str:
        return bytes_to_text(await self._handle.call("description"))

    async def get_vesting_period(self) -> int:
        return await self._handle.call("vestingPeriod")

    async def get_fee(self) -> int:
        return await self._handle.call("fee")

    async def get_quorum(self) -> int:
        return int(await self._handle.call("quorum"))

    async def get_factory_usage_details(self) -> FactoryUsageDetails:
        fee, quorum, vesting_period, owner, description = await self._handle.call_tuple(
            "getUsageDetails", fields=5
        )
        return FactoryUsageDetails(
            fee=fee,
            quorum=quorum,
            vesting_period=vesting_period,
            owner=owner,
            description=bytes_to_text(description),
        )

    async def create_offering(
        self,
        deployer: str,
        start_time: int,
        end_time: int,
        poly_token_rate: int,
        max_poly: int,
        security_token: str,
    ) -> dict[str, Any]:
        start_time = as_uint(start_time, "start_time")
        end_time = as_uint(end_time, "end_time")
        if end_time <= start_time:
            raise ValidationError(f"end_time {end_time} must be after start_time {start_time}")
        return await self._handle.send(
            "createOffering",
            start_time,
            end_time,
            as_uint(poly_token_rate, "poly_token_rate"),
            as_uint(max_poly, "max_poly"),
            checksum(security_token),
            sender=deployer,
        )
