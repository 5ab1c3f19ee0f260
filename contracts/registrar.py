"""
SecurityTokenRegistrar wrapper: creates security tokens and indexes them by ticker.

The host fee is pulled from the creator by the registrar, so creation is
pre-checked against the creator's POLY balance and allowance to the registrar.
"""

from __future__ import annotations

from web3 import AsyncWeb3

from contracts.base import ContractWrapper
from contracts.poly_token import PolyToken
from shared.codecs import address_or_none, as_uint, bytes_to_text, checksum
from shared.constants import MAX_QUORUM_PERCENT
from shared.errors import DecodeMismatchError, ValidationError
from shared.types import SecurityTokenData


class SecurityTokenRegistrar(ContractWrapper):
    ARTIFACT = "SecurityTokenRegistrar"
    EVENTS = ("LogNewSecurityToken",)

    def __init__(self, w3: AsyncWeb3, poly_token: PolyToken, address: str | None = None) -> None:
        super().__init__(w3, address)
        self.poly_token = poly_token

    async def create_security_token(
        self,
        creator: str,
        name: str,
        ticker: str,
        total_supply: int,
        decimals: int,
        owner: str,
        max_poly: int,
        host: str,
        fee: int,
        security_type: int,
        lockup_period: int,
        quorum: int,
    ) -> str:
        """
        Create a security token and return its address from ``LogNewSecurityToken``.

        ``creator`` pays ``fee`` POLY to ``host``.
        """
        if not name or not ticker:
            raise ValidationError("Security token name and ticker must not be empty")
        quorum = as_uint(quorum, "quorum")
        if quorum > MAX_QUORUM_PERCENT:
            raise ValidationError(f"quorum must be 0..{MAX_QUORUM_PERCENT}, got {quorum}")
        fee = as_uint(fee, "fee")

        await self.poly_token.assert_can_spend(creator, self.address, fee)

        receipt = await self._handle.send(
            "createSecurityToken",
            name,
            ticker,
            as_uint(total_supply, "total_supply"),
            as_uint(decimals, "decimals"),
            checksum(owner),
            as_uint(max_poly, "max_poly"),
            checksum(host),
            fee,
            as_uint(security_type, "security_type"),
            as_uint(lockup_period, "lockup_period"),
            quorum,
            sender=creator,
        )
        created = self._handle.process_receipt("LogNewSecurityToken", receipt)
        if not created:
            raise DecodeMismatchError(
                "SecurityTokenRegistrar.createSecurityToken:LogNewSecurityToken", 1, 0
            )
        address = created[0].args["securityTokenAddress"]
        self._logger.info("Security token %s created at %s", ticker, address)
        return address

    async def get_security_token_address(self, ticker: str) -> str | None:
        """Address registered for ``ticker``; None when the ticker is free."""
        return address_or_none(await self._handle.call("getSecurityTokenAddress", ticker))

    async def get_security_token_data(self, security_token: str) -> SecurityTokenData:
        total_supply, owner, ticker, security_type = await self._handle.call_tuple(
            "getSecurityTokenData", checksum(security_token), fields=4
        )
        return SecurityTokenData(
            total_supply=total_supply,
            owner=owner,
            ticker=bytes_to_text(ticker),
            security_type=security_type,
        )

    async def get_poly_token_address(self) -> str:
        return await self._handle.call("polyTokenAddress")

    async def get_customers_address(self) -> str:
        return await self._handle.call("polyCustomersAddress")

    async def get_compliance_address(self) -> str:
        return await self._handle.call("polyComplianceAddress")
