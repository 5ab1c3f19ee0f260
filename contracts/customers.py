"""
Customers wrapper: KYC provider registry and customer verification records.

Registering as a provider costs ``newProviderFee`` POLY and each verification
costs the customer the provider's verification fee. Both are pulled by the
Customers contract via ``transferFrom``, so both are pre-checked against the
payer's balance and allowance to this contract before sending.
"""

from __future__ import annotations

from typing import Any

from web3 import AsyncWeb3

from contracts.base import ContractWrapper
from contracts.poly_token import PolyToken
from shared.codecs import (
    as_uint,
    bytes32_to_jurisdiction,
    checksum,
    jurisdiction_to_bytes32,
    number_to_role,
    role_to_number,
    to_bytes32,
)
from shared.errors import ValidationError
from shared.types import Customer, CustomerRole, KYCProvider


class Customers(ContractWrapper):
    ARTIFACT = "Customers"
    EVENTS = ("LogNewProvider", "LogCustomerVerified")
    ROLE_FIELDS = {"LogCustomerVerified": "role"}

    def __init__(self, w3: AsyncWeb3, poly_token: PolyToken, address: str | None = None) -> None:
        super().__init__(w3, address)
        self.poly_token = poly_token

    # ------------------------------------------------------------------
    # KYC providers
    # ------------------------------------------------------------------

    async def get_new_provider_fee(self) -> int:
        return await self._handle.call("newProviderFee")

    async def get_kyc_provider_by_address(self, address: str) -> KYCProvider | None:
        """The registered provider at ``address``, or None (``joined == 0``)."""
        name, joined, details_hash, fee = await self._handle.call_tuple(
            "providers", checksum(address), fields=4
        )
        if joined == 0:
            return None
        return KYCProvider(
            name=name,
            joined=joined,
            details_hash=bytes(details_hash),
            verification_fee=fee,
        )

    async def new_kyc_provider(
        self,
        provider_address: str,
        name: str,
        details_hash: bytes | str,
        verification_fee: int,
    ) -> dict[str, Any]:
        """
        Register ``provider_address`` as a KYC provider.

        The registration fee is checked against the provider's POLY balance
        and its allowance to this contract before anything is sent.
        """
        if not name:
            raise ValidationError("KYC provider name must not be empty")
        details = to_bytes32(details_hash)
        fee = as_uint(verification_fee, "verification_fee")

        registration_fee = await self.get_new_provider_fee()
        await self.poly_token.assert_can_spend(provider_address, self.address, registration_fee)

        return await self._handle.send(
            "newProvider",
            checksum(provider_address),
            name,
            details,
            fee,
            sender=provider_address,
        )

    async def change_verification_fee(self, kyc_provider: str, new_fee: int) -> dict[str, Any]:
        return await self._handle.send(
            "changeFee", as_uint(new_fee, "new_fee"), sender=kyc_provider
        )

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    async def verify_customer(
        self,
        kyc_provider: str,
        customer: str,
        country_jurisdiction: str,
        division_jurisdiction: str,
        role: CustomerRole | str,
        accredited: bool,
        expires: int,
    ) -> dict[str, Any]:
        """
        Record that ``kyc_provider`` verified ``customer``.

        Jurisdictions are ISO 3166-1 country and ISO 3166-2 subdivision codes.
        The customer pays the provider's verification fee.
        """
        role_code = role_to_number(role)
        country = jurisdiction_to_bytes32(country_jurisdiction)
        division = jurisdiction_to_bytes32(division_jurisdiction)
        expires = as_uint(expires, "expires")

        provider = await self.get_kyc_provider_by_address(kyc_provider)
        if provider is None:
            raise ValidationError(f"{kyc_provider} is not a registered KYC provider")
        if provider.verification_fee > 0:
            await self.poly_token.assert_can_spend(
                customer, self.address, provider.verification_fee
            )

        return await self._handle.send(
            "verifyCustomer",
            checksum(customer),
            country,
            division,
            role_code,
            bool(accredited),
            expires,
            sender=kyc_provider,
        )

    async def get_customer(self, kyc_provider: str, customer: str) -> Customer | None:
        """
        A customer's record as verified by ``kyc_provider``.

        None when no record exists (role code 0). A non-zero role code with no
        known name yields a record with ``role=None``.
        """
        country, division, accredited, role_code, verified, expires = (
            await self._handle.call_tuple(
                "getCustomer", checksum(kyc_provider), checksum(customer), fields=6
            )
        )
        if role_code == 0:
            return None
        return Customer(
            country_jurisdiction=bytes32_to_jurisdiction(country),
            division_jurisdiction=bytes32_to_jurisdiction(division),
            accredited=accredited,
            role=number_to_role(role_code),
            verified=verified,
            expires=expires,
        )
