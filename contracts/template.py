"""
Template wrapper: one compliance rule-set proposed by a legal delegate.

Owner-only operations are checked locally against ``getUsageDetails`` before
sending, and ``check_template_requirements`` answers False from the individual
getters instead of letting the contract revert.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from contracts.base import ContractWrapper
from shared.codecs import (
    bytes32_to_jurisdiction,
    bytes_to_text,
    checksum,
    jurisdiction_to_bytes32,
    role_to_number,
    to_bytes32,
)
from shared.errors import UnauthorizedSenderError, ValidationError
from shared.types import CustomerRole, TemplateDetails, TemplateUsageDetails


class Template(ContractWrapper):
    ARTIFACT = "Template"
    EVENTS = ("DetailsUpdated",)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    async def add_jurisdiction(
        self,
        legal_delegate: str,
        jurisdictions: Sequence[str],
        allowed: Sequence[bool],
    ) -> dict[str, Any]:
        """Allow or disallow ISO 3166-1 country codes, pairwise with ``allowed``."""
        return await self._handle.send(
            "addJurisdiction",
            *self._pair_jurisdictions(jurisdictions, allowed),
            sender=legal_delegate,
        )

    async def add_division_jurisdiction(
        self,
        legal_delegate: str,
        divisions: Sequence[str],
        allowed: Sequence[bool],
    ) -> dict[str, Any]:
        """Allow or disallow ISO 3166-2 subdivision codes, pairwise with ``allowed``."""
        return await self._handle.send(
            "addDivisionJurisdiction",
            *self._pair_jurisdictions(divisions, allowed),
            sender=legal_delegate,
        )

    @staticmethod
    def _pair_jurisdictions(
        jurisdictions: Sequence[str], allowed: Sequence[bool]
    ) -> tuple[list[bytes], list[bool]]:
        if len(jurisdictions) != len(allowed):
            raise ValidationError(
                f"{len(jurisdictions)} jurisdictions but {len(allowed)} allowed flags"
            )
        return [jurisdiction_to_bytes32(j) for j in jurisdictions], [bool(a) for a in allowed]

    async def add_roles(
        self, legal_delegate: str, roles: Sequence[CustomerRole | str]
    ) -> dict[str, Any]:
        return await self._handle.send(
            "addRoles", [role_to_number(r) for r in roles], sender=legal_delegate
        )

    async def update_template_details(
        self, legal_delegate: str, details: bytes | str
    ) -> dict[str, Any]:
        """Point the template at a new off-chain details hash. Owner only."""
        if not details:
            raise ValidationError("Template details must not be empty")
        details_bytes = to_bytes32(details)
        await self._require_owner("updateDetails", legal_delegate)
        return await self._handle.send("updateDetails", details_bytes, sender=legal_delegate)

    async def finalize_template(self, legal_delegate: str) -> dict[str, Any]:
        """Lock the template against further changes. Owner only."""
        await self._require_owner("finalizeTemplate", legal_delegate)
        return await self._handle.send("finalizeTemplate", sender=legal_delegate)

    async def _require_owner(self, method: str, sender: str) -> None:
        owner = (await self.get_template_usage_details()).owner
        if checksum(sender) != checksum(owner):
            raise UnauthorizedSenderError(f"Template.{method}", sender, owner)

    async def check_template_requirements(
        self,
        country_jurisdiction: str,
        division_jurisdiction: str,
        accredited: bool,
        role: CustomerRole | str,
    ) -> bool:
        """
        True when an investor with these attributes may hold the token.

        Answers ``False`` locally, without consulting ``checkTemplateRequirements``,
        when the country, the division or the role is missing from the template's
        allow-lists, or when accreditation is required and ``accredited`` is false.
        A division that is not allow-listed therefore fails here even if the
        contract would accept the investor on country alone. The contract's own
        check runs only once every local check passes.
        """
        country = jurisdiction_to_bytes32(country_jurisdiction)
        division = jurisdiction_to_bytes32(division_jurisdiction)
        role_code = role_to_number(role)

        if not await self._handle.call("allowedJurisdictions", country):
            return False
        if not await self._handle.call("allowedDivisionJurisdictions", division):
            return False
        if not await self._handle.call("allowedRoles", role_code):
            return False
        if await self.check_if_accreditation_is_required() and not accredited:
            return False

        return bool(
            await self._handle.call(
                "checkTemplateRequirements", country, division, bool(accredited), role_code
            )
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_template_details(self) -> TemplateDetails:
        details_hash, finalized = await self._handle.call_tuple("getTemplateDetails", fields=2)
        return TemplateDetails(details_hash=bytes(details_hash), finalized=finalized)

    async def get_template_usage_details(self) -> TemplateUsageDetails:
        fee, quorum, vesting_period, owner, kyc_provider = await self._handle.call_tuple(
            "getUsageDetails", fields=5
        )
        return TemplateUsageDetails(
            fee=fee,
            quorum=quorum,
            vesting_period=vesting_period,
            owner=owner,
            kyc_provider=kyc_provider,
        )

    async def get_offering_type(self) -> str:
        return bytes_to_text(await self._handle.call("offeringType"))

    async def get_issuer_jurisdiction(self) -> str:
        return bytes32_to_jurisdiction(await self._handle.call("issuerJurisdiction"))

    async def check_if_country_jurisdiction_is_allowed(self, jurisdiction: str) -> bool:
        return await self._handle.call("allowedJurisdictions", jurisdiction_to_bytes32(jurisdiction))

    async def check_if_division_jurisdiction_is_allowed(self, jurisdiction: str) -> bool:
        return await self._handle.call(
            "allowedDivisionJurisdictions", jurisdiction_to_bytes32(jurisdiction)
        )

    async def check_if_role_is_allowed(self, role: CustomerRole | str) -> bool:
        return await self._handle.call("allowedRoles", role_to_number(role))

    async def check_if_accreditation_is_required(self) -> bool:
        return await self._handle.call("accredited")

    async def get_template_expiry(self) -> int:
        return int(await self._handle.call("expires"))
