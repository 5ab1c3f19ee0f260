"""
Compliance wrapper: template registry and the template / offering factory
proposal queues per security token.
"""

from __future__ import annotations

from typing import Any

from contracts.base import ContractWrapper
from shared.codecs import (
    address_or_none,
    as_uint,
    checksum,
    jurisdiction_to_bytes32,
    to_bytes32,
)
from shared.constants import MAX_QUORUM_PERCENT
from shared.errors import DecodeMismatchError, ValidationError
from shared.types import TemplateReputation


class Compliance(ContractWrapper):
    ARTIFACT = "Compliance"
    EVENTS = (
        "LogTemplateCreated",
        "LogNewTemplateProposal",
        "LogCancelTemplateProposal",
        "LogNewContractProposal",
        "LogCancelContractProposal",
    )

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    async def create_template(
        self,
        legal_delegate: str,
        offering_type: str,
        issuer_jurisdiction: str,
        accredited: bool,
        kyc_provider: str,
        details: bytes | str,
        expires: int,
        fee: int,
        quorum: int,
        vesting_period: int,
    ) -> str:
        """
        Deploy a new compliance template owned by ``legal_delegate``.

        Returns the template address emitted in ``LogTemplateCreated``.
        """
        quorum = as_uint(quorum, "quorum")
        if quorum > MAX_QUORUM_PERCENT:
            raise ValidationError(f"quorum must be 0..{MAX_QUORUM_PERCENT}, got {quorum}")

        receipt = await self._handle.send(
            "createTemplate",
            offering_type,
            jurisdiction_to_bytes32(issuer_jurisdiction),
            bool(accredited),
            checksum(kyc_provider),
            to_bytes32(details),
            as_uint(expires, "expires"),
            as_uint(fee, "fee"),
            quorum,
            as_uint(vesting_period, "vesting_period"),
            sender=legal_delegate,
        )
        created = self._handle.process_receipt("LogTemplateCreated", receipt)
        if not created:
            raise DecodeMismatchError("Compliance.createTemplate:LogTemplateCreated", 1, 0)
        template = created[0].args["_template"]
        self._logger.info("Template %s created by %s", template, legal_delegate)
        return template

    async def propose_template(
        self, legal_delegate: str, security_token: str, template: str
    ) -> dict[str, Any]:
        return await self._handle.send(
            "proposeTemplate", checksum(security_token), checksum(template), sender=legal_delegate
        )

    async def cancel_template_proposal(
        self, legal_delegate: str, security_token: str, proposal_index: int
    ) -> dict[str, Any]:
        return await self._handle.send(
            "cancelTemplateProposal",
            checksum(security_token),
            as_uint(proposal_index, "proposal_index"),
            sender=legal_delegate,
        )

    async def get_template_address_by_proposal(
        self, security_token: str, proposal_index: int
    ) -> str | None:
        """Template at ``proposal_index`` of the token's queue; None when the slot is empty."""
        address = await self._handle.call(
            "getTemplateByProposal",
            checksum(security_token),
            as_uint(proposal_index, "proposal_index"),
        )
        return address_or_none(address)

    async def get_all_template_proposals(self, security_token: str) -> list[str]:
        return list(await self._handle.call("getAllTemplateProposals", checksum(security_token)))

    async def get_template_reputation(self, template: str) -> TemplateReputation | None:
        owner, total_raised, times_used, expires = await self._handle.call_tuple(
            "templates", checksum(template), fields=4
        )
        if address_or_none(owner) is None:
            return None
        return TemplateReputation(
            owner=owner,
            total_raised=total_raised,
            times_used=times_used,
            expires=expires,
        )

    async def get_minimum_vesting_period(self) -> int:
        return await self._handle.call("minimumVestingPeriod")

    # ------------------------------------------------------------------
    # Registrar / offering factories
    # ------------------------------------------------------------------

    async def set_registrar_address(self, owner: str, registrar: str) -> dict[str, Any]:
        return await self._handle.send("setRegistrarAddress", checksum(registrar), sender=owner)

    async def register_offering_factory(self, creator: str, factory: str) -> dict[str, Any]:
        return await self._handle.send(
            "registerOfferingFactory", checksum(factory), sender=creator
        )

    async def propose_offering_factory(
        self, creator: str, security_token: str, factory: str
    ) -> dict[str, Any]:
        return await self._handle.send(
            "proposeOfferingFactory", checksum(security_token), checksum(factory), sender=creator
        )

    async def cancel_offering_factory_proposal(
        self, creator: str, security_token: str, proposal_index: int
    ) -> dict[str, Any]:
        return await self._handle.send(
            "cancelOfferingFactoryProposal",
            checksum(security_token),
            as_uint(proposal_index, "proposal_index"),
            sender=creator,
        )

    async def get_offering_factory_by_proposal(
        self, security_token: str, proposal_index: int
    ) -> str | None:
        address = await self._handle.call(
            "getOfferingFactoryByProposal",
            checksum(security_token),
            as_uint(proposal_index, "proposal_index"),
        )
        return address_or_none(address)

    async def get_all_offering_factory_proposals(self, security_token: str) -> list[str]:
        return list(
            await self._handle.call("getAllOfferingFactoryProposals", checksum(security_token))
        )
