"""
SecurityToken wrapper: one issued security token and its offering lifecycle.

Covers the ERC-20 surface, compliance state (template, merkle proof,
whitelist/blacklist), STO selection and the POLY allocation vote-to-freeze flow.
"""

from __future__ import annotations

from typing import Any

from contracts.base import ContractWrapper
from shared.codecs import (
    address_or_none,
    as_uint,
    bytes_to_text,
    checksum,
    number_to_role,
    to_bytes32,
)
from shared.types import PolyAllocation, Shareholder, TokenDetails


class SecurityToken(ContractWrapper):
    ARTIFACT = "SecurityToken"
    EVENTS = (
        "LogTemplateSet",
        "LogUpdatedComplianceProof",
        "LogSetSTOContract",
        "LogNewWhitelistedAddress",
        "LogNewBlacklistedAddress",
        "LogVoteToFreeze",
        "LogTokenIssued",
        "Transfer",
        "Approval",
    )
    ROLE_FIELDS = {"LogNewWhitelistedAddress": "_role"}

    # ------------------------------------------------------------------
    # Token reads
    # ------------------------------------------------------------------

    async def get_name(self) -> str:
        return bytes_to_text(await self._handle.call("name"))

    async def get_symbol(self) -> str:
        return bytes_to_text(await self._handle.call("symbol"))

    async def get_owner_address(self) -> str:
        return await self._handle.call("owner")

    async def get_total_supply(self) -> int:
        return await self._handle.call("totalSupply")

    async def get_decimals(self) -> int:
        return int(await self._handle.call("decimals"))

    async def get_balance_of(self, address: str) -> int:
        return await self._handle.call("balanceOf", checksum(address))

    async def get_allowance(self, owner: str, spender: str) -> int:
        return await self._handle.call("allowance", checksum(owner), checksum(spender))

    # ------------------------------------------------------------------
    # Compliance / offering reads
    # ------------------------------------------------------------------

    async def get_delegate_address(self) -> str | None:
        """The legal delegate, or None until a template is selected."""
        return address_or_none(await self._handle.call("delegate"))

    async def get_merkle_root(self) -> bytes:
        return bytes(await self._handle.call("merkleRoot"))

    async def get_kyc_provider_address(self) -> str | None:
        return address_or_none(await self._handle.call("KYC"))

    async def get_sto_contract_address(self) -> str | None:
        return address_or_none(await self._handle.call("STO"))

    async def get_maximum_poly_contribution(self) -> int:
        return await self._handle.call("maxPoly")

    async def get_sto_start(self) -> int:
        return await self._handle.call("startSTO")

    async def get_sto_end(self) -> int:
        return await self._handle.call("endSTO")

    async def get_offering_status(self) -> bool:
        return await self._handle.call("hasOfferingStarted")

    async def is_sto_proposed(self) -> bool:
        return await self._handle.call("isSTOProposed")

    async def get_tokens_issued_by_sto(self) -> int:
        return await self._handle.call("tokensIssuedBySTO")

    async def get_token_details(self) -> TokenDetails:
        template, delegate, merkle_root, sto, kyc = await self._handle.call_tuple(
            "getTokenDetails", fields=5
        )
        return TokenDetails(
            template_address=template,
            delegate_address=delegate,
            merkle_root=bytes(merkle_root),
            sto_address=sto,
            kyc_address=kyc,
        )

    async def get_shareholder_details(self, shareholder: str) -> Shareholder:
        verifier, allowed, role_code = await self._handle.call_tuple(
            "shareholders", checksum(shareholder), fields=3
        )
        return Shareholder(verifier=verifier, allowed=allowed, role=number_to_role(role_code))

    async def get_poly_allocation_details(self, stakeholder: str) -> PolyAllocation:
        amount, vesting_period, quorum, yay_votes, yay_percent, frozen = (
            await self._handle.call_tuple("allocations", checksum(stakeholder), fields=6)
        )
        return PolyAllocation(
            amount=amount,
            vesting_period=vesting_period,
            quorum=quorum,
            yay_votes=yay_votes,
            yay_percent=yay_percent,
            frozen=frozen,
        )

    async def get_contributed_to_sto(self, contributor: str) -> int:
        return await self._handle.call("contributedToSTO", checksum(contributor))

    async def get_voted(self, voter: str, recipient: str) -> bool:
        """Whether ``voter`` has voted to freeze ``recipient``'s POLY allocation."""
        return await self._handle.call("voted", checksum(voter), checksum(recipient))

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def update_compliance_proof(
        self, owner_or_delegate: str, new_merkle_root: bytes | str, merkle_root: bytes | str
    ) -> dict[str, Any]:
        return await self._handle.send(
            "updateComplianceProof",
            to_bytes32(new_merkle_root),
            to_bytes32(merkle_root),
            sender=owner_or_delegate,
        )

    async def select_template(self, owner: str, template_index: int) -> dict[str, Any]:
        return await self._handle.send(
            "selectTemplate", as_uint(template_index, "template_index"), sender=owner
        )

    async def select_sto_proposal(self, delegate: str, proposal_index: int) -> dict[str, Any]:
        return await self._handle.send(
            "selectOfferingProposal", as_uint(proposal_index, "proposal_index"), sender=delegate
        )

    async def start_offering(self, owner: str) -> dict[str, Any]:
        return await self._handle.send("startOffering", sender=owner)

    async def add_to_whitelist(self, owner: str, investor: str) -> dict[str, Any]:
        return await self._handle.send("addToWhitelist", checksum(investor), sender=owner)

    async def add_to_blacklist(self, owner: str, address: str) -> dict[str, Any]:
        return await self._handle.send("addToBlacklist", checksum(address), sender=owner)

    async def withdraw_poly(self, address: str) -> bool:
        """Withdraw a vested POLY allocation. True when POLY actually moved."""
        receipt = await self._handle.send("withdrawPoly", sender=address)
        return bool(self._handle.process_receipt("Transfer", receipt))

    async def vote_to_freeze(self, shareholder: str, recipient: str) -> dict[str, Any]:
        return await self._handle.send("voteToFreeze", checksum(recipient), sender=shareholder)

    async def transfer(self, from_address: str, to_address: str, amount: int) -> dict[str, Any]:
        return await self._handle.send(
            "transfer", checksum(to_address), as_uint(amount), sender=from_address
        )

    async def approve(self, owner: str, spender: str, amount: int) -> dict[str, Any]:
        return await self._handle.send(
            "approve", checksum(spender), as_uint(amount), sender=owner
        )

    async def transfer_from(
        self, from_address: str, to_address: str, spender: str, amount: int
    ) -> dict[str, Any]:
        return await self._handle.send(
            "transferFrom",
            checksum(from_address),
            checksum(to_address),
            as_uint(amount),
            sender=spender,
        )
