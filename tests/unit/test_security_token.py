"""
Unit tests for contracts/security_token.py.
"""

from __future__ import annotations

import asyncio

import pytest

from shared.constants import ZERO_ADDRESS
from shared.errors import DecodeMismatchError, ValidationError
from shared.types import CustomerRole


@pytest.fixture
async def token(patched_config, mock_w3, addresses):
    from contracts.security_token import SecurityToken

    wrapper = SecurityToken(mock_w3, addresses["security_token"])
    await wrapper.initialize()
    return wrapper


class TestReads:
    async def test_delegate_unset_is_none(self, token, stub_call):
        stub_call(token.handle._contract, "delegate", ZERO_ADDRESS)
        assert await token.get_delegate_address() is None

    async def test_delegate(self, token, stub_call, addresses):
        stub_call(token.handle._contract, "delegate", addresses["delegate"])
        assert await token.get_delegate_address() == addresses["delegate"]

    async def test_sto_and_kyc_addresses(self, token, stub_call, addresses):
        stub_call(token.handle._contract, "STO", ZERO_ADDRESS)
        stub_call(token.handle._contract, "KYC", addresses["provider"])
        assert await token.get_sto_contract_address() is None
        assert await token.get_kyc_provider_address() == addresses["provider"]

    async def test_token_metadata(self, token, stub_call):
        contract = token.handle._contract
        stub_call(contract, "name", "Acme Equity")
        stub_call(contract, "symbol", "ACME")
        stub_call(contract, "decimals", 18)
        stub_call(contract, "totalSupply", 10**24)
        assert await token.get_name() == "Acme Equity"
        assert await token.get_symbol() == "ACME"
        assert await token.get_decimals() == 18
        assert await token.get_total_supply() == 10**24

    async def test_offering_state(self, token, stub_call):
        contract = token.handle._contract
        stub_call(contract, "maxPoly", 1000)
        stub_call(contract, "startSTO", 10)
        stub_call(contract, "endSTO", 20)
        stub_call(contract, "hasOfferingStarted", True)
        stub_call(contract, "isSTOProposed", False)
        stub_call(contract, "tokensIssuedBySTO", 55)
        assert await token.get_maximum_poly_contribution() == 1000
        assert await token.get_sto_start() == 10
        assert await token.get_sto_end() == 20
        assert await token.get_offering_status() is True
        assert await token.is_sto_proposed() is False
        assert await token.get_tokens_issued_by_sto() == 55

    async def test_token_details(self, token, stub_call, addresses):
        stub_call(
            token.handle._contract,
            "getTokenDetails",
            (addresses["template"], addresses["delegate"], b"\x01" * 32, addresses["sto"], addresses["provider"]),
        )
        details = await token.get_token_details()
        assert details.template_address == addresses["template"]
        assert details.delegate_address == addresses["delegate"]
        assert details.merkle_root == b"\x01" * 32
        assert details.sto_address == addresses["sto"]
        assert details.kyc_address == addresses["provider"]

    async def test_token_details_shape(self, token, stub_call, addresses):
        stub_call(token.handle._contract, "getTokenDetails", (addresses["template"],) * 4)
        with pytest.raises(DecodeMismatchError):
            await token.get_token_details()

    async def test_shareholder_role_decoded(self, token, stub_call, addresses):
        stub_call(token.handle._contract, "shareholders", (addresses["provider"], True, 1))
        holder = await token.get_shareholder_details(addresses["customer"])
        assert holder.verifier == addresses["provider"]
        assert holder.allowed is True
        assert holder.role is CustomerRole.INVESTOR

    async def test_poly_allocation(self, token, stub_call, addresses):
        stub_call(token.handle._contract, "allocations", (100, 30, 10, 2, 5, False))
        allocation = await token.get_poly_allocation_details(addresses["delegate"])
        assert allocation.amount == 100
        assert allocation.vesting_period == 30
        assert allocation.quorum == 10
        assert allocation.yay_votes == 2
        assert allocation.yay_percent == 5
        assert allocation.frozen is False

    async def test_votes_and_contribution(self, token, stub_call, addresses):
        voted = stub_call(token.handle._contract, "voted", True)
        stub_call(token.handle._contract, "contributedToSTO", 77)
        assert await token.get_voted(addresses["customer"], addresses["delegate"]) is True
        voted.assert_called_once_with(addresses["customer"], addresses["delegate"])
        assert await token.get_contributed_to_sto(addresses["customer"]) == 77


class TestTransactions:
    async def test_select_template(self, token, stub_transact, addresses):
        fn = stub_transact(token.handle._contract, "selectTemplate")
        await token.select_template(addresses["owner"], 0)
        fn.assert_called_once_with(0)

    async def test_select_sto_proposal(self, token, stub_transact, addresses):
        fn = stub_transact(token.handle._contract, "selectOfferingProposal")
        await token.select_sto_proposal(addresses["delegate"], 1)
        fn.assert_called_once_with(1)

    async def test_negative_index_rejected(self, token, addresses):
        with pytest.raises(ValidationError):
            await token.select_template(addresses["owner"], -1)

    async def test_whitelist_and_blacklist(self, token, stub_transact, addresses):
        white = stub_transact(token.handle._contract, "addToWhitelist")
        black = stub_transact(token.handle._contract, "addToBlacklist")
        await token.add_to_whitelist(addresses["owner"], addresses["customer"].lower())
        await token.add_to_blacklist(addresses["owner"], addresses["customer"])
        white.assert_called_once_with(addresses["customer"])
        black.assert_called_once_with(addresses["customer"])

    async def test_update_compliance_proof(self, token, stub_transact, addresses):
        fn = stub_transact(token.handle._contract, "updateComplianceProof")
        await token.update_compliance_proof(addresses["owner"], b"\x02" * 32, b"\x01" * 32)
        fn.assert_called_once_with(b"\x02" * 32, b"\x01" * 32)

    async def test_start_offering(self, token, stub_transact, addresses):
        fn = stub_transact(token.handle._contract, "startOffering")
        await token.start_offering(addresses["owner"])
        fn.assert_called_once_with()

    async def test_withdraw_poly_reports_transfer(
        self, token, stub_transact, stub_receipt_events, event_entry, addresses
    ):
        stub_transact(token.handle._contract, "withdrawPoly")
        stub_receipt_events(
            token.handle._contract,
            "Transfer",
            [event_entry("Transfer", {"from": addresses["security_token"], "to": addresses["delegate"], "value": 5})],
        )
        assert await token.withdraw_poly(addresses["delegate"]) is True

    async def test_withdraw_poly_nothing_moved(self, token, stub_transact, stub_receipt_events, addresses):
        stub_transact(token.handle._contract, "withdrawPoly")
        stub_receipt_events(token.handle._contract, "Transfer", [])
        assert await token.withdraw_poly(addresses["delegate"]) is False

    async def test_vote_to_freeze(self, token, stub_transact, addresses):
        fn = stub_transact(token.handle._contract, "voteToFreeze")
        await token.vote_to_freeze(addresses["customer"], addresses["delegate"])
        fn.assert_called_once_with(addresses["delegate"])
        assert fn.return_value.transact.call_args.args[0]["from"] == addresses["customer"]

    async def test_erc20(self, token, stub_transact, addresses):
        transfer = stub_transact(token.handle._contract, "transfer")
        transfer_from = stub_transact(token.handle._contract, "transferFrom")
        await token.transfer(addresses["owner"], addresses["customer"], 3)
        await token.transfer_from(addresses["owner"], addresses["customer"], addresses["delegate"], 4)
        transfer.assert_called_once_with(addresses["customer"], 3)
        transfer_from.assert_called_once_with(addresses["owner"], addresses["customer"], 4)


class TestWhitelistLogs:
    async def test_roles_translated_and_unknown_dropped(
        self, token, stub_get_logs, event_entry, addresses
    ):
        stub_get_logs(
            token.handle._contract,
            "LogNewWhitelistedAddress",
            [
                event_entry("LogNewWhitelistedAddress", {"_shareholder": addresses["customer"], "_role": 3}, 2),
                event_entry("LogNewWhitelistedAddress", {"_shareholder": addresses["owner"], "_role": 0}, 1),
            ],
        )
        logs = await token.get_logs("LogNewWhitelistedAddress")
        assert len(logs) == 1
        assert logs[0].args["_role"] is CustomerRole.ISSUER
        assert logs[0].args["_shareholder"] == addresses["customer"]

    async def test_subscribe_translates_and_drops_unknown(
        self, token, stub_filter, event_entry, addresses
    ):
        stub_filter(
            token.handle._contract,
            "LogNewWhitelistedAddress",
            [
                [
                    event_entry("LogNewWhitelistedAddress", {"_shareholder": addresses["customer"], "_role": 1}, 1),
                    event_entry("LogNewWhitelistedAddress", {"_shareholder": addresses["owner"], "_role": 9}, 2),
                ],
                [event_entry("LogNewWhitelistedAddress", {"_shareholder": addresses["host"], "_role": 4}, 3)],
            ],
        )
        seen = []
        done = asyncio.Event()

        def callback(err, log):
            seen.append(log)
            if len(seen) == 2:
                done.set()

        await token.subscribe("LogNewWhitelistedAddress", None, callback)
        await asyncio.wait_for(done.wait(), timeout=1)
        await token.close()

        assert [log.args["_role"] for log in seen] == [CustomerRole.INVESTOR, CustomerRole.MARKETMAKER]
        assert seen[0].args["_shareholder"] == addresses["customer"]

    async def test_other_events_untouched(self, token, stub_get_logs, event_entry):
        stub_get_logs(
            token.handle._contract, "LogVoteToFreeze", [event_entry("LogVoteToFreeze", {"_yayPercent": 5})]
        )
        logs = await token.get_logs("LogVoteToFreeze")
        assert logs[0].args == {"_yayPercent": 5}
