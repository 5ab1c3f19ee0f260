"""
PolyToken wrapper: the ERC-20 fee token of the platform.

Also owns the balance-then-allowance pre-flight check every fee-bearing
registration runs before sending its transaction.

Usage:
    poly = PolyToken(w3)
    await poly.initialize()
    await poly.approve(owner, customers.address, fee)
    await poly.assert_can_spend(owner, customers.address, fee)
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from contracts.base import ContractWrapper
from shared.codecs import as_uint, checksum, to_base_units
from shared.errors import InsufficientAllowanceError, InsufficientBalanceError


class PolyToken(ContractWrapper):
    ARTIFACT = "PolyToken"
    EVENTS = ("Transfer", "Approval")

    async def get_total_supply(self) -> int:
        """Total supply in base units."""
        return await self._handle.call("totalSupply")

    async def get_decimals(self) -> int:
        return int(await self._handle.call("decimals"))

    async def get_symbol(self) -> str:
        return await self._handle.call("symbol")

    async def get_balance_of(self, address: str) -> int:
        return await self._handle.call("balanceOf", checksum(address))

    async def get_allowance(self, owner: str, spender: str) -> int:
        """Amount ``spender`` may still withdraw from ``owner``, in base units."""
        return await self._handle.call("allowance", checksum(owner), checksum(spender))

    async def to_base_units(self, amount: Decimal | str | int) -> int:
        """Scale a decimal POLY amount by the token's decimals."""
        return to_base_units(amount, await self.get_decimals())

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def transfer(self, from_address: str, to_address: str, amount: int) -> dict[str, Any]:
        return await self._handle.send(
            "transfer", checksum(to_address), as_uint(amount), sender=from_address
        )

    async def approve(self, owner: str, spender: str, amount: int) -> dict[str, Any]:
        return await self._handle.send(
            "approve", checksum(spender), as_uint(amount), sender=owner
        )

    async def transfer_from(
        self,
        from_address: str,
        to_address: str,
        spender: str,
        amount: int,
    ) -> dict[str, Any]:
        """Move ``amount`` out of ``from_address`` using ``spender``'s allowance."""
        return await self._handle.send(
            "transferFrom",
            checksum(from_address),
            checksum(to_address),
            as_uint(amount),
            sender=spender,
        )

    async def generate_new_tokens(self, amount: int, recipient: str) -> dict[str, Any]:
        """Test-network faucet (``getTokens``); not part of the mainnet token."""
        return await self._handle.send(
            "getTokens", as_uint(amount), checksum(recipient), sender=recipient
        )

    # ------------------------------------------------------------------
    # Pre-flight
    # ------------------------------------------------------------------

    async def assert_can_spend(self, owner: str, spender: str, amount: int) -> None:
        """
        Fail locally when ``owner`` cannot pay ``amount`` through ``spender``.

        Balance is checked first, then allowance. Raises
        InsufficientBalanceError / InsufficientAllowanceError; no transaction
        is sent either way.
        """
        amount = as_uint(amount)
        balance = await self.get_balance_of(owner)
        if balance < amount:
            self._logger.warning(
                "Pre-flight failed: %s balance %s < required %s", owner, balance, amount
            )
            raise InsufficientBalanceError(owner, amount, balance)

        allowance = await self.get_allowance(owner, spender)
        if allowance < amount:
            self._logger.warning(
                "Pre-flight failed: %s allowance to %s is %s < required %s",
                owner,
                spender,
                allowance,
                amount,
            )
            raise InsufficientAllowanceError(owner, spender, amount, allowance)
