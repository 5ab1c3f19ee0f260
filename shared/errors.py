"""
Error taxonomy for the Polymath client.

Local checks (validation, balance/allowance pre-flight) raise before any
transaction is sent. Provider and on-chain failures are wrapped once in
``OnChainRevertError`` with the original exception chained as ``__cause__``.
"""

from __future__ import annotations

from typing import Any


class PolymathError(Exception):
    """Base error for everything raised by this library."""


class ValidationError(PolymathError, ValueError):
    """Raised when an argument cannot be converted to its wire format."""


class NotInitializedError(PolymathError):
    """Raised when a contract handle is used before ``initialize`` completes."""

    def __init__(self, contract_name: str) -> None:
        super().__init__(
            f"Contract {contract_name} not yet initialized. Call `initialize` first."
        )
        self.contract_name = contract_name


class ContractNotFoundError(PolymathError):
    """Raised when no deployed instance can be located for a descriptor."""

    def __init__(self, address: str | None = None, contract_name: str | None = None) -> None:
        if address is not None:
            message = f'Could not find contract "{address}".'
        elif contract_name is not None:
            message = f"Could not find a deployment of {contract_name} on this network."
        else:
            message = "Could not find contract."
        super().__init__(message)
        self.address = address
        self.contract_name = contract_name


class MissingArtifactError(PolymathError):
    """Raised when a contract artifact file cannot be found."""

    def __init__(self, path: str) -> None:
        super().__init__(f'Could not find contract artifact "{path}".')
        self.path = path


class InsufficientBalanceError(PolymathError):
    """Raised when an account cannot cover a fee before a transaction is sent."""

    def __init__(self, owner: str, required: int, balance: int) -> None:
        super().__init__(
            f"Insufficient POLY balance for {owner}: required {required}, has {balance}"
        )
        self.owner = owner
        self.required = required
        self.balance = balance


class InsufficientAllowanceError(PolymathError):
    """Raised when a spender has not been approved for the required fee."""

    def __init__(self, owner: str, spender: str, required: int, allowance: int) -> None:
        super().__init__(
            f"Insufficient POLY allowance from {owner} to {spender}: "
            f"required {required}, approved {allowance}"
        )
        self.owner = owner
        self.spender = spender
        self.required = required
        self.allowance = allowance


class OnChainRevertError(PolymathError):
    """Raised when a contract call or transaction is rejected."""

    def __init__(self, method: str, args: tuple[Any, ...], reason: str) -> None:
        super().__init__(f"{method}{_format_args(args)} failed: {reason}")
        self.method = method
        self.call_args = args
        self.reason = reason


class UnknownSubscriptionError(PolymathError, KeyError):
    """Raised when unsubscribing an id that is not registered on the handle."""

    def __init__(self, subscription_id: str) -> None:
        super().__init__(f"Unknown subscription id: {subscription_id}")
        self.subscription_id = subscription_id

    def __str__(self) -> str:
        return str(self.args[0])


class DecodeMismatchError(PolymathError):
    """Raised when a returned tuple does not have the expected shape."""

    def __init__(self, method: str, expected: int, actual: int | None) -> None:
        got = "a non-tuple value" if actual is None else f"{actual} fields"
        super().__init__(f"{method} returned {got}, expected {expected} fields")
        self.method = method
        self.expected = expected
        self.actual = actual


class UnauthorizedSenderError(PolymathError):
    """Raised when an owner-only operation is attempted by another account."""

    def __init__(self, method: str, sender: str, owner: str) -> None:
        super().__init__(f"Only owner {owner} can call {method} (sender {sender})")
        self.method = method
        self.sender = sender
        self.owner = owner


def _format_args(args: tuple[Any, ...]) -> str:
    return "(" + ", ".join(repr(a) for a in args) + ")"
