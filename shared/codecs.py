"""
Domain codecs: pure conversions between wire values and domain values.

    role name        <-> uint8 role code      (unknown code decodes to None)
    jurisdiction     <-> bytes32              (upper-cased, zero padded, lossy past 32 bytes)
    decimal amount   <-> integer base units   (never via float)
    address string   -> checksum address

Usage:
    from shared.codecs import role_to_number, jurisdiction_to_bytes32

    role_to_number("investor")            # 1
    jurisdiction_to_bytes32("us-ca")      # b"US-CA" + 27 zero bytes
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import Web3

from shared.constants import BYTES32_WIDTH, ROLE_CODES
from shared.errors import ValidationError
from shared.types import CustomerRole

_CODE_TO_ROLE = {code: CustomerRole(name) for name, code in ROLE_CODES.items()}


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------


def role_to_number(role: CustomerRole | str) -> int:
    """Encode a role name (case-insensitive) or CustomerRole as its uint8 code."""
    if isinstance(role, CustomerRole):
        return ROLE_CODES[role.value]
    if isinstance(role, str) and role.lower() in ROLE_CODES:
        return ROLE_CODES[role.lower()]
    raise ValidationError(f"Unknown customer role: {role!r}")


def number_to_role(code: Any) -> CustomerRole | None:
    """Decode a uint8 role code. Unmapped codes return None, never raise."""
    try:
        return _CODE_TO_ROLE.get(int(code))
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Jurisdictions
# ---------------------------------------------------------------------------


def jurisdiction_to_bytes32(jurisdiction: str) -> bytes:
    """
    Encode an ISO 3166 country or subdivision code as bytes32.

    Upper-cases, then zero-pads or truncates to 32 bytes.
    """
    if not isinstance(jurisdiction, str):
        raise ValidationError(f"Jurisdiction must be a string, got {type(jurisdiction).__name__}")
    try:
        raw = jurisdiction.upper().encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValidationError(f"Jurisdiction must be ASCII: {jurisdiction!r}") from exc
    return raw[:BYTES32_WIDTH].ljust(BYTES32_WIDTH, b"\x00")


def bytes32_to_jurisdiction(value: bytes | str) -> str:
    """Decode a bytes32 jurisdiction (raw bytes or 0x-hex), stripping trailing zero padding."""
    raw = bytes(HexBytes(value))
    return raw.rstrip(b"\x00").decode("ascii", errors="replace")


def bytes_to_text(value: bytes | str) -> str:
    """Decode a fixed-width string field (e.g. bytes8 ticker). Strings pass through."""
    if isinstance(value, str) and not value.startswith("0x"):
        return value
    return bytes32_to_jurisdiction(value)


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def as_uint(value: Any, name: str = "amount") -> int:
    """Validate an arbitrary-precision non-negative integer wire value."""
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError(f"{name} must be an integer, got {type(value).__name__}")
    if isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValidationError(f"{name} must be a whole number, got {value}")
        value = int(value)
    if not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def _scale(dec: Decimal, places: int) -> Decimal:
    # Wide enough that shifting the exponent never rounds the coefficient
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(dec.as_tuple().digits) + abs(places))
        return dec.scaleb(places)


def to_base_units(amount: Decimal | str | int, decimals: int) -> int:
    """
    Convert a decimal token amount to integer base units.

    ``to_base_units("1.5", 18) == 1_500_000_000_000_000_000``. Floats are rejected
    and any precision below one base unit is an error, not a rounding.
    """
    if isinstance(amount, (float, bool)):
        raise ValidationError(f"amount must be Decimal, str or int, got {type(amount).__name__}")
    try:
        dec = Decimal(amount)
    except (InvalidOperation, TypeError) as exc:
        raise ValidationError(f"Invalid amount: {amount!r}") from exc
    if not dec.is_finite():
        raise ValidationError(f"Invalid amount: {amount!r}")
    scaled = _scale(dec, decimals)
    if scaled != scaled.to_integral_value():
        raise ValidationError(f"{amount} has more than {decimals} decimal places")
    return as_uint(int(scaled))


def from_base_units(value: int, decimals: int) -> Decimal:
    """Convert integer base units back to a Decimal token amount, exactly."""
    return _scale(Decimal(as_uint(value, "value")), -decimals)


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


def checksum(address: str) -> ChecksumAddress:
    """Normalize an address to EIP-55 checksum form."""
    try:
        return Web3.to_checksum_address(address)
    except (ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid address: {address!r}") from exc


def address_or_none(address: str | None) -> str | None:
    """Map the zero address (unset contract slot) to None."""
    if address is None or int(address, 16) == 0:
        return None
    return address


# ---------------------------------------------------------------------------
# Hashes
# ---------------------------------------------------------------------------


def to_bytes32(value: bytes | str) -> bytes:
    """Right-pad a hash (raw bytes or 0x-hex) to bytes32. Longer values are rejected."""
    try:
        raw = bytes(HexBytes(value))
    except (ValueError, TypeError) as exc:
        raise ValidationError(f"Invalid bytes32 value: {value!r}") from exc
    if len(raw) > BYTES32_WIDTH:
        raise ValidationError(f"Value is {len(raw)} bytes, bytes32 holds {BYTES32_WIDTH}")
    return raw.ljust(BYTES32_WIDTH, b"\x00")
