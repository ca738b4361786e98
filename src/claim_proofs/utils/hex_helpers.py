"""
Hex String and Address Utilities

This module provides utilities for converting between the hex strings used in
JSON payloads and command-line arguments and the raw bytes used for hashing.
"""

from typing import Optional, Union

from eth_utils import is_address, to_canonical_address, to_checksum_address

from ..constants import ADDRESS_LENGTH, HASH_LENGTH, UINT256_MAX


def hex_to_bytes(hex_str: str, expected_bytes: Optional[int] = None) -> bytes:
    """
    Convert a hex string to bytes.

    Args:
        hex_str: Hex string (with or without '0x' prefix)
        expected_bytes: Optional expected byte length for validation

    Returns:
        Bytes representation of the hex string

    Raises:
        ValueError: If the string is not valid hex or has the wrong length

    Examples:
        >>> hex_to_bytes("0x1234")
        b'\x12\x34'
    """
    if not isinstance(hex_str, str):
        raise ValueError(f"Expected a hex string, got {type(hex_str).__name__}")

    hex_part = hex_str[2:] if hex_str.startswith(("0x", "0X")) else hex_str

    if not all(c in "0123456789abcdefABCDEF" for c in hex_part):
        raise ValueError(f"Invalid hex string: {hex_str}")

    # Pad to even length
    if len(hex_part) % 2 == 1:
        hex_part = "0" + hex_part

    data = bytes.fromhex(hex_part)
    if expected_bytes is not None and len(data) != expected_bytes:
        raise ValueError(f"Expected {expected_bytes} bytes, got {len(data)} bytes")
    return data


def bytes_to_hex(data: bytes, prefix: bool = True) -> str:
    """
    Convert bytes to a hex string.

    Examples:
        >>> bytes_to_hex(b'\x12\x34')
        "0x1234"
        >>> bytes_to_hex(b'\x12\x34', prefix=False)
        "1234"
    """
    hex_str = data.hex()
    return f"0x{hex_str}" if prefix else hex_str


def hex_to_bytes32(value: Union[str, bytes]) -> bytes:
    """Convert a 32-byte hash given as hex or bytes into bytes."""
    if isinstance(value, (bytes, bytearray)):
        if len(value) != HASH_LENGTH:
            raise ValueError(f"Expected {HASH_LENGTH} bytes, got {len(value)} bytes")
        return bytes(value)
    return hex_to_bytes(value, HASH_LENGTH)


def canonical_address(account: Union[str, bytes]) -> bytes:
    """
    Normalize an account to its canonical 20-byte form.

    Accepts a 0x-prefixed hex address in any case, or 20 raw bytes.

    Raises:
        ValueError: If the value is not a valid address
    """
    if isinstance(account, (bytes, bytearray)):
        if len(account) != ADDRESS_LENGTH:
            raise ValueError(f"Address must be {ADDRESS_LENGTH} bytes, got {len(account)}")
        return bytes(account)
    if not isinstance(account, str) or not is_address(account):
        raise ValueError(f"Invalid address: {account!r}")
    return to_canonical_address(account)


def checksum_address(account: Union[str, bytes]) -> str:
    """Render an account as an EIP-55 checksum string."""
    return to_checksum_address(canonical_address(account))


def validate_amount(amount: int) -> int:
    """
    Validate that an amount fits the uint256 range.

    Raises:
        ValueError: If amount is not an int or is out of range
    """
    # bool is an int subclass but never a meaningful amount
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValueError(f"Amount must be an integer, got {type(amount).__name__}")
    if amount < 0 or amount > UINT256_MAX:
        raise ValueError(f"Amount {amount} is outside the uint256 range")
    return amount
