"""
Utility Functions

This package provides helpers for hex string handling, address normalization
and amount validation used throughout the claim engine.
"""

from .hex_helpers import (
    hex_to_bytes,
    bytes_to_hex,
    hex_to_bytes32,
    canonical_address,
    checksum_address,
    validate_amount,
)

__all__ = [
    'hex_to_bytes',
    'bytes_to_hex',
    'hex_to_bytes32',
    'canonical_address',
    'checksum_address',
    'validate_amount',
]
