"""
Claim Authorization Constants

This module contains the fixed constants shared by the digest builder,
the signature verifier and the claim orchestrator.

References:
- EIP-712 Typed Structured Data Hashing: https://eips.ethereum.org/EIPS/eip-712
- SEC 2 secp256k1 domain parameters: https://www.secg.org/sec2-v2.pdf
"""

from eth_utils import keccak

# ====================
# EIP-712 Type Strings
# ====================

# Domain type used to bind a signature to one deployment on one chain
EIP712_DOMAIN_TYPE = (
    "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
)

# Struct type signed by the account owner
CLAIM_TYPE = "Claim(address account,uint256 amount)"

DOMAIN_TYPEHASH = keccak(text=EIP712_DOMAIN_TYPE)
CLAIM_TYPEHASH = keccak(text=CLAIM_TYPE)

# Prefix for the final EIP-712 digest: "\x19" followed by version byte 0x01
EIP712_PREFIX = b"\x19\x01"

# ====================
# Default Domain
# ====================

DEFAULT_DOMAIN_NAME = "MerkleDistributor"
DEFAULT_DOMAIN_VERSION = "1"
DEFAULT_CHAIN_ID = 1

# ====================
# Numeric Limits
# ====================

UINT256_MAX = 2**256 - 1

# Order of the secp256k1 group
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# Largest accepted s value; anything above is the malleable twin of a low-s signature
SECP256K1_HALF_N = SECP256K1_N // 2

# Recovery identifiers accepted on the wire
VALID_V_VALUES = (27, 28)

HASH_LENGTH = 32
ADDRESS_LENGTH = 20
