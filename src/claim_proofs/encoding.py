"""
Claim Encoding and Digest Derivation

This module derives the two independent hashes of a claim record:

- the Merkle leaf, keccak256(keccak256(abi.encode(account, amount))), which is
  the value the eligibility tree commits to
- the EIP-712 authorization digest, which is the value the account owner signs

Leaves are hashed twice and interior nodes once, so a 64-byte interior node
preimage never hashes to a leaf. The leaf never includes the domain, and the
digest never includes the leaf.
"""

from typing import Any, Dict, Union

from eth_abi import encode
from eth_utils import keccak

from .config import DomainConfig
from .constants import (
    CLAIM_TYPEHASH,
    DOMAIN_TYPEHASH,
    EIP712_PREFIX,
)
from .utils import checksum_address, validate_amount

Address = Union[str, bytes]


def encode_claim(account: Address, amount: int) -> bytes:
    """
    ABI-encode a claim record as (address, uint256).

    Args:
        account: Claiming account
        amount: Claimable amount (uint256)

    Returns:
        64 bytes: the account left-padded to 32 bytes followed by the amount
    """
    return encode(
        ["address", "uint256"],
        [checksum_address(account), validate_amount(amount)],
    )


def leaf_hash(account: Address, amount: int) -> bytes:
    """
    Compute the Merkle leaf for a claim record.

    Examples:
        >>> leaf = leaf_hash("0x70997970C51812dc3A010C7d01b50e0d17dc79C8", 25)
        >>> len(leaf)
        32
    """
    return keccak(keccak(encode_claim(account, amount)))


def domain_separator(domain: DomainConfig) -> bytes:
    """
    Compute the EIP-712 domain separator for a deployment.

    Args:
        domain: Signing domain (name, version, chain id, verifying contract)

    Returns:
        32-byte domain separator
    """
    return keccak(
        encode(
            ["bytes32", "bytes32", "bytes32", "uint256", "address"],
            [
                DOMAIN_TYPEHASH,
                keccak(text=domain.name),
                keccak(text=domain.version),
                domain.chain_id,
                checksum_address(domain.verifying_contract),
            ],
        )
    )


def claim_struct_hash(account: Address, amount: int) -> bytes:
    """Compute hashStruct(Claim) for a claim record."""
    return keccak(
        encode(
            ["bytes32", "address", "uint256"],
            [CLAIM_TYPEHASH, checksum_address(account), validate_amount(amount)],
        )
    )


def authorization_digest(domain: DomainConfig, account: Address, amount: int) -> bytes:
    """
    Compute the digest the account owner must sign to authorize a claim.

    digest = keccak256("\\x19\\x01" || domainSeparator || hashStruct(Claim))

    Args:
        domain: Signing domain of the verifying deployment
        account: Claiming account
        amount: Claimable amount

    Returns:
        32-byte authorization digest
    """
    return keccak(
        EIP712_PREFIX + domain_separator(domain) + claim_struct_hash(account, amount)
    )


def claim_typed_data(domain: DomainConfig, account: Address, amount: int) -> Dict[str, Any]:
    """
    Build the EIP-712 typed data a wallet signs for a claim.

    The result hashes to exactly authorization_digest(domain, account, amount).
    """
    return {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            "Claim": [
                {"name": "account", "type": "address"},
                {"name": "amount", "type": "uint256"},
            ],
        },
        "primaryType": "Claim",
        "domain": {
            "name": domain.name,
            "version": domain.version,
            "chainId": domain.chain_id,
            "verifyingContract": domain.verifying_contract,
        },
        "message": {
            "account": checksum_address(account),
            "amount": validate_amount(amount),
        },
    }
