"""
Merkle Proof Verification

This module verifies inclusion proofs against a published root using the
sorted-pair rule: at every level the two 32-byte nodes are ordered by numeric
value before being concatenated and hashed, so a proof carries no left/right
position information.

Interior nodes are hashed once; leaves are double hashed by the encoding module.
"""

from typing import List, Sequence

from eth_utils import keccak

from ..constants import HASH_LENGTH


def hash_pair(a: bytes, b: bytes) -> bytes:
    """
    Hash two 32-byte nodes in ascending numeric order.

    Equal-width big-endian values compare numerically exactly as the raw
    bytes compare, so ordering the bytes orders the numbers.

    Examples:
        >>> hash_pair(x, y) == hash_pair(y, x)
        True
    """
    if a <= b:
        return keccak(a + b)
    return keccak(b + a)


def process_proof(leaf: bytes, proof: Sequence[bytes]) -> bytes:
    """
    Fold a proof over a leaf and return the computed root.

    Args:
        leaf: 32-byte leaf hash
        proof: Sibling hashes ordered from the leaf towards the root

    Returns:
        The root implied by the leaf and proof
    """
    computed = leaf
    for sibling in proof:
        computed = hash_pair(computed, sibling)
    return computed


def verify_proof(root: bytes, leaf: bytes, proof: Sequence[bytes]) -> bool:
    """
    Verify a Merkle inclusion proof.

    An empty proof is valid only for a single-leaf tree, where the leaf is the
    root. A proof containing any element that is not exactly 32 bytes is
    rejected.

    Args:
        root: Published 32-byte root
        leaf: 32-byte leaf hash
        proof: Sibling hashes ordered from the leaf towards the root

    Returns:
        True if the proof folds to root
    """
    if len(leaf) != HASH_LENGTH or len(root) != HASH_LENGTH:
        return False
    if any(len(sibling) != HASH_LENGTH for sibling in proof):
        return False
    return process_proof(leaf, proof) == root


def batch_verify_proofs(
    root: bytes,
    leaves: List[bytes],
    proofs: List[List[bytes]],
) -> List[bool]:
    """
    Verify multiple proofs against the same root.

    Returns:
        List of boolean results, one per (leaf, proof) pair
    """
    return [verify_proof(root, leaf, proof) for leaf, proof in zip(leaves, proofs)]
