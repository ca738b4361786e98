"""
Sorted-Pair Merkle Tree Construction

This module builds trees with the same pair rule the verifier folds with. It
exists so that any tree built locally (for tests or diagnostics) can never
disagree with verification about node ordering.
"""

from typing import List

from .proof import hash_pair


def build_tree(leaves: List[bytes]) -> List[List[bytes]]:
    """
    Build a sorted-pair Merkle tree.

    A node left without a partner at the end of a level is promoted to the
    next level unchanged.

    Args:
        leaves: 32-byte leaf hashes in the order they should be placed

    Returns:
        List of tree levels, tree[0] is the leaves and tree[-1] holds the root

    Raises:
        ValueError: If there are no leaves
    """
    if not leaves:
        raise ValueError("Cannot build a merkle tree without leaves")

    tree = [list(leaves)]
    while len(tree[-1]) > 1:
        level = tree[-1]
        parents = []
        for i in range(0, len(level), 2):
            if i + 1 < len(level):
                parents.append(hash_pair(level[i], level[i + 1]))
            else:
                parents.append(level[i])
        tree.append(parents)
    return tree


def merkle_root(leaves: List[bytes]) -> bytes:
    """Compute the root of a sorted-pair tree over leaves."""
    return build_tree(leaves)[-1][0]


def get_proof(tree: List[List[bytes]], index: int) -> List[bytes]:
    """
    Extract the proof for a leaf, ordered from the leaf towards the root.

    Promoted nodes have no sibling on that level, so nothing is emitted for it.

    Raises:
        ValueError: If index is outside the leaf level
    """
    if index < 0 or index >= len(tree[0]):
        raise ValueError(f"Leaf index {index} out of range (0-{len(tree[0]) - 1})")

    proof = []
    i = index
    for level in tree[:-1]:
        sibling_i = i ^ 1
        if sibling_i < len(level):
            proof.append(level[sibling_i])
        i //= 2
    return proof
