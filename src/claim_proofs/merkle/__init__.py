"""
Merkle Tree Operations

This package provides sorted-pair Merkle proof verification and the matching
tree construction helpers:
- proof: pair hashing, proof folding and verification
- tree: tree building and proof extraction using the same pair rule
"""

# Proof verification
from .proof import (
    hash_pair,
    process_proof,
    verify_proof,
    batch_verify_proofs,
)

# Tree building utilities
from .tree import (
    build_tree,
    merkle_root,
    get_proof,
)

__all__ = [
    # Proof functions
    "hash_pair",
    "process_proof",
    "verify_proof",
    "batch_verify_proofs",
    # Tree utilities
    "build_tree",
    "merkle_root",
    "get_proof",
]
