"""
Claim Proofs

Authorization engine for one-time Merkle distributions: leaf and EIP-712
digest derivation, sorted-pair Merkle proof verification, signature recovery
and exactly-once claim processing.

Usage:
    from claim_proofs import MerkleDistributor, InMemoryLedger, load_config

    config = load_config()
    ledger = InMemoryLedger(config.token, config.domain.verifying_contract)
    distributor = MerkleDistributor(config, ledger)
    distributor.claim(account, amount, proof, signature)
"""

from .config import ConfigError, DistributorConfig, DomainConfig, load_config, load_config_file
from .distributor import (
    AlreadyClaimedError,
    ClaimError,
    ClaimEvent,
    InvalidProofError,
    InvalidSignatureError,
    MerkleDistributor,
    TransferFailedError,
)
from .encoding import authorization_digest, claim_struct_hash, domain_separator, leaf_hash
from .ledger import AssetLedger, InMemoryLedger, InsufficientBalanceError, LedgerError
from .merkle import verify_proof
from .signatures import Signature, recover_signer, sign_claim, verify_signature

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DistributorConfig",
    "DomainConfig",
    "load_config",
    "load_config_file",
    "AlreadyClaimedError",
    "ClaimError",
    "ClaimEvent",
    "InvalidProofError",
    "InvalidSignatureError",
    "MerkleDistributor",
    "TransferFailedError",
    "authorization_digest",
    "claim_struct_hash",
    "domain_separator",
    "leaf_hash",
    "AssetLedger",
    "InMemoryLedger",
    "InsufficientBalanceError",
    "LedgerError",
    "verify_proof",
    "Signature",
    "recover_signer",
    "sign_claim",
    "verify_signature",
]
