"""
API Models Package

This package contains request and response models for the claim API.
It includes Pydantic models for validation and serialization of:

- Claim submissions (account, amount, proof, signature)
- Read-only queries (claimed status, distributor configuration, digests)
- Verification helpers and error responses

Usage:
    from claim_proofs.models import ClaimRequest, ClaimResponse

    request = ClaimRequest(account="0x...", amount=25, proof=[...], v=27, r="0x...", s="0x...")
"""

from .api_models import (
    ClaimRequest,
    ClaimResponse,
    ClaimStatusResponse,
    DigestResponse,
    DistributorInfoResponse,
    ErrorResponse,
    HealthResponse,
    ProofCheckRequest,
    ProofCheckResponse,
    SignatureCheckRequest,
    SignatureCheckResponse,
)

__all__ = [
    'ClaimRequest',
    'ClaimResponse',
    'ClaimStatusResponse',
    'DigestResponse',
    'DistributorInfoResponse',
    'ErrorResponse',
    'HealthResponse',
    'ProofCheckRequest',
    'ProofCheckResponse',
    'SignatureCheckRequest',
    'SignatureCheckResponse',
]
