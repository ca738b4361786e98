"""
Claim API Package

This package provides the claim submission surface and its client:

- ClaimService: service layer between transports and the MerkleDistributor
- ClaimAPIClient: HTTP client for a running claim API server

Usage:
    from claim_proofs.api import ClaimAPIClient

    client = ClaimAPIClient()
    status = client.get_claim_status("0x...")
"""

from .claim_client import ClaimAPIClient, ClaimAPIError
from .claim_service import ClaimService, ClaimServiceError

__all__ = [
    'ClaimAPIClient',
    'ClaimAPIError',
    'ClaimService',
    'ClaimServiceError',
]
