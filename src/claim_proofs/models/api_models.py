"""
API Models

This module defines Pydantic models for API request and response validation.
These models ensure proper data structure and type validation for the claim API.
"""

from datetime import datetime, timezone
from typing import List, Optional

from eth_utils import is_address
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import UINT256_MAX


def _check_address(v: str) -> str:
    if not is_address(v):
        raise ValueError("Must be a 20-byte hex address with 0x prefix")
    return v


def _check_bytes32(v: str) -> str:
    if not isinstance(v, str) or not v.startswith("0x") or len(v) != 66:
        raise ValueError("Must be a 32-byte hex string starting with '0x'")
    try:
        bytes.fromhex(v[2:])
    except ValueError:
        raise ValueError("Must be a 32-byte hex string starting with '0x'")
    return v


class ErrorResponse(BaseModel):
    """
    Response model for API errors.

    Attributes:
        error: Error message
        code: Error code (string identifier)
        details: Additional error details
    """
    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
    details: Optional[dict] = Field(default=None, description="Additional error details")


class HealthResponse(BaseModel):
    """Response model for health check endpoint."""
    status: str = Field(..., description="Service status")
    distributor: bool = Field(..., description="Distributor is configured")
    version: str = Field(default="0.1.0", description="Service version")
    timestamp: Optional[str] = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Response timestamp",
    )


class ClaimTarget(BaseModel):
    """Common (account, amount) fields of claim requests."""
    account: str = Field(..., description="Claiming account (hex address)")
    amount: int = Field(..., ge=0, le=UINT256_MAX, description="Claimable amount (uint256)")

    @field_validator('account')
    @classmethod
    def validate_account(cls, v):
        return _check_address(v)


class SignatureFields(BaseModel):
    """Recoverable signature components."""
    v: int = Field(..., ge=0, le=255, description="Recovery identifier (27 or 28)")
    r: str = Field(..., description="Signature r component (32-byte hex)")
    s: str = Field(..., description="Signature s component (32-byte hex)")

    @field_validator('r', 's')
    @classmethod
    def validate_component(cls, v):
        return _check_bytes32(v)


class ClaimRequest(ClaimTarget, SignatureFields):
    """
    Request model for claim submission.

    Attributes:
        account: Account that receives the payout
        amount: Amount recorded for the account in the eligibility tree
        proof: Merkle proof, sibling hashes ordered from leaf to root
        v, r, s: Account's signature over the authorization digest
    """
    proof: List[str] = Field(default_factory=list, description="Merkle proof as 32-byte hex strings")

    @field_validator('proof')
    @classmethod
    def validate_proof_format(cls, v):
        """Validate proof steps are 32-byte hex strings."""
        for step in v:
            _check_bytes32(step)
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "account": "0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
                "amount": 25,
                "proof": [
                    "0x8f8cc4e5ca8ad7ff3d4ae6cf6a9fcfa0f6f2a9c6d4fbb6d7c8b4e3e1a0f9e7d2",
                    "0x1c4b5d8a2d6c0f3b7e9a4c1d2b3f6e8a9c0d1e2f3a4b5c6d7e8f9a0b1c2d3e4f",
                ],
                "v": 27,
                "r": "0x6f0156091cbe912f2d5d1215cc3cd81c0963c8839b93af60e0921b61a19c5430",
                "s": "0x0c71006dd93f3508c432daca21db0095f4b16542782b7986f48a5d0ae3c583d4",
            }
        }
    )


class ProofCheckRequest(ClaimTarget):
    """Request model for the proof verification helper."""
    proof: List[str] = Field(default_factory=list, description="Merkle proof as 32-byte hex strings")

    @field_validator('proof')
    @classmethod
    def validate_proof_format(cls, v):
        for step in v:
            _check_bytes32(step)
        return v


class SignatureCheckRequest(ClaimTarget, SignatureFields):
    """Request model for the signature verification helper."""
    pass


class ClaimResponse(BaseModel):
    """Response model for a successful claim."""
    account: str = Field(..., description="Checksum address that received the payout")
    amount: int = Field(..., description="Amount paid out")
    claimed: bool = Field(default=True, description="Claim status after the call")


class ClaimStatusResponse(BaseModel):
    """Response model for claimed-status queries."""
    account: str = Field(..., description="Checksum address")
    claimed: bool = Field(..., description="Whether the account has claimed")


class DomainInfo(BaseModel):
    name: str
    version: str
    chain_id: int
    verifying_contract: str


class DistributorInfoResponse(BaseModel):
    """
    Response model for the distributor's read-only configuration.

    Attributes:
        merkle_root: Published eligibility root
        token: Distributed asset address
        claim_typehash: keccak256 of the Claim struct type
        domain_separator: EIP-712 domain separator of this deployment
        domain: Signing domain fields
        claimed_count: Number of accounts that have claimed
    """
    merkle_root: str = Field(..., description="Merkle root as hex string")
    token: str = Field(..., description="Distributed asset address")
    claim_typehash: str = Field(..., description="Claim struct type hash as hex string")
    domain_separator: str = Field(..., description="EIP-712 domain separator as hex string")
    domain: DomainInfo
    claimed_count: int = Field(..., description="Number of completed claims")


class SignatureCheckResponse(BaseModel):
    valid: bool = Field(..., description="Whether the signature recovers to the account")
    recovered_signer: Optional[str] = Field(default=None, description="Recovered signer, if recovery succeeded")


class ProofCheckResponse(BaseModel):
    valid: bool = Field(..., description="Whether the proof folds to the merkle root")
    leaf: str = Field(..., description="Leaf hash for (account, amount)")


class DigestResponse(BaseModel):
    """Leaf and authorization digest for a claim record."""
    account: str
    amount: int
    leaf: str = Field(..., description="Merkle leaf as hex string")
    struct_hash: str = Field(..., description="hashStruct(Claim) as hex string")
    digest: str = Field(..., description="EIP-712 authorization digest as hex string")
