"""
Claim Service Module

This module provides a service layer between the transport (REST API) and the
MerkleDistributor: it decodes hex inputs, invokes the distributor and formats
results for JSON responses.
"""

import logging
from typing import Any, Dict, List, Union

from ..distributor import MerkleDistributor
from ..encoding import claim_struct_hash
from ..signatures import Signature, recover_signer
from ..utils import bytes_to_hex, checksum_address, hex_to_bytes32

logger = logging.getLogger(__name__)


class ClaimServiceError(Exception):
    """Custom exception for malformed claim service inputs."""
    pass


class ClaimService:
    """Service for submitting claims and answering read-only queries."""

    def __init__(self, distributor: MerkleDistributor):
        self.distributor = distributor

    @staticmethod
    def parse_account(account: str) -> str:
        try:
            return checksum_address(account)
        except ValueError as e:
            raise ClaimServiceError(f"Invalid account: {e}")

    @staticmethod
    def parse_proof(proof: List[str]) -> List[bytes]:
        try:
            return [hex_to_bytes32(step) for step in proof]
        except ValueError as e:
            raise ClaimServiceError(f"Invalid proof element: {e}")

    @staticmethod
    def parse_signature(v: Union[int, str], r: str, s: str) -> Signature:
        try:
            return Signature.from_hex(v, r, s)
        except ValueError as e:
            raise ClaimServiceError(f"Invalid signature components: {e}")

    def submit_claim(
        self,
        account: str,
        amount: int,
        proof: List[str],
        v: Union[int, str],
        r: str,
        s: str,
    ) -> Dict[str, Any]:
        """
        Submit a claim to the distributor.

        Returns:
            Dictionary describing the completed claim

        Raises:
            ClaimServiceError: If inputs cannot be decoded
            ClaimError: If the distributor rejects the claim
        """
        account = self.parse_account(account)
        proof_bytes = self.parse_proof(proof)
        signature = self.parse_signature(v, r, s)

        logger.info(f"Processing claim for {account} (amount {amount}, proof length {len(proof_bytes)})")
        event = self.distributor.claim(account, amount, proof_bytes, signature)
        return {"account": event.account, "amount": event.amount, "claimed": True}

    def claim_status(self, account: str) -> Dict[str, Any]:
        account = self.parse_account(account)
        return {"account": account, "claimed": self.distributor.is_claimed(account)}

    def distributor_info(self) -> Dict[str, Any]:
        d = self.distributor
        return {
            "merkle_root": bytes_to_hex(d.merkle_root),
            "token": d.token,
            "claim_typehash": bytes_to_hex(d.claim_typehash),
            "domain_separator": bytes_to_hex(d.domain_separator),
            "domain": d.config.domain.to_dict(),
            "claimed_count": len(d.claimed_accounts()),
        }

    def check_signature(self, account: str, amount: int, v: Union[int, str], r: str, s: str) -> Dict[str, Any]:
        """Side-channel signature check; does not consume the claim."""
        account = self.parse_account(account)
        signature = self.parse_signature(v, r, s)
        recovered = recover_signer(self.distributor.authorization_digest(account, amount), signature)
        return {
            "valid": self.distributor.verify_signature(account, amount, signature),
            "recovered_signer": recovered,
        }

    def check_proof(self, account: str, amount: int, proof: List[str]) -> Dict[str, Any]:
        """Side-channel proof check; does not consume the claim."""
        account = self.parse_account(account)
        proof_bytes = self.parse_proof(proof)
        return {
            "valid": self.distributor.verify_proof(account, amount, proof_bytes),
            "leaf": bytes_to_hex(self.distributor.leaf_hash(account, amount)),
        }

    def digests(self, account: str, amount: int) -> Dict[str, Any]:
        account = self.parse_account(account)
        return {
            "account": account,
            "amount": amount,
            "leaf": bytes_to_hex(self.distributor.leaf_hash(account, amount)),
            "struct_hash": bytes_to_hex(claim_struct_hash(account, amount)),
            "digest": bytes_to_hex(self.distributor.authorization_digest(account, amount)),
        }
