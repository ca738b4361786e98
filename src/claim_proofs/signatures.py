"""
Claim Signature Recovery and Verification

This module recovers the signer of an authorization digest from a recoverable
secp256k1 signature (v, r, s) and compares it with the account named in the
claim. Malformed signatures are expected adversarial input, so recovery
reports failure as None instead of raising.

It also provides the off-system signing helper used by account owners to
authorize a claim for a relayer.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from .config import DomainConfig
from .constants import HASH_LENGTH, SECP256K1_HALF_N, SECP256K1_N, VALID_V_VALUES
from .encoding import claim_typed_data
from .utils import bytes_to_hex, canonical_address, hex_to_bytes, hex_to_bytes32

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Signature:
    """
    Recoverable ECDSA signature as submitted with a claim.

    Attributes:
        v: Recovery identifier (27 or 28 for a well-formed signature)
        r: 32-byte r component
        s: 32-byte s component
    """
    v: int
    r: bytes
    s: bytes

    @classmethod
    def from_hex(cls, v: Union[int, str], r: str, s: str) -> "Signature":
        """Build a Signature from hex-encoded r and s components."""
        if isinstance(v, str):
            v = int(v, 0)
        return cls(v=v, r=hex_to_bytes32(r), s=hex_to_bytes32(s))

    @classmethod
    def from_bytes(cls, signature: Union[bytes, str]) -> "Signature":
        """
        Split a 65-byte r || s || v signature.

        Raises:
            ValueError: If the signature is not 65 bytes long
        """
        if isinstance(signature, str):
            signature = hex_to_bytes(signature)
        if len(signature) != 65:
            raise ValueError(f"Signature must be 65 bytes, got {len(signature)}")
        return cls(v=signature[64], r=signature[:32], s=signature[32:64])

    def to_dict(self) -> dict:
        return {"v": self.v, "r": bytes_to_hex(self.r), "s": bytes_to_hex(self.s)}


def recover_signer(digest: bytes, signature: Signature) -> Optional[str]:
    """
    Recover the checksum address that produced signature over digest.

    Returns None when the components are out of range (v not 27/28, r or s
    zero or not below the curve order, s in the upper half of the order) or
    when public key recovery fails.

    Args:
        digest: 32-byte message hash that was signed
        signature: Recoverable signature

    Returns:
        Checksum address of the signer, or None
    """
    if len(digest) != HASH_LENGTH:
        return None
    if len(signature.r) != HASH_LENGTH or len(signature.s) != HASH_LENGTH:
        return None
    if signature.v not in VALID_V_VALUES:
        logger.debug(f"Rejecting signature with recovery id {signature.v}")
        return None

    r = int.from_bytes(signature.r, "big")
    s = int.from_bytes(signature.s, "big")
    if not 0 < r < SECP256K1_N:
        return None
    if not 0 < s <= SECP256K1_HALF_N:
        logger.debug("Rejecting malleable signature with s in the upper half order")
        return None

    try:
        sig = keys.Signature(vrs=(signature.v - 27, r, s))
        public_key = sig.recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError, ValueError) as e:
        logger.debug(f"Public key recovery failed: {e}")
        return None

    return public_key.to_checksum_address()


def verify_signature(
    claimed_signer: Union[str, bytes], digest: bytes, signature: Signature
) -> bool:
    """
    Check that signature over digest was produced by claimed_signer.

    The comparison is made on the canonical 20-byte addresses.
    """
    recovered = recover_signer(digest, signature)
    if recovered is None:
        return False
    return canonical_address(recovered) == canonical_address(claimed_signer)


def sign_claim(
    private_key: Union[str, bytes],
    domain: DomainConfig,
    account: Union[str, bytes],
    amount: int,
) -> Signature:
    """
    Sign a claim authorization as the account owner would in a wallet.

    Args:
        private_key: Signer's secp256k1 private key
        domain: Signing domain of the target deployment
        account: Account the claim pays out to
        amount: Claimable amount

    Returns:
        Signature with v in {27, 28} and a low s value
    """
    signable = encode_typed_data(full_message=claim_typed_data(domain, account, amount))
    signed = Account.sign_message(signable, private_key=private_key)
    return Signature(
        v=signed.v,
        r=signed.r.to_bytes(32, "big"),
        s=signed.s.to_bytes(32, "big"),
    )
