"""
Merkle Distributor

This module contains the claim orchestrator. A claim is paid out at most once
per account and only when

1. the account has not claimed before,
2. the account signed the EIP-712 authorization for (account, amount), and
3. the (account, amount) leaf is proven against the published Merkle root.

Checks run in that order and the first failure aborts the claim. The claimed
state is committed before the ledger transfer is issued and rolled back if the
transfer fails, so a claim either fully happens or leaves no trace.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Sequence, Set, Union

from .config import DistributorConfig
from .constants import CLAIM_TYPEHASH
from .encoding import authorization_digest, domain_separator, leaf_hash
from .ledger import AssetLedger, LedgerError
from .merkle import verify_proof as verify_merkle_proof
from .signatures import Signature, verify_signature as verify_claim_signature
from .utils import bytes_to_hex, canonical_address, checksum_address, validate_amount

logger = logging.getLogger(__name__)

Address = Union[str, bytes]

# Number of re-entrant locks claims are striped across
CLAIM_LOCK_STRIPES = 64


class ClaimError(Exception):
    """Base class for claim rejections. Each subclass carries a distinct code."""
    code = "CLAIM_ERROR"


class AlreadyClaimedError(ClaimError):
    """The account's claim has already been consumed."""
    code = "ALREADY_CLAIMED"


class InvalidSignatureError(ClaimError):
    """The signature does not recover to the claiming account."""
    code = "INVALID_SIGNATURE"


class InvalidProofError(ClaimError):
    """The proof does not fold to the published root for the claim leaf."""
    code = "INVALID_PROOF"


class TransferFailedError(ClaimError):
    """The asset ledger rejected the payout; the claim was rolled back."""
    code = "TRANSFER_FAILED"


@dataclass(frozen=True)
class ClaimEvent:
    """Emitted once for every successful claim."""
    account: str
    amount: int

    def to_dict(self) -> dict:
        return {"account": self.account, "amount": self.amount}


ClaimListener = Callable[[ClaimEvent], None]


class MerkleDistributor:
    """
    One-time token distribution authorized by Merkle proofs and signatures.

    The configuration is fixed at construction. The set of claimed accounts
    only grows; a fixed pool of re-entrant locks, selected by account,
    serializes concurrent claims for the same account while letting a
    re-entrant call from the ledger reach the already-claimed guard.
    """

    def __init__(self, config: DistributorConfig, ledger: AssetLedger):
        """
        Initialize the distributor.

        Args:
            config: Root, asset identity and signing domain
            ledger: Ledger that pays out claims from the distributor's balance
        """
        if ledger.token != config.token:
            raise ValueError(
                f"Ledger asset {ledger.token} does not match configured token {config.token}"
            )

        self.config = config
        self.ledger = ledger
        self.events: List[ClaimEvent] = []

        self._domain_separator = domain_separator(config.domain)
        self._claimed: Set[bytes] = set()
        self._locks: List[threading.RLock] = [threading.RLock() for _ in range(CLAIM_LOCK_STRIPES)]
        self._listeners: List[ClaimListener] = []

        logger.info(
            f"Initialized MerkleDistributor for {config.token} with root "
            f"{bytes_to_hex(config.merkle_root)} on chain {config.domain.chain_id}"
        )

    # Read-only queries

    @property
    def merkle_root(self) -> bytes:
        return self.config.merkle_root

    @property
    def token(self) -> str:
        return self.config.token

    @property
    def claim_typehash(self) -> bytes:
        return CLAIM_TYPEHASH

    @property
    def domain_separator(self) -> bytes:
        return self._domain_separator

    def is_claimed(self, account: Address) -> bool:
        return canonical_address(account) in self._claimed

    def claimed_accounts(self) -> List[str]:
        return sorted(checksum_address(a) for a in self._claimed)

    def leaf_hash(self, account: Address, amount: int) -> bytes:
        return leaf_hash(account, amount)

    def authorization_digest(self, account: Address, amount: int) -> bytes:
        return authorization_digest(self.config.domain, account, amount)

    def verify_signature(self, account: Address, amount: int, signature: Signature) -> bool:
        """
        Check a claim signature without consuming the claim.

        Diagnostic only; authorization decisions are made by claim().
        """
        return verify_claim_signature(
            account, self.authorization_digest(account, amount), signature
        )

    def verify_proof(self, account: Address, amount: int, proof: Sequence[bytes]) -> bool:
        """
        Check a claim proof without consuming the claim.

        Diagnostic only; authorization decisions are made by claim().
        """
        return verify_merkle_proof(self.merkle_root, self.leaf_hash(account, amount), proof)

    def subscribe(self, listener: ClaimListener) -> None:
        """Register a callback invoked with every ClaimEvent."""
        self._listeners.append(listener)

    # State-mutating entry point

    def claim(
        self,
        account: Address,
        amount: int,
        proof: Sequence[bytes],
        signature: Signature,
    ) -> ClaimEvent:
        """
        Claim amount for account.

        The caller may be the account itself or any relayer holding the
        account's signature; tokens always go to account.

        Args:
            account: Eligible account receiving the payout
            amount: Amount recorded for account in the eligibility tree
            proof: Merkle proof for the (account, amount) leaf
            signature: Account's signature over the authorization digest

        Returns:
            ClaimEvent describing the payout

        Raises:
            AlreadyClaimedError: The account has already claimed
            InvalidSignatureError: The signature is not the account's
            InvalidProofError: The proof does not match the root
            TransferFailedError: The ledger could not pay out
            ValueError: account or amount is malformed
        """
        key = canonical_address(account)
        validate_amount(amount)
        display = checksum_address(key)

        with self._lock_for(key):
            if key in self._claimed:
                logger.warning(f"Rejected claim for {display}: already claimed")
                raise AlreadyClaimedError(f"Account {display} has already claimed")

            if not self.verify_signature(key, amount, signature):
                logger.warning(f"Rejected claim for {display}: invalid signature")
                raise InvalidSignatureError(f"Signature is not valid for account {display}")

            if not self.verify_proof(key, amount, proof):
                logger.warning(f"Rejected claim for {display}: invalid proof")
                raise InvalidProofError(
                    f"Proof does not match merkle root for account {display} and amount {amount}"
                )

            # Commit before paying out so a re-entrant claim sees the account as claimed
            self._claimed.add(key)
            try:
                self.ledger.transfer(key, amount)
            except LedgerError as e:
                self._claimed.discard(key)
                logger.error(f"Transfer of {amount} to {display} failed, claim rolled back: {e}")
                raise TransferFailedError(f"Transfer to {display} failed: {e}") from e
            except BaseException:
                self._claimed.discard(key)
                raise

            event = ClaimEvent(account=display, amount=amount)
            self.events.append(event)

        logger.info(f"Claimed {amount} of {self.token} for {display}")
        self._emit(event)
        return event

    def _lock_for(self, key: bytes) -> threading.RLock:
        # Fixed pool: an account always maps to the same stripe
        return self._locks[int.from_bytes(key, "big") % CLAIM_LOCK_STRIPES]

    def _emit(self, event: ClaimEvent) -> None:
        for listener in self._listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"Claim listener {listener!r} failed for {event.account}")
