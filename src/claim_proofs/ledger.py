"""
Asset Ledger

The claim engine pays out through an external asset ledger. This module
defines the interface it relies on and an in-memory implementation used by
the API server and the tests.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional, Union

from .utils import canonical_address, checksum_address, validate_amount

logger = logging.getLogger(__name__)

Address = Union[str, bytes]


class LedgerError(Exception):
    """Exception raised when the ledger cannot complete a transfer."""
    pass


class InsufficientBalanceError(LedgerError):
    """Raised when the distributing balance cannot cover a transfer."""
    pass


class AssetLedger(ABC):
    """
    Abstract fungible asset ledger.

    Implementations must either apply a transfer completely or raise
    LedgerError without changing any balance.
    """

    @property
    @abstractmethod
    def token(self) -> str:
        """Checksum address identifying the distributed asset."""

    @abstractmethod
    def transfer(self, to: Address, amount: int) -> None:
        """
        Move amount from the distributing balance to `to`.

        Raises:
            LedgerError: If the transfer cannot be applied
        """

    @abstractmethod
    def balance_of(self, account: Address) -> int:
        """Return the balance currently credited to account."""


class InMemoryLedger(AssetLedger):
    """
    Process-local ledger holding balances in a dictionary.

    Balances are keyed by canonical 20-byte address. Every transfer debits the
    holder (the distributor's own balance).
    """

    def __init__(self, token: Address, holder: Address, balances: Optional[Dict[Address, int]] = None):
        self._token = checksum_address(token)
        self.holder = canonical_address(holder)
        self._balances: Dict[bytes, int] = {}
        self._lock = threading.Lock()

        for account, amount in (balances or {}).items():
            self.mint(account, amount)

    @property
    def token(self) -> str:
        return self._token

    def mint(self, account: Address, amount: int) -> None:
        key = canonical_address(account)
        validate_amount(amount)
        with self._lock:
            self._balances[key] = self._balances.get(key, 0) + amount

    def balance_of(self, account: Address) -> int:
        return self._balances.get(canonical_address(account), 0)

    def transfer(self, to: Address, amount: int) -> None:
        recipient = canonical_address(to)
        validate_amount(amount)

        with self._lock:
            available = self._balances.get(self.holder, 0)
            if available < amount:
                raise InsufficientBalanceError(
                    f"Insufficient balance: holder has {available}, transfer needs {amount}"
                )
            self._balances[self.holder] = available - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount

        logger.debug(f"Transferred {amount} of {self._token} to {checksum_address(recipient)}")
