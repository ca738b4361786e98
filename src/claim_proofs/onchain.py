"""
On-Chain Deployment Inspection

This module reads the public state of a deployed distributor contract through
web3 and compares it with a local DistributorConfig, so that signatures and
proofs produced off-chain are known to match what the contract will check.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from .config import DistributorConfig
from .encoding import domain_separator
from .utils import bytes_to_hex, checksum_address

logger = logging.getLogger(__name__)

DISTRIBUTOR_ABI = [
    {
        "name": "merkleRoot",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "bytes32"}],
    },
    {
        "name": "token",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "address"}],
    },
    {
        "name": "isClaimed",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
    # EIP-5267 domain retrieval
    {
        "name": "eip712Domain",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "fields", "type": "bytes1"},
            {"name": "name", "type": "string"},
            {"name": "version", "type": "string"},
            {"name": "chainId", "type": "uint256"},
            {"name": "verifyingContract", "type": "address"},
            {"name": "salt", "type": "bytes32"},
            {"name": "extensions", "type": "uint256[]"},
        ],
    },
]


def connect(rpc_url: Optional[str] = None) -> Web3:
    """
    Create a Web3 instance for the given RPC URL.

    Args:
        rpc_url: HTTP RPC endpoint. If None, uses CLAIM_RPC_URL.

    Raises:
        ValueError: If no RPC URL is configured
    """
    rpc_url = rpc_url or os.getenv("CLAIM_RPC_URL")
    if not rpc_url:
        raise ValueError("CLAIM_RPC_URL environment variable is not set")
    return Web3(Web3.HTTPProvider(rpc_url))


class DeploymentInspector:
    """Read-only view of a deployed distributor contract."""

    def __init__(self, w3: Web3, address: str):
        self.w3 = w3
        self.address = checksum_address(address)
        self.contract = w3.eth.contract(address=self.address, abi=DISTRIBUTOR_ABI)

    def merkle_root(self) -> bytes:
        return bytes(self.contract.functions.merkleRoot().call())

    def token(self) -> str:
        return checksum_address(self.contract.functions.token().call())

    def is_claimed(self, account: str) -> bool:
        return bool(self.contract.functions.isClaimed(checksum_address(account)).call())

    def eip712_domain(self) -> Optional[Dict[str, Any]]:
        """
        Read the signing domain via EIP-5267.

        Returns:
            Domain fields, or None if the contract does not implement eip712Domain()
        """
        try:
            _, name, version, chain_id, verifying_contract, _, _ = (
                self.contract.functions.eip712Domain().call()
            )
        except (ContractLogicError, BadFunctionCallOutput) as e:
            logger.info(f"eip712Domain() unavailable on {self.address}: {e}")
            return None
        return {
            "name": name,
            "version": version,
            "chain_id": chain_id,
            "verifying_contract": checksum_address(verifying_contract),
        }

    def compare_with_config(self, config: DistributorConfig) -> List[str]:
        """
        Compare the deployment with a local configuration.

        Returns:
            Human-readable mismatches; empty if the deployment matches
        """
        mismatches = []

        if self.address != config.domain.verifying_contract:
            mismatches.append(
                f"verifying contract: inspecting {self.address}, config has "
                f"{config.domain.verifying_contract}"
            )

        onchain_root = self.merkle_root()
        if onchain_root != config.merkle_root:
            mismatches.append(
                f"merkle root: on-chain {bytes_to_hex(onchain_root)}, config "
                f"{bytes_to_hex(config.merkle_root)}"
            )

        onchain_token = self.token()
        if onchain_token != config.token:
            mismatches.append(f"token: on-chain {onchain_token}, config {config.token}")

        domain = self.eip712_domain()
        if domain is not None:
            for field, expected in config.domain.to_dict().items():
                if domain[field] != expected:
                    mismatches.append(f"domain {field}: on-chain {domain[field]!r}, config {expected!r}")
        else:
            logger.warning(
                f"Could not verify signing domain of {self.address}; "
                f"local domain separator is {bytes_to_hex(domain_separator(config.domain))}"
            )

        return mismatches
