"""
Distributor Configuration

This module defines the immutable configuration of a claim distributor and
loads it from environment variables (optionally via a .env file) or from a
JSON deployment file.
"""

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv

from .constants import DEFAULT_CHAIN_ID, DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION
from .utils import bytes_to_hex, checksum_address, hex_to_bytes32

# Load environment variables
load_dotenv()

DEFAULT_API_URL = "http://127.0.0.1:8000"


class ConfigError(ValueError):
    """Exception raised for missing or malformed configuration values."""
    pass


@dataclass(frozen=True)
class DomainConfig:
    """
    EIP-712 domain that binds signatures to a single deployment.

    Attributes:
        name: Human readable signing domain name
        version: Signing domain version
        chain_id: Chain the verifying contract lives on
        verifying_contract: Checksum address of the verifying contract
    """
    name: str
    version: str
    chain_id: int
    verifying_contract: str

    def __post_init__(self):
        object.__setattr__(self, "verifying_contract", checksum_address(self.verifying_contract))
        if isinstance(self.chain_id, bool) or not isinstance(self.chain_id, int) or self.chain_id < 0:
            raise ConfigError(f"chain_id must be a non-negative integer, got {self.chain_id!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chain_id": self.chain_id,
            "verifying_contract": self.verifying_contract,
        }


@dataclass(frozen=True)
class DistributorConfig:
    """
    Global immutable configuration of a distributor.

    Attributes:
        merkle_root: 32-byte root of the eligibility tree
        token: Checksum address of the distributed asset
        domain: Signing domain for claim authorizations
    """
    merkle_root: bytes
    token: str
    domain: DomainConfig

    def __post_init__(self):
        object.__setattr__(self, "merkle_root", hex_to_bytes32(self.merkle_root))
        object.__setattr__(self, "token", checksum_address(self.token))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "merkle_root": bytes_to_hex(self.merkle_root),
            "token": self.token,
            "domain": self.domain.to_dict(),
        }


def _require(env: Mapping[str, str], key: str) -> str:
    value = env.get(key)
    if not value:
        raise ConfigError(f"{key} environment variable is not set")
    return value


def _parse_int(value: Any, key: str) -> int:
    try:
        return int(value, 0) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{key} must be an integer, got {value!r}")


def load_config(env: Optional[Mapping[str, str]] = None) -> DistributorConfig:
    """
    Build a DistributorConfig from environment variables.

    Args:
        env: Mapping to read from. Defaults to os.environ.

    Returns:
        DistributorConfig

    Raises:
        ConfigError: If a required variable is missing or malformed
    """
    env = os.environ if env is None else env

    try:
        domain = DomainConfig(
            name=env.get("CLAIM_DOMAIN_NAME") or DEFAULT_DOMAIN_NAME,
            version=env.get("CLAIM_DOMAIN_VERSION") or DEFAULT_DOMAIN_VERSION,
            chain_id=_parse_int(env.get("CLAIM_CHAIN_ID") or DEFAULT_CHAIN_ID, "CLAIM_CHAIN_ID"),
            verifying_contract=_require(env, "CLAIM_CONTRACT_ADDRESS"),
        )
        return DistributorConfig(
            merkle_root=_require(env, "CLAIM_MERKLE_ROOT"),
            token=_require(env, "CLAIM_TOKEN_ADDRESS"),
            domain=domain,
        )
    except ConfigError:
        raise
    except ValueError as e:
        raise ConfigError(f"Invalid distributor configuration: {e}") from e


def load_config_file(path: str) -> DistributorConfig:
    """
    Build a DistributorConfig from a JSON deployment file.

    Expected keys: merkleRoot, token, verifyingContract and optionally
    chainId, name and version.
    """
    with open(path, "r") as f:
        data = json.load(f)

    try:
        domain = DomainConfig(
            name=data.get("name", DEFAULT_DOMAIN_NAME),
            version=data.get("version", DEFAULT_DOMAIN_VERSION),
            chain_id=_parse_int(data.get("chainId", DEFAULT_CHAIN_ID), "chainId"),
            verifying_contract=data["verifyingContract"],
        )
        return DistributorConfig(
            merkle_root=data["merkleRoot"],
            token=data["token"],
            domain=domain,
        )
    except KeyError as e:
        raise ConfigError(f"Missing field {e} in {path}") from e
    except ConfigError:
        raise
    except ValueError as e:
        raise ConfigError(f"Invalid distributor configuration in {path}: {e}") from e


def get_initial_balance(env: Optional[Mapping[str, str]] = None) -> int:
    """Seed balance of the in-memory ledger used by the API server."""
    env = os.environ if env is None else env
    return _parse_int(env.get("CLAIM_DISTRIBUTOR_BALANCE") or 0, "CLAIM_DISTRIBUTOR_BALANCE")


def get_api_url() -> str:
    return os.getenv("CLAIM_API_URL", DEFAULT_API_URL)
