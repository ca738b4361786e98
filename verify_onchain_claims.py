#!/usr/bin/env python3
"""
Script to verify a local distributor configuration against the deployed contract.

This script:
1. Loads the distributor configuration from the environment (or a JSON file)
2. Reads merkle root, token and EIP-712 domain from the deployed contract
3. Reports any mismatch that would make off-chain proofs or signatures fail
4. Optionally reports the on-chain claimed status of the given accounts

Usage:
    python verify_onchain_claims.py [--config deployment.json] [ACCOUNT ...]
"""

import argparse
import os
import sys

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src'))

from claim_proofs.config import ConfigError, load_config, load_config_file
from claim_proofs.encoding import domain_separator
from claim_proofs.onchain import DeploymentInspector, connect
from claim_proofs.utils import bytes_to_hex


def main() -> int:
    parser = argparse.ArgumentParser(description="Verify a distributor deployment against local config")
    parser.add_argument("accounts", nargs="*", help="Accounts whose claimed status to report")
    parser.add_argument("--config", help="JSON deployment file (defaults to CLAIM_* environment variables)")
    parser.add_argument("--rpc-url", help="RPC endpoint (defaults to CLAIM_RPC_URL)")
    args = parser.parse_args()

    print("Distributor Deployment Verification")
    print("=" * 60)

    try:
        config = load_config_file(args.config) if args.config else load_config()
    except ConfigError as e:
        print(f"❌ Invalid configuration: {e}")
        return 1

    try:
        w3 = connect(args.rpc_url)
        block_number = w3.eth.block_number
    except Exception as e:
        print(f"❌ Failed to connect to RPC: {e}")
        return 1
    print(f"✅ Connected to RPC (block #{block_number})")

    contract = config.domain.verifying_contract
    if w3.eth.get_code(contract) == b'':
        print(f"❌ No contract found at {contract}")
        return 1
    print(f"✅ Distributor contract found at {contract}\n")

    inspector = DeploymentInspector(w3, contract)
    print(f"Local merkle root:      {bytes_to_hex(config.merkle_root)}")
    print(f"Local token:            {config.token}")
    print(f"Local domain separator: {bytes_to_hex(domain_separator(config.domain))}\n")

    mismatches = inspector.compare_with_config(config)
    if mismatches:
        print("❌ Deployment does not match local configuration:")
        for mismatch in mismatches:
            print(f"  - {mismatch}")
    else:
        print("🎉 Deployment matches local configuration")

    if args.accounts:
        print("\n📊 Claimed Status")
        print("-" * 40)
        for account in args.accounts:
            claimed = inspector.is_claimed(account)
            print(f"  {account}: {'claimed' if claimed else 'unclaimed'}")

    return 1 if mismatches else 0


if __name__ == "__main__":
    sys.exit(main())
