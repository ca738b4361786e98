#!/usr/bin/env python3
"""
Claim Proofs CLI

Command-line interface for preparing, checking and submitting Merkle
distribution claims. Provides script-friendly JSON output and rich tables.
"""

import json
import logging
import sys
from typing import Any, Dict, Optional, Tuple

import click
from eth_account import Account
from eth_keys.exceptions import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .api.claim_client import ClaimAPIClient, ClaimAPIError
from .config import DomainConfig
from .constants import DEFAULT_CHAIN_ID, DEFAULT_DOMAIN_NAME, DEFAULT_DOMAIN_VERSION
from .encoding import authorization_digest, claim_struct_hash, domain_separator, leaf_hash
from .merkle import process_proof, verify_proof
from .signatures import Signature, recover_signer, sign_claim
from .utils import bytes_to_hex, checksum_address, hex_to_bytes32

# Configure rich console
console = Console()
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def format_result(result: Dict[str, Any]) -> str:
    """Format a result dictionary for JSON output."""
    return json.dumps(result, indent=2)


def print_result(result: Dict[str, Any], title: str, format_output: str = "json"):
    """Print results as JSON (default) or as a table."""
    if format_output == "json":
        click.echo(format_result(result))
        return

    table = Table(title=title)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")
    for key, value in result.items():
        if isinstance(value, list):
            value = "\n".join(str(v) for v in value) or "(empty)"
        table.add_row(key.replace("_", " ").title(), str(value))
    console.print(table)


def domain_options(f):
    """Attach the EIP-712 signing domain options to a command."""
    f = click.option(
        "--domain-version", envvar="CLAIM_DOMAIN_VERSION", default=DEFAULT_DOMAIN_VERSION,
        show_default=True, help="EIP-712 domain version",
    )(f)
    f = click.option(
        "--name", "domain_name", envvar="CLAIM_DOMAIN_NAME", default=DEFAULT_DOMAIN_NAME,
        show_default=True, help="EIP-712 domain name",
    )(f)
    f = click.option(
        "--contract", envvar="CLAIM_CONTRACT_ADDRESS", required=True,
        help="Verifying distributor contract address",
    )(f)
    f = click.option(
        "--chain-id", type=int, envvar="CLAIM_CHAIN_ID", default=DEFAULT_CHAIN_ID,
        show_default=True, help="Chain id of the verifying contract",
    )(f)
    return f


def build_domain(chain_id: int, contract: str, domain_name: str, domain_version: str) -> DomainConfig:
    try:
        return DomainConfig(
            name=domain_name,
            version=domain_version,
            chain_id=chain_id,
            verifying_contract=contract,
        )
    except ValueError as e:
        raise click.ClickException(f"Invalid signing domain: {e}")


def parse_claim(account: str, amount: int) -> Tuple[str, int]:
    try:
        return checksum_address(account), amount
    except ValueError as e:
        raise click.ClickException(str(e))


def parse_proof(proof: Tuple[str, ...]):
    try:
        return [hex_to_bytes32(step) for step in proof]
    except ValueError as e:
        raise click.ClickException(f"Invalid proof element: {e}")


format_option = click.option(
    "--format", "format_output", type=click.Choice(["json", "table"]), default="json",
    show_default=True, help="Output format",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--api-url", envvar="CLAIM_API_URL", help="Claim API URL")
@click.pass_context
def cli(ctx, verbose: bool, api_url: Optional[str]):
    """
    Claim Proofs CLI - Prepare and submit Merkle distribution claims.

    Compute leaves and EIP-712 authorization digests, sign claims as an
    account owner, check proofs and signatures, and submit claims to a
    running claim API as the account or as a relayer.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["api_url"] = api_url


@cli.command()
@click.argument("account")
@click.argument("amount", type=int)
@format_option
def leaf(account: str, amount: int, format_output: str):
    """
    Compute the Merkle leaf for a claim.

    ACCOUNT: Claiming account address
    AMOUNT: Claimable amount in base units
    """
    account, amount = parse_claim(account, amount)
    try:
        result = {
            "account": account,
            "amount": amount,
            "leaf": bytes_to_hex(leaf_hash(account, amount)),
        }
    except ValueError as e:
        raise click.ClickException(str(e))
    print_result(result, "Claim Leaf", format_output)


@cli.command()
@click.argument("account")
@click.argument("amount", type=int)
@domain_options
@format_option
def digest(account: str, amount: int, chain_id: int, contract: str, domain_name: str,
           domain_version: str, format_output: str):
    """
    Compute the EIP-712 authorization digest for a claim.

    ACCOUNT: Claiming account address
    AMOUNT: Claimable amount in base units
    """
    account, amount = parse_claim(account, amount)
    domain = build_domain(chain_id, contract, domain_name, domain_version)
    try:
        result = {
            "account": account,
            "amount": amount,
            "domain_separator": bytes_to_hex(domain_separator(domain)),
            "struct_hash": bytes_to_hex(claim_struct_hash(account, amount)),
            "digest": bytes_to_hex(authorization_digest(domain, account, amount)),
        }
    except ValueError as e:
        raise click.ClickException(str(e))
    print_result(result, "Authorization Digest", format_output)


@cli.command()
@click.argument("account")
@click.argument("amount", type=int)
@click.option("--private-key", envvar="CLAIM_SIGNER_KEY", required=True,
              help="Account owner's private key (hex)")
@click.option("--proof", "-p", multiple=True, help="Proof element to include in the output (repeatable)")
@domain_options
def sign(account: str, amount: int, private_key: str, proof: Tuple[str, ...], chain_id: int,
         contract: str, domain_name: str, domain_version: str):
    """
    Sign a claim authorization as the account owner.

    The output is a claim payload that any relayer can pass to `submit`.

    ACCOUNT: Claiming account address (must own the private key)
    AMOUNT: Claimable amount in base units
    """
    account, amount = parse_claim(account, amount)
    domain = build_domain(chain_id, contract, domain_name, domain_version)

    try:
        signer = Account.from_key(private_key).address
    except (ValueError, TypeError, ValidationError) as e:
        raise click.ClickException(f"Invalid private key: {e}")
    if signer != account:
        raise click.ClickException(
            f"Private key belongs to {signer}, but only {account} can authorize its claim"
        )

    try:
        signature = sign_claim(private_key, domain, account, amount)
    except ValueError as e:
        raise click.ClickException(str(e))

    payload = {
        "account": account,
        "amount": amount,
        "proof": [bytes_to_hex(step) for step in parse_proof(proof)],
        **signature.to_dict(),
    }
    click.echo(format_result(payload))


@cli.command("verify-proof")
@click.argument("account")
@click.argument("amount", type=int)
@click.option("--root", envvar="CLAIM_MERKLE_ROOT", required=True, help="Published merkle root (hex)")
@click.option("--proof", "-p", multiple=True, help="Proof element, leaf to root order (repeatable)")
@format_option
def verify_proof_cmd(account: str, amount: int, root: str, proof: Tuple[str, ...], format_output: str):
    """
    Check a Merkle proof for a claim against a root.

    Exits with status 1 if the proof is invalid.
    """
    account, amount = parse_claim(account, amount)
    try:
        root_bytes = hex_to_bytes32(root)
        claim_leaf = leaf_hash(account, amount)
    except ValueError as e:
        raise click.ClickException(str(e))
    proof_bytes = parse_proof(proof)

    valid = verify_proof(root_bytes, claim_leaf, proof_bytes)
    result = {
        "account": account,
        "amount": amount,
        "leaf": bytes_to_hex(claim_leaf),
        "computed_root": bytes_to_hex(process_proof(claim_leaf, proof_bytes)),
        "root": bytes_to_hex(root_bytes),
        "valid": valid,
    }
    print_result(result, "Proof Verification", format_output)
    if not valid:
        sys.exit(1)


@cli.command("verify-signature")
@click.argument("account")
@click.argument("amount", type=int)
@click.option("--v", "v", type=int, required=True, help="Signature recovery id (27 or 28)")
@click.option("--r", "r", required=True, help="Signature r component (hex)")
@click.option("--s", "s", required=True, help="Signature s component (hex)")
@domain_options
@format_option
def verify_signature_cmd(account: str, amount: int, v: int, r: str, s: str, chain_id: int,
                         contract: str, domain_name: str, domain_version: str, format_output: str):
    """
    Check that a signature authorizes a claim.

    Exits with status 1 if the signature does not recover to ACCOUNT.
    """
    account, amount = parse_claim(account, amount)
    domain = build_domain(chain_id, contract, domain_name, domain_version)
    try:
        signature = Signature.from_hex(v, r, s)
        recovered = recover_signer(authorization_digest(domain, account, amount), signature)
    except ValueError as e:
        raise click.ClickException(str(e))

    valid = recovered == account
    result = {
        "account": account,
        "amount": amount,
        "recovered_signer": recovered,
        "valid": valid,
    }
    print_result(result, "Signature Verification", format_output)
    if not valid:
        sys.exit(1)


@cli.command()
@click.argument("account")
@click.pass_context
def status(ctx, account: str):
    """Show whether ACCOUNT has already claimed."""
    client = ClaimAPIClient(ctx.obj.get("api_url"))
    try:
        result = client.get_claim_status(account)
    except ClaimAPIError as e:
        raise click.ClickException(str(e))
    click.echo(format_result(result))


@cli.command()
@click.argument("claim_file", type=click.Path(exists=True))
@click.pass_context
def submit(ctx, claim_file: str):
    """
    Submit a signed claim to the claim API.

    CLAIM_FILE: JSON file with account, amount, proof, v, r and s
    (as produced by `sign`). The submitter pays nothing to the account;
    tokens are always sent to the account in the file.
    """
    try:
        with open(claim_file, "r") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Claim file {claim_file} is not valid JSON: {e}")
    if not isinstance(payload, dict):
        raise click.ClickException(f"Claim file {claim_file} must contain a JSON object")

    client = ClaimAPIClient(ctx.obj.get("api_url"))
    try:
        result = client.submit_claim(payload)
    except ClaimAPIError as e:
        code = f" [{e.code}]" if e.code else ""
        console.print(f"[red]Claim rejected{code}: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]Claimed {result['amount']} for {result['account']}[/green]")
    click.echo(format_result(result))


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8000, type=int, help="Port to bind to")
@click.option("--dev", is_flag=True, help="Enable development mode with auto-reload")
@click.pass_context
def serve(ctx, host: str, port: int, dev: bool):
    """Start the REST API server."""
    from .api.rest_api import run_server

    try:
        console.print(
            Panel(
                f"Starting Claim Proofs API Server\n\n"
                f"Server: http://{host}:{port}\n"
                f"Docs: http://{host}:{port}/docs\n"
                f"Health: http://{host}:{port}/health\n\n"
                f"Press Ctrl+C to stop",
                title="API Server",
                border_style="green",
            )
        )

        run_server(host=host, port=port, dev=dev)

    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")
    except Exception as e:
        console.print(f"[red]Server error: {e}[/red]", style="bold")
        if ctx.obj.get("verbose"):
            console.print_exception()
        sys.exit(1)


@cli.command()
@click.pass_context
def health(ctx):
    """Check the health of the claim API and show its distributor."""
    console.print("[cyan]Checking claim API health...[/cyan]")

    client = ClaimAPIClient(ctx.obj.get("api_url"))
    api_status = client.health_check()

    table = Table(title="System Health Check")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")

    table.add_row("Claim API", "Healthy" if api_status else "Unhealthy", client.base_url)

    if api_status:
        try:
            info = client.get_distributor()
            table.add_row("Distributor", "Ready", f"root {info['merkle_root']}")
            table.add_row("Token", "", info["token"])
            table.add_row("Claims", "", str(info["claimed_count"]))
        except ClaimAPIError as e:
            table.add_row("Distributor", "Error", str(e))

    console.print(table)
    if not api_status:
        sys.exit(1)


if __name__ == "__main__":
    cli()
