"""
Deploy - build a contract deployment transaction.

The transaction is signed with the key in ~/.neoconduit/.env.  It is only
sent to the node with ``--broadcast``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click

from ..contract import ContractClient
from ..config import Settings
from ..manifest.models import ContractManifest
from ..sigil.store import get_key_pair
from ._common import make_client, reporting_faults, rpc_options


@click.command()
@click.option(
    "--program",
    "program_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Compiled contract (.nef file or raw script bytes)",
)
@click.option(
    "--manifest",
    "manifest_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Contract manifest JSON",
)
@click.option("--budget", type=int, default=None, help="Maximum total fee in fractions of GAS")
@click.option("--broadcast/--no-broadcast", default=False, help="Send the signed transaction to the node")
@click.option("--json", "as_json", is_flag=True, help="Print the signed transaction as JSON")
@rpc_options
def deploy(
    program_path: Path,
    manifest_path: Path,
    budget: Optional[int],
    broadcast: bool,
    as_json: bool,
    rpc_url: Optional[str],
    timeout: Optional[float],
) -> None:
    """Build, sign and optionally broadcast a contract deployment."""
    try:
        key = get_key_pair()
        manifest = ContractManifest.from_path(manifest_path)
    except ValueError as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(1)

    with reporting_faults():
        program = program_path.read_bytes()
        network = Settings.from_env().network

        with make_client(rpc_url, timeout) as rpc:
            tx = ContractClient(rpc).create_deploy_contract_tx(
                program, manifest, key, network=network, budget=budget
            )
            click.echo(f"Sender:      {key.address}")
            click.echo(f"Transaction: {tx.hash}")
            click.echo(f"System fee:  {tx.system_fee}")
            click.echo(f"Network fee: {tx.network_fee}")
            if as_json:
                click.echo(json.dumps(tx.to_json(), indent=2))
            if broadcast:
                sent = rpc.send_raw_transaction(tx)
                click.secho(f"Broadcast:   {sent}", fg="green")
