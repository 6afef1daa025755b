"""
Invoke - test-run a contract operation.

The script is simulated by the node; nothing is signed or broadcast.
"""

from __future__ import annotations

import json
import sys
from typing import Optional

import click

from ..contract import ContractClient
from ._common import make_client, reporting_faults, rpc_options


@click.command()
@click.option("--contract", required=True, help="Contract script hash (0x...) or address")
@click.option("--operation", required=True, help="Operation name to call")
@click.option("--args", "args_json", default="[]", help="Operation args as JSON array")
@rpc_options
def invoke(
    contract: str,
    operation: str,
    args_json: str,
    rpc_url: Optional[str],
    timeout: Optional[float],
) -> None:
    """Test-invoke a contract operation and print the result stack."""
    try:
        args = json.loads(args_json)
        if not isinstance(args, list):
            raise ValueError("Args must be a JSON array")
    except (json.JSONDecodeError, ValueError) as exc:
        click.secho(f"ERROR: Invalid args: {exc}", fg="red", err=True)
        sys.exit(1)

    with reporting_faults(), make_client(rpc_url, timeout) as rpc:
        result = ContractClient(rpc).test_invoke(contract, operation, *args)

    colour = "green" if result.halted else "red"
    click.echo("State:        " + click.style(result.state, fg=colour))
    click.echo(f"Gas consumed: {result.gas_consumed}")
    if result.exception:
        click.echo(f"Exception:    {result.exception}")
    for i, item in enumerate(result.stack):
        value = item.value.hex() if isinstance(item.value, bytes) else item.value
        click.echo(f"  [{i}] {item.type}: {value}")
    if not result.halted:
        sys.exit(1)
