"""
Chain - read-only node queries.
"""

from __future__ import annotations

from typing import Optional

import click

from ._common import make_client, reporting_faults, rpc_options


@click.command()
@rpc_options
def blockcount(rpc_url: Optional[str], timeout: Optional[float]) -> None:
    """Show the number of blocks in the node's main chain."""
    with reporting_faults(), make_client(rpc_url, timeout) as rpc:
        count = rpc.get_block_count()
    click.echo(f"Block count: {count}")


@click.command("version")
@rpc_options
def node_version(rpc_url: Optional[str], timeout: Optional[float]) -> None:
    """Show the node's version and network."""
    with reporting_faults(), make_client(rpc_url, timeout) as rpc:
        version = rpc.get_version()
    click.echo(f"User agent: {version.user_agent}")
    if version.network is not None:
        click.echo(f"Network:    {version.network} (0x{version.network:08x})")
    if version.tcp_port is not None:
        click.echo(f"TCP port:   {version.tcp_port}")
    click.echo(f"Nonce:      {version.nonce}")
