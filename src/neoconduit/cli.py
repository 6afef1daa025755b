"""
neoconduit CLI

Command-line access to a Neo node over JSON-RPC.

Identity = secp256r1 key stored as NEO_WIF in ~/.neoconduit/.env.

Commands:
  keygen      - Create a signing key
  whoami      - Show the address of the stored key
  blockcount  - Query the node's block count
  version     - Query the node's version and network
  invoke      - Test-invoke a contract operation
  deploy      - Build, sign and optionally broadcast a contract deployment
  info        - Show configuration and key status
"""

from __future__ import annotations

import logging
import sys

import click

from .config import NEOCONDUIT_ENV, Settings
from .sigil.store import generate_key, get_key_pair, save_wif
from .version import __version__

VERSION = __version__


# ============ Banner ============


def _print_banner() -> None:
    """Print the CLI banner."""
    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="green")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("      N E O C O N D U I T", fg="bright_white", bold=True)
        + click.style(f"      v{VERSION}", dim=True)
    )
    click.secho("        ─── Neo JSON-RPC client ───", fg="green")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="neoconduit")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic and transaction steps")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """neoconduit - Neo node JSON-RPC client."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Node Commands ============

from .commands.chain import blockcount, node_version
from .commands.deploy import deploy
from .commands.invoke import invoke

cli.add_command(blockcount)
cli.add_command(node_version)
cli.add_command(invoke)
cli.add_command(deploy)


# ============ Identity ============


@cli.command()
@click.option("--force", is_flag=True, help="Replace an existing key")
def keygen(force: bool) -> None:
    """Create a signing key and store it in ~/.neoconduit/.env."""
    if not force:
        try:
            existing = get_key_pair()
        except ValueError:
            existing = None
        if existing is not None:
            click.echo(f"Key already exists: {existing.address}")
            click.echo("Use --force to replace it.")
            sys.exit(1)

    wif, address = generate_key()
    path = save_wif(wif)
    click.secho("Key created.", fg="green")
    click.echo(f"Address: {address}")
    click.echo(f"Stored:  {path}")


@cli.command()
def whoami() -> None:
    """Show current key identity."""
    try:
        key = get_key_pair()
        click.echo(f"Address: {key.address}")
        click.echo(f"Public key: {key.public_key.hex()}")
    except ValueError:
        click.echo("No key found.")
        click.echo("Run 'neoconduit keygen' to create one.")
        sys.exit(1)


# ============ Info ============


@cli.command()
def info() -> None:
    """Show configuration and key status."""
    _print_banner()
    settings = Settings.from_env()

    # ── Status ──
    click.secho("  Status ─────────────────────────────────", fg="green")
    click.echo()

    try:
        address = get_key_pair().address
        click.echo(
            click.style("  Address:     ", dim=True)
            + click.style(address, fg="bright_white")
        )
    except ValueError:
        click.echo(
            click.style("  Address:     ", dim=True)
            + click.style("not initialized", fg="yellow")
            + click.style("  (run: neoconduit keygen)", dim=True)
        )

    click.echo(click.style("  Node:        ", dim=True) + click.style(settings.rpc_url, fg="bright_white"))
    auth = "basic" if settings.rpc_user and settings.rpc_password else "none"
    click.echo(click.style("  Auth:        ", dim=True) + click.style(auth, fg="bright_white"))
    network = f"0x{settings.network:08x}" if settings.network is not None else "from node"
    click.echo(click.style("  Network:     ", dim=True) + click.style(network, fg="bright_white"))
    click.echo(click.style("  Config:      ", dim=True) + click.style(str(NEOCONDUIT_ENV), fg="bright_white"))

    click.echo()

    # ── Commands ──
    click.secho("  Commands ───────────────────────────────", fg="green")
    click.echo()

    commands = [
        ("keygen    ", "Create a signing key"),
        ("whoami    ", "Show current address"),
        ("blockcount", "Query the block count"),
        ("version   ", "Query the node version"),
        ("invoke    ", "Test-invoke a contract operation"),
        ("deploy    ", "Build a contract deployment"),
    ]
    for cmd, desc in commands:
        click.echo(
            click.style("  ", dim=True)
            + click.style(cmd, fg="bright_white", bold=True)
            + click.style("  ◇  ", fg="green")
            + click.style(desc, dim=True)
        )

    click.echo()


# ============ Entry Points ============


def main() -> None:
    """neoconduit CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    cli()


if __name__ == "__main__":
    main()
