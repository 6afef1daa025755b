"""Shared CLI plumbing: node options and fault reporting."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

import click

from ..config import Settings
from ..errors import NeoConduitError
from ..rpc.client import RpcClient


def rpc_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Add ``--rpc-url`` and ``--timeout`` to a command."""
    fn = click.option(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the node (default: NEO_RPC_TIMEOUT or 30)",
    )(fn)
    fn = click.option(
        "--rpc-url",
        envvar="NEO_RPC_URL",
        default=None,
        help="Node JSON-RPC URL (default: NEO_RPC_URL or http://localhost:10332)",
    )(fn)
    return fn


def make_client(rpc_url: Optional[str], timeout: Optional[float]) -> RpcClient:
    settings = Settings.from_env()
    return RpcClient(
        rpc_url or settings.rpc_url,
        settings.rpc_user,
        settings.rpc_password,
        timeout=timeout or settings.timeout,
    )


@contextmanager
def reporting_faults() -> Iterator[None]:
    """Print a fault in red and exit with its exit code."""
    try:
        yield
    except NeoConduitError as exc:
        click.secho(f"ERROR: {exc}", fg="red", err=True)
        sys.exit(exc.exit_code)
