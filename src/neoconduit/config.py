"""
Runtime configuration.

Values come from the process environment, after ``~/.neoconduit/.env`` has
been loaded (without overriding variables already set).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

NEOCONDUIT_DIR = Path.home() / ".neoconduit"
NEOCONDUIT_ENV = NEOCONDUIT_DIR / ".env"

DEFAULT_RPC_URL = "http://localhost:10332"
DEFAULT_TIMEOUT = 30.0
DEFAULT_VALID_HORIZON = 5760


@dataclass(frozen=True)
class Settings:
    rpc_url: str = DEFAULT_RPC_URL
    rpc_user: Optional[str] = None
    rpc_password: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    network: Optional[int] = None
    valid_horizon: int = DEFAULT_VALID_HORIZON

    @classmethod
    def from_env(cls, env_path: Optional[Path] = None) -> "Settings":
        env_path = env_path or NEOCONDUIT_ENV
        if env_path.exists():
            load_dotenv(env_path, override=False)

        network = os.environ.get("NEO_NETWORK")
        return cls(
            rpc_url=os.environ.get("NEO_RPC_URL", DEFAULT_RPC_URL),
            rpc_user=os.environ.get("NEO_RPC_USER") or None,
            rpc_password=os.environ.get("NEO_RPC_PASSWORD") or None,
            timeout=float(os.environ.get("NEO_RPC_TIMEOUT", str(DEFAULT_TIMEOUT))),
            network=int(network, 0) if network else None,
            valid_horizon=int(os.environ.get("NEO_VALID_HORIZON", str(DEFAULT_VALID_HORIZON))),
        )


__all__ = [
    "NEOCONDUIT_DIR",
    "NEOCONDUIT_ENV",
    "DEFAULT_RPC_URL",
    "DEFAULT_VALID_HORIZON",
    "Settings",
]
