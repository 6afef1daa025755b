"""
Local key storage.

The signing key lives in ~/.neoconduit/.env as NEO_WIF (Wallet Import Format).
This is a convenience for the CLI; library callers pass ``KeyPair`` objects or
a ``SigningProvider`` directly.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..config import NEOCONDUIT_ENV
from .keys import KeyPair


def generate_key() -> tuple[str, str]:
    """
    Generate a new secp256r1 key pair.

    Returns:
        Tuple of (wif, address)
    """
    key = KeyPair.generate()
    return key.to_wif(), key.address


def save_wif(wif: str, env_path: Optional[Path] = None) -> Path:
    """
    Save a WIF key to the .env file, preserving other entries.

    Args:
        wif: Key in Wallet Import Format
        env_path: Path to .env file (default: ~/.neoconduit/.env)

    Returns:
        Path to the saved .env file
    """
    env_path = env_path or NEOCONDUIT_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                existing[k.strip()] = v.strip()

    existing["NEO_WIF"] = wif

    lines = [f"{k}={v}" for k, v in existing.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    if os.name != "nt":
        env_path.chmod(0o600)

    return env_path


def load_wif(env_path: Optional[Path] = None) -> str:
    """
    Load the WIF key from the .env file or the environment.

    Raises:
        ValueError: If NEO_WIF is not configured
    """
    env_path = env_path or NEOCONDUIT_ENV

    if env_path.exists():
        load_dotenv(env_path, override=True)

    wif = os.environ.get("NEO_WIF")
    if not wif:
        raise ValueError(
            f"NEO_WIF not found. Run 'neoconduit keygen' or set NEO_WIF in {env_path}"
        )
    return wif.strip()


def get_key_pair(wif: Optional[str] = None) -> KeyPair:
    """Get a ``KeyPair`` from a WIF string, loading it from .env when omitted."""
    if wif is None:
        wif = load_wif()
    return KeyPair.from_wif(wif)
