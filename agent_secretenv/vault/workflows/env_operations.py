"""Workflow for turning vault secrets into a process environment."""
import json
import os
import logging
import shlex
import subprocess
from typing import Dict, List, Sequence

from ..domains.base import Vault
from ..domains.config_loader import DataConfig
from ..domains.models import EnvEntry

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("env", "export", "json")


def collect_env(vault: Vault, data: DataConfig) -> List[EnvEntry]:
    """
    Download every configured secret and concatenate the entries.

    Args:
        vault: Any vault backend
        data: Secret names (decoded in order) and optional prefix

    Returns:
        Entries in download order. A key seen twice keeps both entries;
        the later one wins when applied to an environment.

    Behavior:
        - No caching: every call hits the vault again
        - The first failing secret stops the whole collection
    """
    entries: List[EnvEntry] = []
    for secret_name in data.json:
        entries.extend(vault.download_json(secret_name))

    if data.prefix is not None:
        entries.extend(vault.download_prefixed(data.prefix))

    seen = set()
    for key, _ in entries:
        if key in seen:
            logger.warning(f"Environment variable {key} is defined more than once, last value wins")
        seen.add(key)

    logger.info(f"Collected {len(entries)} environment entries")
    return entries


def render_env(entries: Sequence[EnvEntry], fmt: str = "env") -> str:
    """
    Format entries for stdout.

    Args:
        entries: (KEY, value) pairs
        fmt: "env" (KEY=value), "export" (shell-quoted export lines) or "json"

    Returns:
        Rendered text without a trailing newline

    Raises:
        ValueError: If fmt is unknown, or fmt is "env" and a value spans
            several lines (use "export" or "json" for those)
    """
    if fmt == "env":
        for key, value in entries:
            if "\n" in value or "\r" in value:
                raise ValueError(
                    f"Value of {key} contains a line break and cannot be rendered as KEY=value; "
                    f"use --format export or --format json"
                )
        return "\n".join(f"{key}={value}" for key, value in entries)
    if fmt == "export":
        return "\n".join(f"export {key}={shlex.quote(value)}" for key, value in entries)
    if fmt == "json":
        return json.dumps(dict(entries), indent=2)
    raise ValueError(f"Unknown output format: {fmt}")


def run_with_env(entries: Sequence[EnvEntry], command: List[str]) -> int:
    """
    Run a command with the entries layered over the current environment.

    Returns:
        Exit code of the command
    """
    env: Dict[str, str] = dict(os.environ)
    env.update(entries)

    logger.info(f"Running {command[0]} with {len(entries)} injected variables")
    result = subprocess.run(command, env=env, check=False)
    return result.returncode
