"""Backend-agnostic vault interface.

Callers hold a ``Vault`` and never a concrete backend, so new secret stores
(other cloud providers, local files) plug in without touching call sites.
Every operation blocks until it has a result or raises a ``VaultError``.
"""
from abc import ABC, abstractmethod
from typing import List

from .models import EnvEntry


class Vault(ABC):
    """Source of decoded environment entries."""

    @abstractmethod
    def download_prefixed(self, prefix: str) -> List[EnvEntry]:
        """
        Fetch every secret whose name starts with prefix.

        Backends may not support this; they raise UnimplementedError then,
        so callers must be ready to handle it.
        """

    @abstractmethod
    def download_json(self, secret_name: str) -> List[EnvEntry]:
        """
        Fetch one secret holding a JSON object and decode it into entries.

        Args:
            secret_name: Name of the secret in the store

        Returns:
            Ordered (KEY, value) pairs
        """
