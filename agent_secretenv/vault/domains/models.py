"""Domain models for secret retrieval."""
from dataclasses import dataclass
from typing import Tuple

# (KEY, value) pair ready for environment injection
EnvEntry = Tuple[str, str]


@dataclass(frozen=True)
class SecretReference:
    """Addresses exactly one secret version in a project."""
    project: str
    secret_name: str
    version: str = "latest"

    @property
    def resource_name(self) -> str:
        return f"projects/{self.project}/secrets/{self.secret_name}/versions/{self.version}"
