"""
Models describing a single node deployment on the host.
"""
import os
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_REPOSITORY_URL = "https://github.com/Capitalisk/capitalisk-core.git"
DEFAULT_PROJECT_NAME = "capitalisk"
DEFAULT_NETWORK_SYMBOL = "clsk"
DIR_NAME_SUFFIX = "-core"

CONFIG_FILE = "config.json"
COMPOSE_FILE = "docker-compose.yml"
GENESIS_DIR = os.path.join("genesis", "mainnet")

_NAME_CHARS = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_.-")


def validate_name(value: str) -> str:
    """
    Checks that a project name or network symbol can be used inside container
    names, file names and shell commands.
    """
    if not value:
        raise ValueError("must not be empty")
    if not value[0].isalnum() or not set(value) <= _NAME_CHARS:
        raise ValueError(f"'{value}' may only contain letters, digits, '_', '.' and '-' "
                         f"and must start with a letter or digit")
    return value


class DeploymentDescriptor(BaseModel):
    """
    Immutable description of where and what to deploy.
    The directory name is always derived from the project name.
    """
    model_config = ConfigDict(frozen=True)

    repository_url: str = DEFAULT_REPOSITORY_URL
    project_name: str = DEFAULT_PROJECT_NAME
    network_symbol: str = DEFAULT_NETWORK_SYMBOL
    root_path: str = Field(default_factory=os.getcwd)

    @field_validator("project_name", "network_symbol")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return validate_name(value)

    @field_validator("root_path")
    @classmethod
    def _absolute_root(cls, value: str) -> str:
        return os.path.abspath(value)

    @property
    def dir_name(self) -> str:
        return f"{self.project_name}{DIR_NAME_SUFFIX}"

    @property
    def deployment_path(self) -> str:
        return os.path.join(self.root_path, self.dir_name)

    @property
    def config_path(self) -> str:
        return os.path.join(self.deployment_path, CONFIG_FILE)

    @property
    def compose_path(self) -> str:
        return os.path.join(self.deployment_path, COMPOSE_FILE)

    @property
    def admin_container(self) -> str:
        """Name of the project's PostgreSQL container."""
        return f"{self.project_name}-postgres"

    @property
    def is_default_project(self) -> bool:
        return self.project_name == DEFAULT_PROJECT_NAME

    @property
    def container_identifiers(self) -> List[str]:
        """Substrings that identify this deployment's containers in `docker ps`."""
        return [self.dir_name, self.admin_container]

    def genesis_path(self, network_symbol: Optional[str] = None) -> str:
        """
        Path of the genesis file for a network.

        :param network_symbol: Defaults to the deployment's own symbol.
        """
        symbol = validate_name(network_symbol or self.network_symbol)
        return os.path.join(self.deployment_path, GENESIS_DIR, f"{symbol}-genesis.json")

    def module_key(self, project_name: Optional[str] = None) -> str:
        """Key of a project's module inside the config document's `modules` mapping."""
        return f"{validate_name(project_name or self.project_name)}_chain"
