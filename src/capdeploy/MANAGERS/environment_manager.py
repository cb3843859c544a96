"""
Deployer settings resolved from the process environment and .env files.
"""
import os
from typing import Dict, List, Optional

from dotenv import dotenv_values
from pydantic import BaseModel

from ..MODELS.deployment import (
    DEFAULT_NETWORK_SYMBOL,
    DEFAULT_PROJECT_NAME,
    DEFAULT_REPOSITORY_URL,
    DeploymentDescriptor,
)
from .database_manager import DEFAULT_ADMIN_ROLE

ENV_PREFIX = "CAPDEPLOY_"
DEFAULT_ENV_FILE = ".env"


class DeployerSettings(BaseModel):
    """
    Settings of a deployer run.
    """
    repository_url: str = DEFAULT_REPOSITORY_URL
    project_name: str = DEFAULT_PROJECT_NAME
    network_symbol: str = DEFAULT_NETWORK_SYMBOL
    root: Optional[str] = None
    compose_command: str = "docker-compose"
    db_admin_role: str = DEFAULT_ADMIN_ROLE
    log_level: str = "INFO"

    @property
    def compose_args(self) -> List[str]:
        """The compose command split into arguments, e.g. ['docker', 'compose']."""
        return self.compose_command.split()

    def descriptor(self) -> DeploymentDescriptor:
        """Builds the deployment descriptor for these settings."""
        return DeploymentDescriptor(
            repository_url=self.repository_url,
            project_name=self.project_name,
            network_symbol=self.network_symbol,
            root_path=self.root or os.getcwd(),
        )


class EnvironmentManager:
    """
    Manages the merging and resolution of environment variables from multiple sources.
    """
    def __init__(self, base_dir: str = "."):
        """
        Initializes the environment manager.

        :param base_dir: The base directory for resolving relative paths to .env files.
        """
        self.base_dir = base_dir

    def get_merged_environment(self,
                               explicit_env: Dict[str, str],
                               env_files: List[str]) -> Dict[str, str]:
        """
        Merges environment variables from the current process, .env files and
        explicit definitions, in increasing priority.

        :param explicit_env: Explicitly defined variables.
        :param env_files: Paths to .env files; later files override earlier ones.
        :return: The merged environment.
        """
        merged_env = os.environ.copy()

        for env_file in env_files:
            file_path = os.path.join(self.base_dir, env_file)
            if os.path.exists(file_path):
                file_env = {k: v for k, v in dotenv_values(file_path).items() if v is not None}
                merged_env.update(file_env)

        merged_env.update(explicit_env)

        return merged_env

    def load_settings(self,
                      overrides: Optional[Dict[str, Optional[str]]] = None,
                      env_files: Optional[List[str]] = None) -> DeployerSettings:
        """
        Resolves deployer settings from CAPDEPLOY_* variables.

        :param overrides: Setting values (e.g. from the command line); None values are ignored.
        :param env_files: .env files to read, defaults to `.env`.
        :return: The resolved settings.
        """
        if env_files is None:
            env_files = [DEFAULT_ENV_FILE]
        env = self.get_merged_environment({}, env_files)

        values = {}
        for field in DeployerSettings.model_fields:
            key = f"{ENV_PREFIX}{field.upper()}"
            if env.get(key):
                values[field] = env[key]

        for field, value in (overrides or {}).items():
            if value is not None:
                values[field] = value

        return DeployerSettings(**values)
