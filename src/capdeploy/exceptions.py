# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Exceptions raised by the deployer.
"""
from typing import List, Optional


class DeployerError(Exception):
    """Base class for every error raised by capdeploy."""


class HostEnvironmentError(DeployerError):
    """The host cannot run a deployment. Raised at construction, never recovered."""


class UnsupportedPlatformError(HostEnvironmentError):
    """The host operating system is not supported."""


class ToolNotInstalledError(HostEnvironmentError):
    """A required external tool is missing from PATH."""

    def __init__(self, tool: str, hint: str = ""):
        self.tool = tool
        message = f"You need to install {tool} for this to work."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class ExecError(DeployerError):
    """
    An external command exited with a non-zero status.

    Carries the command and its captured output verbatim so callers can
    decide whether a given failure is recoverable.
    """

    def __init__(self, command: List[str], returncode: int, stdout: str = "", stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        super().__init__(
            f"Command '{' '.join(self.command)}' failed with exit code {returncode}: {self.diagnostics}"
        )

    @property
    def diagnostics(self) -> str:
        """The diagnostic output of the command, stderr first."""
        return (self.stderr.strip() or self.stdout.strip())


class ConfigError(DeployerError):
    """Base class for config document failures."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.reason = message
        super().__init__(f"{self.describe()} {path}: {message}")

    def describe(self) -> str:
        return "Config error at"


class ConfigReadError(ConfigError):
    """The document could not be read (missing or unreadable file)."""

    def describe(self) -> str:
        return "Failed to read"


class ConfigParseError(ConfigError):
    """The document was read but is not valid JSON."""

    def describe(self) -> str:
        return "Failed to parse the JSON content of file at path"


class ConfigWriteError(ConfigError):
    """The document could not be serialized or written."""

    def describe(self) -> str:
        return "Failed to write"


class ManifestError(DeployerError):
    """The compose manifest is missing or not a valid compose document."""


class NoDeployFoundError(DeployerError):
    """Undeploy was requested but no deployment is running."""

    def __init__(self, message: str = "Unable to run undeploy. No container is deployed!"):
        super().__init__(message)


class ContainerNotFoundError(DeployerError):
    """Stopping the container stack failed."""

    def __init__(self, message: str = "Container not found", cause: Optional[ExecError] = None):
        self.cause = cause
        super().__init__(message)


class GenesisWriteError(DeployerError):
    """The genesis file could not be written."""

    def __init__(self, message: str):
        super().__init__(f"Error writing genesis file! {message}")


class PostgresInitError(DeployerError):
    """A database could not be created for a reason other than it already existing."""

    def __init__(self, database: str, message: str):
        self.database = database
        super().__init__(f"Failed to create the database {database} in the docker container! {message}")


class InvalidModuleConfigError(DeployerError):
    """A module config was empty or malformed."""


class InvalidGenesisError(DeployerError):
    """A genesis document was empty or has no network symbol."""
