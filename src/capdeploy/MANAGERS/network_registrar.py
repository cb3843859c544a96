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
Orchestration of a node deployment: build and run the stack, register
networks, write genesis files and module configs, provision databases.
"""
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from ..exceptions import (
    ConfigError,
    ConfigParseError,
    ConfigWriteError,
    ContainerNotFoundError,
    ExecError,
    GenesisWriteError,
    InvalidGenesisError,
    InvalidModuleConfigError,
    NoDeployFoundError,
)
from ..MODELS.config_document import (
    GenesisDocument,
    ModuleConfig,
    base_database_name,
    module_database_name,
    module_database_names,
)
from ..MODELS.deployment import DeploymentDescriptor
from ..RUNNERS.process_runner import ProcessRunner
from ..UTILS.host_check import verify_host
from .config_store import ConfigStore
from .database_manager import DatabaseManager
from .deployment_state import ContainerQuery, DeploymentState, DockerPsQuery
from .environment_manager import DeployerSettings
from .repository_manager import RepositoryManager

logger = logging.getLogger(__name__)

GenesisInput = Union[GenesisDocument, Dict[str, Any]]
ModuleConfigInput = Union[ModuleConfig, Dict[str, Any]]


class AddNetworkStep(str, Enum):
    """
    Steps of `add_network`, in execution order.
    """
    GENESIS = "genesis"
    CONFIG = "config"
    DATABASE = "database"
    RECREATE = "recreate"


ADD_NETWORK_STEPS: Tuple[AddNetworkStep, ...] = (
    AddNetworkStep.GENESIS,
    AddNetworkStep.CONFIG,
    AddNetworkStep.DATABASE,
    AddNetworkStep.RECREATE,
)


def _genesis_payload(genesis: GenesisInput, require_symbol: bool = True) -> Tuple[Dict[str, Any], Optional[str]]:
    if isinstance(genesis, GenesisDocument):
        return genesis.dump(), genesis.network_symbol
    if not genesis or not isinstance(genesis, dict):
        raise InvalidGenesisError("A non-empty genesis document is required")
    if not require_symbol:
        return genesis, genesis.get("networkSymbol")
    try:
        symbol = GenesisDocument.model_validate(genesis).network_symbol
    except ValidationError as e:
        raise InvalidGenesisError(f"Invalid genesis document: {e}") from e
    return genesis, symbol


def _module_payload(module_config: ModuleConfigInput) -> Dict[str, Any]:
    if isinstance(module_config, ModuleConfig):
        payload = module_config.dump()
    else:
        payload = module_config
    if not payload or not isinstance(payload, dict):
        raise InvalidModuleConfigError("A non-empty module config is required")
    return payload


class NetworkRegistrar:
    """
    Deploys a node and registers networks on it.

    Only one registrar should act on a given deployment directory and database
    container at a time; nothing here locks.
    """
    def __init__(self,
                 descriptor: Optional[DeploymentDescriptor] = None,
                 settings: Optional[DeployerSettings] = None,
                 runner: Optional[ProcessRunner] = None,
                 query: Optional[ContainerQuery] = None):
        """
        Initializes the registrar and probes whether the stack is running.

        :param descriptor: Deployment to manage, built from the settings when omitted.
        :param settings: Deployer settings, defaults apply when omitted.
        :param runner: Runner for every external command.
        :param query: Source of running containers, `docker ps` when omitted.
        :raises HostEnvironmentError: On Windows or when git, docker or compose is missing.
        """
        self.settings = settings or DeployerSettings()
        self.descriptor = descriptor or self.settings.descriptor()
        self.compose_command = self.settings.compose_args

        verify_host(["git", "docker", self.compose_command[0]])

        self.runner = runner or ProcessRunner(self.descriptor.project_name)
        self.store = ConfigStore()
        self.repository = RepositoryManager(self.descriptor, self.runner)
        self.databases = DatabaseManager(self.descriptor.admin_container, self.runner,
                                         admin_role=self.settings.db_admin_role)
        self.state = DeploymentState(self.descriptor.container_identifiers,
                                     query or DockerPsQuery(self.runner))
        self.config: Optional[Dict[str, Any]] = None
        self.last_completed_step: Optional[AddNetworkStep] = None

        self.state.probe()

    @property
    def deployed(self) -> bool:
        return self.state.deployed

    def _log(self, message: str, *args):
        logger.info(f"[{self.descriptor.project_name}] {message}", *args)

    def _compose(self, *args: str):
        self.runner.run(self.compose_command + list(args), working_dir=self.descriptor.deployment_path)

    def ensure_cloned(self) -> bool:
        return self.repository.ensure_cloned()

    def deploy(self):
        """
        Builds the images without cache, starts the stack detached and
        provisions the base database and every module database.
        """
        self.ensure_cloned()

        self._log("Build docker")
        self._compose("build", "--no-cache")

        self._log("Spin up container")
        self._compose("up", "-d")
        self.state.mark_deployed()

        self._provision_databases()

    def _provision_databases(self):
        document = self.get_config()
        names: List[str] = []
        base = base_database_name(document)
        if base:
            names.append(base)
        for database in module_database_names(document).values():
            if database not in names:
                names.append(database)

        for database in names:
            self.create_database(database)

    def undeploy(self):
        """
        Stops the stack.

        :raises NoDeployFoundError: If the stack is not running.
        :raises ContainerNotFoundError: If stopping the stack fails.
        """
        if not self.state.deployed:
            raise NoDeployFoundError()

        self.ensure_cloned()

        self._log("Shutting down container")
        try:
            self._compose("down")
        except ExecError as e:
            raise ContainerNotFoundError(cause=e) from e

        self.state.mark_undeployed()

    def update_deploy(self):
        """
        Recreates the running containers so they pick up config changes, without rebuilding.
        """
        self.ensure_cloned()
        self._log("Recreating docker containers")
        self._compose("up", "-d", "--force-recreate")

    def create_genesis(self, genesis: GenesisInput, network_symbol: Optional[str] = None) -> str:
        """
        Writes the genesis file of a network. An existing file is overwritten;
        it is only read to report that it was present.

        :param genesis: The genesis document.
        :param network_symbol: Network the file is for, defaults to the deployment's.
        :return: Path of the written file.
        :raises GenesisWriteError: If the file cannot be written.
        """
        self.ensure_cloned()
        payload, _ = _genesis_payload(genesis, require_symbol=False)
        symbol = network_symbol or self.descriptor.network_symbol
        path = self.descriptor.genesis_path(symbol)

        try:
            existing = self.store.read_document(path)
        except ConfigError as e:
            logger.debug("No readable genesis at %s: %s", path, e)
        else:
            if isinstance(existing, dict) and existing.get("networkSymbol") == symbol:
                self._log("Genesis is already present")

        self._log("Writing genesis for %s", symbol)
        try:
            self.store.write_document(path, payload)
        except ConfigWriteError as e:
            raise GenesisWriteError(e.reason) from e
        return path

    def get_config(self) -> Dict[str, Any]:
        """
        Reads the config document and caches it on `config`.
        """
        self.ensure_cloned()
        document = self.store.read_document(self.descriptor.config_path)
        if not isinstance(document, dict):
            raise ConfigParseError(self.descriptor.config_path, "expected a JSON object")
        self.config = document
        return document

    def write_config(self, module_config: ModuleConfigInput, project_name: Optional[str] = None) -> str:
        """
        Sets the module config of a project, replacing any previous entry for
        that project and leaving the other modules alone.

        :param module_config: Config of the module.
        :param project_name: Project owning the module, defaults to the deployment's.
        :return: The module key written.
        :raises InvalidModuleConfigError: If the module config is empty.
        """
        self.ensure_cloned()
        payload = _module_payload(module_config)
        key = self.descriptor.module_key(project_name)

        self._log("Adding config %s", key)
        document = self.get_config()
        modules = document.get("modules")
        if modules is None:
            modules = document["modules"] = {}
        elif not isinstance(modules, dict):
            raise ConfigParseError(self.descriptor.config_path, "'modules' is not a JSON object")
        modules[key] = payload

        self.store.write_document(self.descriptor.config_path, document)
        return key

    def create_database(self, name: str):
        """
        Creates a database in the project's database container, recreating it if it exists.

        :raises PostgresInitError: If the database cannot be created.
        """
        self.databases.create_database(name)

    def add_network(self,
                    genesis: GenesisInput,
                    module_config: ModuleConfigInput,
                    project_name: Optional[str] = None):
        """
        Onboards a new chain: genesis file, module config, database, then a
        recreate of the running stack. A failing step leaves the earlier steps
        in place; `last_completed_step` tells how far it got.

        :param genesis: Genesis document, written for its own network symbol.
        :param module_config: Module config of the new chain.
        :param project_name: Project owning the module, defaults to the deployment's.
        """
        _, symbol = _genesis_payload(genesis)
        payload = _module_payload(module_config)
        database = module_database_name(payload)

        def provision():
            if database:
                self.create_database(database)
            else:
                self._log("Module declares no database, skipping")

        actions: Dict[AddNetworkStep, Callable[[], Any]] = {
            AddNetworkStep.GENESIS: lambda: self.create_genesis(genesis, symbol),
            AddNetworkStep.CONFIG: lambda: self.write_config(payload, project_name),
            AddNetworkStep.DATABASE: provision,
            AddNetworkStep.RECREATE: self.update_deploy,
        }

        self.last_completed_step = None
        for step in ADD_NETWORK_STEPS:
            self._log("Add network %s: %s", symbol, step.value)
            actions[step]()
            self.last_completed_step = step

    def status(self) -> Dict[str, Any]:
        """
        Returns a snapshot of the deployment.
        """
        d = self.descriptor
        cloned = self.repository.is_cloned()
        modules: List[str] = []
        if cloned:
            try:
                modules = sorted((self.get_config().get("modules") or {}).keys())
            except ConfigError as e:
                logger.warning("Unable to read %s: %s", d.config_path, e)
        return {
            "project_name": d.project_name,
            "network_symbol": d.network_symbol,
            "repository_url": d.repository_url,
            "deployment_path": d.deployment_path,
            "cloned": cloned,
            "deployed": self.state.deployed,
            "modules": modules,
        }
