"""
Models for the node's multi-module config document, module configs and genesis files.

The config document itself stays a plain mapping so keys the deployer does
not know about survive a read-modify-write cycle. Only the parts the deployer
reads are modelled here.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class DatabaseConnection(BaseModel):
    """
    Connection descriptor of a data-access component.
    """
    model_config = ConfigDict(extra="allow")

    # Only `database` is read by the deployer; the rest is passed through as given.
    host: Any = None
    user: Any = None
    password: Any = None
    database: Optional[str] = None
    port: Any = None


class DalComponent(BaseModel):
    """
    Data-access-layer settings of a module.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    lib_path: Optional[str] = Field(default=None, alias="libPath")
    client: Optional[str] = None
    connection: Optional[DatabaseConnection] = None


class LoggerComponent(BaseModel):
    """
    Logger settings of a module.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    log_file_name: Optional[str] = Field(default=None, alias="logFileName")
    console_log_level: Optional[str] = Field(default=None, alias="consoleLogLevel")
    file_log_level: Optional[str] = Field(default=None, alias="fileLogLevel")


class ModuleComponents(BaseModel):
    model_config = ConfigDict(extra="allow")

    logger: Optional[LoggerComponent] = None
    dal: Optional[DalComponent] = None


class ModuleConfig(BaseModel):
    """
    Configuration of one chain module inside the config document.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    module_path: Optional[str] = Field(default=None, alias="modulePath")
    genesis_path: Optional[str] = Field(default=None, alias="genesisPath")
    components: ModuleComponents = Field(default_factory=ModuleComponents)

    @property
    def database_name(self) -> Optional[str]:
        """
        Name of the database the module's dal connects to, if it declares one.
        """
        dal = self.components.dal
        if dal is None or dal.connection is None:
            return None
        return dal.connection.database

    def dump(self) -> Dict[str, Any]:
        """Returns the JSON form of the module config, camelCase keys, empty fields left out."""
        return self.model_dump(by_alias=True, exclude_none=True)


class GenesisDocument(BaseModel):
    """
    Initial state of a network: its symbol and account records.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    network_symbol: str = Field(alias="networkSymbol")
    accounts: List[Dict[str, Any]] = []

    def dump(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def module_database_name(module: Any) -> Optional[str]:
    """
    Returns the dal database of a raw module mapping, or None when the module
    declares no data-access component.
    """
    node = module
    for key in ("components", "dal", "connection", "database"):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    if isinstance(node, str) and node:
        return node
    return None


def base_database_name(document: Dict[str, Any]) -> Optional[str]:
    """
    Returns the database of the default connection in the `base` section.
    """
    base = document.get("base")
    if not isinstance(base, dict):
        return None
    return module_database_name(base)


def module_database_names(document: Dict[str, Any]) -> Dict[str, str]:
    """
    Maps every module key of the document that declares a dal component to its database.
    """
    names = {}
    for key, module in (document.get("modules") or {}).items():
        database = module_database_name(module)
        if database:
            names[key] = database
    return names
