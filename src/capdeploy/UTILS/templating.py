"""
Default module config for a new network, rendered from a template.
"""
import json
from typing import Any, Dict, Optional

from jinja2 import Template

from ..MODELS.config_document import ModuleConfig

MODULE_CONFIG_TEMPLATE = """
{
  "modulePath": {{ ("node_modules/" ~ project ~ "-chain") | tojson }},
  "genesisPath": {{ ("genesis/mainnet/" ~ symbol ~ "-genesis.json") | tojson }},
  "components": {
    "logger": {
      "logFileName": {{ ("logs/mainnet/" ~ symbol ~ ".log") | tojson }},
      "consoleLogLevel": {{ console_log_level | tojson }},
      "fileLogLevel": {{ file_log_level | tojson }}
    },
    "dal": {
      "libPath": {{ ("node_modules/" ~ project ~ "-pg-dal") | tojson }},
      "client": "pg",
      "connection": {
        "host": {{ db_host | tojson }},
        "user": {{ db_user | tojson }},
        "password": {{ db_password | tojson }},
        "database": {{ database | tojson }},
        "port": {{ db_port | tojson }}
      }
    }
  }
}
"""


def render_module_config(project_name: str,
                         network_symbol: Optional[str] = None,
                         database: Optional[str] = None,
                         db_host: str = "127.0.0.1",
                         db_port: str = "5432",
                         db_user: Optional[str] = None,
                         db_password: Optional[str] = None,
                         console_log_level: str = "debug",
                         file_log_level: str = "error") -> Dict[str, Any]:
    """
    Renders the module config the node expects for a chain module.

    :param project_name: Project the module belongs to, used for module and dal paths.
    :param network_symbol: Network symbol for genesis and log paths, defaults to the project name.
    :param database: Database name, defaults to `<project>_main`.
    :return: The module config as a JSON mapping.
    """
    symbol = network_symbol or project_name
    content = Template(MODULE_CONFIG_TEMPLATE).render(
        project=project_name,
        symbol=symbol,
        database=database or f"{project_name}_main",
        db_host=db_host,
        db_port=db_port,
        db_user=db_user or project_name,
        db_password=db_password or project_name,
        console_log_level=console_log_level,
        file_log_level=file_log_level,
    )
    config = json.loads(content)
    ModuleConfig.model_validate(config)
    return config
