"""
Reading and writing of the JSON documents kept in the deployment directory.
"""
import json
import logging
import os
from typing import Any

from ..exceptions import ConfigParseError, ConfigReadError, ConfigWriteError

logger = logging.getLogger(__name__)

JSON_INDENTATION = 2


class ConfigStore:
    """
    Read-modify-write access to JSON files.

    There is no locking: a single deployer process is expected to own a
    deployment directory at a time.
    """
    def __init__(self, indent: int = JSON_INDENTATION):
        self.indent = indent

    def read_document(self, path: str) -> Any:
        """
        Reads a JSON document.

        :param path: Path to the file.
        :return: The parsed document.
        :raises ConfigReadError: If the file is missing or unreadable.
        :raises ConfigParseError: If the file is not valid JSON.
        """
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except OSError as e:
            raise ConfigReadError(path, str(e)) from e

        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigParseError(path, str(e)) from e

    def write_document(self, path: str, value: Any):
        """
        Writes a value as indented JSON, creating parent directories.

        :param path: Path to the file.
        :param value: JSON-serializable value.
        :raises ConfigWriteError: If serialization or the write fails.
        """
        try:
            content = json.dumps(value, indent=self.indent)
        except (TypeError, ValueError) as e:
            raise ConfigWriteError(path, str(e)) from e

        try:
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(content + "\n")
        except OSError as e:
            raise ConfigWriteError(path, str(e)) from e

        logger.debug("Wrote %s", path)
