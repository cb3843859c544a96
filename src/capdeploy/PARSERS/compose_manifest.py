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
Access to the node's docker-compose.yml manifest.
"""
import logging
from typing import Any, Dict

import yaml

from ..exceptions import ManifestError

logger = logging.getLogger(__name__)


class ComposeManifest:
    """
    The compose manifest of a cloned node.
    """
    def __init__(self, path: str):
        """
        :param path: Path to the docker-compose.yml file.
        """
        self.path = path

    def read(self) -> str:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return f.read()
        except OSError as e:
            raise ManifestError(f"Unable to read compose manifest {self.path}: {e}") from e

    def load(self) -> Dict[str, Any]:
        """
        Parses the manifest.

        :return: The compose document.
        """
        return self.parse_from_string(self.read())

    def parse_from_string(self, content: str) -> Dict[str, Any]:
        """
        Parses compose content, checking it is a mapping.

        :param content: YAML content of the manifest.
        :return: The compose document.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ManifestError(f"Invalid compose manifest {self.path}: {e}") from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ManifestError(f"Invalid compose manifest {self.path}: expected a mapping")
        return data

    def rename_project(self, old: str, new: str) -> int:
        """
        Replaces every occurrence of the old project identifier with the new one,
        so several deployments on one host get distinct container and network names.
        The file is left untouched if the result is not a valid compose document.

        :param old: Identifier used by the upstream manifest.
        :param new: Identifier of this deployment.
        :return: Number of occurrences replaced.
        """
        content = self.read()
        count = content.count(old)
        if count == 0:
            logger.warning("No occurrence of '%s' found in %s", old, self.path)
            return 0

        renamed = content.replace(old, new)
        self.parse_from_string(renamed)

        try:
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(renamed)
        except OSError as e:
            raise ManifestError(f"Unable to write compose manifest {self.path}: {e}") from e

        logger.info("Renamed %d occurrence(s) of '%s' to '%s' in %s", count, old, new, self.path)
        return count

