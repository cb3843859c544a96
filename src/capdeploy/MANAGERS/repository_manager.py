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
Management of the node's local source tree.
"""
import logging
import os

from ..exceptions import ManifestError
from ..MODELS.deployment import DEFAULT_PROJECT_NAME, DeploymentDescriptor
from ..PARSERS.compose_manifest import ComposeManifest
from ..RUNNERS.process_runner import ProcessRunner

logger = logging.getLogger(__name__)


class RepositoryManager:
    """
    Makes sure the node source tree is cloned exactly once.
    """
    def __init__(self, descriptor: DeploymentDescriptor, runner: ProcessRunner):
        """
        :param descriptor: The deployment to manage.
        :param runner: Runner used for the git clone.
        """
        self.descriptor = descriptor
        self.runner = runner
        self.manifest = ComposeManifest(descriptor.compose_path)

    def is_cloned(self) -> bool:
        """
        Returns True if the deployment directory exists and can be listed.
        """
        try:
            os.listdir(self.descriptor.deployment_path)
        except OSError:
            return False
        return True

    def ensure_cloned(self) -> bool:
        """
        Clones the repository unless it is already present. A fresh clone of a
        non-default project gets its compose manifest renamed once.

        :return: True if a clone happened, False if nothing was done.
        """
        if self.is_cloned():
            return False

        d = self.descriptor
        logger.info("[%s] Cloning %s as %s", d.project_name, d.repository_url, d.dir_name)
        os.makedirs(d.root_path, exist_ok=True)
        self.runner.run(["git", "clone", d.repository_url, d.dir_name], working_dir=d.root_path)

        if not d.is_default_project:
            logger.info("[%s] Namespacing compose manifest", d.project_name)
            try:
                self.manifest.rename_project(DEFAULT_PROJECT_NAME, d.project_name)
            except ManifestError:
                logger.error("[%s] %s is cloned but its compose manifest still uses the %s names; "
                             "remove the directory before deploying again",
                             d.project_name, d.deployment_path, DEFAULT_PROJECT_NAME)
                raise

        return True
