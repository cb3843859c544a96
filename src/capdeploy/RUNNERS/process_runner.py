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
Execution of external commands with captured output.
"""
import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from ..exceptions import ExecError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Output of a command that exited successfully."""

    command: List[str]
    returncode: int
    stdout: str
    stderr: str


class ProcessRunner:
    """
    Runs one external command at a time and waits for it to finish.
    """
    def __init__(self, name: str = "capdeploy"):
        """
        Initializes the process runner.

        :param name: Identifier used in log lines.
        """
        self.name = name

    def run(self, command: List[str], working_dir: Optional[str] = None) -> CommandResult:
        """
        Runs a command to completion.

        :param command: Command and arguments to execute.
        :param working_dir: Directory to run the command in.
        :return: The captured output.
        :raises ExecError: If the command cannot be started or exits non-zero.
        """
        logger.debug("[%s] Running command: %s (cwd=%s)", self.name, " ".join(command), working_dir)

        try:
            completed = subprocess.run(
                command,
                cwd=working_dir,
                capture_output=True,
                text=True,
                # Avoid shell=True for security reasons (CWE-78)
                shell=False,
            )
        except FileNotFoundError as e:
            raise ExecError(command, 127, "", str(e)) from e
        except OSError as e:
            raise ExecError(command, 126, "", str(e)) from e

        if completed.returncode != 0:
            logger.debug("[%s] Command exited with %d: %s", self.name, completed.returncode,
                         completed.stderr.strip())
            raise ExecError(command, completed.returncode, completed.stdout, completed.stderr)

        return CommandResult(
            command=list(command),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
