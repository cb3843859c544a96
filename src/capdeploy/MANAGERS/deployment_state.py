"""
Tracking whether a deployment's container stack is running.
"""
import logging
from typing import List, Protocol, Sequence

from ..exceptions import ExecError
from ..RUNNERS.process_runner import ProcessRunner

logger = logging.getLogger(__name__)


class ContainerQuery(Protocol):
    """
    Anything able to list the names of the running containers.
    """
    def running_containers(self) -> List[str]:
        ...


class DockerPsQuery:
    """
    Lists running containers with `docker ps`.
    """
    def __init__(self, runner: ProcessRunner):
        self.runner = runner

    def running_containers(self) -> List[str]:
        result = self.runner.run(["docker", "ps", "--format", "{{.Names}}"])
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]


class DeploymentState:
    """
    Whether the stack is running. Never persisted: derived from the running
    containers by `probe()` and updated after deploy and undeploy.

    Detection is a substring match on container names, so an unrelated
    container whose name contains one of the identifiers reads as deployed.
    """
    def __init__(self, identifiers: Sequence[str], query: ContainerQuery):
        """
        :param identifiers: Substrings identifying the deployment's containers.
        :param query: Source of running container names.
        """
        self.identifiers = list(identifiers)
        self.query = query
        self.deployed = False

    def probe(self) -> bool:
        """
        Re-derives the state from the running containers.

        :return: The new state.
        """
        try:
            names = self.query.running_containers()
        except ExecError as e:
            logger.warning("Unable to list running containers, assuming not deployed: %s", e)
            self.deployed = False
            return self.deployed

        self.deployed = any(
            identifier in name for name in names for identifier in self.identifiers
        )
        return self.deployed

    def mark_deployed(self):
        self.deployed = True

    def mark_undeployed(self):
        self.deployed = False
