"""
Provisioning of PostgreSQL databases inside the deployment's database container.
"""
import logging
import re
import shlex
from typing import List

from ..exceptions import ExecError, PostgresInitError
from ..RUNNERS.process_runner import ProcessRunner

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_ROLE = "ldpos"

# createdb reports `createdb: error: database creation failed: ERROR:  database "x" already exists`
_ALREADY_EXISTS = re.compile(r'database "[^"]*" already exists')
# Fallback when the message is not the one above, e.g. a localized server.
_EXISTS_WORD = re.compile(r'\bexists\b')


def is_already_exists(error: ExecError) -> bool:
    """
    Tells whether a failed createdb means the database is already there.
    """
    diagnostics = error.diagnostics
    if _ALREADY_EXISTS.search(diagnostics):
        return True
    return bool(_EXISTS_WORD.search(diagnostics))


class DatabaseManager:
    """
    Creates and drops databases through `docker exec` on the admin container.
    """
    def __init__(self, admin_container: str, runner: ProcessRunner, admin_role: str = DEFAULT_ADMIN_ROLE):
        """
        :param admin_container: Name of the PostgreSQL container.
        :param runner: Runner for the docker commands.
        :param admin_role: Database role used for create and drop.
        """
        self.admin_container = admin_container
        self.runner = runner
        self.admin_role = admin_role

    def _admin_command(self, tool: str, name: str) -> List[str]:
        inner = f"{tool} -U {shlex.quote(self.admin_role)} {shlex.quote(name)}"
        return ["docker", "exec", self.admin_container, "runuser", "-l", "postgres", "-c", inner]

    def create_database(self, name: str, recreate: bool = True):
        """
        Creates a database. An existing database of the same name is dropped
        and created again, discarding its data.

        :param name: Name of the database.
        :param recreate: Whether an existing database may be dropped.
        :raises PostgresInitError: If the database cannot be created.
        """
        logger.info("Adding database %s inside %s", name, self.admin_container)
        try:
            self.runner.run(self._admin_command("createdb", name))
        except ExecError as e:
            if recreate and is_already_exists(e):
                logger.info("Recreating the database %s", name)
                self.drop_database(name)
                self.create_database(name, recreate=False)
                return
            raise PostgresInitError(name, e.diagnostics or str(e)) from e

    def drop_database(self, name: str):
        """
        Drops a database.

        :param name: Name of the database.
        :raises PostgresInitError: If the drop fails.
        """
        try:
            self.runner.run(self._admin_command("dropdb", name))
        except ExecError as e:
            raise PostgresInitError(name, e.diagnostics or str(e)) from e
