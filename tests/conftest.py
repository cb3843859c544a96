"""
Shared fixtures: a fake process runner that records commands instead of running them.
"""
import json
import os

import pytest

from capdeploy.exceptions import ExecError
from capdeploy.MODELS.deployment import DeploymentDescriptor
from capdeploy.RUNNERS.process_runner import CommandResult

COMPOSE_MANIFEST = """version: '3.8'
services:
  capitalisk-core:
    build: .
    container_name: capitalisk-core
    depends_on:
      - capitalisk-postgres
    networks:
      - capitalisk-network
  capitalisk-postgres:
    image: postgres:13
    container_name: capitalisk-postgres
    networks:
      - capitalisk-network
networks:
  capitalisk-network: {}
"""

BASE_CONFIG = {
    "base": {
        "components": {
            "dal": {
                "connection": {
                    "host": "127.0.0.1",
                    "user": "capitalisk",
                    "password": "capitalisk",
                    "database": "capitalisk_main",
                    "port": "5432",
                }
            }
        }
    },
    "modules": {
        "capitalisk_chain": {
            "modulePath": "node_modules/capitalisk-chain",
            "genesisPath": "genesis/mainnet/clsk-genesis.json",
            "components": {
                "dal": {"connection": {"database": "capitalisk_main"}}
            },
        },
        "ldpos_chain": {
            "modulePath": "node_modules/ldpos-chain",
            "genesisPath": "genesis/mainnet/ldpos-genesis.json",
            "components": {
                "dal": {"connection": {"database": "ldpos_main"}}
            },
        },
        "http_api": {
            "modulePath": "node_modules/ldpos-http-api",
        },
    },
}


class FakeRunner:
    """
    Records every command. `git clone` creates the directory with a compose
    manifest and config.json; `docker ps` prints `ps_output`. Queued failures
    are raised, in order, for commands containing the given text.
    """
    def __init__(self, config=None, ps_output=""):
        self.calls = []
        self.failures = []
        self.config = config
        self.ps_output = ps_output

    def fail(self, text, message, returncode=1):
        self.failures.append((text, message, returncode))

    def commands(self):
        return [" ".join(command) for command, _ in self.calls]

    def run(self, command, working_dir=None):
        self.calls.append((list(command), working_dir))
        joined = " ".join(command)

        for i, (text, message, returncode) in enumerate(self.failures):
            if text in joined:
                del self.failures[i]
                raise ExecError(command, returncode, "", message)

        if command[:2] == ["git", "clone"]:
            target = os.path.join(working_dir, command[3])
            os.makedirs(target)
            with open(os.path.join(target, "docker-compose.yml"), "w") as f:
                f.write(COMPOSE_MANIFEST)
            if self.config is not None:
                with open(os.path.join(target, "config.json"), "w") as f:
                    json.dump(self.config, f, indent=2)
        elif command[:2] == ["docker", "ps"]:
            return CommandResult(list(command), 0, self.ps_output, "")

        return CommandResult(list(command), 0, "", "")


@pytest.fixture
def fake_runner():
    return FakeRunner(config=BASE_CONFIG)


@pytest.fixture
def tools_installed(monkeypatch):
    """Pretends git, docker and docker-compose are on PATH of a Linux host."""
    monkeypatch.setattr("capdeploy.UTILS.host_check.platform.system", lambda: "Linux")
    monkeypatch.setattr("capdeploy.UTILS.host_check.shutil.which", lambda tool: f"/usr/bin/{tool}")


@pytest.fixture
def descriptor(tmp_path):
    return DeploymentDescriptor(project_name="doge", network_symbol="doge", root_path=str(tmp_path))


@pytest.fixture
def compose_file(tmp_path):
    path = tmp_path / "docker-compose.yml"
    path.write_text(COMPOSE_MANIFEST)
    return path


@pytest.fixture
def make_runner():
    """Builds fake runners cloning a custom config.json."""
    return FakeRunner
