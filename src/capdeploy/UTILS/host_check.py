"""
Checks that the host can run a deployment.
"""
import platform
import shutil
from typing import Dict, Iterable

from ..exceptions import ToolNotInstalledError, UnsupportedPlatformError

INSTALL_HINTS: Dict[str, str] = {
    "git": "Run sudo apt install git",
    "docker": "See how on https://docs.docker.com/engine/install/ubuntu/#install-using-the-repository.",
    "docker-compose": "See how on https://docs.docker.com/compose/install/.",
}


def verify_host(tools: Iterable[str]):
    """
    Raises if the platform is Windows or one of the tools is not on PATH.

    :param tools: Executables that must be available.
    """
    if platform.system() == "Windows":
        raise UnsupportedPlatformError("Not supported for Windows, yet.")

    for tool in tools:
        if shutil.which(tool) is None:
            raise ToolNotInstalledError(tool, INSTALL_HINTS.get(tool, ""))
