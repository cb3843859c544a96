import os
from capdeploy.MANAGERS.environment_manager import DeployerSettings, EnvironmentManager


def test_merged_environment_priority(tmp_path, monkeypatch):
    monkeypatch.setenv("CAPDEPLOY_PROJECT_NAME", "from-process")
    (tmp_path / "a.env").write_text("CAPDEPLOY_PROJECT_NAME=from-a\nCAPDEPLOY_NETWORK_SYMBOL=aaa\n")
    (tmp_path / "b.env").write_text("CAPDEPLOY_NETWORK_SYMBOL='bbb' # comment\n")

    env = EnvironmentManager(base_dir=str(tmp_path)).get_merged_environment(
        {"EXPLICIT": "1"}, ["a.env", "b.env", "missing.env"])

    assert env["CAPDEPLOY_PROJECT_NAME"] == "from-a"
    assert env["CAPDEPLOY_NETWORK_SYMBOL"] == "bbb"
    assert env["EXPLICIT"] == "1"


def test_load_settings_defaults(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("CAPDEPLOY_"):
            monkeypatch.delenv(key)
    settings = EnvironmentManager(base_dir=str(tmp_path)).load_settings()
    assert settings == DeployerSettings()
    assert settings.compose_args == ["docker-compose"]


def test_load_settings_from_env_file_and_overrides(tmp_path, monkeypatch):
    monkeypatch.delenv("CAPDEPLOY_PROJECT_NAME", raising=False)
    (tmp_path / ".env").write_text(
        "CAPDEPLOY_PROJECT_NAME=ldpos\n"
        "CAPDEPLOY_COMPOSE_COMMAND=docker compose\n"
        "CAPDEPLOY_DB_ADMIN_ROLE=admin\n"
    )
    settings = EnvironmentManager(base_dir=str(tmp_path)).load_settings(
        overrides={"project_name": None, "network_symbol": "doge", "root": str(tmp_path)})

    assert settings.project_name == "ldpos"
    assert settings.network_symbol == "doge"
    assert settings.compose_args == ["docker", "compose"]
    assert settings.db_admin_role == "admin"

    descriptor = settings.descriptor()
    assert descriptor.dir_name == "ldpos-core"
    assert descriptor.root_path == str(tmp_path)
