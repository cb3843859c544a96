import os
import pytest
from capdeploy.exceptions import ManifestError
from capdeploy.MANAGERS.repository_manager import RepositoryManager
from capdeploy.MODELS.deployment import DeploymentDescriptor


class TestRepositoryManager:
    """Tests for RepositoryManager."""

    def test_not_cloned(self, descriptor, fake_runner):
        assert RepositoryManager(descriptor, fake_runner).is_cloned() is False

    def test_clone_once(self, descriptor, fake_runner):
        repo = RepositoryManager(descriptor, fake_runner)

        assert repo.ensure_cloned() is True
        calls_after_first = len(fake_runner.calls)
        assert repo.ensure_cloned() is False

        assert len(fake_runner.calls) == calls_after_first == 1
        command, cwd = fake_runner.calls[0]
        assert command == ["git", "clone", descriptor.repository_url, "doge-core"]
        assert cwd == descriptor.root_path
        assert repo.is_cloned()

    def test_manifest_renamed_for_custom_project(self, descriptor, fake_runner):
        RepositoryManager(descriptor, fake_runner).ensure_cloned()
        with open(descriptor.compose_path) as f:
            content = f.read()
        assert "capitalisk" not in content
        assert "doge-postgres" in content

    def test_manifest_renamed_only_once(self, descriptor, fake_runner):
        repo = RepositoryManager(descriptor, fake_runner)
        repo.ensure_cloned()
        # A later edit mentioning the upstream name must survive further calls.
        with open(descriptor.compose_path, "a") as f:
            f.write("# capitalisk\n")
        repo.ensure_cloned()
        with open(descriptor.compose_path) as f:
            assert f.read().endswith("# capitalisk\n")

    def test_default_project_keeps_manifest(self, tmp_path, fake_runner):
        d = DeploymentDescriptor(root_path=str(tmp_path))
        RepositoryManager(d, fake_runner).ensure_cloned()
        assert d.dir_name == "capitalisk-core"
        with open(os.path.join(d.deployment_path, "docker-compose.yml")) as f:
            assert "capitalisk-postgres" in f.read()

    def test_existing_directory_is_not_cloned(self, descriptor, fake_runner):
        os.makedirs(descriptor.deployment_path)
        assert RepositoryManager(descriptor, fake_runner).ensure_cloned() is False
        assert fake_runner.calls == []

    def test_failed_rename_is_reported(self, descriptor, fake_runner, monkeypatch, caplog):
        repo = RepositoryManager(descriptor, fake_runner)

        def broken_rename(old, new):
            raise ManifestError("Invalid compose manifest")

        monkeypatch.setattr(repo.manifest, "rename_project", broken_rename)
        with caplog.at_level("ERROR"):
            with pytest.raises(ManifestError):
                repo.ensure_cloned()

        assert "still uses the capitalisk names" in caplog.text
        assert descriptor.deployment_path in caplog.text
        assert repo.is_cloned()
