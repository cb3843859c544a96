import json
import re
from click.testing import CliRunner

from capdeploy.CLI.main import cli
from capdeploy.MANAGERS.environment_manager import DeployerSettings
from capdeploy.MANAGERS.network_registrar import NetworkRegistrar


def _invoke(args, registrar=None, settings=None):
    obj = {"settings": settings or DeployerSettings()}
    if registrar is not None:
        obj["registrar"] = registrar
    return CliRunner().invoke(cli, args, obj=obj)


def test_cli_help():
    result = CliRunner().invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'add-network' in result.output
    assert 'undeploy' in result.output


def test_cli_add_network_help():
    result = CliRunner().invoke(cli, ['add-network', '--help'])
    assert result.exit_code == 0
    assert '--project-name' in result.output


def test_undeploy_without_deploy(descriptor, fake_runner, tools_installed):
    registrar = NetworkRegistrar(descriptor=descriptor, runner=fake_runner)
    result = _invoke(['undeploy'], registrar)
    assert result.exit_code == 1
    assert 'No container is deployed' in result.output


def test_deploy_then_status(descriptor, fake_runner, tools_installed):
    registrar = NetworkRegistrar(descriptor=descriptor, runner=fake_runner)
    result = _invoke(['deploy'], registrar)
    assert result.exit_code == 0, result.output
    assert 'Node deployed.' in result.output

    result = _invoke(['status'], registrar)
    assert result.exit_code == 0
    assert re.search(r'deployed\s+True', result.output)
    assert 'ldpos_chain' in result.output


def test_write_config_renders_default(descriptor, fake_runner, tools_installed):
    registrar = NetworkRegistrar(descriptor=descriptor, runner=fake_runner)
    result = _invoke(['write-config'], registrar)
    assert result.exit_code == 0, result.output
    assert 'Module doge_chain written.' in result.output
    with open(descriptor.config_path) as f:
        module = json.load(f)['modules']['doge_chain']
    assert module['components']['dal']['connection']['database'] == 'doge_main'


def test_genesis_command(tmp_path, descriptor, fake_runner, tools_installed):
    genesis_file = tmp_path / 'doge-genesis.json'
    genesis_file.write_text(json.dumps({'networkSymbol': 'doge', 'accounts': []}))
    registrar = NetworkRegistrar(descriptor=descriptor, runner=fake_runner)

    result = _invoke(['genesis', str(genesis_file)], registrar)

    assert result.exit_code == 0, result.output
    assert descriptor.genesis_path('doge') in result.output


def test_add_network_reports_last_step(tmp_path, descriptor, fake_runner, tools_installed):
    genesis_file = tmp_path / 'doge-genesis.json'
    genesis_file.write_text(json.dumps({'networkSymbol': 'doge', 'accounts': []}))
    registrar = NetworkRegistrar(descriptor=descriptor, runner=fake_runner)
    fake_runner.fail('createdb', 'connection refused')

    result = _invoke(['add-network', str(genesis_file)], registrar)

    assert result.exit_code == 1
    assert 'Last completed step: config' in result.output
    assert 'Failed to create the database doge_main' in result.output


def test_missing_tool_is_reported(monkeypatch, tmp_path):
    monkeypatch.setattr("capdeploy.UTILS.host_check.platform.system", lambda: "Linux")
    monkeypatch.setattr("capdeploy.UTILS.host_check.shutil.which", lambda tool: None)
    result = _invoke(['status'], settings=DeployerSettings(root=str(tmp_path)))
    assert result.exit_code == 1
    assert 'You need to install git' in result.output


def test_invalid_project_name(tools_installed, tmp_path):
    result = _invoke(['status'], settings=DeployerSettings(project_name='bad name', root=str(tmp_path)))
    assert result.exit_code == 1
    assert 'Error:' in result.output
