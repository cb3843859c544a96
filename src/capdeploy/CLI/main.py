"""
Command Line Interface for capdeploy.
"""
import json
import logging

import click

from ..exceptions import DeployerError
from ..MANAGERS.config_store import ConfigStore
from ..MANAGERS.environment_manager import DEFAULT_ENV_FILE, EnvironmentManager
from ..MANAGERS.network_registrar import NetworkRegistrar
from ..UTILS.templating import render_module_config


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _registrar(ctx) -> NetworkRegistrar:
    """
    Builds the registrar on first use so that `--help` works on hosts without docker.
    """
    if 'registrar' not in ctx.obj:
        ctx.obj['registrar'] = NetworkRegistrar(settings=ctx.obj['settings'])
    return ctx.obj['registrar']


def _read_json(path: str):
    return ConfigStore().read_document(path)


def _run(ctx, action):
    try:
        return action(_registrar(ctx))
    except (DeployerError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@click.group()
@click.option('--root', default=None, help='Directory the node is cloned into (default: current directory)')
@click.option('--project-name', default=None, help='Project name; the node lives in <project>-core')
@click.option('--network-symbol', default=None, help='Default network symbol')
@click.option('--repository-url', default=None, help='Git URL of the node')
@click.option('--env-file', default=DEFAULT_ENV_FILE, help='.env file with CAPDEPLOY_* settings')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
@click.pass_context
def cli(ctx, root, project_name, network_symbol, repository_url, env_file, verbose):
    """
    capdeploy - deploy a Capitalisk node and register networks on it.
    """
    ctx.ensure_object(dict)
    if 'settings' not in ctx.obj:
        ctx.obj['settings'] = EnvironmentManager().load_settings(
            overrides={
                'root': root,
                'project_name': project_name,
                'network_symbol': network_symbol,
                'repository_url': repository_url,
            },
            env_files=[env_file],
        )
    configure_logging("DEBUG" if verbose else ctx.obj['settings'].log_level)


@cli.command()
@click.pass_context
def deploy(ctx):
    """Clone, build and start the node, then create its databases."""
    _run(ctx, lambda r: r.deploy())
    click.echo("Node deployed.")


@cli.command()
@click.pass_context
def undeploy(ctx):
    """Stop the running node."""
    _run(ctx, lambda r: r.undeploy())
    click.echo("Node stopped.")


@cli.command()
@click.pass_context
def update(ctx):
    """Recreate the running containers without rebuilding."""
    _run(ctx, lambda r: r.update_deploy())
    click.echo("Containers recreated.")


@cli.command()
@click.pass_context
def status(ctx):
    """Show deployment status"""
    info = _run(ctx, lambda r: r.status())
    for key, value in info.items():
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        click.echo(f"{key:16} {value}")


@cli.command('show-config')
@click.pass_context
def show_config(ctx):
    """Print the node's config.json"""
    document = _run(ctx, lambda r: r.get_config())
    click.echo(json.dumps(document, indent=2))


@cli.command()
@click.argument('genesis_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--network-symbol', default=None, help='Network the genesis is for')
@click.pass_context
def genesis(ctx, genesis_file, network_symbol):
    """Write a genesis file into the node."""
    path = _run(ctx, lambda r: r.create_genesis(_read_json(genesis_file), network_symbol))
    click.echo(f"Genesis written to {path}")


@cli.command('write-config')
@click.argument('module_config_file', required=False, type=click.Path(exists=True, dir_okay=False))
@click.option('--project-name', default=None, help='Project owning the module')
@click.pass_context
def write_config(ctx, module_config_file, project_name):
    """Set a module config; renders the default one when no file is given."""
    def action(r):
        project = project_name or r.descriptor.project_name
        if module_config_file:
            module_config = _read_json(module_config_file)
        else:
            module_config = render_module_config(project, r.descriptor.network_symbol)
        return r.write_config(module_config, project)

    key = _run(ctx, action)
    click.echo(f"Module {key} written.")


@cli.command('create-db')
@click.argument('name')
@click.pass_context
def create_db(ctx, name):
    """Create a database in the node's PostgreSQL container."""
    _run(ctx, lambda r: r.create_database(name))
    click.echo(f"Database {name} created.")


@cli.command('add-network')
@click.argument('genesis_file', type=click.Path(exists=True, dir_okay=False))
@click.argument('module_config_file', required=False, type=click.Path(exists=True, dir_okay=False))
@click.option('--project-name', default=None, help='Project owning the module')
@click.pass_context
def add_network(ctx, genesis_file, module_config_file, project_name):
    """Register a new network: genesis, module config, database, recreate."""
    def action(r):
        genesis_doc = _read_json(genesis_file)
        project = project_name or r.descriptor.project_name
        if module_config_file:
            module_config = _read_json(module_config_file)
        else:
            symbol = genesis_doc.get('networkSymbol') if isinstance(genesis_doc, dict) else None
            module_config = render_module_config(project, symbol)
        try:
            r.add_network(genesis_doc, module_config, project)
        except DeployerError:
            step = r.last_completed_step
            click.echo(f"Last completed step: {step.value if step else 'none'}", err=True)
            raise

    _run(ctx, action)
    click.echo("Network added.")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
