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
Command Line Interface for Dipod.
"""
import logging
import shutil
import sys

import click

from .. import API_VERSION, MIN_API_VERSION, PROXY_VERSION
from ..BACKEND.errors import BackendError
from ..BACKEND.podman_client import PodmanClient
from ..CONVERTERS.to_systemd import SystemdConverter
from ..PARSERS.config_parser import ConfigError, ConfigParser
from ..SERVER.app import create_app
from ..SERVER.listener import ProxyServer

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def configure_logging(level: str):
    """Logs to stdout, like the container tooling it fronts."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


@click.group()
@click.option('--config', '-c', 'config_path', default=None, help='YAML configuration file')
@click.option('--env-file', default='.env', show_default=True, help='Environment file with DIPOD_* settings')
@click.pass_context
def cli(ctx, config_path, env_file):
    """
    Dipod - Docker Engine API proxy for Podman.

    Serves Docker clients on the Docker socket and carries out their image
    requests through Podman.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['parser'] = ConfigParser(dotenv_path=env_file)


def _load_config(ctx, **overrides):
    try:
        return ctx.obj['parser'].parse(ctx.obj.get('config_path'), overrides)
    except ConfigError as e:
        raise click.ClickException(str(e))


@cli.command()
@click.option('--socket', 'docker_socket', default=None, help='Docker socket path to listen on')
@click.option('--podman-address', default=None, help='Varlink address of Podman')
@click.option('--log-level', type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None)
@click.pass_context
def serve(ctx, docker_socket, podman_address, log_level):
    """Start the proxy."""
    config = _load_config(
        ctx,
        docker_socket=docker_socket,
        podman_address=podman_address,
        log_level=log_level,
    )
    configure_logging(config.log_level)
    logger = logging.getLogger("dipod")

    client = PodmanClient(config.podman_address)
    try:
        client.connect(config.connect_attempts)
    except BackendError as e:
        logger.error(f"podman connect fail address={config.podman_address}: {e.message}")
        raise click.ClickException(f"cannot connect to podman at {config.podman_address}")

    server = ProxyServer(create_app(client, config), config)
    try:
        server.bind()
    except OSError as e:
        logger.error(f"unix listen fail address={config.docker_socket}: {e}")
        client.close()
        raise click.ClickException(f"cannot listen on {config.docker_socket}: {e}")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        click.echo("\nStopping proxy...")
    finally:
        client.close()


@cli.command()
def version():
    """Show proxy and API versions."""
    click.echo(f"dipod {PROXY_VERSION}")
    click.echo(f"Docker Engine API {MIN_API_VERSION} - {API_VERSION}")


@cli.command()
@click.option('--out', '-o', default='systemd', help='Output directory')
@click.option('--executable', default=None, help='Path of the dipod command in the units')
@click.pass_context
def systemd(ctx, out, executable):
    """Generate socket activation units."""
    config = _load_config(ctx)
    executable = executable or shutil.which('dipod') or '/usr/local/bin/dipod'
    converter = SystemdConverter(config, executable=executable)
    converter.convert(out)
    click.echo(f"Systemd units generated in {out}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
