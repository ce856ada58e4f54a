"""
Causerie CLI.

Usage:
    causerie [-s SERVER] [-n NAME] --creds FILE
"""

import sys

import click
from pydantic import ValidationError

from causerie.config.settings import load_config
from causerie.domain.exceptions import CredentialsExpiredError, CredentialsLoadError
from shared.messaging import BusError


@click.command()
@click.version_option(package_name="causerie")
@click.option("--server", "-s", default=None, help="NATS server URL(s)")
@click.option("--name", "-n", default=None, help="Override chat name")
@click.option("--creds", "creds_file", required=True, help="User credentials file")
@click.option("--env", default=None, help="Configuration environment")
def cli(server, name, creds_file, env):
    """Causerie - chat over signed claims."""
    from causerie.main import CauserieApp

    try:
        settings = load_config(env=env)
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    overrides = {"creds_file": creds_file}
    if server:
        overrides["server_url"] = server
    if name:
        overrides["name"] = name
    settings = settings.model_copy(update=overrides)

    try:
        app = CauserieApp(settings, input_stream=sys.stdin)
        exit_code = app.run()
    except CredentialsExpiredError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    except CredentialsLoadError as e:
        click.echo(f"Could not load user credentials: {e}", err=True)
        sys.exit(1)
    except BusError as e:
        click.echo(f"Could not connect to {settings.server_url}: {e}", err=True)
        sys.exit(1)

    if exit_code and app.exit_reason:
        click.echo(app.exit_reason, err=True)
    sys.exit(exit_code)


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
