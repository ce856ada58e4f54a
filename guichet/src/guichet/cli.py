"""
Guichet CLI.

Usage:
    guichet serve [-s SERVER] --acc ACCOUNT_FILE --sk SIGNING_KEY_FILE [--creds FILE]
    guichet init-account DIR [--name NAME]
"""

import sys

import click
from pydantic import ValidationError

from guichet.config.settings import load_config
from guichet.domain.exceptions import AuthorityLoadError
from guichet.infrastructure.authority.authority_loader import bootstrap_authority
from shared.messaging import BusError


@click.group()
@click.version_option(package_name="causerie")
def cli():
    """Guichet - credential issuer for the chat network."""


@cli.command()
@click.option("--server", "-s", default=None, help="NATS server URL(s)")
@click.option("--acc", "account_file", required=True, help="Account JWT file")
@click.option(
    "--sk", "signing_key_file", required=True, help="Account signing key file"
)
@click.option("--creds", "creds_file", default=None, help="App credentials file")
@click.option("--env", default=None, help="Configuration environment")
def serve(server, account_file, signing_key_file, creds_file, env):
    """Answer credential requests until interrupted."""
    from guichet.main import GuichetApp

    try:
        settings = load_config(env=env)
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    overrides = {
        "account_file": account_file,
        "signing_key_file": signing_key_file,
    }
    if server:
        overrides["server_url"] = server
    if creds_file:
        overrides["creds_file"] = creds_file
    settings = settings.model_copy(update=overrides)

    try:
        GuichetApp(settings).run()
    except AuthorityLoadError as e:
        click.echo(f"Could not load signing authority: {e}", err=True)
        sys.exit(1)
    except BusError as e:
        click.echo(f"Could not connect to {settings.server_url}: {e}", err=True)
        sys.exit(1)


@cli.command("init-account")
@click.argument("directory", type=click.Path(file_okay=False))
@click.option("--name", "-n", default="chat", help="Account name")
def init_account(directory, name):
    """Create an account document and a signing key in DIRECTORY."""
    try:
        result = bootstrap_authority(directory, account_name=name)
    except AuthorityLoadError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    click.echo(f"Account:      {result.account_id}")
    click.echo(f"Signing key:  {result.signing_public_key}")
    click.echo(f"Account JWT:  {result.account_file}")
    click.echo(f"Signing seed: {result.signing_key_file}")
    click.echo("")
    click.echo(
        f"Run: guichet serve --acc {result.account_file} "
        f"--sk {result.signing_key_file}"
    )


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
