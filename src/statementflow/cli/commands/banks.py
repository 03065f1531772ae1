"""Supported statement formats."""

import click
from statementflow.parsers import AUTO, list_parsers


@click.command("banks")
def list_banks():
    """List the bank codes accepted by 'import --bank'."""
    click.echo("\nSupported formats:")
    click.echo("-" * 60)
    for info in list_parsers():
        click.echo(f"{info.bank_code:12s} | {info.file_format.upper():4s} | {info.description}")
    click.echo(f"\nUse --bank {AUTO} (the default) to detect the format from the file.")


def register_commands(cli):
    """Register banks command with main CLI."""
    cli.add_command(list_banks)
