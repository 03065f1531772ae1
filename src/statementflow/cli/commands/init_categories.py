"""Initialize default categories."""

import click
from statementflow.cli.context import get_db
from statementflow.domain.category import CategoryService


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Create the default categories that are missing."""
    service = CategoryService(get_db(ctx))
    created = service.seed_default_categories()
    if created == 0:
        click.echo("Default categories already exist.")
    else:
        click.echo(f"Successfully created {created} categories.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
