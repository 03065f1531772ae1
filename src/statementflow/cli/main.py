"""Main CLI entry point."""

import click
from statementflow.database.factories import create_sqlite_database
from statementflow.logger import setup_logging
from statementflow.settings import load_settings

# Import and register all commands at module level
from statementflow.cli.commands import (
    account,
    banks,
    import_cmd,
    categorize,
    init_categories,
    transfers,
    review,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides STATEMENTFLOW_DB_PATH environment variable)",
    envvar="STATEMENTFLOW_DB_PATH",
)
@click.pass_context
def cli(ctx, db_path: str | None):
    """Statementflow - bank statement ingestion.

    Import CSV and OFX statements from several banks, deduplicate them and
    categorize every transaction automatically.
    """
    ctx.ensure_object(dict)
    if "settings" not in ctx.obj:
        ctx.obj["settings"] = load_settings()

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path or ctx.obj["settings"].db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
account.register_commands(cli)
banks.register_commands(cli)
import_cmd.register_commands(cli)
categorize.register_commands(cli)
init_categories.register_commands(cli)
transfers.register_commands(cli)
review.register_commands(cli)


def main():
    """Main entry point for CLI."""
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_dir)
    cli(obj={"settings": settings})


if __name__ == "__main__":
    main()
