"""Statement import command."""

import click
from statementflow.cli.context import build_engine, get_db
from statementflow.cli.error_handling import handle_domain_error
from statementflow.domain.errors import DomainError
from statementflow.domain.ingestion import IngestionService
from statementflow.parsers import AUTO


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--user", "user_id", required=True, help="Owner of the account")
@click.option("--account", "account_id", required=True, type=int, help="Target account ID")
@click.option("--bank", default=AUTO, show_default=True, help="Bank code (see 'banks')")
@click.pass_context
def import_statement(ctx, statement_file: str, user_id: str, account_id: int, bank: str):
    """Import transactions from a CSV or OFX statement."""
    service = IngestionService(get_db(ctx), engine=build_engine(ctx))

    try:
        result = service.import_file(
            file_path=statement_file,
            user_id=user_id,
            account_id=account_id,
            bank_code=bank,
        )
    except (DomainError, OSError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nImport complete ({result['bank_code']}):")
    click.echo(f"  Imported: {result['imported']} transactions")
    click.echo(f"  Duplicates skipped: {result['duplicates_skipped']}")
    click.echo(f"  Total processed: {result['total_processed']}")
    click.echo(f"  Needs review: {result['needs_review']}")
    if result["transfers_linked"]:
        click.echo(f"  Transfers linked: {result['transfers_linked']}")
    if result["skipped_lines"]:
        click.echo(f"  Skipped lines: {len(result['skipped_lines'])}")
        for message in result["skipped_lines"]:
            click.echo(f"    {message}", err=True)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_statement)
