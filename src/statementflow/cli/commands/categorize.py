"""Manual category assignment command."""

import click
from statementflow.cli.context import build_engine, get_db
from statementflow.cli.error_handling import handle_domain_error
from statementflow.domain.errors import DomainError
from statementflow.domain.transaction import TransactionService


@click.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category_name")
@click.option("--user", "user_id", required=True, help="User making the correction")
@click.pass_context
def categorize_transaction(ctx, transaction_id: int, category_name: str, user_id: str):
    """Assign a category to a transaction and remember it for this user.

    Examples:
        statementflow categorize 12 Transporte --user alice
    """
    service = TransactionService(get_db(ctx), engine=build_engine(ctx))

    try:
        txn = service.recategorize(user_id, transaction_id, category_name)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Transaction {txn.id} categorized as '{category_name}'")


def register_commands(cli):
    """Register categorize command with main CLI."""
    cli.add_command(categorize_transaction)
