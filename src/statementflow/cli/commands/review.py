"""Review queue command."""

import click
from statementflow.cli.context import get_db
from statementflow.domain.category import UNCATEGORIZED, CategoryService
from statementflow.domain.transaction import TransactionService


@click.command("review")
@click.option("--user", "user_id", required=True, help="User whose queue is listed")
@click.pass_context
def review_transactions(ctx, user_id: str):
    """List transactions whose category needs a human check."""
    db = get_db(ctx)
    transactions = TransactionService(db).list_needing_review(user_id)
    if not transactions:
        click.echo("Nothing to review.")
        return

    names = {cat.id: cat.name for cat in CategoryService(db).list_categories()}
    click.echo(f"\n{len(transactions)} transactions need review:")
    click.echo("-" * 80)
    for txn in transactions:
        category = names.get(txn.category_id, UNCATEGORIZED)
        confidence = txn.category_confidence if txn.category_confidence is not None else 0.0
        click.echo(
            f"ID: {txn.id:4d} | {txn.date.isoformat()} | {txn.amount:>10} | "
            f"{txn.description_raw[:30]:30s} | {category} ({confidence:.2f})"
        )


def register_commands(cli):
    """Register review command with main CLI."""
    cli.add_command(review_transactions)
