"""Transfer detection command."""

import click
from statementflow.cli.context import get_db
from statementflow.domain.transfers import TransferDetector


@click.command("transfers")
@click.option("--user", "user_id", required=True, help="User whose transactions are scanned")
@click.option(
    "--distinct-accounts",
    is_flag=True,
    help="Only pair transactions that belong to different accounts",
)
@click.pass_context
def detect_transfers(ctx, user_id: str, distinct_accounts: bool):
    """Link opposite transactions of equal amount on the same date."""
    detector = TransferDetector(get_db(ctx), require_distinct_accounts=distinct_accounts)
    linked = detector.detect(user_id)
    click.echo(f"Linked {linked} transfer pair{'s' if linked != 1 else ''}.")


def register_commands(cli):
    """Register transfers command with main CLI."""
    cli.add_command(detect_transfers)
