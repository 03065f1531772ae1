"""Account management commands."""

import click
from statementflow.cli.context import get_db
from statementflow.cli.error_handling import handle_domain_error
from statementflow.domain.account import AccountService
from statementflow.domain.errors import DomainError


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option("--user", "user_id", required=True, help="Owner of the account")
@click.option("--bank", help="Bank name (defaults to account name if not provided)")
@click.pass_context
def create_account(ctx, name: str, user_id: str, bank: str | None):
    """Create a new account.

    Examples:
        statementflow account create "Checking" --user alice --bank "C6 Bank"
        statementflow account create "Nubank" --user alice
    """
    service = AccountService(get_db(ctx))
    bank_name = bank if bank is not None else name

    try:
        account_id = service.create_account(user_id=user_id, name=name, bank_name=bank_name)
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--user", "user_id", help="Only list accounts of this user")
@click.pass_context
def list_accounts(ctx, user_id: str | None):
    """List accounts."""
    service = AccountService(get_db(ctx))

    accounts = service.list_accounts(user_id=user_id)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for acc in accounts:
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | User: {acc.user_id:10s} | Bank: {acc.bank_name}")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
