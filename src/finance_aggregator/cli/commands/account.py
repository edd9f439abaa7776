"""Account browsing commands."""

import click
from finance_aggregator.domain.account import AccountService
from finance_aggregator.domain.errors import DomainError
from finance_aggregator.cli.error_handling import handle_domain_error


@click.group()
def account_group():
    """Browse synced accounts."""
    pass


@account_group.command("list")
@click.option("--user", help="Only show accounts owned by this user")
@click.pass_context
def list_accounts(ctx, user: str | None):
    """List all accounts."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(user_id=user)
    if not accounts:
        click.echo("No accounts found. Run 'sync' to fetch accounts from a provider.")
        return

    institutions = {inst.id: inst.name for inst in db.list_institutions()}

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        institution = institutions.get(acc.institution, "Unknown")
        account_type = acc.account_type.value if acc.account_type else "-"
        click.echo(
            f"ID: {acc.id:3d} | {(acc.external_name or acc.external_id):25s} | {institution:20s} | {account_type:10s} | {acc.currency}"
        )


@account_group.command("balances")
@click.argument("account")
@click.pass_context
def account_balances(ctx, account: str):
    """Show balance history of an account (ID or provider account ID)."""
    db = ctx.obj["db"]
    service = AccountService(db)

    try:
        account_id = service.resolve_account(account)
        snapshots = service.balance_history(account_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not snapshots:
        click.echo("No balances recorded.")
        return

    for snap in snapshots:
        click.echo(f"{snap.date}  {snap.balance:>14,.2f}  ({snap.source.value})")


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
