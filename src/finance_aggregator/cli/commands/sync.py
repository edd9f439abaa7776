"""Provider sync commands."""

import json
import click
from finance_aggregator.domain.entities import Credential, Provider
from finance_aggregator.domain.errors import DomainError
from finance_aggregator.domain.sync import DEFAULT_SYNC_MONTHS, SyncService, SyncState
from finance_aggregator.providers.plaid_client import PlaidClient
from finance_aggregator.providers.simplefin_client import SimpleFINClient
from finance_aggregator.cli.error_handling import handle_domain_error


def _run_sync(ctx, client, provider: Provider, secret: str, user: str, months: int, end_date: str | None, accounts_only: bool):
    db = ctx.obj["db"]
    service = SyncService(db, client, provider)
    credential = Credential(provider=provider, secret=secret, user_id=user)

    try:
        if accounts_only:
            results = {"accounts": service.sync_accounts(credential)}
        else:
            results = service.sync_all(credential, months_back=months, end_date=end_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(json.dumps({kind: result.to_dict() for kind, result in results.items()}, indent=2))
    if any(result.state == SyncState.FAILED for result in results.values()):
        ctx.exit(1)


def _window_options(func):
    func = click.option("--accounts-only", is_flag=True, help="Sync accounts and balances only")(func)
    func = click.option("--end-date", help="Last day of the sync window (YYYY-MM-DD, default: today)")(func)
    func = click.option(
        "--months",
        type=click.IntRange(min=0),
        default=DEFAULT_SYNC_MONTHS,
        show_default=True,
        help="Number of months of transactions to fetch",
    )(func)
    func = click.option("--user", default="default", show_default=True, help="Owning user ID")(func)
    return func


def _plaid_options(func):
    func = click.option(
        "--env",
        "environment",
        envvar="PLAID_ENV",
        default="sandbox",
        show_default=True,
        help="Plaid environment (sandbox, development, production)",
    )(func)
    func = click.option("--secret", envvar="PLAID_SECRET", required=True, help="Plaid secret")(func)
    func = click.option("--client-id", envvar="PLAID_CLIENT_ID", required=True, help="Plaid client ID")(func)
    return func


@click.group()
def sync_group():
    """Sync accounts and transactions from a provider."""
    pass


@sync_group.command("simplefin")
@click.option(
    "--access-url",
    envvar="SIMPLEFIN_ACCESS_URL",
    required=True,
    help="SimpleFIN access URL (or SIMPLEFIN_ACCESS_URL environment variable)",
)
@_window_options
@click.pass_context
def sync_simplefin(ctx, access_url: str, user: str, months: int, end_date: str | None, accounts_only: bool):
    """Sync from a SimpleFIN bridge.

    Examples:
        finagg sync simplefin --months 3
        finagg sync simplefin --end-date 2024-12-31 --accounts-only
    """
    client = SimpleFINClient()
    try:
        _run_sync(ctx, client, Provider.SIMPLEFIN, access_url, user, months, end_date, accounts_only)
    finally:
        client.close()


@sync_group.command("plaid")
@click.option(
    "--access-token",
    envvar="PLAID_ACCESS_TOKEN",
    required=True,
    help="Plaid item access token (or PLAID_ACCESS_TOKEN environment variable)",
)
@_plaid_options
@_window_options
@click.pass_context
def sync_plaid(
    ctx,
    access_token: str,
    client_id: str,
    secret: str,
    environment: str,
    user: str,
    months: int,
    end_date: str | None,
    accounts_only: bool,
):
    """Sync from a Plaid item."""
    try:
        client = PlaidClient(client_id=client_id, secret=secret, environment=environment)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    try:
        _run_sync(ctx, client, Provider.PLAID, access_token, user, months, end_date, accounts_only)
    finally:
        client.close()


@click.command("claim-simplefin")
@click.argument("setup_token")
@click.pass_context
def claim_simplefin(ctx, setup_token: str):
    """Exchange a SimpleFIN setup token for an access URL.

    The access URL is printed once; store it in SIMPLEFIN_ACCESS_URL.
    """
    client = SimpleFINClient()
    try:
        access_url = client.claim_setup_token(setup_token)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    finally:
        client.close()
    click.echo(access_url)


@click.command("plaid-link-token")
@click.option("--user", default="default", show_default=True, help="Owning user ID")
@_plaid_options
@click.pass_context
def plaid_link_token(ctx, user: str, client_id: str, secret: str, environment: str):
    """Create a Plaid Link token for connecting a bank in the browser."""
    try:
        client = PlaidClient(client_id=client_id, secret=secret, environment=environment)
        try:
            link_token = client.create_link_token(user)
        finally:
            client.close()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(link_token)


@click.command("plaid-exchange-token")
@click.argument("public_token")
@_plaid_options
@click.pass_context
def plaid_exchange_token(ctx, public_token: str, client_id: str, secret: str, environment: str):
    """Exchange a Plaid Link public token for an item access token.

    The access token is printed once; store it in PLAID_ACCESS_TOKEN.
    """
    try:
        client = PlaidClient(client_id=client_id, secret=secret, environment=environment)
        try:
            tokens = client.exchange_public_token(public_token)
        finally:
            client.close()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(json.dumps(tokens, indent=2))


def register_commands(cli):
    """Register sync commands with main CLI."""
    cli.add_command(sync_group, name="sync")
    cli.add_command(claim_simplefin)
    cli.add_command(plaid_link_token)
    cli.add_command(plaid_exchange_token)
