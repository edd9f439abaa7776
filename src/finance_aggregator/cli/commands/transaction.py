"""Transaction commands."""

import click
from finance_aggregator.domain.transaction import TransactionService
from finance_aggregator.domain.account import AccountService
from finance_aggregator.domain.category import CategoryService
from finance_aggregator.domain.errors import DomainError
from finance_aggregator.utils.date_parser import parse_date
from finance_aggregator.cli.error_handling import handle_domain_error


def _parse_optional_date(ctx, value: str | None, label: str):
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


@click.group()
def transaction_group():
    """Browse and categorize transactions."""
    pass


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@click.option("--category", help="Category ident (e.g., 'food-groceries')")
@click.option("--account", help="Account ID or provider account ID")
@click.option("--uncategorized", is_flag=True, help="Show only uncategorized transactions")
@click.option("--verbose", "-v", is_flag=True, help="Show all columns including memo, tags and external id")
@click.pass_context
def list_transactions(
    ctx, start_date: str, end_date: str, category: str, account: str, uncategorized: bool, verbose: bool
):
    """View transactions with optional filters.

    Dates filter on the posted date.
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)
    account_service = AccountService(db)

    start = _parse_optional_date(ctx, start_date, "start date")
    end = _parse_optional_date(ctx, end_date, "end date")

    try:
        account_id = account_service.resolve_account(account) if account else None
        transactions = service.list_transactions(
            start_date=start,
            end_date=end,
            account_id=account_id,
            category_ident=category,
            uncategorized=uncategorized,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.external_name or acc.external_id for acc in account_service.list_accounts()}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    for txn in transactions:
        account_name = accounts.get(txn.account, "Unknown")
        if txn.category_id:
            category_name = category_service.format_category_path(txn.category_id)
        else:
            category_name = "Uncategorized"

        if verbose:
            click.echo(f"\nTransaction ID: {txn.id}")
            click.echo(f"  Posted: {txn.posted_date}")
            if txn.transaction_date and txn.transaction_date != txn.posted_date:
                click.echo(f"  Transacted: {txn.transaction_date}")
            click.echo(f"  Amount: {txn.amount:,.2f}")
            click.echo(f"  Account: {account_name} (ID: {txn.account})")
            click.echo(f"  Category: {category_name}")
            click.echo(f"  Payee: {txn.payee or ''}")
            if txn.description:
                click.echo(f"  Description: {txn.description}")
            if txn.memo:
                click.echo(f"  Memo: {txn.memo}")
            if txn.tags:
                click.echo(f"  Tags: {', '.join(sorted(tag.value for tag in txn.tags))}")
            if txn.transfer_pair_id:
                click.echo(f"  Transfer pair: {txn.transfer_pair_id}")
            click.echo(f"  External ID: {txn.external_id}")
        else:
            payee = (txn.payee or "")[:30]
            click.echo(
                f"{txn.id:5d} | {txn.posted_date} | {txn.amount:>12,.2f} | {account_name[:20]:20s} | "
                f"{payee:30s} | {category_name}"
            )


@transaction_group.command("categorize")
@click.argument("transaction_id", type=int)
@click.argument("category", required=False)
@click.option("--clear", is_flag=True, help="Remove the category")
@click.pass_context
def categorize(ctx, transaction_id: int, category: str | None, clear: bool):
    """Assign a category (by ident) to a transaction.

    Examples:
        finagg transaction categorize 12 food-groceries
        finagg transaction categorize 12 --clear
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    if clear == (category is not None):
        click.echo("Error: Give either a category ident or --clear", err=True)
        ctx.exit(1)

    category_id = None
    if category is not None:
        category_obj = category_service.get_category_by_ident(category)
        if category_obj is None:
            click.echo(f"Error: Category '{category}' not found", err=True)
            ctx.exit(1)
        category_id = category_obj.id

    try:
        service.update_category(transaction_id, category_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if category_id is None:
        click.echo(f"Removed category from transaction {transaction_id}")
    else:
        click.echo(f"Categorized transaction {transaction_id} as '{category}'")


@transaction_group.command("tag")
@click.argument("transaction_id", type=int)
@click.argument("tags", nargs=-1)
@click.pass_context
def tag(ctx, transaction_id: int, tags: tuple[str, ...]):
    """Replace the tags on a transaction (income, transfer). No tags clears them."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.update_tags(transaction_id, set(tags))
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Tagged transaction {transaction_id}: {', '.join(sorted(tags)) or '(none)'}")


@transaction_group.command("link-transfer")
@click.argument("transaction_id", type=int)
@click.argument("other_id", type=int)
@click.pass_context
def link_transfer(ctx, transaction_id: int, other_id: int):
    """Mark two transactions as the two sides of one transfer."""
    service = TransactionService(ctx.obj["db"])
    try:
        service.link_transfer(transaction_id, other_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Linked transactions {transaction_id} and {other_id} as a transfer")


@transaction_group.command("dupes")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative)")
@click.pass_context
def dupes(ctx, start_date: str, end_date: str):
    """List likely duplicate transactions."""
    service = TransactionService(ctx.obj["db"])
    start = _parse_optional_date(ctx, start_date, "start date")
    end = _parse_optional_date(ctx, end_date, "end date")

    candidates = service.find_duplicates(start_date=start, end_date=end)
    if not candidates:
        click.echo("No likely duplicates found.")
        return

    click.echo(f"\nFound {len(candidates)} likely duplicate(s):")
    for candidate in candidates:
        txn = candidate.transaction
        flag = " [same account]" if candidate.same_account else ""
        click.echo(
            f"{txn.id:5d} | {txn.posted_date} | {txn.amount:>12,.2f} | {(txn.payee or '')[:30]:30s} | "
            f"group of {candidate.group_size}{flag}"
        )


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
