"""Main CLI entry point."""

import click
from finance_aggregator.database.factories import create_sqlite_database
from finance_aggregator.logger import setup_logging

# Import and register all commands at module level
from finance_aggregator.cli.commands import (
    account,
    sync,
    transaction,
    category,
    init_categories,
    stats,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINANCE_AGGREGATOR_DB_PATH environment variable)",
    envvar="FINANCE_AGGREGATOR_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="LOG_LEVEL",
    help="Logging level (default: WARNING)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str | None):
    """finagg - Personal finance aggregator.

    Syncs accounts and transactions from SimpleFIN and Plaid into a local
    database, where they can be categorized and checked for duplicates.
    """
    ctx.ensure_object(dict)
    setup_logging(log_level)

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
sync.register_commands(cli)
account.register_commands(cli)
transaction.register_commands(cli)
category.register_commands(cli)
init_categories.register_commands(cli)
stats.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
