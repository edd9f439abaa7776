"""Database statistics command."""

import click
from finance_aggregator.domain.stats import StatsService


@click.command("stats")
@click.pass_context
def stats(ctx):
    """Show counts of stored institutions, accounts and transactions."""
    db = ctx.obj["db"]
    counts = StatsService(db).get_stats()
    for kind in ("institutions", "accounts", "transactions"):
        click.echo(f"{kind.capitalize():13s} {counts.get(kind, 0)}")


def register_commands(cli):
    """Register stats command with main CLI."""
    cli.add_command(stats)
