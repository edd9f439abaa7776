"""Initialize default categories."""

import click
from finance_aggregator.domain.category import CategoryService


@click.command("init-categories")
@click.pass_context
def init_categories(ctx):
    """Initialize database with default category tree.

    Existing categories are kept; only missing defaults are created.
    """
    service = CategoryService(ctx.obj["db"])

    click.echo("Creating default category tree...")
    created, skipped = service.seed_defaults()
    click.echo(f"Created {created} categories")
    if skipped:
        click.echo(f"Skipped {skipped} existing categories")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
