"""Category management commands."""

import click
from finance_aggregator.domain.category import CategoryService
from finance_aggregator.domain.entities import CategoryType
from finance_aggregator.domain.errors import DomainError
from finance_aggregator.cli.error_handling import handle_domain_error


def print_category_tree(nodes: list[dict], indent: int = 0) -> None:
    """Recursively print category tree."""
    for node in nodes:
        cat = node["category"]
        prefix = "  " * indent
        click.echo(f"{prefix}{cat.name} [{cat.ident}] ({cat.category_type.value}, ID: {cat.id})")
        if node["children"]:
            print_category_tree(node["children"], indent + 1)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories in tree format."""
    service = CategoryService(ctx.obj["db"])

    tree = service.get_category_tree()
    if not tree:
        click.echo("No categories found. Run 'init-categories' to create default categories.")
        return

    click.echo("\nCategories:")
    print_category_tree(tree)


@category_group.command("create")
@click.argument("name")
@click.option("--ident", help="Unique ident (default: derived from the name)")
@click.option("--parent", help="Parent category ident (e.g., 'food')")
@click.option(
    "--type",
    "category_type",
    type=click.Choice([t.value for t in CategoryType], case_sensitive=False),
    default=CategoryType.EXPENSE.value,
    help="Category type (default: expense)",
)
@click.pass_context
def create_category(ctx, name: str, ident: str | None, parent: str | None, category_type: str):
    """Create a new category."""
    service = CategoryService(ctx.obj["db"])

    try:
        category_id = service.create_category(
            name=name, ident=ident, category_type=category_type.lower(), parent_ident=parent
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    category = service.get_category(category_id)
    parent_str = f" under '{parent}'" if parent else ""
    click.echo(f"Created category '{name}' [{category.ident}]{parent_str} (ID: {category_id})")


@category_group.command("update")
@click.argument("ident")
@click.option("--name", help="New display name")
@click.option("--new-ident", help="New unique ident")
@click.option(
    "--type",
    "category_type",
    type=click.Choice([t.value for t in CategoryType], case_sensitive=False),
    help="New category type",
)
@click.option("--parent", help="New parent category ident")
@click.option("--root", is_flag=True, help="Move the category to the top level")
@click.option("--sort-order", type=int, help="Position among siblings")
@click.pass_context
def update_category(
    ctx,
    ident: str,
    name: str | None,
    new_ident: str | None,
    category_type: str | None,
    parent: str | None,
    root: bool,
    sort_order: int | None,
):
    """Update a category's name, ident, type, parent or sort order."""
    service = CategoryService(ctx.obj["db"])

    category = service.get_category_by_ident(ident)
    if category is None:
        click.echo(f"Error: Category '{ident}' not found", err=True)
        ctx.exit(1)
    if parent and root:
        click.echo("Error: --parent and --root cannot be combined", err=True)
        ctx.exit(1)

    fields = {}
    if name is not None:
        fields["name"] = name
    if new_ident is not None:
        fields["ident"] = new_ident
    if category_type is not None:
        fields["category_type"] = category_type.lower()
    if sort_order is not None:
        fields["sort_order"] = sort_order
    if root:
        fields["parent_id"] = None
    elif parent is not None:
        parent_category = service.get_category_by_ident(parent)
        if parent_category is None:
            click.echo(f"Error: Category '{parent}' not found", err=True)
            ctx.exit(1)
        fields["parent_id"] = parent_category.id

    if not fields:
        click.echo("Nothing to update")
        return

    try:
        service.update_category(category.id, **fields)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    updated = service.get_category(category.id)
    click.echo(f"Updated category {service.format_category_path(category.id)} [{updated.ident}]")


@category_group.command("reorder")
@click.argument("assignments", nargs=-1, required=True)
@click.pass_context
def reorder_categories(ctx, assignments: tuple[str, ...]):
    """Set sort orders for several categories at once.

    Examples:
        finagg category reorder food=0 income=1 transfers=2
    """
    service = CategoryService(ctx.obj["db"])

    updates = {}
    for assignment in assignments:
        ident, sep, value = assignment.partition("=")
        if not sep or not value.strip().lstrip("-").isdigit():
            click.echo(f"Error: Expected IDENT=ORDER, got '{assignment}'", err=True)
            ctx.exit(1)
        sort_order = int(value)
        category = service.get_category_by_ident(ident)
        if category is None:
            click.echo(f"Error: Category '{ident}' not found", err=True)
            ctx.exit(1)
        updates[category.id] = sort_order

    try:
        service.reorder(updates)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Reordered {len(updates)} categories")


@category_group.command("delete")
@click.argument("ident")
@click.pass_context
def delete_category(ctx, ident: str):
    """Delete a category that no transaction uses."""
    service = CategoryService(ctx.obj["db"])

    category = service.get_category_by_ident(ident)
    if category is None:
        click.echo(f"Error: Category '{ident}' not found", err=True)
        ctx.exit(1)

    try:
        service.delete_category(category.id)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted category '{category.name}'")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
