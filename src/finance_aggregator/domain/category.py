"""Category domain service."""

import re
from typing import Any, Optional
from finance_aggregator.database.base import Database
from finance_aggregator.domain.entities import Category as CategoryEntity, CategoryType
from finance_aggregator.domain.errors import (
    DependencyError,
    NotFoundError,
    ValidationError,
    category_delete_blocked,
    category_ident_not_found,
    category_not_found,
    duplicate_category_ident,
)


# Default category tree: (name, ident, type, parent ident)
DEFAULT_CATEGORIES = [
    # Root categories
    ("Income", "income", CategoryType.INCOME, None),
    ("Food & Dining", "food", CategoryType.EXPENSE, None),
    ("Transportation", "transportation", CategoryType.EXPENSE, None),
    ("Shopping", "shopping", CategoryType.EXPENSE, None),
    ("Bills & Utilities", "bills", CategoryType.EXPENSE, None),
    ("Entertainment", "entertainment", CategoryType.EXPENSE, None),
    ("Health & Fitness", "health", CategoryType.EXPENSE, None),
    ("Travel", "travel", CategoryType.EXPENSE, None),
    ("Transfers", "transfers", CategoryType.TRANSFER, None),
    ("Other", "other", CategoryType.EXPENSE, None),
    # Income subcategories
    ("Salary", "income-salary", CategoryType.INCOME, "income"),
    ("Interest", "income-interest", CategoryType.INCOME, "income"),
    ("Other Income", "income-other", CategoryType.INCOME, "income"),
    # Food & Dining subcategories
    ("Groceries", "food-groceries", CategoryType.EXPENSE, "food"),
    ("Restaurants", "food-restaurants", CategoryType.EXPENSE, "food"),
    ("Coffee & Snacks", "food-coffee", CategoryType.EXPENSE, "food"),
    # Transportation subcategories
    ("Gas", "transportation-gas", CategoryType.EXPENSE, "transportation"),
    ("Public Transit", "transportation-transit", CategoryType.EXPENSE, "transportation"),
    ("Parking", "transportation-parking", CategoryType.EXPENSE, "transportation"),
    # Bills & Utilities subcategories
    ("Electricity", "bills-electricity", CategoryType.EXPENSE, "bills"),
    ("Internet", "bills-internet", CategoryType.EXPENSE, "bills"),
    ("Phone", "bills-phone", CategoryType.EXPENSE, "bills"),
    # Transfer subcategories
    ("Credit Card Payment", "transfers-credit-card", CategoryType.TRANSFER, "transfers"),
    ("Between Accounts", "transfers-internal", CategoryType.TRANSFER, "transfers"),
]


def make_ident(name: str) -> str:
    """Derive a category ident from its name.

    >>> make_ident("Food & Dining")
    'food-dining'
    """
    ident = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    if not ident:
        raise ValidationError(f"Cannot derive an ident from category name {name!r}")
    return ident


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        ident: Optional[str] = None,
        category_type: CategoryType | str = CategoryType.EXPENSE,
        parent_ident: Optional[str] = None,
        sort_order: int = 0,
        user_id: Optional[str] = None,
    ) -> int:
        """Create a category.

        Args:
            name: Category name
            ident: Unique ident; derived from the name when omitted
            category_type: expense, income or transfer
            parent_ident: Optional parent category ident
            sort_order: Position among siblings
            user_id: Owning user, None for a system-wide category

        Returns:
            Category ID

        Raises:
            ValidationError: If the ident is already used or the type is unknown
            NotFoundError: If the parent category doesn't exist
        """
        ident = ident or make_ident(name)
        if self.db.get_category_by_ident(ident) is not None:
            raise ValidationError(duplicate_category_ident(ident))

        try:
            category_type = CategoryType(category_type)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        parent_id = None
        if parent_ident is not None:
            parent = self.db.get_category_by_ident(parent_ident)
            if parent is None:
                raise NotFoundError(category_ident_not_found(parent_ident))
            parent_id = parent.id

        return self.db.create_category(
            name=name,
            ident=ident,
            category_type=category_type,
            parent_id=parent_id,
            sort_order=sort_order,
            user_id=user_id,
        )

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        """Get category by ID."""
        return self.db.get_category(category_id)

    def get_category_by_ident(self, ident: str) -> Optional[CategoryEntity]:
        """Get category by ident."""
        return self.db.get_category_by_ident(ident)

    def list_categories(self) -> list[CategoryEntity]:
        """List all categories."""
        return self.db.list_categories()

    def get_category_tree(self) -> list[dict[str, Any]]:
        """Get full category tree.

        Returns:
            List of root nodes, each ``{"category": Category, "children": [...]}``
        """
        categories = self.db.list_categories()
        nodes = {cat.id: {"category": cat, "children": []} for cat in categories}
        roots = []
        for cat in categories:
            node = nodes[cat.id]
            if cat.parent_id is not None and cat.parent_id in nodes:
                nodes[cat.parent_id]["children"].append(node)
            else:
                roots.append(node)
        return roots

    def format_category_path(self, category_id: int) -> str:
        """Get full path for a category (e.g., "Food & Dining > Groceries")."""
        cat = self.get_category(category_id)
        if cat is None:
            return ""

        path_parts = [cat.name]
        seen = {cat.id}
        current_parent_id = cat.parent_id
        while current_parent_id is not None and current_parent_id not in seen:
            parent = self.get_category(current_parent_id)
            if parent is None:
                break
            path_parts.append(parent.name)
            seen.add(parent.id)
            current_parent_id = parent.parent_id

        return " > ".join(reversed(path_parts))

    def update_category(self, category_id: int, **fields: Any) -> None:
        """Update name, ident, type, parent or sort order of a category.

        Raises:
            NotFoundError: If the category doesn't exist
            ValidationError: If the new ident is taken or the parent would
                create a cycle
        """
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        ident = fields.get("ident")
        if ident is not None:
            existing = self.db.get_category_by_ident(ident)
            if existing is not None and existing.id != category_id:
                raise ValidationError(duplicate_category_ident(ident))

        parent_id = fields.get("parent_id")
        while parent_id is not None:
            if parent_id == category_id:
                raise ValidationError(f"Category {category_id} cannot be its own ancestor")
            parent = self.db.get_category(parent_id)
            if parent is None:
                raise NotFoundError(category_not_found(parent_id))
            parent_id = parent.parent_id

        self.db.update_category(category_id, **fields)

    def reorder(self, updates: dict[int, int]) -> None:
        """Apply several sort orders at once, keyed by category ID.

        Either every update is applied or none is.

        Raises:
            ValidationError: If a sort order is not an integer
            NotFoundError: If any category doesn't exist
        """
        for category_id, sort_order in updates.items():
            if isinstance(sort_order, bool) or not isinstance(sort_order, int):
                raise ValidationError(f"Sort order for category {category_id} must be an integer: {sort_order!r}")
        if updates:
            self.db.update_category_sort_orders(dict(updates))

    def delete_category(self, category_id: int) -> None:
        """Delete a category.

        Raises:
            NotFoundError: If the category doesn't exist
            DependencyError: If transactions or subcategories still use it
        """
        if self.db.get_category(category_id) is None:
            raise NotFoundError(category_not_found(category_id))

        count = self.db.count_category_transactions(category_id)
        if count > 0:
            raise DependencyError(category_delete_blocked(category_id, count))

        children = [cat for cat in self.db.list_categories() if cat.parent_id == category_id]
        if children:
            raise DependencyError(
                f"Cannot delete category {category_id}: it has {len(children)} subcategories"
            )

        self.db.delete_category(category_id)

    def seed_defaults(self) -> tuple[int, int]:
        """Create the default category tree, skipping idents that already exist.

        Returns:
            (created, skipped) counts
        """
        created = 0
        skipped = 0
        for sort_order, (name, ident, category_type, parent_ident) in enumerate(DEFAULT_CATEGORIES):
            if self.db.get_category_by_ident(ident) is not None:
                skipped += 1
                continue
            self.create_category(
                name=name,
                ident=ident,
                category_type=category_type,
                parent_ident=parent_ident,
                sort_order=sort_order,
            )
            created += 1
        return created, skipped
