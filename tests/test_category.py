"""Tests for category management."""

import pytest

from finance_aggregator.domain.category import DEFAULT_CATEGORIES, make_ident
from finance_aggregator.domain.entities import CategoryType
from finance_aggregator.domain.errors import DependencyError, NotFoundError, ValidationError


class TestCategoryService:
    """Tests for CategoryService."""

    def test_create_root_category(self, category_service):
        """Idents are derived from names when not given."""
        category_id = category_service.create_category(name="Food & Dining")
        category = category_service.get_category(category_id)
        assert category.name == "Food & Dining"
        assert category.ident == "food-dining"
        assert category.category_type == CategoryType.EXPENSE
        assert category.parent_id is None

    def test_create_child_category(self, category_service):
        parent_id = category_service.create_category(name="Food", ident="food")
        child_id = category_service.create_category(name="Groceries", ident="food-groceries", parent_ident="food")
        assert category_service.get_category(child_id).parent_id == parent_id
        assert category_service.format_category_path(child_id) == "Food > Groceries"

    def test_duplicate_ident_rejected(self, category_service):
        category_service.create_category(name="Food", ident="food")
        with pytest.raises(ValidationError, match="already exists"):
            category_service.create_category(name="Other Food", ident="food")

    def test_unknown_parent(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.create_category(name="Orphan", parent_ident="missing")

    def test_unknown_type(self, category_service):
        with pytest.raises(ValidationError):
            category_service.create_category(name="Weird", category_type="savings")

    def test_category_tree(self, category_service):
        category_service.create_category(name="Income", ident="income", category_type="income")
        category_service.create_category(name="Salary", ident="income-salary", category_type="income", parent_ident="income")
        category_service.create_category(name="Food", ident="food")

        tree = category_service.get_category_tree()

        roots = {node["category"].ident: node for node in tree}
        assert set(roots) == {"income", "food"}
        assert [child["category"].ident for child in roots["income"]["children"]] == ["income-salary"]
        assert roots["food"]["children"] == []

    def test_update_category(self, category_service):
        category_id = category_service.create_category(name="Fod", ident="fod")
        category_service.update_category(category_id, name="Food", ident="food")
        category = category_service.get_category(category_id)
        assert (category.name, category.ident) == ("Food", "food")

    def test_update_rejects_taken_ident(self, category_service):
        category_service.create_category(name="Food", ident="food")
        other_id = category_service.create_category(name="Fun", ident="fun")
        with pytest.raises(ValidationError):
            category_service.update_category(other_id, ident="food")

    def test_update_rejects_cycle(self, category_service):
        parent_id = category_service.create_category(name="A", ident="a")
        child_id = category_service.create_category(name="B", ident="b", parent_ident="a")
        with pytest.raises(ValidationError):
            category_service.update_category(parent_id, parent_id=child_id)

    def test_reorder(self, category_service):
        """All sort orders are applied together."""
        a = category_service.create_category(name="A", ident="a", sort_order=0)
        b = category_service.create_category(name="B", ident="b", sort_order=1)
        c = category_service.create_category(name="C", ident="c", sort_order=2)

        category_service.reorder({a: 2, b: 0, c: 1})

        assert [cat.ident for cat in category_service.list_categories()] == ["b", "c", "a"]

    def test_reorder_missing_category_changes_nothing(self, category_service):
        a = category_service.create_category(name="A", ident="a", sort_order=0)
        with pytest.raises(NotFoundError):
            category_service.reorder({a: 5, 9999: 1})
        assert category_service.get_category(a).sort_order == 0

    def test_reorder_rejects_non_integer(self, category_service):
        a = category_service.create_category(name="A", ident="a")
        with pytest.raises(ValidationError):
            category_service.reorder({a: "first"})

    def test_delete_unused_category(self, category_service):
        category_id = category_service.create_category(name="Temp")
        category_service.delete_category(category_id)
        assert category_service.get_category(category_id) is None

    def test_delete_blocked_by_transactions(self, category_service, transaction_service, sample_transactions):
        category_id = category_service.create_category(name="Coffee")
        transaction_service.update_category(sample_transactions["T-1"].id, category_id)

        with pytest.raises(DependencyError, match="1 transaction\\."):
            category_service.delete_category(category_id)
        assert category_service.get_category(category_id) is not None

    def test_delete_blocked_by_children(self, category_service):
        parent_id = category_service.create_category(name="Food", ident="food")
        category_service.create_category(name="Groceries", parent_ident="food")
        with pytest.raises(DependencyError):
            category_service.delete_category(parent_id)

    def test_delete_missing(self, category_service):
        with pytest.raises(NotFoundError):
            category_service.delete_category(12345)

    def test_seed_defaults_is_repeatable(self, category_service):
        created, skipped = category_service.seed_defaults()
        assert (created, skipped) == (len(DEFAULT_CATEGORIES), 0)

        created, skipped = category_service.seed_defaults()
        assert (created, skipped) == (0, len(DEFAULT_CATEGORIES))
        assert len(category_service.list_categories()) == len(DEFAULT_CATEGORIES)

        groceries = category_service.get_category_by_ident("food-groceries")
        assert category_service.format_category_path(groceries.id) == "Food & Dining > Groceries"


@pytest.mark.parametrize(
    "name,ident",
    [("Food & Dining", "food-dining"), ("  Coffee  ", "coffee"), ("Bills/Utilities 2", "bills-utilities-2")],
)
def test_make_ident(name, ident):
    assert make_ident(name) == ident


def test_make_ident_rejects_symbols_only():
    with pytest.raises(ValidationError):
        make_ident("&&&")
