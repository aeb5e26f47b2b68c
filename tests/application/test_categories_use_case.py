from datetime import date
from decimal import Decimal

import pytest

from finledger.application.requests import (
    CreateCategoryInput,
    CreateTransactionInput,
    UpdateCategoryInput,
)
from finledger.domain.errors import NotFoundError, ValidationError
from finledger.domain.models import Category

OWNER = "owner-1"


@pytest.fixture
def default_category(store):
    category = Category(id="default-food", owner_id=None, name="Food", is_default=True)
    with store.unit_of_work() as session:
        session.insert_category(category)
    return category


def test_tree_operations(categories):
    home = categories.create(OWNER, CreateCategoryInput(name="Home"))
    rent = categories.create(OWNER, CreateCategoryInput(name="Rent", parent_id=home.id))

    assert rent.parent_id == home.id
    assert [c.name for c in categories.list_categories(OWNER)] == ["Home", "Rent"]
    assert categories.list_categories("owner-2") == []


def test_names_are_unique_per_level(categories):
    home = categories.create(OWNER, CreateCategoryInput(name="Home"))
    categories.create(OWNER, CreateCategoryInput(name="Misc", parent_id=home.id))

    with pytest.raises(ValidationError, match="already exists"):
        categories.create(OWNER, CreateCategoryInput(name="Home"))
    misc = categories.create(OWNER, CreateCategoryInput(name="Misc"))
    assert misc.parent_id is None


def test_cycles_and_self_parenting_are_rejected(categories):
    root = categories.create(OWNER, CreateCategoryInput(name="Root"))
    child = categories.create(OWNER, CreateCategoryInput(name="Child", parent_id=root.id))

    with pytest.raises(ValidationError, match="own parent"):
        categories.update(OWNER, root.id, UpdateCategoryInput(parent_id=root.id))
    with pytest.raises(ValidationError, match="cycle"):
        categories.update(OWNER, root.id, UpdateCategoryInput(parent_id=child.id))

    renamed = categories.update(OWNER, child.id, UpdateCategoryInput(name="Kid"))
    assert renamed.name == "Kid"
    assert renamed.parent_id == root.id


def test_default_categories_are_visible_but_read_only(categories, default_category):
    assert categories.get(OWNER, default_category.id).is_default is True
    assert categories.get("owner-2", default_category.id).name == "Food"

    with pytest.raises(ValidationError, match="Default categories"):
        categories.update(OWNER, default_category.id, UpdateCategoryInput(name="Eats"))
    with pytest.raises(ValidationError, match="Default categories"):
        categories.delete(OWNER, default_category.id)

    own = categories.create(
        OWNER,
        CreateCategoryInput(name="Takeaway", parent_id=default_category.id),
    )
    assert own.parent_id == default_category.id


def test_delete_rules(categories, make_account, transactions):
    parent = categories.create(OWNER, CreateCategoryInput(name="Parent"))
    categories.create(OWNER, CreateCategoryInput(name="Leaf", parent_id=parent.id))
    used = categories.create(OWNER, CreateCategoryInput(name="Used"))
    unused = categories.create(OWNER, CreateCategoryInput(name="Unused"))
    account = make_account()
    transactions.create(
        OWNER,
        CreateTransactionInput(
            account_id=account.id,
            type="expense",
            amount=Decimal("5.00"),
            currency="USD",
            txn_date=date(2024, 3, 1),
            category_id=used.id,
        ),
    )

    with pytest.raises(ValidationError, match="children"):
        categories.delete(OWNER, parent.id)
    with pytest.raises(ValidationError, match="used by"):
        categories.delete(OWNER, used.id)
    categories.delete(OWNER, unused.id)
    with pytest.raises(NotFoundError):
        categories.get(OWNER, unused.id)


def test_unknown_parent_is_not_found(categories):
    with pytest.raises(NotFoundError, match="Parent category"):
        categories.create(OWNER, CreateCategoryInput(name="Orphan", parent_id="missing"))


def test_subcategory_can_move_back_to_top_level(categories):
    home = categories.create(OWNER, CreateCategoryInput(name="Home"))
    rent = categories.create(OWNER, CreateCategoryInput(name="Rent", parent_id=home.id))
    categories.create(OWNER, CreateCategoryInput(name="Misc"))
    misc = categories.create(OWNER, CreateCategoryInput(name="Misc", parent_id=home.id))

    moved = categories.update(
        OWNER,
        rent.id,
        UpdateCategoryInput(detach_from_parent=True),
    )

    assert moved.parent_id is None
    assert categories.get(OWNER, rent.id).parent_id is None
    with pytest.raises(ValidationError, match="already exists"):
        categories.update(OWNER, misc.id, UpdateCategoryInput(detach_from_parent=True))
    with pytest.raises(ValidationError, match="at the same time"):
        categories.update(
            OWNER,
            rent.id,
            UpdateCategoryInput(parent_id=home.id, detach_from_parent=True),
        )


def test_usage_nets_activity_per_category(categories, make_account, transactions):
    food = categories.create(OWNER, CreateCategoryInput(name="Food"))
    salary = categories.create(OWNER, CreateCategoryInput(name="Salary"))
    categories.create(OWNER, CreateCategoryInput(name="Idle"))
    account = make_account()

    def _record(txn_type, amount, category, on=date(2024, 3, 10), pending=False):
        transactions.create(
            OWNER,
            CreateTransactionInput(
                account_id=account.id,
                type=txn_type,
                amount=Decimal(amount),
                currency="USD",
                txn_date=on,
                category_id=category.id,
                is_pending=pending,
            ),
        )

    _record("income", "1000.00", salary)
    _record("expense", "30.00", food)
    _record("expense", "20.00", food, pending=True)
    _record("expense", "500.00", food, on=date(2024, 2, 1))

    usage = categories.usage(OWNER, date(2024, 3, 1), date(2024, 3, 31))

    assert [
        (u.category_name, u.total_amount, u.transaction_count, u.average_amount)
        for u in usage
    ] == [
        ("Salary", Decimal("-1000.00"), 1, Decimal("-1000.00")),
        ("Food", Decimal("50.00"), 2, Decimal("25.00")),
    ]
    assert [u.category_name for u in categories.usage(OWNER)] == ["Salary", "Food"]
    assert categories.usage("owner-2") == []
    with pytest.raises(ValidationError, match="date_from"):
        categories.usage(OWNER, date(2024, 4, 1), date(2024, 3, 1))


def test_default_tree_fills_gaps_and_is_idempotent(categories):
    income = categories.create(OWNER, CreateCategoryInput(name="Income"))
    categories.create(OWNER, CreateCategoryInput(name="Salary", parent_id=income.id))

    created = categories.create_defaults(OWNER)

    listed = categories.list_categories(OWNER)
    assert len(created) == 42
    assert len(listed) == 44
    assert {c.parent_id for c in listed if c.name == "Freelance"} == {income.id}
    assert len({c.parent_id for c in listed if c.name == "Insurance"}) == 2
    assert all(c.owner_id == OWNER and not c.is_default for c in created)
    assert categories.create_defaults(OWNER) == []
    assert categories.list_categories("owner-2") == []
