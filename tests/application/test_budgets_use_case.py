from datetime import date
from decimal import Decimal

import pytest

from finledger.application.requests import (
    BudgetCategoryInput,
    CreateBudgetInput,
    CreateCategoryInput,
    CreateTransactionInput,
    UpdateBudgetInput,
)
from finledger.domain.errors import ConflictError, NotFoundError, ValidationError

OWNER = "owner-1"


@pytest.fixture
def food(categories):
    return categories.create(OWNER, CreateCategoryInput(name="Food"))


@pytest.fixture
def fun(categories):
    return categories.create(OWNER, CreateCategoryInput(name="Fun"))


@pytest.fixture
def spend(make_account, transactions):
    account = make_account()

    def _spend(category_id, amount, on=date(2024, 3, 10), pending=False):
        return transactions.create(
            OWNER,
            CreateTransactionInput(
                account_id=account.id,
                type="expense",
                amount=Decimal(amount),
                currency="USD",
                txn_date=on,
                category_id=category_id,
                is_pending=pending,
            ),
        )

    return _spend


def _march(budgets, caps, total="1000.00"):
    return budgets.create(
        OWNER,
        CreateBudgetInput(
            year=2024,
            month=3,
            currency="USD",
            amount_total=None if total is None else Decimal(total),
            categories=[
                BudgetCategoryInput(category_id=cid, cap_amount=Decimal(cap))
                for cid, cap in caps
            ],
        ),
    )


def test_one_budget_per_month(budgets, food):
    budget = _march(budgets, [(food.id, "400.00")])

    assert budget.categories[0].category_name == "Food"
    assert budgets.get_current(OWNER, today=date(2024, 3, 31)).id == budget.id
    with pytest.raises(ConflictError, match="already exists"):
        _march(budgets, [])


def test_create_validates_period_and_caps(budgets, food):
    with pytest.raises(ValidationError):
        budgets.create(OWNER, CreateBudgetInput(year=2024, month=13, currency="USD"))
    with pytest.raises(ValidationError):
        _march(budgets, [(food.id, "10"), (food.id, "20")])
    with pytest.raises(ValidationError):
        _march(budgets, [(food.id, "-1")])
    with pytest.raises(NotFoundError):
        _march(budgets, [("unknown", "10")])


def test_usage_includes_pending_and_ignores_other_months(
    budgets,
    food,
    fun,
    spend,
):
    budget = _march(budgets, [(food.id, "400.00"), (fun.id, "100.00")])
    spend(food.id, "300.00")
    spend(fun.id, "120.00", pending=True)
    spend(None, "30.00")
    spend(food.id, "999.00", on=date(2024, 4, 1))

    usage = budgets.calculate_usage(OWNER, budget.id)

    assert usage.total_spent == Decimal("450.00")
    assert usage.remaining_budget == Decimal("550.00")
    by_name = {c.category_name: c for c in usage.categories}
    assert by_name["Food"].spent_amount == Decimal("300.00")
    assert by_name["Fun"].is_over_budget is True


def test_summary_and_alerts(budgets, food, fun, spend, notifier):
    _march(budgets, [(food.id, "400.00"), (fun.id, "100.00")], total="500.00")
    spend(food.id, "340.00")
    spend(fun.id, "110.00")

    summary = budgets.summary(OWNER, 2024, 3)
    alerts = budgets.get_alerts(OWNER, 2024, 3)
    dispatched = budgets.dispatch_alerts(OWNER, 2024, 3, threshold=100)

    assert summary.categories_over_budget == 1
    assert summary.categories_near_budget == 1
    assert [a.category_name for a in alerts] == ["Fun", None, "Food"]
    assert [a.severity for a in dispatched] == ["high"]
    (notification,) = [c.args[0] for c in notifier.dispatch.call_args_list]
    assert notification.kind == "budget_alert"
    assert notification.related_entity_id == fun.id
    assert budgets.get_alerts(OWNER, 2024, 4) == []
    with pytest.raises(NotFoundError):
        budgets.summary(OWNER, 2024, 4)


def test_update_replaces_every_cap(budgets, food, fun):
    budget = _march(budgets, [(food.id, "400.00")])

    updated = budgets.update(
        OWNER,
        budget.id,
        UpdateBudgetInput(
            amount_total=Decimal("800.00"),
            categories=[BudgetCategoryInput(category_id=fun.id, cap_amount=Decimal("50"))],
        ),
    )

    assert updated.amount_total == Decimal("800.00")
    assert [c.category_id for c in updated.categories] == [fun.id]


def test_template_copies_total_and_caps(budgets, food):
    template = _march(budgets, [(food.id, "400.00")])

    april = budgets.create_from_template(OWNER, template.id, 2024, 4)

    assert april.month == 4
    assert april.amount_total == Decimal("1000.00")
    assert [(c.category_id, c.cap_amount) for c in april.categories] == [
        (food.id, Decimal("400.00"))
    ]
    with pytest.raises(ConflictError):
        budgets.create_from_template(OWNER, template.id, 2024, 4)
    with pytest.raises(NotFoundError, match="Template"):
        budgets.create_from_template(OWNER, "missing", 2024, 5)


def test_check_before_transaction_is_advisory(budgets, food, fun, spend):
    _march(budgets, [(food.id, "100.00")])
    spend(food.id, "70.00")

    near = budgets.check_before_transaction(OWNER, food.id, "15.00", date(2024, 3, 20))
    over = budgets.check_before_transaction(OWNER, food.id, "40.00", date(2024, 3, 20))
    uncapped = budgets.check_before_transaction(OWNER, fun.id, "40.00", date(2024, 3, 20))

    assert near.allowed is True and "85.00%" in near.warning
    assert over.allowed is False
    assert uncapped.allowed is True and uncapped.warning is None


def test_delete_budget(budgets, food):
    budget = _march(budgets, [(food.id, "400.00")])

    budgets.delete(OWNER, budget.id)

    assert budgets.list_budgets(OWNER) == []
    with pytest.raises(NotFoundError):
        budgets.get(OWNER, budget.id)


def test_alert_threshold_must_be_numeric(budgets, food):
    _march(budgets, [(food.id, "400.00")])

    with pytest.raises(ValidationError, match="threshold"):
        budgets.get_alerts(OWNER, 2024, 3, threshold="most")
