from datetime import date
from decimal import Decimal

import pytest

from finledger.application.requests import (
    CreateCategoryInput,
    CreateTransactionInput,
    WhatIfScenarioInput,
)
from finledger.domain.errors import ValidationError

OWNER = "owner-1"
TODAY = date(2024, 3, 15)


@pytest.fixture
def record(transactions):
    def _record(account, txn_type, amount, on, category=None, pending=False):
        return transactions.create(
            OWNER,
            CreateTransactionInput(
                account_id=account.id,
                type=txn_type,
                amount=Decimal(amount),
                currency=account.currency,
                txn_date=on,
                category_id=category.id if category else None,
                is_pending=pending,
            ),
        )

    return _record


def test_monthly_report_counts_confirmed_activity_of_the_month(
    make_account,
    categories,
    record,
    reports,
):
    account = make_account(currency="EUR", opening_balance="1000.00")
    food = categories.create(OWNER, CreateCategoryInput(name="Food"))
    rent = categories.create(OWNER, CreateCategoryInput(name="Rent"))
    record(account, "income", "3000.00", date(2024, 3, 1))
    record(account, "expense", "300.00", date(2024, 3, 5), food)
    record(account, "expense", "100.00", date(2024, 3, 20), rent)
    record(account, "expense", "50.00", date(2024, 3, 21))
    record(account, "expense", "999.00", date(2024, 3, 22), food, pending=True)
    record(account, "expense", "40.00", date(2024, 2, 29), food)

    report = reports.monthly_report(OWNER, 2024, 3)

    assert report.currency == "EUR"
    assert report.total_income == Decimal("3000.00")
    assert report.total_expenses == Decimal("450.00")
    assert report.net_income == Decimal("2550.00")
    assert [
        (item.category_name, item.amount, item.percentage)
        for item in report.category_breakdown
    ] == [
        ("Food", Decimal("300.00"), Decimal("66.67")),
        ("Rent", Decimal("100.00"), Decimal("22.22")),
    ]


def test_monthly_report_without_accounts_defaults_to_usd(reports):
    report = reports.monthly_report("owner-2", 2024, 3)

    assert report.currency == "USD"
    assert report.total_income == Decimal("0.00")
    assert report.category_breakdown == []
    with pytest.raises(ValidationError, match="month"):
        reports.monthly_report(OWNER, 2024, 13)


def test_cash_flow_projection_averages_the_last_six_months(
    make_account,
    accounts,
    record,
    reports,
):
    account = make_account(opening_balance="1000.00")
    savings = make_account(
        name="Old savings",
        opening_balance="900.00",
        account_type="savings",
    )
    accounts.archive(OWNER, savings.id)
    record(account, "income", "1200.00", date(2024, 1, 10))
    record(account, "expense", "300.00", date(2024, 2, 10))
    record(account, "expense", "600.00", date(2023, 9, 15))
    record(account, "expense", "100.00", date(2024, 3, 1), pending=True)

    points = reports.cash_flow_projection(OWNER, months_ahead=3, today=TODAY)

    assert [(p.date, p.projected_balance) for p in points] == [
        (date(2024, 4, 15), Decimal("1450.00")),
        (date(2024, 5, 15), Decimal("1600.00")),
        (date(2024, 6, 15), Decimal("1750.00")),
    ]
    assert points[-1].description == "Month 3 projection"


@pytest.mark.parametrize("months_ahead", [0, 121, "6"])
def test_cash_flow_projection_rejects_bad_month_counts(reports, months_ahead):
    with pytest.raises(ValidationError, match="months_ahead"):
        reports.cash_flow_projection(OWNER, months_ahead=months_ahead, today=TODAY)


def test_what_if_starts_from_active_balances(make_account, accounts, reports):
    make_account(opening_balance="250.00")
    savings = make_account(
        name="Old savings",
        opening_balance="900.00",
        account_type="savings",
    )
    accounts.archive(OWNER, savings.id)

    result = reports.what_if(
        OWNER,
        WhatIfScenarioInput(
            scenario_name=" Side job ",
            monthly_income=Decimal("500.00"),
            monthly_expenses=Decimal("300.00"),
            start_date=date(2024, 4, 1),
            months_to_project=12,
        ),
    )

    assert result.scenario_name == "Side job"
    assert len(result.projections) == 12
    assert result.projections[-1].date == date(2025, 4, 1)
    assert result.final_balance == Decimal("2650.00")
    assert result.total_savings == Decimal("2400.00")


@pytest.mark.parametrize(
    ("changes", "message"),
    [
        ({"scenario_name": "  "}, "Scenario name"),
        ({"monthly_income": Decimal("-1")}, "monthly_income"),
        ({"monthly_expenses": Decimal("1.001")}, "monthly_expenses"),
        ({"months_to_project": 0}, "months_to_project"),
        ({"months_to_project": 601}, "months_to_project"),
    ],
)
def test_what_if_validates_its_inputs(reports, changes, message):
    values = {
        "scenario_name": "Plan",
        "monthly_income": Decimal("100.00"),
        "monthly_expenses": Decimal("50.00"),
        "start_date": date(2024, 4, 1),
        "months_to_project": 6,
    }
    values.update(changes)

    with pytest.raises(ValidationError, match=message):
        reports.what_if(OWNER, WhatIfScenarioInput(**values))
