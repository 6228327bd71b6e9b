from decimal import Decimal

from app.services.periods import aggregate_records
from app.services.records import create_record
from app.services.reports import build_financial_summary, render_summary_pdf, summary_payload
from app.services.trends import analyze_trends


def _records():
    rows = [
        ("2026-01-05", "income", "5000", "Sales", "p1"),
        ("2026-01-20", "expense", "8000", "Salaries", "p1"),
        ("2026-02-05", "income", "3500", "Consulting", "p1"),
        ("2026-02-06", "expense", "999", "Salaries", "p2"),
    ]
    return [
        create_record(
            date=day,
            type=kind,
            amount=amount,
            category=category,
            project_id=project,
            description=category,
            user_id="u1",
        )
        for day, kind, amount, category, project in rows
    ]


def test_summary_figures() -> None:
    summary = build_financial_summary("p1", _records(), budget="10000")

    assert summary.total_income == Decimal("8500.00")
    assert summary.total_expenses == Decimal("8000.00")
    assert summary.remaining == Decimal("2000.00")
    assert summary.percentage_used == Decimal("80")
    assert summary.profit_margin == Decimal("5.882353")
    assert summary.income_by_category == {"Sales": Decimal("5000.00"), "Consulting": Decimal("3500.00")}
    assert [row.net for row in summary.cash_flow] == [Decimal("-3000.00"), Decimal("3500.00")]
    assert summary.transaction_count == 3


def test_summary_without_budget_or_income() -> None:
    summary = build_financial_summary("empty", _records())
    assert summary.percentage_used == Decimal("0")
    assert summary.profit_margin == Decimal("0")
    assert summary_payload(summary)["cash_flow"] == []


def test_pdf_renders() -> None:
    records = _records()
    summary = build_financial_summary("p1", records, budget=10000)
    trends = analyze_trends(aggregate_records([row for row in records if row.project_id == "p1"]))
    content = render_summary_pdf(summary, trends, source="local")
    assert content.startswith(b"%PDF")
    assert len(content) > 500
