from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.models.enums import RecordType
from app.services.records import FinancialRecordData, active_records
from app.services.trends import TrendAnalysis
from app.utils.decimal_math import HUNDRED, money, pct


@dataclass(frozen=True)
class CashFlowRow:
    month: str
    income: Decimal
    expenses: Decimal

    @property
    def net(self) -> Decimal:
        return money(self.income - self.expenses)


@dataclass(frozen=True)
class FinancialSummary:
    project_id: str
    budget: Decimal
    total_income: Decimal
    total_expenses: Decimal
    expenses_by_category: dict[str, Decimal]
    income_by_category: dict[str, Decimal]
    cash_flow: list[CashFlowRow]
    transaction_count: int

    @property
    def spent(self) -> Decimal:
        return self.total_expenses

    @property
    def remaining(self) -> Decimal:
        return money(self.budget - self.total_expenses)

    @property
    def percentage_used(self) -> Decimal:
        return pct(self.total_expenses / self.budget * HUNDRED) if self.budget > 0 else pct(0)

    @property
    def net_profit(self) -> Decimal:
        return money(self.total_income - self.total_expenses)

    @property
    def profit_margin(self) -> Decimal:
        if self.total_income <= 0:
            return pct(0)
        return pct(self.net_profit / self.total_income * HUNDRED)


def _by_category(records: list[FinancialRecordData], record_type: RecordType) -> dict[str, Decimal]:
    totals: dict[str, Decimal] = {}
    for row in records:
        if row.type != record_type:
            continue
        totals[row.category] = money(totals.get(row.category, money(0)) + row.amount)
    return totals


def _cash_flow(records: list[FinancialRecordData]) -> list[CashFlowRow]:
    months: dict[str, dict[str, Decimal]] = {}
    for row in records:
        bucket = months.setdefault(row.date.strftime("%Y-%m"), {"income": money(0), "expenses": money(0)})
        key = "income" if row.type == RecordType.income else "expenses"
        bucket[key] = money(bucket[key] + row.amount)
    return [
        CashFlowRow(month=month, income=values["income"], expenses=values["expenses"])
        for month, values in sorted(months.items())
    ]


def build_financial_summary(
    project_id: str,
    records: Iterable[FinancialRecordData],
    *,
    budget: Decimal | int | str = Decimal("0"),
) -> FinancialSummary:
    rows = [row for row in active_records(list(records)) if row.project_id == project_id]
    expenses = _by_category(rows, RecordType.expense)
    income = _by_category(rows, RecordType.income)
    return FinancialSummary(
        project_id=project_id,
        budget=money(budget),
        total_income=money(sum(income.values(), Decimal("0"))),
        total_expenses=money(sum(expenses.values(), Decimal("0"))),
        expenses_by_category=expenses,
        income_by_category=income,
        cash_flow=_cash_flow(rows),
        transaction_count=len(rows),
    )


def summary_payload(summary: FinancialSummary) -> dict[str, Any]:
    return {
        "project_id": summary.project_id,
        "budget": summary.budget,
        "spent": summary.spent,
        "remaining": summary.remaining,
        "percentage_used": summary.percentage_used,
        "total_income": summary.total_income,
        "total_expenses": summary.total_expenses,
        "net_profit": summary.net_profit,
        "profit_margin": summary.profit_margin,
        "expenses_by_category": summary.expenses_by_category,
        "income_by_category": summary.income_by_category,
        "cash_flow": [
            {"month": row.month, "income": row.income, "expenses": row.expenses, "net": row.net}
            for row in summary.cash_flow
        ],
        "transaction_count": summary.transaction_count,
    }


def _draw_header(pdf: canvas.Canvas, title: str, subtitle: str) -> None:
    pdf.setFont("Helvetica-Bold", 14)
    pdf.drawString(50, 800, title)
    pdf.setFont("Helvetica", 10)
    pdf.drawString(50, 785, subtitle)
    pdf.line(50, 780, 550, 780)


def render_summary_pdf(
    summary: FinancialSummary,
    trends: TrendAnalysis,
    *,
    source: str = "local",
) -> bytes:
    stream = io.BytesIO()
    pdf = canvas.Canvas(stream, pagesize=A4)
    generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    _draw_header(
        pdf,
        f"Financial Report - Project {summary.project_id}",
        f"Generated {generated} | Data source: {source}",
    )

    y = 750
    lines = [
        f"Budget: {summary.budget:,.2f}",
        f"Total income: {summary.total_income:,.2f}",
        f"Total expenses: {summary.total_expenses:,.2f}",
        f"Net profit: {summary.net_profit:,.2f} ({summary.profit_margin:.2f}% margin)",
        f"Budget used: {summary.percentage_used:.2f}% | Remaining: {summary.remaining:,.2f}",
    ]
    for line in lines:
        pdf.drawString(50, y, line)
        y -= 16

    y -= 8
    pdf.setFont("Helvetica-Bold", 10)
    for x, heading in ((50, "Period"), (150, "Income"), (250, "Expense"), (350, "Profit"), (450, "Flag")):
        pdf.drawString(x, y, heading)
    y -= 14
    pdf.setFont("Helvetica", 9)

    for point in trends.points:
        if y < 60:
            pdf.showPage()
            pdf.setFont("Helvetica", 9)
            y = 800
        if point.is_forecast:
            values = (point.forecasted_income, point.forecasted_expense, point.forecasted_profit)
            flag = "forecast"
        else:
            values = (point.income, point.expense, point.profit)
            flag = f"anomaly ({point.anomaly_type.value})" if point.anomaly_type else ""
        pdf.drawString(50, y, point.period)
        for x, value in zip((150, 250, 350), values):
            pdf.drawString(x, y, f"{value:,.2f}")
        pdf.drawString(450, y, flag)
        y -= 12

    pdf.showPage()
    pdf.save()
    return stream.getvalue()
