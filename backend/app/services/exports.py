from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from openpyxl import Workbook

from app.models.enums import CostType, RecordType
from app.services.records import FinancialRecordData, active_records
from app.utils.decimal_math import HUNDRED, money, pct


BREAKDOWN_HEADERS = ["Category", "Cost Type", "Amount", "Percentage of Total"]
DETAIL_HEADERS = ["Date", "Category", "Cost Type", "Amount", "Percentage of Total"]


@dataclass(frozen=True)
class CategoryBreakdown:
    category: str
    cost_type: CostType
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class CostBreakdown:
    categories: list[CategoryBreakdown]
    total_expenses: Decimal
    fixed_total: Decimal
    variable_total: Decimal

    @property
    def fixed_percentage(self) -> Decimal:
        return _share(self.fixed_total, self.total_expenses)

    @property
    def variable_percentage(self) -> Decimal:
        return _share(self.variable_total, self.total_expenses)


@dataclass(frozen=True)
class ExpenseLine:
    date: date
    category: str
    cost_type: CostType
    amount: Decimal
    percentage: Decimal


def _share(amount: Decimal, total: Decimal) -> Decimal:
    return pct(amount / total * HUNDRED) if total > 0 else pct(0)


def _expenses(
    records: Iterable[FinancialRecordData],
    start: date | None = None,
    end: date | None = None,
) -> list[FinancialRecordData]:
    rows = [row for row in active_records(list(records)) if row.type == RecordType.expense]
    if start is not None:
        rows = [row for row in rows if row.date >= start]
    if end is not None:
        rows = [row for row in rows if row.date <= end]
    return rows


def cost_breakdown(
    records: Iterable[FinancialRecordData],
    *,
    cost_type: CostType | None = None,
    category: str | None = None,
) -> CostBreakdown:
    """Expenses per category, largest first. Percentages are shares of all expenses, before filtering."""
    expenses = _expenses(records)
    total = money(sum((row.amount for row in expenses), Decimal("0")))

    amounts: dict[str, Decimal] = {}
    kinds: dict[str, CostType] = {}
    for row in expenses:
        amounts[row.category] = money(amounts.get(row.category, money(0)) + row.amount)
        # the most recent record decides the category's cost type
        kinds[row.category] = row.effective_cost_type

    categories = [
        CategoryBreakdown(
            category=name,
            cost_type=kinds[name],
            amount=amount,
            percentage=_share(amount, total),
        )
        for name, amount in sorted(amounts.items(), key=lambda item: item[1], reverse=True)
    ]
    fixed = money(sum((row.amount for row in categories if row.cost_type == CostType.fixed), Decimal("0")))
    variable = money(sum((row.amount for row in categories if row.cost_type == CostType.variable), Decimal("0")))

    if cost_type is not None:
        categories = [row for row in categories if row.cost_type == cost_type]
    if category is not None:
        categories = [row for row in categories if row.category == category]

    return CostBreakdown(categories=categories, total_expenses=total, fixed_total=fixed, variable_total=variable)


def expense_lines(
    records: Iterable[FinancialRecordData],
    *,
    start: date | None = None,
    end: date | None = None,
) -> list[ExpenseLine]:
    expenses = _expenses(records, start, end)
    total = money(sum((row.amount for row in expenses), Decimal("0")))
    return [
        ExpenseLine(
            date=row.date,
            category=row.category,
            cost_type=row.effective_cost_type,
            amount=money(row.amount),
            percentage=_share(row.amount, total),
        )
        for row in expenses
    ]


def _fixed2(value: Decimal) -> str:
    return f"{money(value):.2f}"


def breakdown_csv(breakdown: CostBreakdown) -> str:
    # Consumers parse this exact layout; values are joined unquoted, no trailing newline.
    lines = [",".join(BREAKDOWN_HEADERS)]
    for row in breakdown.categories:
        lines.append(
            ",".join(
                [row.category, row.cost_type.value, _fixed2(row.amount), f"{_fixed2(row.percentage)}%"]
            )
        )
    lines.append("")
    lines.append(",".join(["Total Expenses", "", _fixed2(breakdown.total_expenses), "100%"]))
    return "\n".join(lines)


def expense_lines_csv(lines: list[ExpenseLine]) -> str:
    total = money(sum((row.amount for row in lines), Decimal("0")))
    rows = [",".join(DETAIL_HEADERS)]
    for row in lines:
        rows.append(
            ",".join(
                [
                    row.date.isoformat(),
                    row.category,
                    row.cost_type.value,
                    _fixed2(row.amount),
                    f"{_fixed2(row.percentage)}%",
                ]
            )
        )
    rows.append("")
    rows.append(",".join(["Total Expenses", "", "", _fixed2(total), "100%"]))
    return "\n".join(rows)


def expense_lines_json(
    lines: list[ExpenseLine],
    *,
    start: date | None = None,
    end: date | None = None,
    exported_at: datetime | None = None,
) -> dict[str, Any]:
    total = money(sum((row.amount for row in lines), Decimal("0")))
    return {
        "exportDate": (exported_at or datetime.now(timezone.utc)).isoformat(),
        "dateRange": {
            "start": start.isoformat() if start else "All",
            "end": end.isoformat() if end else "All",
        },
        "summary": {"totalExpenses": float(total), "recordCount": len(lines)},
        "data": [
            {
                "category": row.category,
                "costType": row.cost_type.value,
                "amount": float(row.amount),
                "percentage": float(row.percentage),
                "date": row.date.isoformat(),
            }
            for row in lines
        ],
    }


def breakdown_workbook(breakdown: CostBreakdown) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "CostBreakdown"
    sheet.append(BREAKDOWN_HEADERS)
    for row in breakdown.categories:
        sheet.append([row.category, row.cost_type.value, float(row.amount), float(row.percentage)])
    sheet.append([])
    sheet.append(["Total Expenses", None, float(breakdown.total_expenses), 100.0])

    stream = io.BytesIO()
    workbook.save(stream)
    return stream.getvalue()
