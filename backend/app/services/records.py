from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from app.core.errors import ValidationError
from app.models.enums import CostType, RecordType
from app.utils.decimal_math import money, to_decimal


UPDATABLE_FIELDS = {"date", "type", "amount", "category", "cost_type", "description", "project_id"}


@dataclass(frozen=True)
class FinancialRecordData:
    date: date
    type: RecordType
    amount: Decimal
    category: str
    project_id: str
    description: str
    user_id: str = ""
    cost_type: CostType | None = None
    id: int | None = None
    deleted_at: datetime | None = None

    @property
    def effective_cost_type(self) -> CostType:
        return self.cost_type or CostType.variable


def _parse_date(value: date | str | None) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None or not str(value).strip():
        raise ValidationError("Financial record date is required", field="date")
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValidationError(f"Financial record date is not a valid ISO date: {value!r}", field="date") from exc


def _parse_type(value: RecordType | str | None) -> RecordType:
    try:
        return RecordType(value)
    except ValueError as exc:
        raise ValidationError('Financial record type must be "income" or "expense"', field="type") from exc


def _parse_amount(value: Any) -> Decimal:
    amount = to_decimal(value)
    if amount is None or amount < 0:
        raise ValidationError("Financial record amount must be a non-negative number", field="amount")
    return money(amount)


def _parse_cost_type(value: CostType | str | None) -> CostType | None:
    if value is None or value == "":
        return None
    try:
        return CostType(value)
    except ValueError as exc:
        raise ValidationError('Financial record costType must be "fixed" or "variable"', field="cost_type") from exc


def _required_text(value: str | None, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"Financial record {field} is required", field=field)
    return text


def create_record(
    *,
    date: date | str | None,
    type: RecordType | str | None,
    amount: Any,
    category: str | None,
    project_id: str | None,
    description: str | None,
    user_id: str = "",
    cost_type: CostType | str | None = None,
    record_id: int | None = None,
) -> FinancialRecordData:
    return FinancialRecordData(
        id=record_id,
        date=_parse_date(date),
        type=_parse_type(type),
        amount=_parse_amount(amount),
        category=_required_text(category, "category"),
        project_id=_required_text(project_id, "projectId"),
        description=_required_text(description, "description"),
        user_id=user_id,
        cost_type=_parse_cost_type(cost_type),
    )


def update_record(record: FinancialRecordData, **updates: Any) -> FinancialRecordData:
    unknown = set(updates) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    if record.deleted_at is not None:
        raise ValidationError("Cannot update a deleted financial record", record_id=record.id)

    changes: dict[str, Any] = {}
    if "date" in updates:
        changes["date"] = _parse_date(updates["date"])
    if "type" in updates:
        changes["type"] = _parse_type(updates["type"])
    if "amount" in updates:
        changes["amount"] = _parse_amount(updates["amount"])
    if "category" in updates:
        changes["category"] = _required_text(updates["category"], "category")
    if "description" in updates:
        changes["description"] = _required_text(updates["description"], "description")
    if "project_id" in updates:
        changes["project_id"] = _required_text(updates["project_id"], "projectId")
    if "cost_type" in updates:
        changes["cost_type"] = _parse_cost_type(updates["cost_type"])
    return replace(record, **changes)


def soft_delete(record: FinancialRecordData, *, at: datetime | None = None) -> FinancialRecordData:
    if record.deleted_at is not None:
        return record
    return replace(record, deleted_at=at or datetime.now(timezone.utc))


def is_valid_record(record: FinancialRecordData) -> bool:
    amount = to_decimal(record.amount)
    return bool(
        record.id is not None
        and record.date
        and record.type in (RecordType.income, RecordType.expense)
        and amount is not None
        and amount >= 0
        and record.category.strip()
        and record.project_id.strip()
        and record.description.strip()
        and record.user_id
    )


def active_records(records: list[FinancialRecordData]) -> list[FinancialRecordData]:
    return [record for record in records if getattr(record, "deleted_at", None) is None]
