from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.db.repository import FinancialRecordRepository, TeamMemberRepository
from app.models.enums import CostType, RecordType
from app.models.record import FinancialRecord
from app.models.team import TeamMember
from app.services.records import create_record


logger = logging.getLogger(__name__)

DEMO_PROJECT_ID = "demo"
DEMO_USER_ID = "demo-user"
DEMO_MONTHS = 12

TEAM = [
    ("Ana Torres", Decimal("100")),
    ("Ben Okafor", Decimal("80")),
    ("Chen Wei", Decimal("50")),
]

# category, cost type, base monthly amount
EXPENSES = [
    ("Salaries", CostType.fixed, Decimal("6000")),
    ("Rent", CostType.fixed, Decimal("1500")),
    ("Cloud", CostType.variable, Decimal("650")),
    ("Marketing", CostType.variable, Decimal("900")),
]


def _next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


def _seed_team(db: Session) -> None:
    if db.scalar(select(func.count(TeamMember.id))):
        return
    team = TeamMemberRepository(db)
    for name, availability in TEAM:
        team.add(name, availability)


def _seed_records(db: Session, *, start_year: int, start_month: int) -> int:
    existing = db.scalar(
        select(func.count(FinancialRecord.id)).where(FinancialRecord.project_id == DEMO_PROJECT_ID)
    )
    if existing:
        return 0

    records = []
    year, month = start_year, start_month
    for step in range(DEMO_MONTHS):
        day = date(year, month, 1)
        # steady growth with a one-off spike in month 8
        income = Decimal("9000") + Decimal("450") * step
        if step == 7:
            income += Decimal("12000")
        records.append(
            create_record(
                date=day.replace(day=5),
                type=RecordType.income,
                amount=income,
                category="Subscriptions",
                project_id=DEMO_PROJECT_ID,
                description=f"Subscription revenue {day:%b %Y}",
                user_id=DEMO_USER_ID,
            )
        )
        for category, cost_type, base in EXPENSES:
            amount = base if cost_type == CostType.fixed else base + Decimal("25") * step
            records.append(
                create_record(
                    date=day.replace(day=20),
                    type=RecordType.expense,
                    amount=amount,
                    category=category,
                    project_id=DEMO_PROJECT_ID,
                    description=f"{category} {day:%b %Y}",
                    user_id=DEMO_USER_ID,
                    cost_type=cost_type,
                )
            )
        year, month = _next_month(year, month)

    FinancialRecordRepository(db).save(records)
    return len(records)


def seed_demo_data(db: Session, *, today: date | None = None) -> None:
    current = today or date.today()
    start_year, start_month = current.year - 1, current.month
    _seed_team(db)
    created = _seed_records(db, start_year=start_year, start_month=start_month)
    db.commit()
    if created:
        logger.info("Seeded %d demo records for project %s.", created, DEMO_PROJECT_ID)
