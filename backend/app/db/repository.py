from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError
from app.models.enums import FundCategory
from app.models.fund import BudgetAllocation, FundAccount
from app.models.profit_share import ProfitShare
from app.models.record import FinancialRecord
from app.models.team import TeamMember
from app.services.allocation import BudgetAllocationData, Distribution, FundAccountData
from app.services.profit_sharing import MemberWeight, ProfitShareData
from app.services.records import FinancialRecordData


def _record_data(row: FinancialRecord) -> FinancialRecordData:
    return FinancialRecordData(
        id=row.id,
        date=row.record_date,
        type=row.record_type,
        amount=Decimal(str(row.amount)),
        category=row.category,
        project_id=row.project_id,
        description=row.description,
        user_id=row.user_id,
        cost_type=row.cost_type,
        deleted_at=row.deleted_at,
    )


def _fund_data(row: FundAccount) -> FundAccountData:
    return FundAccountData(
        id=row.id,
        name=row.name,
        balance=Decimal(str(row.balance)),
        allocated=Decimal(str(row.allocated)),
        percentage=Decimal(str(row.percentage)),
        purpose=row.purpose,
        allocation_category=row.allocation_category,
    )


def _allocation_data(row: BudgetAllocation) -> BudgetAllocationData:
    return BudgetAllocationData(
        id=row.id,
        total_budget=Decimal(str(row.total_budget)),
        allocations={FundCategory.parse(key): Decimal(value) for key, value in row.allocations.items()},
        status=row.status,
        user_id=row.user_id,
        project_id=row.project_id,
        created_at=row.created_at,
    )


class FinancialRecordRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def load(self, project_id: str, *, include_deleted: bool = False) -> list[FinancialRecordData]:
        stmt = select(FinancialRecord).where(FinancialRecord.project_id == project_id)
        if not include_deleted:
            stmt = stmt.where(FinancialRecord.deleted_at.is_(None))
        rows = self.db.scalars(stmt.order_by(FinancialRecord.record_date, FinancialRecord.id)).all()
        return [_record_data(row) for row in rows]

    def get(self, project_id: str, record_id: int) -> FinancialRecordData:
        row = self.db.get(FinancialRecord, record_id)
        if row is None or row.project_id != project_id:
            raise NotFoundError("Financial record not found.", record_id=record_id)
        return _record_data(row)

    def save(self, records: Iterable[FinancialRecordData]) -> list[FinancialRecordData]:
        saved: list[FinancialRecordData] = []
        for record in records:
            row = self.db.get(FinancialRecord, record.id) if record.id is not None else None
            if row is None:
                row = FinancialRecord()
                self.db.add(row)
            row.project_id = record.project_id
            row.user_id = record.user_id
            row.record_date = record.date
            row.record_type = record.type
            row.amount = record.amount
            row.category = record.category
            row.cost_type = record.cost_type
            row.description = record.description
            row.deleted_at = record.deleted_at
            self.db.flush()
            saved.append(_record_data(row))
        return saved


class TeamMemberRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list(self) -> list[MemberWeight]:
        rows = self.db.scalars(select(TeamMember).order_by(TeamMember.id)).all()
        return [
            MemberWeight(member_id=str(row.id), member_name=row.name, availability=Decimal(str(row.availability)))
            for row in rows
        ]

    def add(self, name: str, availability: Decimal | int | str = Decimal("100")) -> MemberWeight:
        row = TeamMember(name=name, availability=Decimal(str(availability)))
        self.db.add(row)
        self.db.flush()
        return MemberWeight(member_id=str(row.id), member_name=row.name, availability=Decimal(str(row.availability)))


class AllocationRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def save_distribution(self, distribution: Distribution) -> Distribution:
        """Store the allocation and replace the project's funds with the new six."""
        allocation = distribution.allocation
        row = BudgetAllocation(
            project_id=allocation.project_id,
            user_id=allocation.user_id,
            total_budget=allocation.total_budget,
            allocations={category.value: str(amount) for category, amount in allocation.allocations.items()},
            status=allocation.status,
            created_at=allocation.created_at,
        )
        self.db.add(row)
        self.db.execute(delete(FundAccount).where(FundAccount.project_id == allocation.project_id))
        self.db.flush()

        fund_rows = [
            FundAccount(
                project_id=allocation.project_id,
                allocation_id=row.id,
                name=fund.name,
                balance=fund.balance,
                allocated=fund.allocated,
                percentage=fund.percentage,
                purpose=fund.purpose,
                allocation_category=fund.allocation_category,
            )
            for fund in distribution.funds
        ]
        self.db.add_all(fund_rows)
        self.db.flush()
        return Distribution(
            allocation=_allocation_data(row),
            funds=[_fund_data(fund_row) for fund_row in fund_rows],
        )

    def history(self, project_id: str | None) -> list[BudgetAllocationData]:
        rows = self.db.scalars(
            select(BudgetAllocation)
            .where(BudgetAllocation.project_id == project_id)
            .order_by(BudgetAllocation.created_at.desc(), BudgetAllocation.id.desc())
        ).all()
        return [_allocation_data(row) for row in rows]

    def latest(self, project_id: str | None) -> BudgetAllocationData | None:
        rows = self.history(project_id)
        return rows[0] if rows else None


class FundRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list(self, project_id: str | None) -> list[FundAccountData]:
        rows = self.db.scalars(
            select(FundAccount).where(FundAccount.project_id == project_id).order_by(FundAccount.id)
        ).all()
        return [_fund_data(row) for row in rows]

    def get(self, project_id: str | None, fund_id: int) -> FundAccountData:
        row = self.db.get(FundAccount, fund_id)
        if row is None or row.project_id != project_id:
            raise NotFoundError("Fund account not found.", fund_id=fund_id)
        return _fund_data(row)

    def save(self, fund: FundAccountData) -> FundAccountData:
        row = self.db.get(FundAccount, fund.id) if fund.id is not None else None
        if row is None:
            raise NotFoundError("Fund account not found.", fund_id=fund.id)
        row.balance = fund.balance
        row.allocated = fund.allocated
        row.percentage = fund.percentage
        row.purpose = fund.purpose
        row.allocation_category = fund.allocation_category
        self.db.flush()
        return _fund_data(row)


class ProfitShareRepository:
    def __init__(self, db: Session) -> None:
        self.db = db

    def list(self, project_id: str | None) -> list[ProfitShareData]:
        rows = self.db.scalars(
            select(ProfitShare).where(ProfitShare.project_id == project_id).order_by(ProfitShare.id)
        ).all()
        return [
            ProfitShareData(
                member_id=row.member_id,
                member_name=row.member_name,
                percentage=Decimal(str(row.percentage)),
                amount=Decimal(str(row.amount)),
                project_id=row.project_id,
                user_id=row.user_id,
            )
            for row in rows
        ]

    def replace(self, project_id: str | None, shares: Iterable[ProfitShareData]) -> list[ProfitShareData]:
        self.db.execute(delete(ProfitShare).where(ProfitShare.project_id == project_id))
        self.db.add_all(
            [
                ProfitShare(
                    project_id=project_id,
                    member_id=share.member_id,
                    member_name=share.member_name,
                    percentage=share.percentage,
                    amount=share.amount,
                    user_id=share.user_id,
                )
                for share in shares
            ]
        )
        self.db.flush()
        return self.list(project_id)
