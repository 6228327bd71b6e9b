from collections.abc import Generator

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.core.config import Settings, get_settings
from app.db.repository import (
    AllocationRepository,
    FinancialRecordRepository,
    FundRepository,
    ProfitShareRepository,
    TeamMemberRepository,
)
from app.db.session import SessionLocal
from app.services.sources import TieredRecordSource, build_record_source


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_user_id(x_user_id: str | None = Header(default=None)) -> str:
    # Local development runs without an identity provider.
    return x_user_id or "local-user"


def get_record_repository(db: Session = Depends(get_db)) -> FinancialRecordRepository:
    return FinancialRecordRepository(db)


def get_team_repository(db: Session = Depends(get_db)) -> TeamMemberRepository:
    return TeamMemberRepository(db)


def get_allocation_repository(db: Session = Depends(get_db)) -> AllocationRepository:
    return AllocationRepository(db)


def get_fund_repository(db: Session = Depends(get_db)) -> FundRepository:
    return FundRepository(db)


def get_profit_share_repository(db: Session = Depends(get_db)) -> ProfitShareRepository:
    return ProfitShareRepository(db)


def get_record_source(
    records: FinancialRecordRepository = Depends(get_record_repository),
    settings: Settings = Depends(get_settings),
) -> TieredRecordSource:
    return build_record_source(
        records,
        remote_url=settings.remote_records_url,
        timeout=settings.remote_timeout_seconds,
    )
