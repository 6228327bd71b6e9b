from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_allocation_repository, get_db, get_fund_repository, get_user_id
from app.core.config import Settings, get_settings
from app.db.repository import AllocationRepository, FundRepository
from app.schemas.funds import (
    AllocationOut,
    CategoryUpdateRequest,
    DistributeRequest,
    DistributionResponse,
    FundOut,
    ThresholdNoticeOut,
)
from app.services.allocation import (
    BudgetAllocationData,
    FundAccountData,
    depletion_status,
    distribute,
    reassign_category,
    remaining_percentage,
    threshold_notifications,
)


router = APIRouter(prefix="/projects/{project_id}", tags=["funds"])


def _fund_out(fund: FundAccountData, settings: Settings) -> FundOut:
    return FundOut(
        id=fund.id,
        name=fund.name,
        balance=fund.balance,
        allocated=fund.allocated,
        percentage=fund.percentage,
        purpose=fund.purpose,
        allocation_category=fund.allocation_category,
        remaining_percentage=remaining_percentage(fund),
        status=depletion_status(fund, warning_pct=settings.fund_warning_remaining_pct),
    )


def _allocation_out(allocation: BudgetAllocationData, settings: Settings) -> AllocationOut:
    notices = threshold_notifications(allocation, low_threshold_pct=settings.low_fund_threshold_pct)
    return AllocationOut(
        id=allocation.id,
        project_id=allocation.project_id,
        user_id=allocation.user_id,
        total_budget=allocation.total_budget,
        allocations={category.value: amount for category, amount in allocation.allocations.items()},
        status=allocation.status,
        created_at=allocation.created_at,
        notifications=[ThresholdNoticeOut.model_validate(row) for row in notices],
    )


@router.post("/funds/distribute", response_model=DistributionResponse, status_code=status.HTTP_201_CREATED)
def distribute_budget(
    project_id: str,
    payload: DistributeRequest,
    db: Session = Depends(get_db),
    allocations: AllocationRepository = Depends(get_allocation_repository),
    user_id: str = Depends(get_user_id),
    settings: Settings = Depends(get_settings),
) -> DistributionResponse:
    result = distribute(
        payload.total_budget,
        payload.percentages,
        user_id=user_id,
        project_id=project_id,
        tolerance=settings.percentage_tolerance,
    )
    saved = allocations.save_distribution(result)
    db.commit()
    return DistributionResponse(
        allocation=_allocation_out(saved.allocation, settings),
        funds=[_fund_out(fund, settings) for fund in saved.funds],
    )


@router.get("/funds", response_model=list[FundOut])
def list_funds(
    project_id: str,
    funds: FundRepository = Depends(get_fund_repository),
    settings: Settings = Depends(get_settings),
) -> list[FundOut]:
    return [_fund_out(fund, settings) for fund in funds.list(project_id)]


@router.patch("/funds/{fund_id}/category", response_model=FundOut)
def change_fund_category(
    project_id: str,
    fund_id: int,
    payload: CategoryUpdateRequest,
    db: Session = Depends(get_db),
    funds: FundRepository = Depends(get_fund_repository),
    settings: Settings = Depends(get_settings),
) -> FundOut:
    fund = funds.get(project_id, fund_id)
    saved = funds.save(reassign_category(fund, payload.allocation_category))
    db.commit()
    return _fund_out(saved, settings)


@router.get("/allocations", response_model=list[AllocationOut])
def allocation_history(
    project_id: str,
    allocations: AllocationRepository = Depends(get_allocation_repository),
    settings: Settings = Depends(get_settings),
) -> list[AllocationOut]:
    return [_allocation_out(row, settings) for row in allocations.history(project_id)]
