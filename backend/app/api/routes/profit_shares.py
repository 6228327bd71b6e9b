from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_profit_share_repository, get_team_repository, get_user_id
from app.core.config import Settings, get_settings
from app.db.repository import ProfitShareRepository, TeamMemberRepository
from app.schemas.profit_shares import (
    FromAvailabilityRequest,
    ProfitShareOut,
    ProfitSharesResponse,
    ProfitSharesUpdateRequest,
)
from app.services.profit_sharing import (
    ProfitShareData,
    calculate_from_availability,
    ensure_finalizable,
    equal_shares,
    update_shares,
)


router = APIRouter(prefix="/projects/{project_id}/profit-shares", tags=["profit-shares"])


def _response(project_id: str, shares: list[ProfitShareData]) -> ProfitSharesResponse:
    return ProfitSharesResponse(
        project_id=project_id,
        total_percentage=sum((Decimal(str(row.percentage)) for row in shares), Decimal("0")),
        shares=[ProfitShareOut.model_validate(row) for row in shares],
    )


@router.get("", response_model=ProfitSharesResponse)
def list_profit_shares(
    project_id: str,
    shares: ProfitShareRepository = Depends(get_profit_share_repository),
) -> ProfitSharesResponse:
    return _response(project_id, shares.list(project_id))


@router.put("", response_model=ProfitSharesResponse)
def save_profit_shares(
    project_id: str,
    payload: ProfitSharesUpdateRequest,
    db: Session = Depends(get_db),
    shares: ProfitShareRepository = Depends(get_profit_share_repository),
    user_id: str = Depends(get_user_id),
    settings: Settings = Depends(get_settings),
) -> ProfitSharesResponse:
    incoming = [
        ProfitShareData(
            member_id=row.member_id,
            member_name=row.member_name,
            percentage=row.percentage,
            amount=row.amount,
            project_id=project_id,
            user_id=user_id,
        )
        for row in payload.shares
    ]
    updated = update_shares(incoming, payload.total_revenue)
    ensure_finalizable(updated, tolerance=settings.percentage_tolerance)
    saved = shares.replace(project_id, updated)
    db.commit()
    return _response(project_id, saved)


@router.post("/from-availability", response_model=ProfitSharesResponse)
def compute_from_availability(
    project_id: str,
    payload: FromAvailabilityRequest,
    team: TeamMemberRepository = Depends(get_team_repository),
) -> ProfitSharesResponse:
    """Preview shares for the current roster. Nothing is stored until the set is saved with PUT."""
    members = team.list()
    if payload.equal_split:
        rows = equal_shares(payload.total_revenue, members, project_id=project_id)
    else:
        rows = calculate_from_availability(payload.total_revenue, members, project_id=project_id)
    return _response(project_id, rows)
