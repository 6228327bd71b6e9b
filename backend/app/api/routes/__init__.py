from fastapi import APIRouter

from app.api.routes import analytics, exports, funds, health, profit_shares, records, reports
from app.schemas.common import ErrorResponse


api_router = APIRouter(
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    }
)
api_router.include_router(health.router)
api_router.include_router(records.router)
api_router.include_router(analytics.router)
api_router.include_router(funds.router)
api_router.include_router(profit_shares.router)
api_router.include_router(exports.router)
api_router.include_router(reports.router)
