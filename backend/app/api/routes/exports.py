import io
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from app.api.deps import get_record_repository
from app.db.repository import FinancialRecordRepository
from app.models.enums import CostType
from app.services.exports import (
    breakdown_csv,
    breakdown_workbook,
    cost_breakdown,
    expense_lines,
    expense_lines_csv,
    expense_lines_json,
)


router = APIRouter(prefix="/projects/{project_id}/exports", tags=["exports"])


def _filename(project_id: str, stem: str, extension: str) -> str:
    return f"{stem}-{project_id}-{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')}.{extension}"


def _attachment(body: str | bytes, media_type: str, filename: str) -> StreamingResponse:
    payload = body.encode("utf-8") if isinstance(body, str) else body
    return StreamingResponse(
        io.BytesIO(payload),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/cost-breakdown.csv")
def export_cost_breakdown_csv(
    project_id: str,
    cost_type: CostType | None = None,
    category: str | None = None,
    records: FinancialRecordRepository = Depends(get_record_repository),
):
    breakdown = cost_breakdown(records.load(project_id), cost_type=cost_type, category=category)
    return _attachment(breakdown_csv(breakdown), "text/csv", _filename(project_id, "cost-breakdown", "csv"))


@router.get("/cost-breakdown.xlsx")
def export_cost_breakdown_excel(
    project_id: str,
    cost_type: CostType | None = None,
    category: str | None = None,
    records: FinancialRecordRepository = Depends(get_record_repository),
):
    breakdown = cost_breakdown(records.load(project_id), cost_type=cost_type, category=category)
    return _attachment(
        breakdown_workbook(breakdown),
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        _filename(project_id, "cost-breakdown", "xlsx"),
    )


@router.get("/records.csv")
def export_records_csv(
    project_id: str,
    start: date | None = None,
    end: date | None = None,
    records: FinancialRecordRepository = Depends(get_record_repository),
):
    lines = expense_lines(records.load(project_id), start=start, end=end)
    return _attachment(expense_lines_csv(lines), "text/csv", _filename(project_id, "financial-data", "csv"))


@router.get("/records.json")
def export_records_json(
    project_id: str,
    start: date | None = None,
    end: date | None = None,
    records: FinancialRecordRepository = Depends(get_record_repository),
):
    lines = expense_lines(records.load(project_id), start=start, end=end)
    return JSONResponse(
        content=expense_lines_json(lines, start=start, end=end),
        headers={"Content-Disposition": f'attachment; filename="{_filename(project_id, "financial-data", "json")}"'},
    )
