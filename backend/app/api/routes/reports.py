import logging
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse

from app.api.deps import get_allocation_repository, get_record_source
from app.api.routes.analytics import project_budget
from app.core.config import Settings, get_settings
from app.db.repository import AllocationRepository
from app.models.enums import PeriodGranularity
from app.services.periods import aggregate_records
from app.services.reports import build_financial_summary, render_summary_pdf
from app.services.sources import TieredRecordSource
from app.services.trends import analyze_trends


logger = logging.getLogger(__name__)

router = APIRouter(tags=["reports"])


@router.get("/projects/{project_id}/reports/summary.pdf")
def download_summary_report(
    project_id: str,
    granularity: PeriodGranularity = PeriodGranularity.monthly,
    budget: Decimal | None = Query(default=None, ge=0),
    source: TieredRecordSource = Depends(get_record_source),
    allocations: AllocationRepository = Depends(get_allocation_repository),
    settings: Settings = Depends(get_settings),
):
    loaded = source.load(project_id)
    summary = build_financial_summary(
        project_id,
        loaded.records,
        budget=project_budget(allocations, project_id, budget),
    )
    trends = analyze_trends(
        aggregate_records(loaded.records, granularity),
        forecast_periods=settings.forecast_periods,
        anomaly_threshold=settings.anomaly_z_threshold,
    )

    reports_dir = Path(settings.reports_dir)
    reports_dir.mkdir(parents=True, exist_ok=True)
    filename = f"summary-{project_id}-{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')}.pdf"
    path = reports_dir / filename
    path.write_bytes(render_summary_pdf(summary, trends, source=loaded.source))
    logger.info("Wrote summary report %s from %s records", path, loaded.source)
    return FileResponse(
        path,
        media_type="application/pdf",
        filename=filename,
        headers={"X-Record-Source": loaded.source},
    )
