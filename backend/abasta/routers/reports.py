"""Reporting router.

Endpoints:
    GET /api/reports/dashboard                           Trailing-window counters
    GET /api/reports/global?startDate=&endDate=          Global report (JSON)
    GET /api/reports/global/pdf?startDate=&endDate=      Global report (PDF download)

Dates accept yyyy-MM-dd, yyyy-MM-dd HH:mm:ss or ISO date-time. Omitting
both bounds reports on the dashboard window.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from abasta.auth.deps import get_caller_email
from abasta.config import settings
from abasta.database import get_db
from abasta.schemas.common import ApiResponse
from abasta.schemas.report import DashboardOut, GlobalReportOut
from abasta.services import reports as report_service
from abasta.services.pdf import render_global_report_pdf
from abasta.utils.dates import resolve_window

router = APIRouter()


async def _global_report(
    db: AsyncSession,
    caller: str,
    start_date: str | None,
    end_date: str | None,
) -> GlobalReportOut:
    start, end = resolve_window(start_date, end_date, settings.dashboard_window_days)
    return await report_service.global_info(db, caller, start, end)


@router.get("/dashboard", response_model=ApiResponse[DashboardOut])
async def dashboard(
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    info = await report_service.dashboard_info(db, caller)
    return ApiResponse.ok(info)


@router.get("/global", response_model=ApiResponse[GlobalReportOut])
async def global_report(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    report = await _global_report(db, caller, start_date, end_date)
    return ApiResponse.ok(report)


@router.get("/global/pdf", response_class=Response)
async def global_report_pdf(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    db: AsyncSession = Depends(get_db),
    caller: str = Depends(get_caller_email),
):
    report = await _global_report(db, caller, start_date, end_date)
    pdf = render_global_report_pdf(report)
    filename = f"abasta-report-{report.period_start:%Y%m%d}-{report.period_end:%Y%m%d}.pdf"
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
