"""
Admin daily report endpoints - figures, expenses and Excel workbooks.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from fastapi.responses import FileResponse, StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession
from dataclasses import asdict
from datetime import date
from typing import Optional
import io

from app.core.database import get_db
from app.core.logging_config import logger
from app.models.user import User
from app.modules.auth.dependencies import get_current_admin
from app.schemas.report import (
    DailyReportResponse,
    ExpenseCreate,
    ExpenseResponse,
    RegenerateReportRequest,
    RegenerateReportResponse,
    StoredReportList,
)
from app.services.excel_export import (
    XLSX_MEDIA_TYPE,
    export_file_name,
    export_workbook_bytes,
    get_daily_workbook_path,
    list_daily_workbooks,
    refresh_daily_workbook,
    save_daily_workbook,
)
from app.services.report_service import add_expense, build_daily_report, delete_expense
from app.utils.dates import local_today

router = APIRouter()


@router.get("", response_model=DailyReportResponse)
async def get_daily_report(
    day: Optional[date] = Query(None, alias="date", description="Report day (YYYY-MM-DD), defaults to today"),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Orders, expenses, totals and profit for one day"""
    report = await build_daily_report(db, day)
    return {
        "date": report.day,
        "summary": report.summary(),
        "orders": [asdict(line) for line in report.orders],
        "expenses": report.expenses,
        "status_breakdown": report.status_breakdown,
        "pricing": report.rates.to_dict(),
    }


@router.post("/expenses", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    data: ExpenseCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Book an expense against a day"""
    expense = await add_expense(db, data, current_admin)
    await db.commit()

    background_tasks.add_task(refresh_daily_workbook, data.date)
    return expense


@router.delete("/expenses/{expense_id}")
async def remove_expense(
    expense_id: str,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Delete an expense"""
    day = await delete_expense(db, expense_id, current_admin)
    await db.commit()

    background_tasks.add_task(refresh_daily_workbook, day)
    return {"success": True, "message": "Expense deleted"}


@router.get("/export")
async def export_daily_report(
    day: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Download the day's report as an Excel workbook"""
    report = await build_daily_report(db, day)
    content = export_workbook_bytes(report)
    file_name = export_file_name(report.day)

    logger.info(
        f"[Reports] Export generated: {file_name}",
        extra={"event_type": "report_export", "admin_email": current_admin.email},
    )

    return StreamingResponse(
        io.BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.get("/excel/list", response_model=StoredReportList)
async def list_stored_reports(
    current_admin: User = Depends(get_current_admin)
):
    """Stored daily workbooks, newest first"""
    return {"reports": list_daily_workbooks()}


@router.get("/excel")
async def download_stored_report(
    day: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Download the stored workbook for a day, generating it if missing"""
    day = day or local_today()
    path = get_daily_workbook_path(day)
    if path is None:
        path = await save_daily_workbook(db, day)
        await db.commit()

    return FileResponse(path, media_type=XLSX_MEDIA_TYPE, filename=path.name)


@router.post("/excel", response_model=RegenerateReportResponse)
async def regenerate_stored_report(
    data: Optional[RegenerateReportRequest] = None,
    db: AsyncSession = Depends(get_db),
    current_admin: User = Depends(get_current_admin)
):
    """Rebuild the stored workbook for a day now"""
    day = (data.date if data else None) or local_today()
    path = await save_daily_workbook(db, day)
    await db.commit()

    return {
        "success": True,
        "message": f"Daily report regenerated for {day.isoformat()}",
        "file_name": path.name,
        "date": day,
    }
