"""Monthly exports: CSV per table and the PDF report."""

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response

from api.deps import get_db, month_param
from db import KIND_SEIZURES, KIND_SLAUGHTER, Database
from utils.csv_export import build_seizure_csv, build_slaughter_csv
from utils.pdf_monthly_report import build_monthly_report_pdf_bytes


router = APIRouter()

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def _csv_response(body: str, filename: str) -> Response:
    return Response(
        content=body.encode("utf-8"),
        headers={
            "Content-Type": CSV_MEDIA_TYPE,
            "Content-Disposition": f'attachment; filename="{filename}"',
        },
    )


@router.get("/export/{month}/abattage.csv")
async def export_abattage_csv(
    month: str = Depends(month_param),
    database: Database = Depends(get_db),
) -> Response:
    rows = await database.query_aggregate_by_month(month, KIND_SLAUGHTER)
    return _csv_response(build_slaughter_csv(rows), f"abattage-{month}.csv")


@router.get("/export/{month}/saisies.csv")
async def export_seizures_csv(
    month: str = Depends(month_param),
    database: Database = Depends(get_db),
) -> Response:
    rows = await database.query_aggregate_by_month(month, KIND_SEIZURES)
    return _csv_response(build_seizure_csv(rows), f"saisies-{month}.csv")


@router.get("/export/{month}/report.pdf")
async def export_report_pdf(
    month: str = Depends(month_param),
    database: Database = Depends(get_db),
) -> Response:
    slaughter_rows = await database.query_aggregate_by_month(month, KIND_SLAUGHTER)
    seizure_rows = await database.query_aggregate_by_month(month, KIND_SEIZURES)
    pdf = await run_in_threadpool(build_monthly_report_pdf_bytes, month, slaughter_rows, seizure_rows)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="rapport-{month}.pdf"'},
    )
