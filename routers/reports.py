import logging
from datetime import date
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from sqlalchemy.orm import Session

from database.db import get_db
from dependencies.reports import get_report_generator
from services.grade_service import load_report_input
from services.pdf_service import PDFService
from services.report_generator import ReportGenerator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["AI reports"])

pdf_service = PDFService()


# ✅ [AI] subject performance report (JSON)
@router.get("/subjects/{subject_id}")
def subject_report(
    subject_id: int,
    db: Session = Depends(get_db),
    generator: ReportGenerator = Depends(get_report_generator),
):
    subject, records = load_report_input(db, subject_id)
    report = generator.generate_report(subject, records)
    logger.info(f"report for {subject.code}: {len(records)} records, source={report.source.value}")
    return {
        "success": True,
        "data": report.model_dump(by_alias=True, mode="json"),
        "message": "Report generated",
    }


# ✅ [PDF] printable subject performance report
@router.get("/subjects/{subject_id}/pdf")
def subject_report_pdf(
    subject_id: int,
    db: Session = Depends(get_db),
    generator: ReportGenerator = Depends(get_report_generator),
):
    subject, records = load_report_input(db, subject_id)
    report = generator.generate_report(subject, records)
    pdf_content = pdf_service.generate_subject_report_pdf(report, generated_date=date.today())

    filename = quote(f"{subject.code}_performance_report.pdf")
    return Response(
        content=pdf_content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{filename}"},
    )
