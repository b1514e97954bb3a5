from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config.settings import settings
from schemas.reports import Report
from utils.numbers import format_score

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class PDFService:
    def __init__(self, template_dir: Optional[str] = None):
        # template environment
        path = Path(template_dir or settings.REPORT_TEMPLATE_DIR)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        self.env = Environment(loader=FileSystemLoader(path), autoescape=select_autoescape(["html"]))
        self.env.filters["score"] = format_score

    def _render_template(self, template_name: str, data: Dict[str, Any]) -> str:
        """Render a template to HTML"""
        template = self.env.get_template(template_name)
        return template.render(**data)

    def _html_to_pdf(self, html_content: str) -> bytes:
        """HTML -> PDF"""
        # imported here: WeasyPrint loads Pango/Cairo native libraries on import
        import weasyprint
        return weasyprint.HTML(string=html_content).write_pdf()

    def render_subject_report_html(self, report: Report, generated_date: Optional[date] = None) -> str:
        return self._render_template(
            "subject_report.html",
            {"report": report, "generated_date": (generated_date or date.today()).isoformat()},
        )

    def generate_subject_report_pdf(self, report: Report, generated_date: Optional[date] = None) -> bytes:
        """Printable subject performance report"""
        html = self.render_subject_report_html(report, generated_date)
        return self._html_to_pdf(html)
