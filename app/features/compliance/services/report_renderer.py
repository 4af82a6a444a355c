"""Serializes aggregate reports for download."""
import os
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.features.compliance.schemas.report import AggregateReport
from app.features.compliance.schemas.rule import ManualCheckItem

current_dir = os.path.dirname(os.path.abspath(__file__))
template_dir = os.path.join(current_dir, "../template")

env = Environment(
    loader=FileSystemLoader(template_dir),
    autoescape=select_autoescape(["html"]),
)

JSON_REPORT_FILENAME = "dga_compliance_report.json"
HTML_REPORT_FILENAME = "dga_compliance_report.html"


def render_json_report(report: AggregateReport) -> str:
    return report.model_dump_json(indent=2)


def render_html_report(
    report: AggregateReport,
    manual_checks: Optional[List[ManualCheckItem]] = None,
    site_url: Optional[str] = None,
) -> str:
    """Render a standalone HTML document. All report text is escaped."""
    template = env.get_template("compliance_report.html")
    return template.render(
        report=report,
        manual_checks=manual_checks or [],
        site_url=site_url,
    )
