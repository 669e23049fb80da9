# obra/routes/report.py
import io

from flask import Blueprint, send_file

from obra.operations.error_classification import failure_result
from obra.operations.report_ops import build_report_service, generate_project_report
from obra.routes.common import get_session, require_login, result_response
from obra.services.report_service import build_workbook

report_bp = Blueprint("report", __name__, url_prefix="/api/projects/<int:project_id>/report")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@report_bp.route("", methods=["GET"])
def view_report(project_id):
    """Report rows as JSON."""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        return result_response(generate_project_report(db, project_id))
    finally:
        db.close()


@report_bp.route("/excel", methods=["GET"])
def download_excel(project_id):
    """Download the report as .xlsx (sheets Resumo / Detalhes)."""
    check = require_login()
    if check:
        return check

    db = get_session()
    try:
        service = build_report_service(db)
        try:
            report = service.generate_project_report(project_id)
            content = build_workbook(report)
        except Exception as e:
            db.rollback()
            return result_response(failure_result(e))

        return send_file(
            io.BytesIO(content),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name="relatorio.xlsx",
        )
    finally:
        db.close()
