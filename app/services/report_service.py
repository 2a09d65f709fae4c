# app/services/report_service.py
from datetime import date, datetime
from io import BytesIO
import logging
from typing import Any, Dict
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import InternalError
from app.services.quotation_service import fetch_quotation_detail

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"

LINE_HEADERS = ["Product #", "Description", "Quantity", "Unit Price", "VAT", "Subtotal"]


# --------------------------
# Report view
# --------------------------
def _format_date(value: Any) -> str:
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    if value:
        return str(value).split("T")[0].split(" ")[0]
    return ""


def build_report_view(detail: Dict[str, Any]) -> Dict[str, Any]:
    """Decorate an aggregate quotation with the fields the printed reports show."""
    sales_rep = detail.get("salesRep") or {}
    view = dict(detail)
    view["created_at"] = _format_date(detail.get("created_at"))
    view["products"] = [
        {**product, "productNumber": str(index).zfill(3)}
        for index, product in enumerate(detail.get("products", []), start=1)
    ]
    view["name"] = sales_rep.get("name") or "N/A"
    view["email"] = sales_rep.get("email") or "N/A"
    view["phone"] = sales_rep.get("phone") or "N/A"
    view["supervisor_name"] = detail.get("supervisor_name") or "No Supervisor Assigned"
    return view


def report_filename(detail: Dict[str, Any], extension: str) -> str:
    custom_id = detail.get("custom_id") or detail.get("id")
    return f"quotation_{custom_id}.{extension}"


def _line_rows(view: Dict[str, Any]):
    for product in view["products"]:
        yield [
            product["productNumber"],
            product.get("description") or "",
            float(product.get("quantity") or 0),
            float(product.get("price") or 0),
            float(product.get("vat") or 0),
            float(product.get("subtotal") or 0),
        ]


def _totals_rows(view: Dict[str, Any]):
    return [
        ["Total Price", float(view.get("total_price") or 0)],
        ["Total VAT", float(view.get("total_vat") or 0)],
        ["Total", float(view.get("total_subtotal") or 0)],
    ]


# --------------------------
# Spreadsheet
# --------------------------
def render_quotation_xlsx(detail: Dict[str, Any]) -> bytes:
    view = build_report_view(detail)
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Quotation"

    sheet.append(["Quotation ID", view.get("custom_id") or view.get("id")])
    sheet.append(["Client Name", view.get("client_name")])
    sheet.append(["Company Name", view.get("company_name")])
    sheet.append(["Quotation Date", view["created_at"]])
    sheet.append(["Sales Rep", view["name"]])
    sheet.append(["Supervisor", view["supervisor_name"]])
    sheet.append([])

    sheet.append(LINE_HEADERS)
    for cell in sheet[sheet.max_row]:
        cell.font = Font(bold=True)
    for row in _line_rows(view):
        sheet.append(row)

    sheet.append([])
    for row in _totals_rows(view):
        sheet.append(row)

    for column, width in zip("ABCDEF", (14, 40, 12, 14, 12, 14)):
        sheet.column_dimensions[column].width = width

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# --------------------------
# PDF
# --------------------------
def render_quotation_pdf(detail: Dict[str, Any]) -> bytes:
    view = build_report_view(detail)
    buffer = BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4)
    styles = getSampleStyleSheet()

    def line(label, value):
        # Paragraph parses markup, so user text is escaped
        return Paragraph(f"{label}: {escape(str(value or ''))}", styles["Normal"])

    elements = [
        Paragraph(escape(f"Quotation {view.get('custom_id') or view.get('id')}"), styles["Title"]),
        line("Date", view["created_at"]),
        line("Client", view.get("client_name")),
        line("Company", view.get("company_name")),
        line("Sales Rep", f"{view['name']} ({view['email']}, {view['phone']})"),
        line("Supervisor", view["supervisor_name"]),
        Spacer(1, 12),
    ]

    data = [LINE_HEADERS] + [
        [number, description, f"{qty:g}", f"{price:.2f}", f"{vat:.2f}", f"{subtotal:.2f}"]
        for number, description, qty, price, vat, subtotal in _line_rows(view)
    ]
    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("ALIGN", (2, 1), (-1, -1), "RIGHT"),
    ]))
    elements.append(table)
    elements.append(Spacer(1, 12))

    for label, amount in _totals_rows(view):
        elements.append(Paragraph(f"{label}: {amount:.2f}", styles["Normal"]))

    doc.build(elements)
    return buffer.getvalue()


# --------------------------
# Entry points used by the router
# --------------------------
async def generate_quotation_xlsx(db: AsyncSession, quotation_id: int):
    detail = await fetch_quotation_detail(db, quotation_id)
    try:
        content = render_quotation_xlsx(detail)
    except Exception as e:
        logger.exception("Excel rendering failed for quotation %s", quotation_id)
        raise InternalError("Failed to generate Excel. Please try again later.", details=str(e))
    return content, report_filename(detail, "xlsx")


async def generate_quotation_pdf(db: AsyncSession, quotation_id: int):
    detail = await fetch_quotation_detail(db, quotation_id)
    try:
        content = render_quotation_pdf(detail)
    except Exception as e:
        logger.exception("PDF rendering failed for quotation %s", quotation_id)
        raise InternalError("Failed to generate PDF. Please try again later.", details=str(e))
    return content, report_filename(detail, "pdf")
