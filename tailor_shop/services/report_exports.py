"""CSV and PDF exports of the payment report."""

from __future__ import annotations

import csv
import re
from decimal import Decimal
from io import BytesIO, StringIO
from typing import Any

from tailor_shop.core.config import settings
from tailor_shop.services.payment_report import PaymentReport
from tailor_shop.utils.pdf_fonts import register_pdf_font
from tailor_shop.utils.time import to_local

CSV_HEADER = ["Date", "Order Number", "Customer", "Method", "Amount", "Note"]


def _reportlab():
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    return {
        "colors": colors,
        "A4": A4,
        "ParagraphStyle": ParagraphStyle,
        "getSampleStyleSheet": getSampleStyleSheet,
        "Paragraph": Paragraph,
        "SimpleDocTemplate": SimpleDocTemplate,
        "Spacer": Spacer,
        "Table": Table,
        "TableStyle": TableStyle,
    }


def sanitize_filename(value: str, max_length: int = 80) -> str:
    """Return a filesystem-friendly filename fragment."""
    normalized = re.sub(r"[\\/:*?\"<>|]+", "_", (value or "").strip())
    normalized = re.sub(r"\s+", "_", normalized)
    normalized = re.sub(r"_+", "_", normalized).strip("._")
    return (normalized or "report")[:max_length]


def report_filename(report: PaymentReport, extension: str) -> str:
    return sanitize_filename(f"payments_{report.start_date.isoformat()}_{report.end_date.isoformat()}") + f".{extension}"


def _money(value: Decimal | int | float) -> str:
    return f"{Decimal(value):.2f}"


def _payment_row(payment: Any) -> list[str]:
    order = getattr(payment, "order", None)
    customer = getattr(order, "customer", None)
    return [
        to_local(payment.payment_date).strftime("%Y-%m-%d %H:%M"),
        getattr(order, "order_number", "") or "",
        getattr(customer, "full_name", "") or "",
        payment.payment_method,
        _money(payment.amount),
        payment.note or "",
    ]


def render_payments_csv(report: PaymentReport) -> str:
    buffer = StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for payment in report.payments:
        writer.writerow(_payment_row(payment))
    writer.writerow([])
    writer.writerow(["Total", "", "", "", _money(report.total_amount), f"{report.total_count} payments"])
    return buffer.getvalue()


def _build_styles() -> dict[str, Any]:
    font_name = register_pdf_font()
    rl = _reportlab()
    styles = rl["getSampleStyleSheet"]()
    return {
        "font_name": font_name,
        "title": rl["ParagraphStyle"]("ReportTitle", parent=styles["Title"], fontName=font_name),
        "heading": rl["ParagraphStyle"]("ReportHeading", parent=styles["Heading2"], fontName=font_name),
        "normal": rl["ParagraphStyle"]("ReportNormal", parent=styles["Normal"], fontName=font_name),
    }


def _table(rows: list[list[str]], col_widths: list[int], styles: dict[str, Any]):
    rl = _reportlab()
    table = rl["Table"](rows, colWidths=col_widths)
    table.setStyle(
        rl["TableStyle"](
            [
                ("BACKGROUND", (0, 0), (-1, 0), rl["colors"].lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.5, rl["colors"].black),
                ("FONTNAME", (0, 0), (-1, -1), styles["font_name"]),
            ]
        )
    )
    return table


def render_payments_pdf(report: PaymentReport, meta: dict[str, Any] | None = None) -> bytes:
    """Render the payment report: totals, per-method and per-day tables, then every payment."""
    meta = meta or {}
    styles = _build_styles()
    rl = _reportlab()
    currency = settings.currency

    story: list[Any] = [
        rl["Paragraph"](f"{settings.business_name}: payments", styles["title"]),
        rl["Paragraph"](
            f"{report.start_date.strftime('%b %d, %Y')} to {report.end_date.strftime('%b %d, %Y')}",
            styles["normal"],
        ),
    ]
    if meta.get("branch"):
        story.append(rl["Paragraph"](f"Branch: {meta['branch']}", styles["normal"]))
    if meta.get("generated_at"):
        story.append(rl["Paragraph"](f"Generated: {meta['generated_at']}", styles["normal"]))
    story.append(
        rl["Paragraph"](
            f"Total received: {currency} {_money(report.total_amount)} from {report.total_count} payments",
            styles["heading"],
        )
    )
    story.append(rl["Spacer"](1, 10))

    if report.by_method:
        story.append(rl["Paragraph"]("By method", styles["heading"]))
        method_rows = [["Method", "Count", f"Total ({currency})"]]
        method_rows.extend(
            [method, str(totals.count), _money(totals.total)] for method, totals in sorted(report.by_method.items())
        )
        story.append(_table(method_rows, [200, 100, 160], styles))
        story.append(rl["Spacer"](1, 10))

    story.append(rl["Paragraph"]("By day", styles["heading"]))
    day_rows = [["Day", "Date", "Count", f"Total ({currency})"]]
    day_rows.extend(
        [bucket.day_name, bucket.date.isoformat(), str(bucket.count), _money(bucket.total)] for bucket in report.by_day
    )
    story.append(_table(day_rows, [120, 120, 80, 140], styles))
    story.append(rl["Spacer"](1, 10))

    story.append(rl["Paragraph"]("Payments", styles["heading"]))
    if not report.payments:
        story.append(rl["Paragraph"]("No payments in this period.", styles["normal"]))
    else:
        rows = [CSV_HEADER[:5]]
        rows.extend(_payment_row(payment)[:5] for payment in report.payments)
        story.append(_table(rows, [100, 90, 140, 60, 70], styles))

    buffer = BytesIO()
    rl["SimpleDocTemplate"](buffer, pagesize=rl["A4"]).build(story)
    return buffer.getvalue()
