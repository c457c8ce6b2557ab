"""
Printable quotation document.

Uses fpdf2 (pure Python, no system dependencies). Every amount printed comes
from the quotation's stored snapshot prices; the catalog is never consulted.

Sections:
1. Company header + quotation number/date
2. Customer block
3. Item table (dimensions, material, qty, snapshot unit price, line total)
4. Totals (subtotal, discount, tax, grand total)
"""

import unicodedata
from datetime import datetime
from decimal import Decimal

from fpdf import FPDF

from .config import settings
from .pricing import to_decimal


def _fmt(amount) -> str:
    """Format money with thousands separators, e.g. '9.720.000 VND'."""
    places = settings.CURRENCY_MINOR_UNITS
    value = to_decimal(amount or 0)
    text = f"{value:,.{places}f}"
    # Vietnamese convention: '.' groups thousands, ',' marks decimals
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{text} {settings.CURRENCY_CODE}"


def _fmt_dim(value) -> str:
    value = to_decimal(value or 0)
    if value == value.to_integral_value():
        return str(int(value))
    return str(value.normalize())


def _safe(text) -> str:
    """Fold text to latin-1 for the core PDF fonts (drops Vietnamese diacritics)."""
    text = str(text or "")
    text = (
        text.replace("\u0111", "d")    # d with stroke
        .replace("\u0110", "D")    # D with stroke
        .replace("\u2014", " - ")  # em dash
        .replace("\u2013", "-")    # en dash
        .replace("\u00b2", "2")    # superscript two
    )
    text = unicodedata.normalize("NFKD", text)
    text = "".join(c for c in text if not unicodedata.combining(c))
    return text.encode("latin-1", errors="replace").decode("latin-1")


STATUS_LABELS = {
    "Draft": "DRAFT",
    "Sent": "AWAITING APPROVAL",
    "Approved": "APPROVED",
    "Rejected": "REJECTED",
}


class QuotationPDF(FPDF):
    """Custom PDF class for quotation documents."""

    def __init__(self, company_name="", company_info=""):
        super().__init__()
        self.company_name = company_name
        self.company_info = company_info
        self.set_auto_page_break(auto=True, margin=20)

    def footer(self):
        self.set_y(-15)
        self.set_font("Helvetica", "I", 8)
        self.set_text_color(150, 150, 150)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="C")

    def section_header(self, title):
        self.set_font("Helvetica", "B", 11)
        self.set_fill_color(45, 55, 72)
        self.set_text_color(255, 255, 255)
        self.cell(0, 8, f"  {title}", fill=True, new_x="LMARGIN", new_y="NEXT")
        self.set_text_color(0, 0, 0)
        self.ln(2)

    def table_header(self, cols):
        """cols: [(label, width, align), ...]"""
        self.set_font("Helvetica", "B", 8)
        self.set_fill_color(240, 240, 240)
        for label, width, align in cols:
            self.cell(width, 6, label, border="B", fill=True, align=align)
        self.ln()

    def table_row(self, values, cols):
        self.set_font("Helvetica", "", 8)
        for val, (_, width, align) in zip(values, cols):
            self.cell(width, 5.5, _safe(val), align=align)
        self.ln()

    def total_row(self, label, amount, bold=False):
        self.set_font("Helvetica", "B" if bold else "", 10)
        self.cell(130, 6, label, align="R")
        self.cell(60, 6, _fmt(amount), align="R")
        self.ln()


def generate_quotation_pdf(quotation: dict, material_names: dict = None) -> bytes:
    """
    Render a quotation detail dict (as returned by GET /quotations/{id}).

    Args:
        quotation: detail dict with customer fields, items and breakdown
        material_names: optional {material_id: name} for the item table

    Returns:
        PDF bytes
    """
    material_names = material_names or {}
    info_parts = [p for p in [settings.COMPANY_ADDRESS, settings.COMPANY_PHONE, settings.COMPANY_EMAIL] if p]

    pdf = QuotationPDF(company_name=settings.COMPANY_NAME, company_info=" | ".join(info_parts))
    pdf.alias_nb_pages()
    pdf.add_page()

    # ── Header ──
    pdf.set_font("Helvetica", "B", 20)
    pdf.cell(0, 10, _safe(pdf.company_name), new_x="LMARGIN", new_y="NEXT")
    if pdf.company_info:
        pdf.set_font("Helvetica", "", 9)
        pdf.set_text_color(100, 100, 100)
        pdf.cell(0, 5, _safe(pdf.company_info), new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)
    pdf.ln(4)

    created = quotation.get("created_at") or ""
    try:
        date_str = datetime.fromisoformat(created).strftime("%d/%m/%Y")
    except (ValueError, TypeError):
        date_str = datetime.utcnow().strftime("%d/%m/%Y")

    pdf.set_font("Helvetica", "B", 14)
    pdf.cell(0, 8, f"QUOTATION BG-{quotation.get('id', '?')}", new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 10)
    pdf.cell(0, 5, f"Date: {date_str}", new_x="LMARGIN", new_y="NEXT")
    status = quotation.get("status", "Draft")
    pdf.cell(0, 5, f"Status: {STATUS_LABELS.get(status, status)}", new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)

    # ── Customer ──
    pdf.section_header("CUSTOMER")
    pdf.set_font("Helvetica", "", 10)
    for label, key in (("Name", "customer_name"), ("Phone", "customer_phone"),
                       ("Address", "customer_address"), ("Email", "customer_email")):
        value = quotation.get(key)
        if value:
            pdf.cell(0, 5, _safe(f"{label}: {value}"), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)

    # ── Items ──
    pdf.section_header("ITEMS")
    cols = [
        ("#", 8, "L"),
        ("Product", 50, "L"),
        ("W x H x D (mm)", 34, "L"),
        ("Material", 30, "L"),
        ("Qty", 12, "R"),
        ("Unit price", 28, "R"),
        ("Total", 28, "R"),
    ]
    pdf.table_header(cols)
    for index, item in enumerate(quotation.get("items", []), start=1):
        dims = " x ".join(_fmt_dim(item.get(k)) for k in ("width", "height", "depth"))
        material = material_names.get(item.get("material_id"), f"#{item.get('material_id')}")
        pdf.table_row(
            [
                str(index),
                (item.get("product_name") or "")[:30],
                dims,
                material[:18],
                str(item.get("quantity", 1)),
                _fmt(item.get("unit_price_snapshot")),
                _fmt(item.get("total_price")),
            ],
            cols,
        )
    pdf.ln(4)

    # ── Totals ──
    breakdown = quotation.get("breakdown", {})
    pdf.section_header("TOTAL")
    pdf.total_row("Subtotal", breakdown.get("subtotal", 0))
    discount_pct = to_decimal(quotation.get("discount_percent") or 0)
    if discount_pct > 0:
        pdf.total_row(f"Discount ({_fmt_dim(discount_pct)}%)", -to_decimal(breakdown.get("discount_amount", 0)))
    tax_pct = to_decimal(quotation.get("tax_percent") or 0)
    if tax_pct > 0:
        pdf.total_row(f"Tax ({_fmt_dim(tax_pct)}%)", breakdown.get("tax_amount", 0))

    pdf.ln(1)
    pdf.set_fill_color(45, 55, 72)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font("Helvetica", "B", 13)
    pdf.cell(130, 10, "  GRAND TOTAL", fill=True)
    pdf.cell(60, 10, f"{_fmt(quotation.get('total_amount', Decimal(0)))}  ", fill=True, align="R")
    pdf.set_text_color(0, 0, 0)
    pdf.ln(14)

    pdf.set_font("Helvetica", "I", 8)
    pdf.set_text_color(100, 100, 100)
    pdf.cell(0, 4, "Prices are fixed as of the quotation date.", new_x="LMARGIN", new_y="NEXT")
    pdf.set_text_color(0, 0, 0)

    return pdf.output()
