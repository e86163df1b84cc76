from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Sequence

from fpdf import FPDF

from utils.pdf_common import add_title, kv, new_pdf, pdf_bytes, section, set_font, text_line

# курсор ниже этой отметки (мм) — новая страница перед следующей строкой
PAGE_Y_LIMIT = 265.0
LINE_H = 6.0
MIN_PDF_BYTES = 2048

SLAUGHTER_COLUMNS = ["species", "total_number", "total_weight"]
SEIZURE_COLUMNS = ["species", "organ", "cause", "total_number"]


def _to_float(x: Any) -> float:
    try:
        return float(x or 0)
    except (TypeError, ValueError):
        return 0.0


def _to_int(x: Any) -> int:
    return int(round(_to_float(x)))


def _cell(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, float):
        return str(int(val)) if val.is_integer() else f"{val:.2f}"
    return str(val)


def _next_page_if_needed(pdf: FPDF):
    if pdf.get_y() > PAGE_Y_LIMIT:
        pdf.add_page()
        pdf.ln(LINE_H)


def _draw_table(pdf: FPDF, title: str, columns: Sequence[str], rows: Sequence[Mapping[str, Any]]):
    section(pdf, title)
    set_font(pdf, bold=True, size=11)
    text_line(pdf, " | ".join(columns), h=LINE_H)
    pdf.ln(1)
    set_font(pdf, size=11)
    for r in rows:
        text_line(pdf, " | ".join(_cell(r.get(c)) for c in columns), h=LINE_H)
        _next_page_if_needed(pdf)
    pdf.ln(LINE_H)


def render_monthly_report(
    month: str,
    slaughter_rows: Sequence[Mapping[str, Any]],
    seizure_rows: Sequence[Mapping[str, Any]],
) -> FPDF:
    pdf, theme = new_pdf("P", title=f"Rapport mensuel - {month}")
    add_title(
        pdf,
        f"Rapport mensuel - {month}",
        f"Généré le {datetime.now().strftime('%d.%m.%Y %H:%M')}",
        theme,
    )

    # итоги пересчитываются из переданных строк
    total_heads = sum(_to_int(r.get("total_number")) for r in slaughter_rows)
    total_weight = sum(_to_float(r.get("total_weight")) for r in slaughter_rows)
    total_seized = sum(_to_int(r.get("total_number")) for r in seizure_rows)

    section(pdf, "Résumé", theme)
    kv(pdf, "Total abattus:", total_heads, theme)
    kv(pdf, "Total poids:", f"{total_weight:.2f} kg", theme)
    kv(pdf, "Total saisies:", total_seized, theme)
    pdf.ln(LINE_H)

    _draw_table(pdf, "Abattage par espèce", SLAUGHTER_COLUMNS, slaughter_rows)
    _draw_table(pdf, "Saisies détaillées", SEIZURE_COLUMNS, seizure_rows)

    # заполнитель: документ не должен быть «пустым» даже без строк
    for _ in range(6):
        pdf.ln(LINE_H)
        _next_page_if_needed(pdf)

    return pdf


def build_monthly_report_pdf_bytes(
    month: str,
    slaughter_rows: Sequence[Mapping[str, Any]],
    seizure_rows: Sequence[Mapping[str, Any]],
) -> bytes:
    pdf = render_monthly_report(month, slaughter_rows or [], seizure_rows or [])
    return pdf_bytes(pdf, min_size=MIN_PDF_BYTES)


__all__ = [
    "PAGE_Y_LIMIT",
    "MIN_PDF_BYTES",
    "render_monthly_report",
    "build_monthly_report_pdf_bytes",
]
