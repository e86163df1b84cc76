# utils/pdf_common.py — общий модуль PDF на fpdf2 (шрифты, шапка, секции)
# -----------------------------------------------------------------------------
from __future__ import annotations

import os
import re
from typing import Any, Dict, List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos


# ─────────────────────────────────────────────────────────────
# THEME (единый стиль для всех PDF)
# ─────────────────────────────────────────────────────────────
THEME_DEFAULT: Dict[str, Any] = {
    "primary": (120, 30, 30),
    "header_text": (255, 255, 255),
    "section_fill": (245, 235, 235),
    "row_odd": (255, 255, 255),
    "row_even": (250, 246, 246),
    "border": (210, 200, 200),
    "text": (0, 0, 0),
    "muted": (70, 70, 70),
}

# ─────────────────────────────────────────────────────────────
# ШРИФТЫ (Linux)
# ─────────────────────────────────────────────────────────────
_DEFAULT_FONT_REGULAR_CANDIDATES = [
    os.getenv("PDF_FONT_REGULAR", "").strip(),
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansCondensed.ttf",
]

_DEFAULT_FONT_BOLD_CANDIDATES = [
    os.getenv("PDF_FONT_BOLD", "").strip(),
    "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSansCondensed-Bold.ttf",
]


def _first_existing(paths: List[str]) -> Optional[str]:
    for p in paths:
        if p and os.path.exists(p):
            return p
    return None


FONT_REGULAR_PATH = _first_existing(_DEFAULT_FONT_REGULAR_CANDIDATES)
FONT_BOLD_PATH = _first_existing(_DEFAULT_FONT_BOLD_CANDIDATES)
FONT_FAMILY = "DejaVu"
CORE_FONT = "Helvetica"


# ─────────────────────────────────────────────────────────────
# ТЕКСТ: безопасный вывод для PDF
# ─────────────────────────────────────────────────────────────
_EMOJI_RE = re.compile(
    "["
    "\U0001F300-\U0001FAFF"
    "\u2600-\u27BF"
    "]+",
    flags=re.UNICODE,
)


def safe_text(val: Any, unicode_font: bool = True) -> str:
    s = "" if val is None else str(val)
    s = s.replace("\r\n", "\n").replace("\r", "\n")
    s = _EMOJI_RE.sub("", s)
    s = re.sub(r"[ \t]+", " ", s).strip()
    if not unicode_font:
        # Helvetica знает только latin-1
        s = s.encode("latin-1", errors="replace").decode("latin-1")
    return s


def has_unicode_font(pdf: FPDF) -> bool:
    return bool(getattr(pdf, "_unicode_font", False))


def pdf_text(pdf: FPDF, val: Any) -> str:
    return safe_text(val, unicode_font=has_unicode_font(pdf))


# ─────────────────────────────────────────────────────────────
# PDF: базовые настройки и байты
# ─────────────────────────────────────────────────────────────
def setup_pdf(pdf: FPDF, title: str = "Rapport"):
    pdf.set_auto_page_break(auto=True, margin=12)
    pdf.set_margins(12, 12, 12)
    pdf.set_creator("abattoir")
    pdf.set_author("Abattoir - registre des abattages")
    pdf.set_title(title)
    pdf.set_subject(title)

    setattr(pdf, "_unicode_font", False)
    if FONT_REGULAR_PATH and FONT_BOLD_PATH:
        try:
            pdf.add_font(FONT_FAMILY, "", FONT_REGULAR_PATH)
            pdf.add_font(FONT_FAMILY, "B", FONT_BOLD_PATH)
            setattr(pdf, "_unicode_font", True)
        except Exception:
            # файл шрифта не читается — остаёмся на Helvetica
            pass

    set_font(pdf)


def set_font(pdf: FPDF, bold: bool = False, size: int = 10):
    family = FONT_FAMILY if has_unicode_font(pdf) else CORE_FONT
    pdf.set_font(family, "B" if bold else "", size)


def pdf_bytes(pdf: FPDF, min_size: int = 0) -> bytes:
    out = bytes(pdf.output())
    if len(out) < min_size:
        # пробелы после %%EOF читалки игнорируют
        out += b"\n" + b" " * (min_size - len(out) - 1)
    return out


def ensure_space(pdf: FPDF, h: float, limit: Optional[float] = None):
    bottom = limit if limit is not None else (pdf.h - pdf.b_margin)
    if pdf.get_y() + h > bottom:
        pdf.add_page()


# ─────────────────────────────────────────────────────────────
# РЕНДЕР
# ─────────────────────────────────────────────────────────────
def text_line(pdf: FPDF, text: Any, h: float = 6.0, align: str = "L"):
    pdf.set_x(pdf.l_margin)
    pdf.multi_cell(0, h, pdf_text(pdf, text), align=align, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def add_title(pdf: FPDF, title: str, subtitle: str = "", theme: Optional[Dict[str, Any]] = None):
    t = dict(THEME_DEFAULT, **(theme or {}))

    pdf.set_fill_color(*t["primary"])
    pdf.rect(0, 0, pdf.w, 22, style="F")

    pdf.set_text_color(*t["header_text"])
    set_font(pdf, bold=True, size=16)
    pdf.set_xy(pdf.l_margin, 5)
    pdf.cell(pdf.w - pdf.l_margin - pdf.r_margin, 9, pdf_text(pdf, title), align="C")

    if subtitle:
        set_font(pdf, bold=False, size=9)
        pdf.set_xy(pdf.l_margin, 14)
        pdf.cell(pdf.w - pdf.l_margin - pdf.r_margin, 6, pdf_text(pdf, subtitle), align="C")

    pdf.set_text_color(*t["text"])
    pdf.set_y(26)
    setattr(pdf, "_kv_i", 0)


def section(pdf: FPDF, text: str, theme: Optional[Dict[str, Any]] = None):
    t = dict(THEME_DEFAULT, **(theme or {}))

    pdf.ln(2)
    ensure_space(pdf, 10)

    y = pdf.get_y()
    pdf.set_fill_color(*t["section_fill"])
    pdf.rect(pdf.l_margin, y, pdf.w - pdf.l_margin - pdf.r_margin, 8, style="F")

    set_font(pdf, bold=True, size=12)
    pdf.set_text_color(*t["muted"])
    pdf.set_xy(pdf.l_margin + 2, y + 1.2)
    pdf.cell(0, 6, pdf_text(pdf, text))

    pdf.set_text_color(*t["text"])
    pdf.set_y(y + 10)
    set_font(pdf)
    setattr(pdf, "_kv_i", 0)


def kv(pdf: FPDF, label: str, value: Any, theme: Optional[Dict[str, Any]] = None):
    """Строка «метка — значение» с зеброй."""
    t = dict(THEME_DEFAULT, **(theme or {}))

    w_total = pdf.w - pdf.l_margin - pdf.r_margin
    w_label = w_total * 0.42
    row_h = 6.5
    ensure_space(pdf, row_h + 1)

    i = int(getattr(pdf, "_kv_i", 0))
    setattr(pdf, "_kv_i", i + 1)

    x0, y0 = pdf.l_margin, pdf.get_y()
    pdf.set_fill_color(*(t["row_even"] if i % 2 == 0 else t["row_odd"]))
    pdf.set_draw_color(*t["border"])
    pdf.rect(x0, y0, w_total, row_h, style="DF")

    set_font(pdf, bold=True, size=10)
    pdf.set_xy(x0 + 1, y0 + 0.5)
    pdf.cell(w_label - 2, row_h - 1, pdf_text(pdf, label))
    set_font(pdf, bold=False, size=10)
    pdf.set_xy(x0 + w_label + 1, y0 + 0.5)
    pdf.cell(w_total - w_label - 2, row_h - 1, pdf_text(pdf, value))

    pdf.set_y(y0 + row_h)


def new_pdf(orientation: str = "P", unit: str = "mm", format: str = "A4", title: str = "Rapport") -> Tuple[FPDF, Dict[str, Any]]:
    pdf = FPDF(orientation=orientation, unit=unit, format=format)
    setup_pdf(pdf, title=title)
    pdf.add_page()
    return pdf, dict(THEME_DEFAULT)


__all__ = [
    "THEME_DEFAULT",
    "safe_text",
    "pdf_text",
    "setup_pdf",
    "set_font",
    "pdf_bytes",
    "ensure_space",
    "text_line",
    "add_title",
    "section",
    "kv",
    "new_pdf",
]
