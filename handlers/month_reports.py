# handlers/month_reports.py
# Итоги за месяц в чат + выгрузка PDF / CSV (ввод данных — только через API)

from __future__ import annotations

import html
import logging
from datetime import datetime
from typing import Optional

from aiogram import Router, types
from aiogram.filters import Command, CommandObject, CommandStart
from aiogram.types import BufferedInputFile

from aggregator import summarize
from catalog import DEFAULT_CATALOG, DomainCatalog
from config import ALLOWED_CHAT_IDS
from db import KIND_SEIZURES, KIND_SLAUGHTER, StorageError, db
from models import Summary
from utils.csv_export import build_seizure_csv, build_slaughter_csv
from utils.pdf_monthly_report import build_monthly_report_pdf_bytes
from validation import validate_month

logger = logging.getLogger(__name__)
router = Router()

HELP_TEXT = (
    "🐑 <b>Registre de l'abattoir</b>\n\n"
    "/mois [YYYY-MM] — synthèse du mois\n"
    "/rapport [YYYY-MM] — rapport PDF\n"
    "/csv [YYYY-MM] — exports CSV (abattage + saisies)\n\n"
    "Sans paramètre: mois en cours."
)
BAD_MONTH_TEXT = "❗️Paramètre mois invalide (YYYY-MM)"
STORAGE_DOWN_TEXT = "⚠️ Stockage indisponible, réessayez plus tard."


# ────────────────────────────── helpers ──────────────────────────────
def _esc(s) -> str:
    return html.escape(str(s or ""), quote=False)


def _is_allowed(chat_id: int) -> bool:
    return not ALLOWED_CHAT_IDS or chat_id in ALLOWED_CHAT_IDS


def parse_month_arg(args: Optional[str], today: Optional[datetime] = None) -> Optional[str]:
    """Пусто → текущий месяц; иначе строго YYYY-MM (или None)."""
    raw = (args or "").strip()
    if not raw:
        return (today or datetime.now()).strftime("%Y-%m")
    return validate_month(raw)


def _fmt_kg(x: float) -> str:
    return f"{x:,.2f}".replace(",", " ")


def format_month_summary(month: str, summary: Summary, catalog: DomainCatalog = DEFAULT_CATALOG) -> str:
    lines = [f"📅 <b>Synthèse {_esc(month)}</b>", ""]
    for s in summary.by_species:
        lines.append(
            f"• {_esc(catalog.species_label(s.species))}: "
            f"<b>{s.slaughtered}</b> têtes, <b>{_fmt_kg(s.weight)}</b> kg, "
            f"<b>{s.seizures}</b> saisies"
        )
    t = summary.total
    lines.append("")
    lines.append(
        f"<b>Total</b>: <b>{t.slaughtered}</b> têtes, <b>{_fmt_kg(t.weight)}</b> kg, "
        f"<b>{t.seizures}</b> saisies"
    )
    return "\n".join(lines)


async def _month_or_reply(message: types.Message, command: CommandObject) -> Optional[str]:
    if not _is_allowed(message.chat.id):
        return None
    month = parse_month_arg(command.args)
    if month is None:
        await message.answer(BAD_MONTH_TEXT)
    return month


# ────────────────────────────── команды ──────────────────────────────
@router.message(CommandStart())
async def start_cmd(message: types.Message):
    if not _is_allowed(message.chat.id):
        return
    await message.answer(HELP_TEXT)


@router.message(Command("mois"))
async def month_summary_cmd(message: types.Message, command: CommandObject):
    month = await _month_or_reply(message, command)
    if month is None:
        return
    try:
        result = await db.query_month(month)
    except StorageError:
        logger.exception("❌ /mois %s", month)
        await message.answer(STORAGE_DOWN_TEXT)
        return
    await message.answer(format_month_summary(month, summarize(result, DEFAULT_CATALOG)))


@router.message(Command("rapport"))
async def month_pdf_cmd(message: types.Message, command: CommandObject):
    month = await _month_or_reply(message, command)
    if month is None:
        return
    try:
        slaughter_rows = await db.query_aggregate_by_month(month, KIND_SLAUGHTER)
        seizure_rows = await db.query_aggregate_by_month(month, KIND_SEIZURES)
    except StorageError:
        logger.exception("❌ /rapport %s", month)
        await message.answer(STORAGE_DOWN_TEXT)
        return

    pdf = build_monthly_report_pdf_bytes(month, slaughter_rows, seizure_rows)
    await message.answer_document(
        BufferedInputFile(pdf, filename=f"rapport-{month}.pdf"),
        caption=f"📄 Rapport mensuel {month}",
    )


@router.message(Command("csv"))
async def month_csv_cmd(message: types.Message, command: CommandObject):
    month = await _month_or_reply(message, command)
    if month is None:
        return
    try:
        slaughter_rows = await db.query_aggregate_by_month(month, KIND_SLAUGHTER)
        seizure_rows = await db.query_aggregate_by_month(month, KIND_SEIZURES)
    except StorageError:
        logger.exception("❌ /csv %s", month)
        await message.answer(STORAGE_DOWN_TEXT)
        return

    await message.answer_document(
        BufferedInputFile(build_slaughter_csv(slaughter_rows).encode("utf-8"), filename=f"abattage-{month}.csv"),
        caption=f"📊 Abattage {month}",
    )
    await message.answer_document(
        BufferedInputFile(build_seizure_csv(seizure_rows).encode("utf-8"), filename=f"saisies-{month}.csv"),
        caption=f"📊 Saisies {month}",
    )
