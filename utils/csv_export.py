# utils/csv_export.py — выгрузка CSV (разделитель «;»)
# -----------------------------------------------------------------------------
# Экранирования нет: значения берутся из справочника. Исключение — свободная
# причина для «meat»: «;» внутри неё сдвинет колонки (см. тесты).
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

DELIMITER = ";"

SLAUGHTER_CSV_COLUMNS = ["species", "total_abattus", "total_poids"]
SEIZURE_CSV_COLUMNS = ["species", "organ", "cause", "total_saisi"]


def format_value(val: Any) -> str:
    if val is None:
        return ""
    if isinstance(val, bool):
        return str(val).lower()
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    return str(val)


def render_csv(rows: Sequence[Mapping[str, Any]], columns: Sequence[str], delimiter: str = DELIMITER) -> str:
    lines = [delimiter.join(columns)]
    for r in rows:
        lines.append(delimiter.join(format_value(r.get(c)) for c in columns))
    return "\n".join(lines)


def build_slaughter_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """Строки из query_aggregate_by_month(..., "abattage")."""
    out: List[Dict[str, Any]] = [
        {
            "species": r.get("species"),
            "total_abattus": r.get("total_number"),
            "total_poids": r.get("total_weight"),
        }
        for r in rows
    ]
    return render_csv(out, SLAUGHTER_CSV_COLUMNS)


def build_seizure_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    out: List[Dict[str, Any]] = [
        {
            "species": r.get("species"),
            "organ": r.get("organ"),
            "cause": r.get("cause"),
            "total_saisi": r.get("total_number"),
        }
        for r in rows
    ]
    return render_csv(out, SEIZURE_CSV_COLUMNS)


__all__ = [
    "DELIMITER",
    "SLAUGHTER_CSV_COLUMNS",
    "SEIZURE_CSV_COLUMNS",
    "format_value",
    "render_csv",
    "build_slaughter_csv",
    "build_seizure_csv",
]
