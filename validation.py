# validation.py — проверка входящих записей по справочнику
# ----------------------------------------------------------
# Функции не бросают исключений: возвращают либо запись, либо
# ValidationError со списком ВСЕХ нарушений (для вывода всей формы).
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from catalog import DEFAULT_CATALOG, DomainCatalog
from models import SeizureRecord, SlaughterRecord

DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")
MONTH_RE = re.compile(r"\d{4}-(0[1-9]|1[0-2])")
# верхняя граница INTEGER в SQLite
MAX_COUNT = 2**63 - 1


@dataclass(frozen=True)
class Issue:
    field: str
    code: str
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"field": self.field, "code": self.code, "message": self.message}


@dataclass
class ValidationError:
    issues: List[Issue] = field(default_factory=list)

    def fields(self) -> List[str]:
        return [i.field for i in self.issues]

    def as_dict(self) -> Dict[str, Any]:
        return {"error": "Validation error", "details": [i.as_dict() for i in self.issues]}


# ────────────────────────────── поля ──────────────────────────────
def _check_date(raw: Dict[str, Any], issues: List[Issue]) -> Optional[str]:
    v = raw.get("date")
    if v is None:
        issues.append(Issue("date", "required", "Date obligatoire"))
        return None
    if not isinstance(v, str) or not DATE_RE.fullmatch(v):
        issues.append(Issue("date", "invalid_format", "Format de date attendu: YYYY-MM-DD"))
        return None
    try:
        datetime.strptime(v, "%Y-%m-%d")
    except ValueError:
        issues.append(Issue("date", "invalid_date", "Date inexistante"))
        return None
    return v


def _check_enum(raw: Dict[str, Any], name: str, allowed, issues: List[Issue]) -> Optional[str]:
    v = raw.get(name)
    if v is None:
        issues.append(Issue(name, "required", f"Champ {name} obligatoire"))
        return None
    if not isinstance(v, str) or v not in allowed:
        issues.append(Issue(name, "invalid_enum", f"Valeur invalide: {v!r} (attendu: {', '.join(sorted(allowed))})"))
        return None
    return v


def _check_positive_int(raw: Dict[str, Any], name: str, issues: List[Issue]) -> Optional[int]:
    v = raw.get(name)
    if v is None:
        issues.append(Issue(name, "required", f"Champ {name} obligatoire"))
        return None
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        issues.append(Issue(name, "invalid_type", "Nombre entier attendu"))
        return None
    if isinstance(v, float) and not (math.isfinite(v) and v.is_integer()):
        issues.append(Issue(name, "not_integer", "Nombre entier attendu"))
        return None
    if v <= 0:
        issues.append(Issue(name, "not_positive", "Doit être strictement positif"))
        return None
    if v > MAX_COUNT:
        issues.append(Issue(name, "too_large", "Valeur trop grande"))
        return None
    return int(v)


def _check_positive_real(raw: Dict[str, Any], name: str, issues: List[Issue]) -> Optional[float]:
    v = raw.get(name)
    if v is None:
        issues.append(Issue(name, "required", f"Champ {name} obligatoire"))
        return None
    if isinstance(v, bool) or not isinstance(v, (int, float)) or (isinstance(v, float) and not math.isfinite(v)):
        issues.append(Issue(name, "invalid_type", "Nombre attendu"))
        return None
    if v <= 0:
        issues.append(Issue(name, "not_positive", "Doit être strictement positif"))
        return None
    return float(v)


def _check_body(raw: Any) -> Optional[ValidationError]:
    if not isinstance(raw, dict):
        return ValidationError([Issue("body", "invalid_type", "Objet JSON attendu")])
    return None


# ────────────────────────────── записи ──────────────────────────────
def validate_slaughter_input(
    raw: Any, catalog: DomainCatalog = DEFAULT_CATALOG
) -> Union[SlaughterRecord, ValidationError]:
    bad = _check_body(raw)
    if bad:
        return bad

    issues: List[Issue] = []
    date = _check_date(raw, issues)
    species = _check_enum(raw, "species", catalog.allowed_species(), issues)
    number = _check_positive_int(raw, "number", issues)
    weight = _check_positive_real(raw, "weight", issues)

    if issues:
        return ValidationError(issues)
    return SlaughterRecord(date=date, species=species, total_number=number, total_weight=weight)


def validate_seizure_input(
    raw: Any, catalog: DomainCatalog = DEFAULT_CATALOG
) -> Union[SeizureRecord, ValidationError]:
    bad = _check_body(raw)
    if bad:
        return bad

    issues: List[Issue] = []
    date = _check_date(raw, issues)
    species = _check_enum(raw, "species", catalog.allowed_species(), issues)
    organ = _check_enum(raw, "organ", catalog.allowed_organs(), issues)
    number = _check_positive_int(raw, "number", issues)

    cause = raw.get("cause")
    if cause is None:
        issues.append(Issue("cause", "required", "Cause obligatoire"))
    elif not isinstance(cause, str) or len(cause) < 1:
        issues.append(Issue("cause", "empty", "Cause obligatoire"))
    elif organ is not None and not catalog.is_free_text(organ):
        if cause not in catalog.allowed_causes(organ):
            issues.append(Issue("cause", "invalid_cause", "Cause invalide pour cet organe"))

    if issues:
        return ValidationError(issues)
    return SeizureRecord(date=date, species=species, organ=organ, cause=cause, total_number=number)


def validate_month(value: Any) -> Optional[str]:
    """'YYYY-MM' → то же значение, иначе None."""
    if isinstance(value, str) and MONTH_RE.fullmatch(value):
        return value
    return None
