# aggregator.py — итоги за месяц по видам и разбивка по дням
from __future__ import annotations

from typing import Dict, List

from catalog import DEFAULT_CATALOG, DomainCatalog
from models import DayEntry, MonthQueryResult, SpeciesTotals, Summary


def summarize(month_result: MonthQueryResult, catalog: DomainCatalog = DEFAULT_CATALOG) -> Summary:
    """Виды берём из справочника: вид без записей всё равно попадает в итог с нулями.

    Общий итог считается по всем строкам, включая виды вне справочника.
    """
    by_species: Dict[str, SpeciesTotals] = {s: SpeciesTotals(species=s) for s in catalog.species}
    total = SpeciesTotals(species="total")

    for r in month_result.slaughter:
        target = by_species.get(r.species)
        if target is not None:
            target.slaughtered += r.total_number
            target.weight += r.total_weight
        total.slaughtered += r.total_number
        total.weight += r.total_weight

    for r in month_result.seizures:
        target = by_species.get(r.species)
        if target is not None:
            target.seizures += r.total_number
        total.seizures += r.total_number

    return Summary(by_species=[by_species[s] for s in catalog.species], total=total)


def group_by_date(month_result: MonthQueryResult) -> List[DayEntry]:
    days: Dict[str, DayEntry] = {}
    for r in month_result.slaughter:
        days.setdefault(r.date, DayEntry(date=r.date)).slaughter.append(r)
    for r in month_result.seizures:
        days.setdefault(r.date, DayEntry(date=r.date)).seizures.append(r)
    return [days[d] for d in sorted(days, reverse=True)]
