# models.py — записи журнала и результаты выборок
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass
class SlaughterRecord:
    date: str
    species: str
    total_number: int
    total_weight: float
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SlaughterRecord":
        return cls(
            id=row["id"],
            date=row["date"],
            species=row["species"],
            total_number=int(row["total_number"]),
            total_weight=float(row["total_weight"]),
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SeizureRecord:
    date: str
    species: str
    organ: str
    cause: str
    total_number: int
    id: Optional[int] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "SeizureRecord":
        return cls(
            id=row["id"],
            date=row["date"],
            species=row["species"],
            organ=row["organ"],
            cause=row["cause"],
            total_number=int(row["total_number"]),
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class MonthQueryResult:
    slaughter: List[SlaughterRecord] = field(default_factory=list)
    seizures: List[SeizureRecord] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "abattage": [r.as_dict() for r in self.slaughter],
            "seizures": [r.as_dict() for r in self.seizures],
        }


@dataclass
class SpeciesTotals:
    species: str
    slaughtered: int = 0
    weight: float = 0.0
    seizures: int = 0


@dataclass
class Summary:
    by_species: List[SpeciesTotals]
    total: SpeciesTotals

    def as_dict(self) -> Dict[str, Any]:
        return {
            "by_species": [asdict(s) for s in self.by_species],
            "total": {k: v for k, v in asdict(self.total).items() if k != "species"},
        }


@dataclass
class DayEntry:
    date: str
    slaughter: List[SlaughterRecord] = field(default_factory=list)
    seizures: List[SeizureRecord] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "abattage": [r.as_dict() for r in self.slaughter],
            "seizures": [r.as_dict() for r in self.seizures],
        }
