# catalog.py — справочник: виды, органы, причины изъятия
# -------------------------------------------------------
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Tuple

FREE_TEXT_ORGAN = "meat"

SPECIES: Tuple[str, ...] = ("ovine", "caprine", "bovine")
ORGANS: Tuple[str, ...] = ("head", "heart", "viscera", "liver", "lung", FREE_TEXT_ORGAN)

CAUSES_BY_ORGAN: Dict[str, Tuple[str, ...]] = {
    "head": ("Tuberculose", "Autre"),
    "heart": ("Tuberculose", "Autre"),
    "viscera": ("Tuberculose", "Autre"),
    "liver": ("Kyste hydatique", "Parasite", "Tuberculose", "Fasciolose"),
    "lung": ("Kyste hydatique", "Parasite", "Tuberculose", "Pneumonie", "Autre"),
    FREE_TEXT_ORGAN: (),  # причина вводится текстом
}

SPECIES_LABELS: Dict[str, str] = {
    "ovine": "Ovin",
    "caprine": "Caprin",
    "bovine": "Bovin",
}

ORGAN_LABELS: Dict[str, str] = {
    "head": "Tête",
    "heart": "Cœur",
    "viscera": "Viscères",
    "liver": "Foie",
    "lung": "Poumon",
    FREE_TEXT_ORGAN: "Viande",
}


@dataclass(frozen=True)
class DomainCatalog:
    species: Tuple[str, ...]
    organs: Tuple[str, ...]
    causes_by_organ: Mapping[str, Tuple[str, ...]]
    species_labels: Mapping[str, str] = field(default_factory=dict)
    organ_labels: Mapping[str, str] = field(default_factory=dict)

    def allowed_species(self) -> FrozenSet[str]:
        return frozenset(self.species)

    def allowed_organs(self) -> FrozenSet[str]:
        return frozenset(self.organs)

    def allowed_causes(self, organ: str) -> Tuple[str, ...]:
        """Пустой кортеж — причина свободным текстом (или орган неизвестен)."""
        return tuple(self.causes_by_organ.get(organ, ()))

    def is_free_text(self, organ: str) -> bool:
        return organ in self.organs and not self.allowed_causes(organ)

    def species_label(self, code: str) -> str:
        return self.species_labels.get(code, code)

    def organ_label(self, code: str) -> str:
        return self.organ_labels.get(code, code)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "species": [{"code": s, "label": self.species_label(s)} for s in self.species],
            "organs": [
                {
                    "code": o,
                    "label": self.organ_label(o),
                    "causes": list(self.allowed_causes(o)),
                    "free_text": self.is_free_text(o),
                }
                for o in self.organs
            ],
        }


def build_catalog() -> DomainCatalog:
    return DomainCatalog(
        species=SPECIES,
        organs=ORGANS,
        causes_by_organ=MappingProxyType(dict(CAUSES_BY_ORGAN)),
        species_labels=MappingProxyType(dict(SPECIES_LABELS)),
        organ_labels=MappingProxyType(dict(ORGAN_LABELS)),
    )


# ---------- один экземпляр на процесс ----------
DEFAULT_CATALOG = build_catalog()
