"""Provider filter pipeline: text search, city, specialty.

Every stage is an independent predicate that keeps the relative order of
the rows it lets through and returns a copy, so the result of the whole
pipeline is the intersection of the active filters. The pipeline always runs
on the full source collection, never on a previous result, which is what
lets a relaxed filter bring excluded providers back.

Doctors and clinics share one implementation; what differs between them is
captured by a :class:`ProviderKind` (which columns are searchable, where the
city lives, and how to get a provider's specialty ids).
"""
import logging
from dataclasses import dataclass
from typing import Callable, Collection, Iterable, List, Optional, Tuple

import pandas as pd

from .search_state import FilterState
from .specialties import Specialty, matches_any_specialty

logger = logging.getLogger(__name__)


def _cell_text(value) -> str:
    if value is None or (not isinstance(value, (list, tuple)) and pd.isna(value)):
        return ""
    return str(value)


def _listed_specialty_ids(row: pd.Series) -> List[int]:
    ids = row.get("Specialty IDs")
    if ids is None or isinstance(ids, float):
        return []
    return list(ids)


@dataclass(frozen=True)
class ProviderKind:
    """Per-entity accessors used by the generic pipeline."""

    name: str
    search_columns: Tuple[str, ...]
    city_column: str = "City"
    specialty_ids: Callable[[pd.Series], List[int]] = _listed_specialty_ids

    def get_city(self, row: pd.Series) -> str:
        return _cell_text(row.get(self.city_column))

    def get_searchable_text(self, row: pd.Series) -> List[str]:
        return [_cell_text(row.get(col)) for col in self.search_columns]


def _doctor_specialty_ids(row: pd.Series) -> List[int]:
    specialty_id = row.get("Specialty ID")
    if specialty_id is None or pd.isna(specialty_id):
        return []
    return [int(specialty_id)]


DOCTORS = ProviderKind(
    name="doctors",
    search_columns=("Display Name", "Specialty", "Location"),
    specialty_ids=_doctor_specialty_ids,
)

# A clinic matches a specialty when any of its affiliated doctors does
CLINICS = ProviderKind(
    name="clinics",
    search_columns=("Display Name", "Description", "Address"),
)

PROVIDER_KINDS = {kind.name: kind for kind in (DOCTORS, CLINICS)}


def filter_by_search_text(df: pd.DataFrame, search_text: Optional[str], kind: ProviderKind) -> pd.DataFrame:
    """Keep providers whose searchable fields contain the text (case-insensitive)."""
    if df is None or df.empty:
        return df
    if not search_text:
        return df.copy()

    term = search_text.lower()
    mask = pd.Series(False, index=df.index)
    for col in kind.search_columns:
        if col in df.columns:
            mask |= df[col].fillna("").astype(str).str.lower().str.contains(term, regex=False)
    return df[mask].copy()


def filter_by_city(df: pd.DataFrame, city: Optional[str], kind: ProviderKind) -> pd.DataFrame:
    """Exact, case-sensitive city equality. An empty city disables the filter."""
    if df is None or df.empty:
        return df
    if not city:
        return df.copy()
    if kind.city_column not in df.columns:
        return df.iloc[0:0].copy()
    return df[df[kind.city_column] == city].copy()


def filter_by_specialty(
    df: pd.DataFrame,
    parent_id: Optional[int],
    sub_ids: Collection[int],
    hierarchy: Iterable[Specialty],
    kind: ProviderKind,
) -> pd.DataFrame:
    """Hierarchical specialty filter; see ``specialties.matches_specialty``."""
    if df is None or df.empty:
        return df
    if parent_id is None:
        return df.copy()

    hierarchy = list(hierarchy)
    sub_ids = frozenset(sub_ids or ())
    mask = df.apply(
        lambda row: matches_any_specialty(kind.specialty_ids(row), parent_id, sub_ids, hierarchy),
        axis=1,
    )
    return df[mask.astype(bool)].copy()


def filter_providers(
    providers: pd.DataFrame,
    state: FilterState,
    kind: ProviderKind,
    hierarchy: Iterable[Specialty] = (),
) -> pd.DataFrame:
    """Apply text search, then city, then specialty to the full collection."""
    if providers is None or providers.empty:
        return providers.copy() if providers is not None else pd.DataFrame()

    filtered = filter_by_search_text(providers, state.search_text, kind)
    filtered = filter_by_city(filtered, state.city, kind)
    filtered = filter_by_specialty(
        filtered, state.parent_specialty_id, state.sub_specialty_ids, hierarchy, kind
    )
    logger.debug(f"{kind.name}: {len(filtered)} of {len(providers)} providers pass the filters")
    return filtered
