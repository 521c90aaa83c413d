import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Union

import pandas as pd

from provider_directory.data.ingestion import load_cities, load_clinics, load_doctors, load_specialties
from provider_directory.utils.filters import PROVIDER_KINDS, ProviderKind, filter_providers
from provider_directory.utils.ranking import attach_distances, sort_providers
from provider_directory.utils.search_state import FilterState
from provider_directory.utils.specialties import Specialty

__all__ = [
    "DirectoryData",
    "load_directory_data",
    "resolve_kind",
    "run_search",
]

logger = logging.getLogger(__name__)


@dataclass
class DirectoryData:
    """Everything one listing page needs from the backend."""

    providers: pd.DataFrame
    hierarchy: List[Specialty] = field(default_factory=list)
    cities: pd.DataFrame = field(default_factory=pd.DataFrame)


def resolve_kind(kind: Union[str, ProviderKind]) -> ProviderKind:
    if isinstance(kind, ProviderKind):
        return kind
    try:
        return PROVIDER_KINDS[kind]
    except KeyError:
        raise ValueError(f"Unknown provider kind: {kind!r}") from None


def load_directory_data(kind: Union[str, ProviderKind]) -> DirectoryData:
    """Load the providers of one kind together with the specialty hierarchy and city registry.

    Each collection comes from its own cached loader, so reruns do not refetch.

    Raises:
        DataSourceError: if any collection cannot be fetched (caught by the pages)
    """
    kind = resolve_kind(kind)
    providers = load_doctors() if kind.name == "doctors" else load_clinics()
    data = DirectoryData(providers=providers, hierarchy=load_specialties(), cities=load_cities())
    logger.info(
        f"Loaded {len(data.providers)} {kind.name}, {len(data.hierarchy)} specialties, {len(data.cities)} cities"
    )
    return data


def run_search(
    providers: pd.DataFrame,
    state: FilterState,
    kind: Union[str, ProviderKind],
    hierarchy: Iterable[Specialty] = (),
) -> pd.DataFrame:
    """Run the complete search pipeline for one filter state.

    This orchestrates, on the full source collection:
    1. Filter by search text, city and specialty
    2. Attach distances from the user's location (when active)
    3. Sort by the selected key (stable)

    Args:
        providers: Full provider collection from the backend (never modified)
        state: Current filter state
        kind: "doctors", "clinics" or a ProviderKind
        hierarchy: Top-level specialty list

    Returns:
        pd.DataFrame: Ranked providers with a fresh 0..n-1 index
    """
    kind = resolve_kind(kind)
    filtered = filter_providers(providers, state, kind, hierarchy)
    if filtered.empty:
        return filtered.reset_index(drop=True)
    ranked = attach_distances(filtered, state.user_location)
    ranked = sort_providers(ranked, state.sort_key, state.location_active)
    return ranked.reset_index(drop=True)
