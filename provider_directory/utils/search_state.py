"""Filter state for one search session.

``FilterState`` is immutable; every user interaction produces a new state
which, together with the fetched provider collection, is the sole input to
the search pipeline.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, FrozenSet, Iterable, Mapping, Optional

import pandas as pd

from .cities import resolve_city
from .cleaning import decode_query_value
from .specialties import Specialty, find_specialty_by_slug

# URL query parameters understood by the listing pages
QUERY_SEARCH = "pretraga"
QUERY_CITY = "grad"
QUERY_SPECIALTY = "specijalnost"


class SortKey(str, Enum):
    NAME = "name"
    RATING = "rating"
    DISTANCE = "distance"


@dataclass(frozen=True)
class UserLocation:
    lat: float
    lng: float


def coerce_specialty_id(value: Any) -> Optional[int]:
    """Widget and URL values arrive as strings; '' and 'all' mean no selection."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text or text.lower() == "all":
        return None
    try:
        return int(text)
    except ValueError:
        return None


def coerce_specialty_ids(values: Optional[Iterable[Any]]) -> FrozenSet[int]:
    if not values:
        return frozenset()
    ids = (coerce_specialty_id(value) for value in values)
    return frozenset(i for i in ids if i is not None)


@dataclass(frozen=True)
class FilterState:
    search_text: str = ""
    city: str = ""
    parent_specialty_id: Optional[int] = None
    sub_specialty_ids: FrozenSet[int] = field(default_factory=frozenset)
    user_location: Optional[UserLocation] = None
    sort_key: SortKey = SortKey.NAME

    @property
    def location_active(self) -> bool:
        return self.user_location is not None

    def with_search_text(self, text: Optional[str]) -> "FilterState":
        return replace(self, search_text=text or "")

    def with_city(self, city: Optional[str]) -> "FilterState":
        return replace(self, city=city or "")

    def with_parent_specialty(self, parent_id: Any) -> "FilterState":
        """Pick a parent specialty; any previous sub-selection is dropped."""
        return replace(self, parent_specialty_id=coerce_specialty_id(parent_id), sub_specialty_ids=frozenset())

    def with_sub_specialties(self, sub_ids: Optional[Iterable[Any]]) -> "FilterState":
        return replace(self, sub_specialty_ids=coerce_specialty_ids(sub_ids))

    def with_sort_key(self, sort_key: Any) -> "FilterState":
        """Change the sort key. Distance is refused while no location is set."""
        sort_key = SortKey(sort_key)
        if sort_key is SortKey.DISTANCE and not self.location_active:
            return self
        return replace(self, sort_key=sort_key)

    @classmethod
    def from_query_params(
        cls,
        params: Mapping[str, Any],
        hierarchy: Iterable[Specialty] = (),
        cities_df: Optional[pd.DataFrame] = None,
    ) -> "FilterState":
        """Initial state from URL query parameters (search text, city, specialty)."""
        search_text = decode_query_value(params.get(QUERY_SEARCH))

        city = decode_query_value(params.get(QUERY_CITY))
        if city and cities_df is not None:
            city = resolve_city(cities_df, city) or city

        parent_id = None
        specialty_slug = decode_query_value(params.get(QUERY_SPECIALTY))
        if specialty_slug:
            specialty = find_specialty_by_slug(hierarchy, specialty_slug)
            if specialty is not None:
                parent_id = specialty.id
            else:
                parent_id = coerce_specialty_id(specialty_slug)

        return cls(search_text=search_text, city=city, parent_specialty_id=parent_id)
