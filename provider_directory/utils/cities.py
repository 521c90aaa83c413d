"""City registry helpers: canonical names and autocomplete suggestions."""
from typing import List, Optional

import pandas as pd

from .cleaning import collation_key, slugify


def get_city_names(cities_df: pd.DataFrame) -> List[str]:
    """All canonical city names, sorted, whether or not they have providers."""
    if cities_df is None or cities_df.empty or "Name" not in cities_df.columns:
        return []
    names = {str(name) for name in cities_df["Name"].dropna() if str(name).strip()}
    return sorted(names, key=collation_key)


def suggest_cities(city_names: List[str], query: str) -> List[str]:
    """Autocomplete: names containing ``query``, case-insensitively."""
    if not query or not query.strip():
        return list(city_names)
    needle = query.strip().lower()
    return [name for name in city_names if needle in name.lower()]


def resolve_city(cities_df: pd.DataFrame, value: str) -> Optional[str]:
    """Canonical city name for a name or slug, or None when unknown."""
    if not value or cities_df is None or cities_df.empty:
        return None
    wanted = value.strip().lower()
    wanted_slug = slugify(value)
    for row in cities_df.itertuples(index=False):
        if str(row.Name).lower() == wanted or (row.Slug and str(row.Slug) == wanted_slug):
            return str(row.Name)
    return None
