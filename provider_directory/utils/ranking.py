"""Distance attachment and the sort stage of the search pipeline."""
import logging
from typing import Optional

import numpy as np
import pandas as pd

from .cleaning import collation_key
from .geo import calculate_distances
from .search_state import SortKey, UserLocation

logger = logging.getLogger(__name__)

DISTANCE_COLUMN = "Distance (km)"

# Stable sort algorithm, so ties keep their input order
_STABLE = "mergesort"


def attach_distances(providers: pd.DataFrame, user_location: Optional[UserLocation]) -> pd.DataFrame:
    """Return a copy carrying ``Distance (km)`` from the user's location.

    Without a location the copy has no distance column at all. Providers
    without coordinates get NaN. The input frame is never modified.
    """
    ranked = providers.copy()
    if user_location is None:
        return ranked.drop(columns=[DISTANCE_COLUMN], errors="ignore")
    if ranked.empty or "Latitude" not in ranked.columns or "Longitude" not in ranked.columns:
        ranked[DISTANCE_COLUMN] = pd.Series(np.nan, index=ranked.index, dtype=float)
        return ranked

    distances = calculate_distances(user_location.lat, user_location.lng, ranked)
    ranked[DISTANCE_COLUMN] = pd.Series(
        [np.nan if d is None else d for d in distances], index=ranked.index, dtype=float
    )
    return ranked


def sort_providers(providers: pd.DataFrame, sort_key: SortKey, location_active: bool) -> pd.DataFrame:
    """Order providers by name, rating or distance (stable, never in place).

    - name: ascending, accented letters next to their base letter
    - rating: descending, missing rating counts as 0
    - distance: ascending, providers without a distance last; a no-op while
      no location is active
    """
    if providers is None or providers.empty:
        return providers.copy() if providers is not None else pd.DataFrame()

    sort_key = SortKey(sort_key)
    if sort_key is SortKey.NAME:
        return providers.sort_values(
            by="Display Name",
            key=lambda names: names.map(collation_key),
            kind=_STABLE,
        )

    if sort_key is SortKey.RATING:
        return providers.sort_values(
            by="Rating",
            key=lambda ratings: -pd.to_numeric(ratings, errors="coerce").fillna(0.0),
            kind=_STABLE,
        )

    if not location_active or DISTANCE_COLUMN not in providers.columns:
        logger.debug("Distance sort requested without an active location; keeping input order")
        return providers.copy()

    return providers.sort_values(
        by=DISTANCE_COLUMN,
        key=lambda distances: pd.to_numeric(distances, errors="coerce").fillna(np.inf),
        kind=_STABLE,
    )
