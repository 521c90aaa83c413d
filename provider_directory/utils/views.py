"""List, map and split projections of a ranked provider frame.

Projections are read-only: they never filter or reorder, so the list and
the map always show the same providers in the same order.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .io_utils import format_distance, format_rating
from .ranking import DISTANCE_COLUMN
from .search_state import UserLocation

# Sarajevo
DEFAULT_MAP_CENTER: Tuple[float, float] = (43.8563, 18.4131)

MARKER_COLUMNS = ["lat", "lon", "name", "rating", "color"]


class ViewMode(str, Enum):
    LIST = "list"
    MAP = "map"
    SPLIT = "split"


def marker_color(rating) -> str:
    rating = pd.to_numeric(rating, errors="coerce")
    if pd.isna(rating):
        rating = 0.0
    if rating >= 4.5:
        return "#10b981"
    if rating >= 4:
        return "#3b82f6"
    return "#8b5cf6"


def project_list(ranked: pd.DataFrame) -> List[Dict[str, Any]]:
    """Card data for every provider, in ranked order."""
    if ranked is None or ranked.empty:
        return []
    has_distance = DISTANCE_COLUMN in ranked.columns
    cards = []
    for _, row in ranked.iterrows():
        provider_id = row.get("ID")
        cards.append(
            {
                "id": None if pd.isna(provider_id) else int(provider_id),
                "name": row.get("Display Name", ""),
                "slug": row.get("Slug", ""),
                "city": row.get("City", ""),
                "specialty": row.get("Specialty", ""),
                "rating": format_rating(row.get("Rating")),
                "review_count": int(row.get("Review Count", 0) or 0),
                "distance": format_distance(row.get(DISTANCE_COLUMN)) if has_distance else "",
            }
        )
    return cards


def project_map_markers(ranked: pd.DataFrame) -> pd.DataFrame:
    """Markers for providers that have both coordinates, in ranked order."""
    if ranked is None or ranked.empty or "Latitude" not in ranked.columns or "Longitude" not in ranked.columns:
        return pd.DataFrame(columns=MARKER_COLUMNS)

    located = ranked.dropna(subset=["Latitude", "Longitude"])
    markers = pd.DataFrame(
        {
            "lat": located["Latitude"].astype(float),
            "lon": located["Longitude"].astype(float),
            "name": located["Display Name"],
            "rating": pd.to_numeric(located["Rating"], errors="coerce").fillna(0.0),
        }
    )
    markers["color"] = markers["rating"].map(marker_color)
    return markers.reset_index(drop=True)[MARKER_COLUMNS]


def map_center(markers: pd.DataFrame, user_location: Optional[UserLocation] = None) -> Tuple[float, float]:
    if user_location is not None:
        return user_location.lat, user_location.lng
    if markers is not None and not markers.empty:
        first = markers.iloc[0]
        return float(first["lat"]), float(first["lon"])
    return DEFAULT_MAP_CENTER


@dataclass
class ViewProjection:
    mode: ViewMode
    items: List[Dict[str, Any]] = field(default_factory=list)
    markers: pd.DataFrame = field(default_factory=lambda: pd.DataFrame(columns=MARKER_COLUMNS))
    center: Tuple[float, float] = DEFAULT_MAP_CENTER

    @property
    def shows_list(self) -> bool:
        return self.mode in (ViewMode.LIST, ViewMode.SPLIT)

    @property
    def shows_map(self) -> bool:
        return self.mode in (ViewMode.MAP, ViewMode.SPLIT)


def project_view(
    ranked: pd.DataFrame, mode: ViewMode, user_location: Optional[UserLocation] = None
) -> ViewProjection:
    mode = ViewMode(mode)
    projection = ViewProjection(mode=mode)
    if projection.shows_list:
        projection.items = project_list(ranked)
    if projection.shows_map:
        projection.markers = project_map_markers(ranked)
        projection.center = map_center(projection.markers, user_location)
    return projection


def available_view_modes(split_enabled: bool = True) -> List[ViewMode]:
    if split_enabled:
        return [ViewMode.LIST, ViewMode.MAP, ViewMode.SPLIT]
    return [ViewMode.LIST, ViewMode.MAP]
