"""Plotly map figure for the map and split views."""
from typing import Optional

import plotly.express as px
import plotly.graph_objects as go

from .search_state import UserLocation
from .views import ViewProjection

PLOTLY_CONFIG = {"displayModeBar": False, "scrollZoom": True}

DEFAULT_ZOOM = 7
USER_ZOOM = 11


def build_map_figure(projection: ViewProjection, user_location: Optional[UserLocation] = None, height: int = 520):
    """Scatter map of the projection's markers, coloured by rating band.

    The marker colours are literal hex values, so they are passed through
    unchanged rather than mapped onto a palette.
    """
    lat, lon = projection.center
    fig = px.scatter_map(
        projection.markers,
        lat="lat",
        lon="lon",
        hover_name="name",
        hover_data={"rating": ":.1f", "lat": False, "lon": False, "color": False},
        color="color",
        color_discrete_map="identity",
        map_style="open-street-map",
        center={"lat": lat, "lon": lon},
        zoom=USER_ZOOM if user_location is not None else DEFAULT_ZOOM,
        height=height,
    )
    if user_location is not None:
        fig.add_trace(
            go.Scattermap(
                lat=[user_location.lat],
                lon=[user_location.lng],
                mode="markers",
                marker={"size": 14, "color": "#ef4444"},
                name="You",
                hoverinfo="name",
            )
        )
    fig.update_layout(showlegend=False, margin={"l": 0, "r": 0, "t": 0, "b": 0})
    return fig
