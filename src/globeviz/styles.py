# SPDX-License-Identifier: Apache-2.0
"""Fixed styling constants for the globe layers."""

from __future__ import annotations

EARTH_RADIUS_METERS = 6.3e6
SPHERE_NLAT = 18
SPHERE_NLONG = 36

SEA_COLOR = (149, 176, 196)
LAND_COLOR = (250, 250, 250)
LAND_OPACITY = 0.8
CLIENT_COLOR = (255, 158, 86)
OFFICE_COLOR = (27, 143, 140)
ARC_COLOR = (239, 158, 86)
ARC_WIDTH = 0.5

LAND_GEOJSON_URL = (
    "https://d2ad6b4ur7yvpq.cloudfront.net/naturalearth-3.3.0/ne_50m_land.geojson"
)
ICON_ATLAS_URL = (
    "https://raw.githubusercontent.com/visgl/deck.gl-data/master/website/icon-atlas.png"
)
ICON_MAPPING = {"marker": {"x": 0, "y": 0, "width": 128, "height": 128, "mask": True}}
ICON_SIZE_SCALE = 15
AVATAR_SIZE = 128

TOOLTIP_STYLE = {"backgroundColor": "#fff", "fontSize": "0.8em"}
