# SPDX-License-Identifier: Apache-2.0
"""Camera parameters for the globe view."""

from __future__ import annotations

from dataclasses import asdict, dataclass


def normalize_longitude(value: float) -> float:
    """Wrap ``value`` into [-180, 180)."""

    return (float(value) + 180.0) % 360.0 - 180.0


@dataclass(frozen=True)
class ViewState:
    longitude: float
    latitude: float
    zoom: float

    def rotated(self, step: float) -> ViewState:
        """Return the state one rotation step west, at the resting latitude and zoom."""

        return ViewState(
            longitude=normalize_longitude(self.longitude - step),
            latitude=INITIAL_VIEW_STATE.latitude,
            zoom=INITIAL_VIEW_STATE.zoom,
        )

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


INITIAL_VIEW_STATE = ViewState(longitude=-10.0, latitude=40.0, zoom=0.5)
