# SPDX-License-Identifier: Apache-2.0
"""Map loaded records and fixed anchors to an ordered list of layer descriptors."""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from globeviz import styles
from globeviz.errors import MissingFieldError

from .descriptors import Anchor, Arc, LayerDescriptor, LonLat
from .geometry import mesh_config, sphere_mesh

LOGGER = logging.getLogger(__name__)

ARC_MODES = ("anchors", "pairs", "none")

TooltipBuilder = Callable[[Mapping[str, Any]], "str | None"]


@dataclass(frozen=True)
class ViewConstants:
    """Per-visualization field names and fixed styling."""

    lon_field: str = "Longitude"
    lat_field: str = "Latitude"
    record_layer_id: str = "clients-icon-layer"
    record_color: tuple[int, int, int] = styles.CLIENT_COLOR
    record_size: float = 1.5
    icon_field: str | None = None
    anchor_layer_id: str = "anchor-icon-layer"
    anchor_color: tuple[int, int, int] = styles.OFFICE_COLOR
    anchor_size: float = 2.0
    arc_mode: str = "anchors"
    tooltip: TooltipBuilder | None = None

    def __post_init__(self) -> None:
        if self.arc_mode not in ARC_MODES:
            raise ValueError(f"arc_mode must be one of {ARC_MODES}, got {self.arc_mode!r}")


def _coordinate(record: Mapping[str, Any], field: str) -> float:
    raw = record.get(field)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise MissingFieldError(field)
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise MissingFieldError(field, f"field {field} is not numeric: {raw!r}") from exc
    if not math.isfinite(value):
        raise MissingFieldError(field, f"field {field} is not finite: {raw!r}")
    return value


def position_of(
    record: Mapping[str, Any], lon_field: str = "Longitude", lat_field: str = "Latitude"
) -> LonLat:
    """Return ``(longitude, latitude)`` or raise :class:`MissingFieldError`."""

    return (_coordinate(record, lon_field), _coordinate(record, lat_field))


def _positions(
    records: Sequence[Mapping[str, Any]], lon_field: str, lat_field: str
) -> list[LonLat]:
    out: list[LonLat] = []
    for record in records:
        try:
            out.append(position_of(record, lon_field, lat_field))
        except MissingFieldError:
            continue
    return out


def arcs_to_anchors(
    records: Sequence[Mapping[str, Any]],
    anchors: Sequence[Anchor],
    *,
    lon_field: str = "Longitude",
    lat_field: str = "Latitude",
) -> list[Arc]:
    """Connect every placeable record to every anchor."""

    return [
        Arc(source=pos, target=anchor.coordinates)
        for pos in _positions(records, lon_field, lat_field)
        for anchor in anchors
    ]


def arcs_all_pairs(
    records: Sequence[Mapping[str, Any]],
    *,
    lon_field: str = "Longitude",
    lat_field: str = "Latitude",
) -> list[Arc]:
    """Connect each unordered pair of placeable records once."""

    return [
        Arc(source=a, target=b)
        for a, b in itertools.combinations(_positions(records, lon_field, lat_field), 2)
    ]


def background_layers() -> tuple[LayerDescriptor, ...]:
    mesh = sphere_mesh(styles.EARTH_RADIUS_METERS, styles.SPHERE_NLAT, styles.SPHERE_NLONG)
    return (
        LayerDescriptor(
            id="earth-sphere",
            type="SimpleMeshLayer",
            data=(0,),
            props={
                "mesh": mesh_config(mesh),
                "coordinateSystem": "CARTESIAN",
                "getPosition": [0, 0, 0],
                "getColor": styles.SEA_COLOR,
            },
        ),
        LayerDescriptor(
            id="earth-land",
            type="GeoJsonLayer",
            data=styles.LAND_GEOJSON_URL,
            props={
                "stroked": False,
                "filled": True,
                "opacity": styles.LAND_OPACITY,
                "getFillColor": styles.LAND_COLOR,
            },
        ),
    )


def _avatar_icon(field: str) -> Callable[[Mapping[str, Any]], dict[str, Any]]:
    def _icon(record: Mapping[str, Any]) -> dict[str, Any]:
        url = record.get(field)
        if not url:
            raise MissingFieldError(field)
        return {
            "url": str(url),
            "width": styles.AVATAR_SIZE,
            "height": styles.AVATAR_SIZE,
        }

    return _icon


def _marker(_row: Any) -> str:
    return "marker"


def _tooltip_accessor(builder: TooltipBuilder, fields: Callable[[Any], Mapping[str, Any]]):
    return lambda row: builder(fields(row))


def _placeable(
    records: Sequence[Mapping[str, Any]],
    accessors: Mapping[str, Callable[[Any], Any]],
    layer_id: str,
) -> tuple[Any, ...]:
    kept: list[Any] = []
    for record in records:
        try:
            for fn in accessors.values():
                fn(record)
        except MissingFieldError as exc:
            LOGGER.debug("Skipping record in %s: %s", layer_id, exc)
            continue
        kept.append(record)
    skipped = len(records) - len(kept)
    if skipped:
        LOGGER.info("%s: skipped %d of %d records", layer_id, skipped, len(records))
    return tuple(kept)


def record_icon_layer(
    records: Sequence[Mapping[str, Any]], constants: ViewConstants
) -> LayerDescriptor:
    lon, lat = constants.lon_field, constants.lat_field
    accessors: dict[str, Callable[[Any], Any]] = {
        "getPosition": lambda r: list(position_of(r, lon, lat)),
    }
    props: dict[str, Any] = {
        "pickable": True,
        "sizeScale": styles.ICON_SIZE_SCALE,
        "getSize": constants.record_size,
    }
    if constants.icon_field:
        accessors["getIcon"] = _avatar_icon(constants.icon_field)
    else:
        accessors["getIcon"] = _marker
        props.update(
            iconAtlas=styles.ICON_ATLAS_URL,
            iconMapping=styles.ICON_MAPPING,
            getColor=constants.record_color,
        )
    if constants.tooltip is not None:
        accessors["tooltip"] = _tooltip_accessor(constants.tooltip, lambda r: r)
    return LayerDescriptor(
        id=constants.record_layer_id,
        type="IconLayer",
        data=_placeable(records, accessors, constants.record_layer_id),
        props=props,
        accessors=accessors,
    )


def anchor_icon_layer(
    anchors: Sequence[Anchor], constants: ViewConstants
) -> LayerDescriptor:
    accessors: dict[str, Callable[[Any], Any]] = {
        "getPosition": lambda a: list(a.coordinates),
        "getIcon": _marker,
    }
    if constants.tooltip is not None:
        accessors["tooltip"] = _tooltip_accessor(constants.tooltip, lambda a: a.as_fields())
    return LayerDescriptor(
        id=constants.anchor_layer_id,
        type="IconLayer",
        data=tuple(anchors),
        props={
            "pickable": True,
            "sizeScale": styles.ICON_SIZE_SCALE,
            "iconAtlas": styles.ICON_ATLAS_URL,
            "iconMapping": styles.ICON_MAPPING,
            "getSize": constants.anchor_size,
            "getColor": constants.anchor_color,
        },
        accessors=accessors,
    )


def arc_layer(
    records: Sequence[Mapping[str, Any]],
    anchors: Sequence[Anchor],
    constants: ViewConstants,
) -> LayerDescriptor | None:
    lon, lat = constants.lon_field, constants.lat_field
    if constants.arc_mode == "anchors":
        arcs = arcs_to_anchors(records, anchors, lon_field=lon, lat_field=lat)
    elif constants.arc_mode == "pairs":
        arcs = arcs_all_pairs(records, lon_field=lon, lat_field=lat)
    else:
        return None
    return LayerDescriptor(
        id="arc-layer",
        type="GreatCircleLayer",
        data=tuple(arcs),
        props={
            "pickable": False,
            "getWidth": styles.ARC_WIDTH,
            "getSourceColor": styles.ARC_COLOR,
            "getTargetColor": styles.ARC_COLOR,
        },
        accessors={
            "getSourcePosition": lambda a: list(a.source),
            "getTargetPosition": lambda a: list(a.target),
        },
    )


def compose(
    records: Sequence[Mapping[str, Any]],
    anchors: Sequence[Anchor] = (),
    constants: ViewConstants | None = None,
    *,
    background: Sequence[LayerDescriptor] | None = None,
) -> tuple[LayerDescriptor, ...]:
    """Build the layer stack, bottom to top.

    Order: sphere, land, record icons, anchor icons (when anchors are given),
    arcs (unless ``arc_mode`` is ``"none"``). Records that cannot be placed
    are left out of every layer without affecting the others.
    """

    constants = constants or ViewConstants()
    layers = list(background if background is not None else background_layers())
    layers.append(record_icon_layer(records, constants))
    if anchors:
        layers.append(anchor_icon_layer(anchors, constants))
    arcs = arc_layer(records, anchors, constants)
    if arcs is not None:
        layers.append(arcs)
    return tuple(layers)


class ComposeCache:
    """Memoize :func:`compose` on the identity of its inputs.

    Background layers are built once per cache. The full stack is rebuilt only
    when a different ``records`` or ``anchors`` object is passed; mutating a
    list in place is not detected, since records are immutable once loaded.
    """

    def __init__(self, constants: ViewConstants | None = None) -> None:
        self.constants = constants or ViewConstants()
        self._background: tuple[LayerDescriptor, ...] | None = None
        self._inputs: tuple[object, object] | None = None
        self._layers: tuple[LayerDescriptor, ...] | None = None
        self.hits = 0
        self.misses = 0

    @property
    def background(self) -> tuple[LayerDescriptor, ...]:
        if self._background is None:
            self._background = background_layers()
        return self._background

    def compose(
        self, records: Sequence[Mapping[str, Any]], anchors: Sequence[Anchor] = ()
    ) -> tuple[LayerDescriptor, ...]:
        if (
            self._layers is not None
            and self._inputs is not None
            and self._inputs[0] is records
            and self._inputs[1] is anchors
        ):
            self.hits += 1
            return self._layers
        self.misses += 1
        self._layers = compose(records, anchors, self.constants, background=self.background)
        self._inputs = (records, anchors)
        return self._layers

    def clear(self) -> None:
        self._inputs = None
        self._layers = None
