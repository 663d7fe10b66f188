# SPDX-License-Identifier: Apache-2.0
"""Declarative layer, effect and arc values handed to the renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

Accessor = Callable[[Any], Any]
LonLat = tuple[float, float]


@dataclass(frozen=True)
class Anchor:
    """A fixed, named point used as an arc endpoint (e.g. an office)."""

    name: str
    longitude: float
    latitude: float
    country: str = ""

    @property
    def coordinates(self) -> LonLat:
        return (float(self.longitude), float(self.latitude))

    def as_fields(self) -> dict[str, Any]:
        return {"Name": self.name, "Country": self.country}


@dataclass(frozen=True)
class Arc:
    source: LonLat
    target: LonLat


@dataclass(frozen=True, eq=False)
class LayerDescriptor:
    """Side-effect-free description of one deck.gl layer.

    ``data`` is either a tuple of rows or a URL the browser fetches itself.
    ``accessors`` map deck.gl accessor props (``getPosition``) to Python
    callables evaluated per row when the descriptor is serialized, so the
    browser only reads precomputed fields. Equality is structural: two
    descriptors are equal when their serialized forms are.
    """

    id: str
    type: str
    data: tuple[Any, ...] | str = ()
    props: Mapping[str, Any] = field(default_factory=dict)
    accessors: Mapping[str, Accessor] = field(default_factory=dict)

    def __len__(self) -> int:
        return 0 if isinstance(self.data, str) else len(self.data)

    def evaluate(self, name: str, row: Any) -> Any:
        return self.accessors[name](row)

    def rows(self) -> list[dict[str, Any]]:
        if isinstance(self.data, str):
            return []
        return [
            {name: _jsonable(fn(row)) for name, fn in self.accessors.items()}
            for row in self.data
        ]

    def to_config(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "data": self.data if isinstance(self.data, str) else self.rows(),
            "props": _jsonable(dict(self.props)),
            "accessors": sorted(self.accessors),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LayerDescriptor):
            return NotImplemented
        return self.to_config() == other.to_config()

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class EffectDescriptor:
    type: str
    props: Mapping[str, Any] = field(default_factory=dict)

    def to_config(self) -> dict[str, Any]:
        return {"type": self.type, "props": _jsonable(dict(self.props))}


def default_lighting() -> tuple[EffectDescriptor, ...]:
    return (
        EffectDescriptor(
            "LightingEffect",
            {
                "ambient": {"color": [255, 255, 255], "intensity": 0.6},
                "directional": {
                    "color": [255, 255, 255],
                    "intensity": 0.9,
                    "direction": [-3, -9, -1],
                },
            },
        ),
    )


def _jsonable(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (tuple, list)):
        return [_jsonable(v) for v in value]
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return [_jsonable(v) for v in value]
    tolist = getattr(value, "tolist", None)
    if callable(tolist):  # numpy arrays and scalars
        return tolist()
    return value
