# SPDX-License-Identifier: Apache-2.0
"""Built-in globe visualizations: client offices, team avatars, org members."""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape
from typing import Any, Iterable, Mapping

from globeviz import styles
from globeviz.layers.composer import ViewConstants
from globeviz.layers.descriptors import Anchor

CLIENTS_URL = (
    "https://raw.githubusercontent.com/datopian/global-presence/master/data/clients.csv"
)
TEAM_URL = (
    "https://raw.githubusercontent.com/datopian/global-presence/master/data/team.csv"
)

OFFICES: tuple[Anchor, ...] = (
    Anchor("Datopian", -122.25846741601838, 37.52372710642201, "USA"),
    Anchor("Datopian", -0.118092, 51.509865, "United Kingdom"),
)


def _text(record: Mapping[str, Any], key: str) -> str:
    value = record.get(key)
    return "" if value is None else escape(str(value))


def client_tooltip(record: Mapping[str, Any]) -> str | None:
    if not record:
        return None
    parts = [f"<h3>{_text(record, 'Name')}</h3>{_text(record, 'Country')}"]
    if record.get("Sector"):
        parts.append(f"<br />{_text(record, 'Sector')}")
    return "".join(parts)


def team_tooltip(record: Mapping[str, Any]) -> str | None:
    if not record:
        return None
    lines = [f"<h3>{_text(record, 'fullname') or _text(record, 'username')}</h3>"]
    for key in ("position", "country"):
        if record.get(key):
            lines.append(f"{_text(record, key)}<br />")
    if record.get("username"):
        lines.append(f"@{_text(record, 'username')}")
    return "".join(lines)


def member_tooltip(record: Mapping[str, Any]) -> str | None:
    if not record:
        return None
    return f"<h3>{_text(record, 'login')}</h3>"


@dataclass(frozen=True)
class Variant:
    name: str
    description: str
    source: str
    fmt: str = "csv"
    anchors: tuple[Anchor, ...] = ()
    constants: ViewConstants = field(default_factory=ViewConstants)
    title: str = "Global presence"

    @property
    def is_org_listing(self) -> bool:
        return self.fmt == "github-org"


_VARIANTS: dict[str, Variant] = {}


def register(variant: Variant) -> Variant:
    if variant.name in _VARIANTS:
        raise ValueError(f"variant already registered: {variant.name}")
    _VARIANTS[variant.name] = variant
    return variant


def get_variant(name: str) -> Variant:
    try:
        return _VARIANTS[name]
    except KeyError as exc:
        raise KeyError(
            f"unknown variant: {name} (available: {', '.join(sorted(_VARIANTS))})"
        ) from exc


def available_variants() -> Iterable[Variant]:
    return _VARIANTS.values()


register(
    Variant(
        name="clients",
        description="Client locations linked to company offices by great-circle arcs.",
        source=CLIENTS_URL,
        anchors=OFFICES,
        constants=ViewConstants(
            lon_field="Longitude",
            lat_field="Latitude",
            record_layer_id="clients-icon-layer",
            record_color=styles.CLIENT_COLOR,
            anchor_layer_id="datopian-icon-layer",
            arc_mode="anchors",
            tooltip=client_tooltip,
        ),
        title="Clients around the globe",
    )
)

register(
    Variant(
        name="team",
        description="Team member avatars, each linked to every other member.",
        source=TEAM_URL,
        constants=ViewConstants(
            lon_field="lng",
            lat_field="lat",
            record_layer_id="team-icon-layer",
            icon_field="avatar",
            record_size=2.5,
            arc_mode="pairs",
            tooltip=team_tooltip,
        ),
        title="Team around the globe",
    )
)

register(
    Variant(
        name="org",
        description="GitHub organization members placed via a username location table.",
        source="datopian",
        fmt="github-org",
        constants=ViewConstants(
            lon_field="lng",
            lat_field="lat",
            record_layer_id="members-icon-layer",
            icon_field="avatar_url",
            record_size=2.5,
            arc_mode="none",
            tooltip=member_tooltip,
        ),
        title="Organization members",
    )
)
