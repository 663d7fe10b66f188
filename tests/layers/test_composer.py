# SPDX-License-Identifier: Apache-2.0
import pytest

from globeviz.data.loader import Record, parse_delimited
from globeviz.errors import MissingFieldError
from globeviz.layers.composer import (
    ComposeCache,
    ViewConstants,
    arcs_all_pairs,
    arcs_to_anchors,
    compose,
    position_of,
)
from globeviz.layers.descriptors import Anchor, Arc
from globeviz.variants import OFFICES, client_tooltip

ANCHORS = (Anchor("HQ", -122.0, 37.0, "USA"), Anchor("EU", 0.0, 51.0, "UK"))


def _records(n: int) -> list[Record]:
    return [Record({"Longitude": str(i), "Latitude": str(-i), "Name": f"r{i}"}) for i in range(n)]


def _layer(layers, layer_id):
    return next(layer for layer in layers if layer.id == layer_id)


def test_position_of_requires_numeric_coordinates():
    assert position_of(Record({"Longitude": "10", "Latitude": "-2.5"})) == (10.0, -2.5)
    for bad in ({"Longitude": "", "Latitude": "1"}, {"Latitude": "1"}, {"Longitude": "x", "Latitude": "1"}):
        with pytest.raises(MissingFieldError) as excinfo:
            position_of(Record(bad))
        assert excinfo.value.field == "Longitude"
    with pytest.raises(MissingFieldError):
        position_of(Record({"Longitude": "1", "Latitude": "nan"}))


def test_missing_field_error_is_a_key_error():
    assert issubclass(MissingFieldError, KeyError)
    assert str(MissingFieldError("lat")) == "missing field: lat"


def test_end_to_end_csv_skips_blank_coordinates(clients_csv):
    records = parse_delimited(clients_csv)
    assert len(records) == 3
    layers = compose(records, (), ViewConstants(arc_mode="none"))
    icons = _layer(layers, "clients-icon-layer")
    assert len(icons) == 2
    assert [row["getPosition"] for row in icons.rows()] == [[10.0, 20.0], [30.0, 40.0]]


def test_layer_order_is_fixed():
    layers = compose(_records(3), ANCHORS, ViewConstants(anchor_layer_id="offices"))
    assert [layer.id for layer in layers] == [
        "earth-sphere",
        "earth-land",
        "clients-icon-layer",
        "offices",
        "arc-layer",
    ]
    assert [layer.type for layer in layers] == [
        "SimpleMeshLayer",
        "GeoJsonLayer",
        "IconLayer",
        "IconLayer",
        "GreatCircleLayer",
    ]


def test_no_anchor_or_arc_layers_when_not_requested():
    layers = compose(_records(2), (), ViewConstants(arc_mode="none"))
    assert [layer.id for layer in layers] == ["earth-sphere", "earth-land", "clients-icon-layer"]


def test_compose_is_pure():
    records = _records(4)
    constants = ViewConstants(tooltip=client_tooltip)
    first = compose(records, ANCHORS, constants)
    second = compose(list(records), tuple(ANCHORS), constants)
    assert first == second
    for a, b in zip(first, second):
        for row in a.data if not isinstance(a.data, str) else ():
            for name in a.accessors:
                assert a.evaluate(name, row) == b.evaluate(name, row)


def test_arcs_to_anchors_is_cross_product():
    arcs = arcs_to_anchors(_records(5), ANCHORS)
    assert len(arcs) == 5 * 2
    assert arcs[0] == Arc(source=(0.0, 0.0), target=(-122.0, 37.0))


@pytest.mark.parametrize("n", [0, 1, 2, 5, 9])
def test_arcs_all_pairs_count_and_uniqueness(n):
    arcs = arcs_all_pairs(_records(n))
    assert len(arcs) == n * (n - 1) // 2
    pairs = {frozenset((a.source, a.target)) for a in arcs}
    assert len(pairs) == len(arcs)
    assert all(a.source != a.target for a in arcs)


def test_arcs_ignore_unplaceable_records():
    records = _records(3) + [Record({"Longitude": "", "Latitude": "", "Name": "ghost"})]
    assert len(arcs_to_anchors(records, ANCHORS)) == 6
    assert len(arcs_all_pairs(records)) == 3


def test_missing_coordinates_do_not_affect_other_records():
    records = [
        Record({"lng": "1", "lat": "2", "avatar": "https://x/a.png"}),
        Record({"lng": "", "lat": "2", "avatar": "https://x/b.png"}),
        Record({"lng": "3", "lat": "4", "avatar": ""}),
        Record({"lng": "5", "lat": "6", "avatar": "https://x/c.png"}),
    ]
    constants = ViewConstants(
        lon_field="lng", lat_field="lat", icon_field="avatar", arc_mode="pairs"
    )
    layers = compose(records, (), constants)
    icons = _layer(layers, "clients-icon-layer")
    assert [row["getIcon"]["url"] for row in icons.rows()] == [
        "https://x/a.png",
        "https://x/c.png",
    ]
    # the avatar-less record still has a position, so it joins the arcs
    assert len(_layer(layers, "arc-layer")) == 3


def test_icon_rows_carry_tooltips():
    layers = compose(
        [Record({"Longitude": "1", "Latitude": "2", "Name": "<Acme>", "Country": "USA"})],
        OFFICES,
        ViewConstants(tooltip=client_tooltip),
    )
    (row,) = _layer(layers, "clients-icon-layer").rows()
    assert row["tooltip"] == "<h3>&lt;Acme&gt;</h3>USA"
    offices = _layer(layers, "anchor-icon-layer").rows()
    assert offices[1]["tooltip"] == "<h3>Datopian</h3>United Kingdom"
    assert offices[0]["getPosition"] == [-122.25846741601838, 37.52372710642201]


def test_view_constants_validate_arc_mode():
    with pytest.raises(ValueError):
        ViewConstants(arc_mode="spiral")


def test_compose_cache_keys_on_identity():
    cache = ComposeCache()
    records = _records(3)
    first = cache.compose(records, ANCHORS)
    assert cache.compose(records, ANCHORS) is first
    assert (cache.hits, cache.misses) == (1, 1)

    rebuilt = cache.compose(list(records), ANCHORS)
    assert rebuilt is not first
    assert rebuilt == first
    assert cache.misses == 2
    # background layers are shared between rebuilds
    assert rebuilt[0] is first[0] and rebuilt[1] is first[1]

    cache.clear()
    assert cache.compose(records, ANCHORS) is not first
