# SPDX-License-Identifier: Apache-2.0
import json

from globeviz.layers.descriptors import (
    Anchor,
    EffectDescriptor,
    LayerDescriptor,
    default_lighting,
)


def test_to_config_materializes_accessors():
    layer = LayerDescriptor(
        id="pts",
        type="IconLayer",
        data=({"x": 1}, {"x": 2}),
        props={"getColor": (1, 2, 3)},
        accessors={"getPosition": lambda d: [d["x"], 0], "tooltip": lambda d: f"#{d['x']}"},
    )
    config = layer.to_config()
    assert config["data"] == [
        {"getPosition": [1, 0], "tooltip": "#1"},
        {"getPosition": [2, 0], "tooltip": "#2"},
    ]
    assert config["props"] == {"getColor": [1, 2, 3]}
    assert config["accessors"] == ["getPosition", "tooltip"]
    assert len(layer) == 2
    json.dumps(config)


def test_url_data_passes_through():
    layer = LayerDescriptor(id="land", type="GeoJsonLayer", data="https://x/land.geojson")
    assert layer.to_config()["data"] == "https://x/land.geojson"
    assert len(layer) == 0


def test_structural_equality_ignores_callable_identity():
    def make():
        return LayerDescriptor(
            id="a", type="IconLayer", data=(1, 2), accessors={"getSize": lambda d: d * 2}
        )

    assert make() == make()
    other = LayerDescriptor(id="a", type="IconLayer", data=(1, 3), accessors={"getSize": lambda d: d * 2})
    assert make() != other


def test_effects_and_anchors():
    (lighting,) = default_lighting()
    assert lighting.to_config()["type"] == "LightingEffect"
    assert EffectDescriptor("LightingEffect", {"ambient": {"intensity": 1}}).to_config() == {
        "type": "LightingEffect",
        "props": {"ambient": {"intensity": 1}},
    }
    anchor = Anchor("HQ", -1, 2, "UK")
    assert anchor.coordinates == (-1.0, 2.0)
    assert anchor.as_fields() == {"Name": "HQ", "Country": "UK"}
