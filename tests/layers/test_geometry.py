# SPDX-License-Identifier: Apache-2.0
import json

import numpy as np
import pytest

from globeviz.layers.geometry import mesh_config, sphere_mesh


def test_sphere_mesh_shapes():
    mesh = sphere_mesh(6.3e6, nlat=18, nlong=36)
    vertices = 19 * 37
    assert mesh["positions"].shape == (vertices, 3)
    assert mesh["normals"].shape == (vertices, 3)
    assert mesh["texCoords"].shape == (vertices, 2)
    assert mesh["indices"].shape == (18 * 36 * 6,)
    assert mesh["indices"].dtype == np.uint16
    assert int(mesh["indices"].max()) < vertices


def test_sphere_vertices_lie_on_radius():
    mesh = sphere_mesh(2.0, nlat=4, nlong=8)
    radii = np.linalg.norm(mesh["positions"], axis=1)
    np.testing.assert_allclose(radii, 2.0, rtol=1e-6)
    np.testing.assert_allclose(np.linalg.norm(mesh["normals"], axis=1), 1.0, rtol=1e-6)
    # first row is the north pole
    np.testing.assert_allclose(mesh["positions"][0], [0.0, 2.0, 0.0], atol=1e-6)


def test_sphere_mesh_rejects_degenerate_tessellation():
    with pytest.raises(ValueError):
        sphere_mesh(1.0, nlat=1, nlong=8)


def test_mesh_config_is_json_serializable():
    config = mesh_config(sphere_mesh(1.0, nlat=2, nlong=3))
    payload = json.loads(json.dumps(config))
    assert payload["attributes"]["positions"]["size"] == 3
    assert len(payload["attributes"]["positions"]["value"]) == 3 * 3 * 4
    assert payload["attributes"]["texCoords"]["size"] == 2
    assert len(payload["indices"]) == 2 * 3 * 6


def test_sphere_mesh_rejects_tessellation_beyond_uint16_indices():
    with pytest.raises(ValueError, match="vertices"):
        sphere_mesh(1.0, nlat=256, nlong=256)
    mesh = sphere_mesh(1.0, nlat=255, nlong=255)
    assert len(mesh["positions"]) == 65536
    assert int(mesh["indices"].max()) == 65535
