# SPDX-License-Identifier: Apache-2.0
"""Locally generated mesh primitives."""

from __future__ import annotations

from typing import Any

import numpy as np

# uint16 index range
MAX_VERTICES = 65536


def sphere_mesh(radius: float, nlat: int = 18, nlong: int = 36) -> dict[str, np.ndarray]:
    """Build a UV sphere centred on the origin.

    Vertices run latitude-major from the north pole, ``(nlat + 1) * (nlong + 1)``
    of them, with a seam column duplicated so texture coordinates stay
    continuous. Returns float32 ``positions``/``normals`` (N x 3),
    ``texCoords`` (N x 2) and uint16 ``indices`` (two triangles per quad).
    """

    if nlat < 2 or nlong < 3:
        raise ValueError("sphere needs nlat >= 2 and nlong >= 3")
    if (nlat + 1) * (nlong + 1) > MAX_VERTICES:
        raise ValueError(
            f"sphere with nlat={nlat}, nlong={nlong} exceeds {MAX_VERTICES} vertices"
        )

    theta = np.linspace(0.0, np.pi, nlat + 1)
    phi = np.linspace(0.0, 2.0 * np.pi, nlong + 1)
    th, ph = np.meshgrid(theta, phi, indexing="ij")

    normals = np.stack(
        [np.cos(ph) * np.sin(th), np.cos(th), np.sin(ph) * np.sin(th)], axis=-1
    ).reshape(-1, 3)
    positions = normals * float(radius)
    u, v = np.meshgrid(
        np.arange(nlong + 1) / nlong, 1.0 - np.arange(nlat + 1) / nlat, indexing="xy"
    )
    tex_coords = np.stack([u, v], axis=-1).reshape(-1, 2)

    row = nlong + 1
    i, j = np.meshgrid(np.arange(nlat), np.arange(nlong), indexing="ij")
    v1 = (i * row + j).ravel()
    v2 = v1 + row
    indices = np.stack([v1, v2, v1 + 1, v2, v2 + 1, v1 + 1], axis=-1).ravel()

    return {
        "positions": positions.astype(np.float32),
        "normals": normals.astype(np.float32),
        "texCoords": tex_coords.astype(np.float32),
        "indices": indices.astype(np.uint16),
    }


def mesh_config(mesh: dict[str, np.ndarray], *, decimals: int = 3) -> dict[str, Any]:
    """Serialize a mesh into the attribute layout the browser rebuilds typed arrays from."""

    attributes = {
        name: {
            "size": int(mesh[name].shape[1]),
            "value": np.round(mesh[name].astype(np.float64), decimals).ravel().tolist(),
        }
        for name in ("positions", "normals", "texCoords")
    }
    return {"attributes": attributes, "indices": mesh["indices"].tolist()}
