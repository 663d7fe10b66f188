# SPDX-License-Identifier: Apache-2.0
from .composer import (
    ComposeCache,
    ViewConstants,
    arcs_all_pairs,
    arcs_to_anchors,
    compose,
    position_of,
)
from .descriptors import Arc, EffectDescriptor, LayerDescriptor

__all__ = [
    "Arc",
    "ComposeCache",
    "EffectDescriptor",
    "LayerDescriptor",
    "ViewConstants",
    "arcs_all_pairs",
    "arcs_to_anchors",
    "compose",
    "position_of",
]
