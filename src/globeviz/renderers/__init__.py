# SPDX-License-Identifier: Apache-2.0
"""Interactive renderer registry and the deck.gl globe bundle writer."""

from __future__ import annotations

from . import deck_globe as _deck_globe  # noqa: F401
from .base import InteractiveBundle, InteractiveRenderer
from .registry import available, create, get, register

__all__ = [
    "InteractiveBundle",
    "InteractiveRenderer",
    "available",
    "create",
    "get",
    "register",
]
