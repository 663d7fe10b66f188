# SPDX-License-Identifier: Apache-2.0
"""Slug-keyed registry of interactive renderers."""

from __future__ import annotations

from typing import Any, Iterable, TypeVar

from .base import InteractiveRenderer

_RendererT = TypeVar("_RendererT", bound=InteractiveRenderer)

_REGISTRY: dict[str, type[InteractiveRenderer]] = {}


def register(renderer_cls: type[_RendererT]) -> type[_RendererT]:
    """Class decorator adding ``renderer_cls`` under its ``slug``."""

    if not issubclass(renderer_cls, InteractiveRenderer):
        raise TypeError("renderer must inherit InteractiveRenderer")
    slug = renderer_cls.slug
    if not slug:
        raise ValueError("renderer slug must be non-empty")
    existing = _REGISTRY.get(slug)
    if existing is not None and existing is not renderer_cls:
        raise ValueError(f"renderer slug already registered: {slug}")
    _REGISTRY[slug] = renderer_cls
    return renderer_cls


def get(slug: str) -> type[InteractiveRenderer]:
    try:
        return _REGISTRY[slug]
    except KeyError as exc:
        raise KeyError(f"unknown renderer slug: {slug}") from exc


def create(slug: str, **options: Any) -> InteractiveRenderer:
    return get(slug)(**options)


def available() -> Iterable[type[InteractiveRenderer]]:
    return _REGISTRY.values()
