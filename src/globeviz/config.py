# SPDX-License-Identifier: Apache-2.0
"""Runtime settings resolved from ``GLOBEVIZ_*`` environment variables."""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "GLOBEVIZ_"


def _positive(value: float) -> bool:
    return value > 0


def _non_negative(value: float) -> bool:
    return value >= 0


_ENV_FIELDS = (
    ("http_timeout", int, _positive),
    ("max_retries", int, _non_negative),
    ("retry_backoff", float, _non_negative),
    ("rotation_period", float, _positive),
    ("rotation_step", float, math.isfinite),
    ("github_api", str, bool),
)


@dataclass(frozen=True)
class Settings:
    http_timeout: int = 60
    max_retries: int = 3
    retry_backoff: float = 0.5
    rotation_period: float = 0.05
    rotation_step: float = 0.2
    github_api: str = "https://api.github.com"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from the environment, ignoring unparsable or out-of-range values."""

        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for name, caster, valid in _ENV_FIELDS:
            key = ENV_PREFIX + name.upper()
            raw = env.get(key)
            if raw in (None, ""):
                continue
            try:
                value = caster(raw)
            except (TypeError, ValueError):
                LOGGER.warning("Ignoring invalid %s=%r", key, raw)
                continue
            if not valid(value):
                LOGGER.warning("Ignoring out-of-range %s=%r", key, raw)
                continue
            values[name] = value
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> Settings:
        """Return a copy with non-None ``overrides`` applied."""

        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
