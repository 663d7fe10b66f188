# SPDX-License-Identifier: Apache-2.0
"""Logging setup shared by CLI handlers."""

from __future__ import annotations

import logging
import os

VERBOSITY_ENV = "GLOBEVIZ_VERBOSITY"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "quiet": logging.ERROR,
}


def verbosity_from_env(default: str = "info") -> str:
    value = (os.environ.get(VERBOSITY_ENV) or default).strip().lower()
    return value if value in _LEVELS else default


def configure_logging_from_env(default: str = "info") -> int:
    """Configure root logging from ``GLOBEVIZ_VERBOSITY``.

    Accepts ``debug``, ``info`` or ``quiet``; unknown values fall back to
    ``default``. Returns the level that was applied.
    """

    level = _LEVELS[verbosity_from_env(default)]
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    root.setLevel(level)
    # requests/urllib3 are chatty at debug
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
    return level


def apply_verbosity_flags(ns: object) -> None:
    """Translate ``--verbose``/``--quiet`` flags into the env var and configure logging."""

    if getattr(ns, "verbose", False):
        os.environ[VERBOSITY_ENV] = "debug"
    elif getattr(ns, "quiet", False):
        os.environ[VERBOSITY_ENV] = "quiet"
    configure_logging_from_env()
