# SPDX-License-Identifier: Apache-2.0
"""Rotating globe visualizations of offices, teams and organization members."""

from __future__ import annotations

__version__ = "0.3.0"

__all__ = ["__version__"]
