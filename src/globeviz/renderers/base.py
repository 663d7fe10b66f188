# SPDX-License-Identifier: Apache-2.0
"""Base interfaces for interactive globe renderers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Sequence


@dataclass(slots=True)
class InteractiveBundle:
    """Files written by a renderer: an entry page plus its assets."""

    output_dir: Path
    index_html: Path
    assets: Sequence[Path] = field(default_factory=tuple)

    def relative_assets(self) -> list[str]:
        return [str(path.relative_to(self.output_dir)) for path in self.assets]


class InteractiveRenderer(ABC):
    """Consumes layer descriptors and a view state, emits a browsable bundle."""

    slug: str = "interactive"
    description: str = ""

    def __init__(self, **options: Any) -> None:
        self._options: dict[str, Any] = dict(options)

    def configure(self, **options: Any) -> None:
        """Update renderer options prior to bundle generation."""

        self._options.update(options)

    @abstractmethod
    def build(self, *, output_dir: Path) -> InteractiveBundle:
        """Write the bundle inside ``output_dir``."""
