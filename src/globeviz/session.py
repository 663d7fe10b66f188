# SPDX-License-Identifier: Apache-2.0
"""One globe view: rotation, data load, composition and bundle output."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Sequence

from globeviz.config import Settings
from globeviz.data.loader import (
    Record,
    attach_locations,
    load_org_members,
    load_records,
)
from globeviz.data.tasks import LoadTask
from globeviz.errors import GlobeVizError
from globeviz.layers.composer import ComposeCache
from globeviz.layers.descriptors import LayerDescriptor
from globeviz.renderers import InteractiveBundle, create
from globeviz.variants import Variant
from globeviz.view.controller import RotationController

LOGGER = logging.getLogger(__name__)


class GlobeSession:
    """Drive one variant from fetch to rendered bundle.

    Rotation starts before the data arrives and is independent of it. The
    load result is applied only while the session is alive; ``close()``
    cancels the load, releases the rotation timer and marks the view dead.
    """

    def __init__(
        self,
        variant: Variant,
        *,
        settings: Settings | None = None,
        source: str | None = None,
        locations: str | None = None,
        token: str | None = None,
        renderer: str = "deck-globe",
        renderer_options: dict[str, Any] | None = None,
        autostart: bool = True,
    ) -> None:
        self.variant = variant
        self.settings = settings or Settings()
        self.source = source or variant.source
        self.locations = locations
        self.token = token
        self.renderer_slug = renderer
        self.renderer_options = dict(renderer_options or {})
        self.autostart = autostart
        self.cache = ComposeCache(variant.constants)
        self.controller: RotationController | None = None
        self.records: Sequence[Record] | None = None
        self.error: BaseException | None = None
        self.bundle: InteractiveBundle | None = None
        self._task: LoadTask[list[Record]] | None = None
        self._alive = False

    @property
    def alive(self) -> bool:
        return self._alive

    def load(self) -> list[Record]:
        """Blocking load of this session's records."""

        if not self.variant.is_org_listing:
            return load_records(self.source, self.variant.fmt, settings=self.settings)
        members = load_org_members(self.source, settings=self.settings, token=self.token)
        if not self.locations:
            LOGGER.warning(
                "No location table for %s members; none can be placed on the globe",
                self.source,
            )
            return members
        table = load_records(self.locations, "csv", settings=self.settings)
        constants = self.variant.constants
        return attach_locations(
            members, table, lon_field=constants.lon_field, lat_field=constants.lat_field
        )

    def start(self) -> LoadTask[list[Record]]:
        """Arm rotation and schedule the load; requires a running event loop."""

        if self._task is not None:
            raise RuntimeError("session already started")
        self.controller = RotationController(
            asyncio.get_running_loop(),
            period=self.settings.rotation_period,
            step=self.settings.rotation_step,
        )
        self._alive = True
        if self.autostart:
            self.controller.start()
        self._task = LoadTask(
            self.load,
            on_loaded=self._on_loaded,
            on_failed=self._on_failed,
            is_alive=lambda: self._alive,
        ).start()
        return self._task

    def _on_loaded(self, records: list[Record]) -> None:
        self.records = tuple(records)
        LOGGER.info("%s: %d records loaded", self.variant.name, len(records))

    def _on_failed(self, exc: BaseException) -> None:
        self.error = exc
        LOGGER.error("%s: loading %s failed: %s", self.variant.name, self.source, exc)

    def layers(self) -> tuple[LayerDescriptor, ...]:
        return self.cache.compose(self.records or (), self.variant.anchors)

    def render(self, output_dir: Path, *, error: str | None = None) -> InteractiveBundle:
        options: dict[str, Any] = {
            "title": self.variant.title,
            "rotation": {
                "period_ms": int(round(self.settings.rotation_period * 1000)),
                "step": self.settings.rotation_step,
                "autostart": self.autostart,
            },
        }
        if self.controller is not None:
            options["view_state"] = self.controller.view_state
        options.update(self.renderer_options)
        if error:
            options["error"] = error
            options["layers"] = self.cache.background
        else:
            options["layers"] = self.layers()
        renderer = create(self.renderer_slug, **options)
        self.bundle = renderer.build(output_dir=Path(output_dir))
        return self.bundle

    async def run(self, output_dir: Path) -> InteractiveBundle | None:
        """Load, compose and render; returns ``None`` if the view died first.

        Fetch and parse failures still produce a bundle that shows the error,
        then propagate to the caller.
        """

        task = self.start()
        try:
            await task.wait()
        except asyncio.CancelledError:
            if self._alive:
                raise
            LOGGER.info("%s: load cancelled before rendering", self.variant.name)
            return None
        except GlobeVizError as exc:
            if self._alive:
                self.render(output_dir, error=str(exc))
            raise
        else:
            if self._alive and self.records is not None:
                return self.render(output_dir)
            return None
        finally:
            self.close()

    def close(self) -> None:
        self._alive = False
        if self._task is not None:
            self._task.cancel()
        if self.controller is not None:
            self.controller.close()
