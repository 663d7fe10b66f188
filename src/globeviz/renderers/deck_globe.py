# SPDX-License-Identifier: Apache-2.0
"""deck.gl globe renderer.

The generated bundle loads deck.gl from the jsDelivr CDN and rebuilds each
layer from its serialized descriptor. Accessors arrive precomputed per row,
so the browser script only maps fields onto layer props.
"""

from __future__ import annotations

import json
import logging
from html import escape
from pathlib import Path
from textwrap import dedent
from typing import Any

from globeviz import styles
from globeviz.layers.descriptors import (
    EffectDescriptor,
    LayerDescriptor,
    default_lighting,
)
from globeviz.view.controller import DEFAULT_PERIOD, DEFAULT_STEP
from globeviz.view.state import INITIAL_VIEW_STATE, ViewState

from .base import InteractiveBundle, InteractiveRenderer
from .registry import register

LOGGER = logging.getLogger(__name__)

DECK_GL_URL = "https://cdn.jsdelivr.net/npm/deck.gl@8.9.35/dist.min.js"


def _layer_config(layer: LayerDescriptor | dict[str, Any]) -> dict[str, Any]:
    return layer.to_config() if isinstance(layer, LayerDescriptor) else dict(layer)


def _effect_config(effect: EffectDescriptor | dict[str, Any]) -> dict[str, Any]:
    return effect.to_config() if isinstance(effect, EffectDescriptor) else dict(effect)


@register
class DeckGlobeRenderer(InteractiveRenderer):
    slug = "deck-globe"
    description = "deck.gl globe view with icon, land and arc layers."

    def build(self, *, output_dir: Path) -> InteractiveBundle:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        assets_dir = output_dir / "assets"
        assets_dir.mkdir(parents=True, exist_ok=True)

        index_html = output_dir / "index.html"
        script_path = assets_dir / "globe.js"
        config_path = assets_dir / "config.json"

        config = self._sanitized_config()
        config_path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")
        index_html.write_text(self._render_index_html(config), encoding="utf-8")
        script_path.write_text(self._render_script(), encoding="utf-8")

        LOGGER.debug(
            "Wrote %s with %d layers (status %s)",
            index_html,
            len(config["layers"]),
            config["status"],
        )
        return InteractiveBundle(
            output_dir=output_dir,
            index_html=index_html,
            assets=(script_path, config_path),
        )

    def _sanitized_config(self) -> dict[str, Any]:
        """Return the browser config; credentials never leave Python."""

        options = self._options
        view_state = options.get("view_state") or INITIAL_VIEW_STATE
        if isinstance(view_state, ViewState):
            view_state = view_state.to_dict()

        rotation = {
            "period_ms": int(round(DEFAULT_PERIOD * 1000)),
            "step": DEFAULT_STEP,
            "autostart": True,
        }
        rotation.update(options.get("rotation") or {})

        effects = options.get("effects")
        if effects is None:
            effects = default_lighting()

        error = options.get("error")
        return {
            "title": options.get("title") or "Globe",
            "width": options.get("width"),
            "height": options.get("height"),
            "status": "error" if error else "ok",
            "error": str(error) if error else None,
            "view_state": dict(view_state),
            "rotation": rotation,
            "views": {"keyboard": True, "inertia": True},
            "layers": [_layer_config(layer) for layer in options.get("layers") or ()],
            "effects": [_effect_config(effect) for effect in effects],
            "tooltip_style": dict(options.get("tooltip_style") or styles.TOOLTIP_STYLE),
        }

    def _render_index_html(self, config: dict[str, Any]) -> str:
        # Escape "</" so record text cannot close the inline script early.
        config_json = json.dumps(config).replace("</", "<\\/")
        title = escape(str(config["title"]))
        return (
            dedent(
                f"""
            <!DOCTYPE html>
            <html lang=\"en\">
              <head>
                <meta charset=\"utf-8\" />
                <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
                <title>{title}</title>
                <style>
                  html, body {{ margin: 0; padding: 0; width: 100%; height: 100%; background: #0b0d11; font-family: system-ui, sans-serif; }}
                  #globeviz {{ width: 100%; height: 100%; position: relative; }}
                  #globeviz-error {{ position: absolute; top: 16px; left: 16px; z-index: 10; background: #fff3f0; color: #8a1c0b; border: 1px solid #e0a090; padding: 12px 16px; border-radius: 8px; max-width: 360px; }}
                </style>
              </head>
              <body>
                <div id=\"globeviz\">
                  <div id=\"globeviz-error\" role=\"alert\" hidden></div>
                </div>
                <script>
                  window.GLOBEVIZ_CONFIG = {config_json};
                </script>
                <script src=\"{DECK_GL_URL}\"></script>
                <script src=\"assets/globe.js\"></script>
              </body>
            </html>
            """
            ).strip()
            + "\n"
        )

    def _render_script(self) -> str:
        return (
            dedent(
                """
            (function () {
              const config = window.GLOBEVIZ_CONFIG || {};
              const container = document.getElementById("globeviz");
              const errorBox = document.getElementById("globeviz-error");

              function showError(message) {
                errorBox.textContent = message;
                errorBox.hidden = false;
              }

              if (config.status === "error") {
                showError(config.error || "The dataset could not be loaded.");
              }
              if (!window.deck) {
                showError("deck.gl failed to load.");
                return;
              }

              if (config.width) container.style.width = `${config.width}px`;
              if (config.height) container.style.height = `${config.height}px`;

              const COORDINATE_SYSTEMS = {
                CARTESIAN: deck.COORDINATE_SYSTEM.CARTESIAN,
                LNGLAT: deck.COORDINATE_SYSTEM.LNGLAT,
              };

              function buildMesh(desc) {
                const attributes = {};
                for (const [name, attr] of Object.entries(desc.attributes)) {
                  attributes[name] = { size: attr.size, value: new Float32Array(attr.value) };
                }
                return { attributes, indices: { size: 1, value: new Uint16Array(desc.indices) } };
              }

              function buildLayer(desc) {
                const LayerClass = deck[desc.type];
                if (!LayerClass) {
                  throw new Error(`Unknown layer type: ${desc.type}`);
                }
                const props = Object.assign({ id: desc.id, data: desc.data }, desc.props);
                if (props.mesh) props.mesh = buildMesh(props.mesh);
                if (typeof props.coordinateSystem === "string") {
                  props.coordinateSystem = COORDINATE_SYSTEMS[props.coordinateSystem];
                }
                for (const name of desc.accessors || []) {
                  if (name.startsWith("get")) props[name] = (d) => d[name];
                }
                return new LayerClass(props);
              }

              function buildEffect(desc) {
                if (desc.type !== "LightingEffect") return null;
                const lights = {};
                if (desc.props.ambient) lights.ambient = new deck.AmbientLight(desc.props.ambient);
                if (desc.props.directional) {
                  lights.directional = new deck.DirectionalLight(desc.props.directional);
                }
                return new deck.LightingEffect(lights);
              }

              const rest = config.view_state;
              const rotation = config.rotation || {};
              const step = rotation.step;
              let viewState = Object.assign({}, rest);
              let timer = null;
              let deckgl = null;

              function normalize(longitude) {
                return ((((longitude + 180) % 360) + 360) % 360) - 180;
              }

              function setViewState(next) {
                viewState = next;
                deckgl.setProps({ viewState });
              }

              function rotateOnce() {
                setViewState(
                  Object.assign({}, viewState, {
                    longitude: normalize(viewState.longitude - step),
                    latitude: rest.latitude,
                    zoom: rest.zoom,
                  }),
                );
              }

              function start() {
                if (timer === null) timer = window.setInterval(rotateOnce, rotation.period_ms);
              }

              function stop() {
                if (timer !== null) {
                  window.clearInterval(timer);
                  timer = null;
                }
              }

              function toggle() {
                if (timer !== null) {
                  stop();
                } else {
                  rotateOnce();
                  start();
                }
              }

              try {
                deckgl = new deck.DeckGL({
                  container,
                  views: new deck._GlobeView(config.views || {}),
                  viewState,
                  controller: true,
                  onViewStateChange: ({ viewState: next }) => setViewState(next),
                  onClick: toggle,
                  layers: (config.layers || []).map(buildLayer),
                  effects: (config.effects || []).map(buildEffect).filter(Boolean),
                  getTooltip: ({ object }) =>
                    object && object.tooltip
                      ? { html: object.tooltip, style: config.tooltip_style }
                      : null,
                });
              } catch (error) {
                console.error("Globe bootstrap failed", error);
                showError(`Globe bootstrap failed: ${error.message}`);
                return;
              }

              if (rotation.autostart !== false) start();
              window.addEventListener("pagehide", stop);
            })();
            """
            ).strip()
            + "\n"
        )
