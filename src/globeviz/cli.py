# SPDX-License-Identifier: Apache-2.0
"""Command-line entry point: ``globeviz variants`` and ``globeviz build``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Sequence

from globeviz import __version__
from globeviz.config import Settings
from globeviz.errors import GlobeVizError
from globeviz.renderers import available
from globeviz.session import GlobeSession
from globeviz.utils.cli_helpers import apply_verbosity_flags
from globeviz.variants import available_variants, get_variant

EXIT_LOAD_FAILED = 2


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value


def _non_negative_int(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"expected zero or more, got {text}")
    return value


def _add_logging_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--verbose", action="store_true", help="Debug logging")
    group.add_argument("--quiet", action="store_true", help="Only log errors")


def _cmd_variants(ns: argparse.Namespace) -> int:
    apply_verbosity_flags(ns)
    for variant in sorted(available_variants(), key=lambda v: v.name):
        print(f"{variant.name:<10} {variant.description}")
    return 0


def _renderer_options(ns: argparse.Namespace) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if ns.width is not None:
        options["width"] = ns.width
    if ns.height is not None:
        options["height"] = ns.height
    if ns.title:
        options["title"] = ns.title
    return options


def _cmd_build(ns: argparse.Namespace) -> int:
    apply_verbosity_flags(ns)

    try:
        variant = get_variant(ns.variant)
    except KeyError as exc:
        raise SystemExit(str(exc.args[0])) from exc

    if variant.is_org_listing:
        if ns.data_url:
            raise SystemExit(
                f"--data-url does not apply to the '{variant.name}' variant; use --org"
            )
    elif ns.org or ns.locations:
        flag = "--org" if ns.org else "--locations"
        raise SystemExit(f"{flag} only applies to organization variants such as 'org'")

    renderer_slugs = sorted(r.slug for r in available())
    if ns.renderer not in renderer_slugs:
        raise SystemExit(
            f"Unknown globe renderer '{ns.renderer}'. Available: {', '.join(renderer_slugs)}"
        )

    settings = Settings.from_env().with_overrides(
        http_timeout=ns.timeout,
        max_retries=ns.retries,
    )
    session = GlobeSession(
        variant,
        settings=settings,
        source=ns.org if variant.is_org_listing else ns.data_url,
        locations=ns.locations,
        token=os.environ.get(ns.token_env) if ns.token_env else None,
        renderer=ns.renderer,
        renderer_options=_renderer_options(ns),
        autostart=not ns.no_rotate,
    )
    try:
        bundle = asyncio.run(session.run(ns.output))
    except GlobeVizError as exc:
        logging.error("Failed to load %s data: %s", variant.name, exc)
        if session.bundle is not None:
            logging.info("Wrote error page to %s", session.bundle.index_html)
        return EXIT_LOAD_FAILED

    if bundle is None:
        logging.error("Rendering was abandoned before the data arrived")
        return EXIT_LOAD_FAILED
    logging.info("Generated globe bundle at %s", bundle.index_html)
    logging.debug("Bundle assets: %s", ", ".join(bundle.relative_assets()))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="globeviz",
        description="Render datasets as icons and great-circle arcs on a rotating globe.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_list = subparsers.add_parser("variants", help="List built-in visualizations")
    _add_logging_flags(p_list)
    p_list.set_defaults(func=_cmd_variants)

    p_build = subparsers.add_parser(
        "build",
        help="Fetch data and write an interactive globe bundle",
        description=(
            "Fetch the variant's dataset, compose its layers and write index.html "
            "plus assets into the output directory. A failed fetch still writes "
            "a page that shows the error."
        ),
    )
    p_build.add_argument("variant", help="Variant name (see 'globeviz variants')")
    p_build.add_argument("-o", "--output", required=True, help="Output directory")
    p_build.add_argument("--data-url", dest="data_url", help="Override the dataset URL or path")
    p_build.add_argument("--org", help="GitHub organization for the 'org' variant")
    p_build.add_argument(
        "--locations",
        help="CSV with username,lng,lat used to place organization members",
    )
    p_build.add_argument(
        "--token-env",
        dest="token_env",
        default="GITHUB_TOKEN",
        help="Environment variable holding a GitHub token (default: GITHUB_TOKEN)",
    )
    p_build.add_argument("--renderer", default="deck-globe", help="Renderer slug")
    p_build.add_argument("--title", help="Page title")
    p_build.add_argument("--width", type=int, help="Canvas width in pixels")
    p_build.add_argument("--height", type=int, help="Canvas height in pixels")
    p_build.add_argument("--timeout", type=_positive_int, help="HTTP timeout in seconds")
    p_build.add_argument("--retries", type=_non_negative_int, help="HTTP retry attempts")
    p_build.add_argument(
        "--no-rotate",
        dest="no_rotate",
        action="store_true",
        help="Start with rotation paused (click the globe to start)",
    )
    _add_logging_flags(p_build)
    p_build.set_defaults(func=_cmd_build)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    return int(ns.func(ns) or 0)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
