"""HTTP backend utilities for dataset ingestion.

Provides single-request helpers with retries, a one-shot ``fetch_bytes`` for
static datasets (HTTP or local files), and an iterator for RFC 5988
Link-based pagination as used by the GitHub REST API.
"""

# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Iterator
from pathlib import Path
from urllib.parse import unquote, urljoin, urlparse

import requests

from globeviz.errors import FetchError

RETRY_STATUS = {429, 500, 502, 503, 504}

LOGGER = logging.getLogger(__name__)


def _parse_retry_after(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def request_once(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
    timeout: int = 60,
) -> tuple[int, dict[str, str], bytes]:
    try:
        resp = requests.request(
            method.upper(),
            url,
            headers=headers or {},
            params=params or {},
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise FetchError(f"{method.upper()} {url} failed: {exc}", url=url) from exc
    # Flatten headers to str->str
    headers_out: dict[str, str] = {k: v for k, v in resp.headers.items()}
    return resp.status_code, headers_out, resp.content or b""


def request_with_retries(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
    timeout: int = 60,
    max_retries: int = 3,
    retry_backoff: float = 0.5,
) -> tuple[int, dict[str, str], bytes]:
    """Issue a request, retrying transient statuses and transport failures.

    Backoff doubles each attempt starting at ``retry_backoff`` seconds and is
    stretched to honor ``Retry-After`` when the server sends one. The final
    response is returned as-is, whatever its status; a transport failure on
    the last attempt raises :class:`FetchError`.
    """
    attempt = 0
    while True:
        try:
            status, resp_headers, content = request_once(
                method, url, headers=headers, params=params, timeout=timeout
            )
        except FetchError:
            if attempt >= max_retries:
                raise
            status, resp_headers, content = -1, {}, b""
        if status != -1 and (status not in RETRY_STATUS or attempt >= max_retries):
            return status, resp_headers, content
        delay = retry_backoff * (2**attempt)
        if "Retry-After" in resp_headers:
            with contextlib.suppress(ValueError):
                delay = max(delay, _parse_retry_after(resp_headers["Retry-After"]))
        LOGGER.debug(
            "Retrying %s %s in %.2fs (attempt %d, status %s)",
            method.upper(),
            url,
            delay,
            attempt + 1,
            status,
        )
        time.sleep(delay)
        attempt += 1


def _local_path(url: str) -> Path | None:
    parsed = urlparse(url)
    if parsed.scheme == "file":
        return Path(unquote(parsed.path))
    if parsed.scheme in ("http", "https"):
        return None
    if len(parsed.scheme) <= 1:  # plain path, incl. Windows drive letters
        return Path(url)
    return None


def fetch_bytes(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: int = 60,
    max_retries: int = 3,
    retry_backoff: float = 0.5,
) -> bytes:
    """Return the body at ``url`` or raise :class:`FetchError`.

    ``file://`` URLs and bare filesystem paths are read from disk.
    """
    local = _local_path(url)
    if local is not None:
        try:
            return local.expanduser().read_bytes()
        except OSError as exc:
            raise FetchError(f"Cannot read {local}: {exc}", url=url) from exc
    status, _headers, content = request_with_retries(
        "GET",
        url,
        headers=headers,
        timeout=timeout,
        max_retries=max_retries,
        retry_backoff=retry_backoff,
    )
    if status >= 400:
        raise FetchError(f"GET {url} returned HTTP {status}", url=url, status=status)
    return content


def _parse_link_header(link_value: str, want_rel: str = "next") -> str | None:
    """Return the URL for a relation in an RFC 5988 Link header.

    Example:
        ``Link: <https://api.example/items?page=2>; rel="next", <...>; rel="last"``
    """
    if not link_value:
        return None
    want = want_rel.strip().lower()
    for part in (p.strip() for p in link_value.split(",")):
        if not part.startswith("<") or ">" not in part:
            continue
        url_part, rest = part.split(">", 1)
        url = url_part.lstrip("<").strip()
        for attr in (a.strip() for a in rest.split(";")):
            if attr.lower().startswith("rel="):
                rels = attr.split("=", 1)[1].strip().strip('"').lower().split()
                if want in rels:
                    return url
    return None


def paginate_link(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
    timeout: int = 60,
    max_retries: int = 3,
    retry_backoff: float = 0.5,
    link_rel: str = "next",
    max_pages: int = 1000,
) -> Iterator[tuple[int, dict[str, str], bytes]]:
    """Iterate pages by following ``Link: ...; rel="next"`` headers.

    - Resolves relative links against the current URL.
    - Sends ``params`` only on the initial request; subsequent requests use the
      URL provided in the Link header unmodified.
    - Stops after a status >= 400 has been yielded.
    """
    cur_url = url
    send_params: dict[str, str] | None = dict(params or {})
    pages = 0
    while pages < max_pages:
        status, resp_headers, content = request_with_retries(
            method,
            cur_url,
            headers=headers,
            params=send_params,
            timeout=timeout,
            max_retries=max_retries,
            retry_backoff=retry_backoff,
        )
        yield status, resp_headers, content
        pages += 1
        if status >= 400:
            break
        link_val = resp_headers.get("Link") or resp_headers.get("link") or ""
        next_url = _parse_link_header(link_val, want_rel=link_rel)
        if not next_url:
            break
        cur_url = urljoin(cur_url, next_url)
        send_params = None
