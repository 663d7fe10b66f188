# SPDX-License-Identifier: Apache-2.0
"""Load tabular or JSON datasets into immutable records."""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from globeviz.config import Settings
from globeviz.connectors.backends import http
from globeviz.errors import FetchError, ParseError

LOGGER = logging.getLogger(__name__)

FORMATS = ("csv", "json")


class Record(Mapping[str, Any]):
    """One row of a dataset: a read-only, ordered field mapping."""

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, Any] | Iterable[tuple[str, Any]] = ()):
        object.__setattr__(self, "_fields", dict(fields))

    def __getitem__(self, key: str) -> Any:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Record is immutable")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Record):
            return self._fields == other._fields
        if isinstance(other, Mapping):
            return self._fields == dict(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Record({self._fields!r})"

    def merged(self, **fields: Any) -> Record:
        """Return a copy with ``fields`` added or replaced."""

        return Record({**self._fields, **fields})


def parse_delimited(text: str, *, delimiter: str = ",") -> list[Record]:
    """Parse delimited text with a header row into records.

    Fully blank lines are skipped wherever they appear. Rows whose fields are
    merely empty are kept. A row with more fields than the header raises
    :class:`ParseError`; short rows get ``""`` for the missing fields.
    """

    stream = io.StringIO(text.lstrip("\ufeff"), newline="")
    reader = csv.reader(stream, delimiter=delimiter, strict=True)
    records: list[Record] = []
    header: list[str] | None = None
    try:
        for row in reader:
            if not row or (len(row) == 1 and not row[0].strip()):
                continue
            if header is None:
                header = [name.strip() for name in row]
                if len(set(header)) != len(header):
                    raise ParseError("duplicate column names in header", line=reader.line_num)
                continue
            if len(row) > len(header):
                raise ParseError(
                    f"expected {len(header)} fields, found {len(row)}",
                    line=reader.line_num,
                )
            row = row + [""] * (len(header) - len(row))
            records.append(Record(zip(header, row)))
    except csv.Error as exc:
        raise ParseError(str(exc), line=reader.line_num) from exc
    return records


def parse_json_list(payload: bytes | str) -> list[Record]:
    """Parse a top-level JSON array of objects into records."""

    try:
        data = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ParseError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise ParseError(f"expected a JSON array, got {type(data).__name__}")
    records: list[Record] = []
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            raise ParseError(f"item {idx} is {type(item).__name__}, expected object")
        records.append(Record(item))
    return records


def _decode(content: bytes, url: str) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"{url} is not valid UTF-8: {exc}") from exc


def load_records(
    url: str,
    fmt: str = "csv",
    *,
    settings: Settings | None = None,
    headers: dict[str, str] | None = None,
) -> list[Record]:
    """Fetch ``url`` once (with transport retries) and parse it as ``fmt``."""

    if fmt not in FORMATS:
        raise ValueError(f"unsupported format '{fmt}', expected one of {FORMATS}")
    settings = settings or Settings()
    content = http.fetch_bytes(
        url,
        headers=headers,
        timeout=settings.http_timeout,
        max_retries=settings.max_retries,
        retry_backoff=settings.retry_backoff,
    )
    if fmt == "csv":
        records = parse_delimited(_decode(content, url))
    else:
        records = parse_json_list(content)
    LOGGER.debug("Loaded %d records from %s", len(records), url)
    return records


def load_org_members(
    org: str,
    *,
    settings: Settings | None = None,
    token: str | None = None,
    per_page: int = 100,
) -> list[Record]:
    """Collapse the paginated GitHub organization member listing into records.

    The listing carries ``login`` and ``avatar_url`` but no location; see
    :func:`attach_locations` for placing members on the globe.
    """

    settings = settings or Settings()
    url = f"{settings.github_api.rstrip('/')}/orgs/{org}/members"
    headers = {"Accept": "application/vnd.github+json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    records: list[Record] = []
    for page, (status, _headers, content) in enumerate(
        http.paginate_link(
            "GET",
            url,
            headers=headers,
            params={"per_page": str(per_page)},
            timeout=settings.http_timeout,
            max_retries=settings.max_retries,
            retry_backoff=settings.retry_backoff,
        ),
        start=1,
    ):
        if status >= 400:
            raise FetchError(
                f"GET {url} page {page} returned HTTP {status}", url=url, status=status
            )
        records.extend(parse_json_list(content))
    LOGGER.debug("Loaded %d members of %s", len(records), org)
    return records


def attach_locations(
    records: Iterable[Record],
    locations: Iterable[Record],
    *,
    key: str = "login",
    location_key: str = "username",
    lon_field: str = "lng",
    lat_field: str = "lat",
) -> list[Record]:
    """Join member records with a location table keyed by username.

    Members without a matching location row are returned unchanged, so the
    composer later skips them instead of guessing a position.
    """

    table: dict[str, Record] = {}
    for loc in locations:
        name = str(loc.get(location_key) or "").strip().lower()
        if name:
            table[name] = loc
    out: list[Record] = []
    missing = 0
    for rec in records:
        loc = table.get(str(rec.get(key) or "").strip().lower())
        if loc is None:
            missing += 1
            out.append(rec)
            continue
        out.append(rec.merged(**{lon_field: loc.get(lon_field), lat_field: loc.get(lat_field)}))
    if missing:
        LOGGER.warning("%d of %d members have no known location", missing, len(out))
    return out
