"""Read-only data exposure check against a Supabase (PostgREST) backend."""

import asyncio
import json
import logging
import re
from typing import Any
from urllib.parse import quote

from surfacescan.errors import ProbeFailure
from surfacescan.tools.http import HTTPClient

from .models import BackendCredential, DataExposure, ExposedTable, Finding

logger = logging.getLogger(__name__)

MAX_TABLES = 12
SAMPLE_LIMIT = 3

CONTENT_RANGE_TOTAL_RE = re.compile(r"/(\d+)\s*$")
INTERNAL_MARKERS = ("pg_", "information_schema")


def _auth_headers(credential: BackendCredential) -> dict[str, str]:
    return {
        "apikey": credential.key,
        "Authorization": f"Bearer {credential.key}",
        "Accept": "application/json",
    }


def parse_catalog(document: Any, max_tables: int = MAX_TABLES) -> dict[str, tuple[str, ...]]:
    """Extract ``{table: columns}`` from a PostgREST OpenAPI document.

    Internal and system-schema names are skipped; at most *max_tables* are kept.
    """
    if not isinstance(document, dict):
        return {}
    definitions = document.get("definitions")
    if not isinstance(definitions, dict):
        return {}

    catalog: dict[str, tuple[str, ...]] = {}
    for name, definition in definitions.items():
        if name.startswith("_") or any(marker in name for marker in INTERNAL_MARKERS):
            continue
        properties = definition.get("properties") if isinstance(definition, dict) else None
        catalog[name] = tuple(properties) if isinstance(properties, dict) else ()
        if len(catalog) >= max_tables:
            break
    return catalog


def parse_total_rows(content_range: str | None) -> int | None:
    """Read the total from a ``Content-Range: 0-2/57`` header."""
    if not content_range:
        return None
    match = CONTENT_RANGE_TOTAL_RE.search(content_range)
    return int(match.group(1)) if match else None


def exposure_finding(exposure: DataExposure) -> Finding | None:
    """Critical finding when at least one table returned real rows."""
    if exposure.open_tables == 0:
        return None
    noun = "table is" if exposure.open_tables == 1 else "tables are"
    return Finding(
        identifier="supabase-data-exposure",
        category="exposure",
        severity="critical",
        label="Live Database Rows Exposed",
        detail=(
            f"{exposure.open_tables} Supabase {noun} returning real data to anyone with "
            "the public anon key. Row Level Security is not protecting them."
        ),
        value=f"{exposure.open_tables} open tables",
    )


class DataExposureProber:
    """Discover the backend's tables, then sample each under the leaked key.

    A table is ``open`` when rows come back, ``empty`` when the query succeeds
    with no rows, and ``blocked`` when the request fails for any reason.
    """

    name = "data_exposure"

    def __init__(
        self,
        schema_timeout: float = 8.0,
        table_timeout: float = 6.0,
        max_tables: int = MAX_TABLES,
        sample_limit: int = SAMPLE_LIMIT,
    ):
        self.schema_timeout = schema_timeout
        self.table_timeout = table_timeout
        self.max_tables = max_tables
        self.sample_limit = sample_limit

    async def run(self, client: HTTPClient, credential: BackendCredential) -> DataExposure | None:
        """Return the exposure result, or None when the catalog is unavailable."""
        base_url = credential.backend_url.rstrip("/")
        catalog = await self.fetch_catalog(client, base_url, credential)
        if not catalog:
            return None

        tables = await asyncio.gather(
            *(
                self.sample_table(client, base_url, credential, name, columns)
                for name, columns in catalog.items()
            )
        )
        exposure = DataExposure(
            backend_url=base_url,
            key_preview=credential.key_preview,
            tables=tuple(tables),
        )
        logger.debug(
            "data_exposure: %d tables, %d open, %d empty, %d blocked",
            exposure.tables_found,
            exposure.open_tables,
            exposure.empty_tables,
            exposure.blocked_tables,
        )
        return exposure

    async def fetch_catalog(
        self, client: HTTPClient, base_url: str, credential: BackendCredential
    ) -> dict[str, tuple[str, ...]]:
        try:
            response = await client.get(
                f"{base_url}/rest/v1/",
                headers=_auth_headers(credential),
                timeout=self.schema_timeout,
            )
        except ProbeFailure as exc:
            logger.debug("data_exposure: catalog fetch failed: %s", exc)
            return {}
        if not response.ok:
            logger.debug("data_exposure: catalog returned HTTP %d", response.status_code)
            return {}
        try:
            document = json.loads(response.body)
        except ValueError:
            return {}
        return parse_catalog(document, self.max_tables)

    async def sample_table(
        self,
        client: HTTPClient,
        base_url: str,
        credential: BackendCredential,
        name: str,
        catalog_columns: tuple[str, ...],
    ) -> ExposedTable:
        blocked = ExposedTable(name=name, status="blocked", columns=catalog_columns)
        headers = {**_auth_headers(credential), "Prefer": "count=exact"}
        try:
            response = await client.get(
                f"{base_url}/rest/v1/{quote(name, safe='')}?limit={self.sample_limit}",
                headers=headers,
                timeout=self.table_timeout,
            )
        except ProbeFailure as exc:
            logger.debug("data_exposure: %s blocked: %s", name, exc)
            return blocked
        if not response.ok:
            return blocked
        try:
            rows = json.loads(response.body)
        except ValueError:
            return blocked
        if not isinstance(rows, list):
            return blocked

        rows = [row for row in rows if isinstance(row, dict)][: self.sample_limit]
        if not rows:
            return ExposedTable(name=name, status="empty", columns=catalog_columns, total_rows=0)
        return ExposedTable(
            name=name,
            status="open",
            columns=tuple(rows[0]),
            sample_rows=tuple(rows),
            total_rows=parse_total_rows(response.header("content-range")),
        )
