"""Windows feature-release catalog.

Maps (product name, version label) to the vendor's update-history page and the
release baseline of that feature update. The table needs a manual revision
whenever a new feature release ships; sites can also add rows through the
``catalog:`` section of the agent config (see ``extend_catalog``).

Columns: ProductName, Version, InitialOSBuild (optional), InitialReleaseDate, Uri
"""

from __future__ import annotations

import datetime
from typing import Iterable, Sequence

from ..errors import CatalogLookupFailed
from ..models.schema import CatalogEntry

_MS_TOPIC = "https://support.microsoft.com/en-us/topic/"

_WIN11_21H2 = _MS_TOPIC + "windows-11-version-21h2-update-history-a19cd327-b57f-44b9-84e0-26ced7109ba9"
_WIN11_22H2 = _MS_TOPIC + "windows-11-version-22h2-update-history-ec4229c3-9c5f-4e75-9d6d-9025ab70fcce"
_WIN11_23H2 = _MS_TOPIC + "windows-11-version-23h2-update-history-59875222-b990-4bd9-932f-91a5954de434"
_WIN11_24H2 = _MS_TOPIC + "windows-11-version-24h2-update-history-0929c747-1815-4543-8461-0160d16f15e5"
_WIN10_2XH2 = _MS_TOPIC + "windows-10-update-history-8127c2c6-6edf-4fdf-8b9f-0f7be1ef3562"
_WIN10_1809 = _MS_TOPIC + "windows-10-and-windows-server-2019-update-history-725fc2e1-4443-6831-a5ca-51ff5cbcb059"
_SRV_2022   = _MS_TOPIC + "windows-server-2022-update-history-e1caa597-00c5-4ab9-9f3e-8212fe80b2ee"


def _row(product: str, version: str, build: str | None, date: str, uri: str) -> CatalogEntry:
    return CatalogEntry(
        product_name=product,
        version_label=version,
        initial_build=build,
        initial_release_date=datetime.date.fromisoformat(date),
        history_uri=uri,
    )


CATALOG: tuple[CatalogEntry, ...] = (
    _row("Windows Server 2022", "21H2", "20348.169",  "2021-08-18", _SRV_2022),
    _row("Windows Server 2019", "1809", "17763.107",  "2018-11-13", _WIN10_1809),
    _row("Windows 11",          "21H2", "22000.194",  "2021-10-04", _WIN11_21H2),
    _row("Windows 11",          "22H2", None,         "2022-09-20", _WIN11_22H2),
    _row("Windows 11",          "23H2", "22631.2428", "2023-10-31", _WIN11_23H2),
    _row("Windows 11",          "24H2", "26100.1742", "2024-10-01", _WIN11_24H2),
    _row("Windows 10",          "1809", "17763.107",  "2018-11-13", _WIN10_1809),
    _row("Windows 10",          "21H2", "19044.1288", "2021-11-16", _WIN10_2XH2),
    _row("Windows 10",          "22H2", "19045.2130", "2022-10-18", _WIN10_2XH2),
)


def extend_catalog(extra: Iterable[dict], base: Sequence[CatalogEntry] = CATALOG) -> tuple[CatalogEntry, ...]:
    """Return a new table with config-supplied rows placed before *base*.

    A config row replaces the built-in row with the same (product, version)
    pair, so every pair stays unique in the effective table.

    Raises:
        ValueError: If a row is invalid or repeats a (product, version) pair
            already present in the extra rows.
    """
    rows: list[CatalogEntry] = []
    seen: set[tuple[str, str]] = set()
    for raw in extra:
        entry = CatalogEntry.model_validate(raw)
        key = (entry.product_name.casefold(), entry.version_label.strip().casefold())
        if key in seen:
            raise ValueError(
                f"Duplicate catalog row: {entry.product_name} {entry.version_label}"
            )
        seen.add(key)
        rows.append(entry)
    kept = [
        entry for entry in base
        if (entry.product_name.casefold(), entry.version_label.strip().casefold()) not in seen
    ]
    return tuple(rows) + tuple(kept)


def lookup(
    product_name: str,
    version_label: str,
    entries: Sequence[CatalogEntry] = CATALOG,
) -> CatalogEntry:
    """Return the first row whose product is contained in *product_name*.

    The product match is a case-insensitive substring test because the OS
    caption carries edition words ("Microsoft Windows 11 Enterprise"); the
    version label must match exactly.

    Raises:
        CatalogLookupFailed: If no row matches.
    """
    caption = product_name.casefold()
    version = version_label.strip()
    for entry in entries:
        if entry.product_name.casefold() in caption and entry.version_label == version:
            return entry
    raise CatalogLookupFailed(
        f"No catalog entry for product '{product_name}' version '{version_label}'"
    )
