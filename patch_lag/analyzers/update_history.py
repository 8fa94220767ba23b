"""Resolve the installed and latest cumulative updates for this device.

Pipeline:
  1. Query the local OS identity (product caption, version label, build).
  2. Look the product/version up in the release catalog.
  3. Fetch the catalog's update-history page (single attempt).
  4. Keep only anchors that describe an OS build.
  5. Installed = first link mentioning the full local build, or the catalog
     baseline when the device has no cumulative update applied yet.
  6. Latest = first link for the same major build that is neither a Preview
     nor an Out-of-band release. The vendor lists updates newest first, so
     document order is trusted and nothing is sorted.

Installed fallback policy: the catalog baseline is used when the catalog row
declares no initial build, or when its initial build equals the local build.
Any other unmatched build raises InstalledUpdateNotFound.
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence, Union

from ..catalog.releases import CATALOG, lookup
from ..errors import (
    EnvironmentQueryFailed,
    InstalledUpdateNotFound,
    NoUpdateLinksFound,
    UnexpectedPageFormat,
)
from ..models.schema import (
    BaselineRecord,
    CatalogEntry,
    OSIdentity,
    RawLinkElement,
    Resolution,
    UpdateRecord,
)
from .update_links import DEFAULT_ORIGIN, is_update_link, mentions_build, parse

# Link text markers that disqualify an update from being the "latest"
_EXCLUDED_MARKERS = ("Preview", "Out-of-band")

IdentitySource = Callable[[], OSIdentity]
PageFetcher    = Callable[[str], Sequence[RawLinkElement]]


def filter_update_links(links: Sequence[RawLinkElement], uri: str) -> list[RawLinkElement]:
    """Return the update anchors of a fetched page, in document order."""
    if not links:
        raise UnexpectedPageFormat(f"No hyperlinks found on update history page: {uri}")
    updates = [link for link in links if is_update_link(link)]
    if not updates:
        raise NoUpdateLinksFound(
            f"None of {len(links)} hyperlinks on {uri} look like an OS build entry"
        )
    return updates


def select_installed(
    updates: Sequence[RawLinkElement],
    identity: OSIdentity,
    entry: CatalogEntry,
    origin: str = DEFAULT_ORIGIN,
) -> Union[UpdateRecord, BaselineRecord]:
    for link in updates:
        if mentions_build(link.markup, identity.build):
            return parse(link, origin)

    if entry.initial_build is None or entry.initial_build == identity.build:
        return BaselineRecord(release_date=entry.initial_release_date)

    raise InstalledUpdateNotFound(
        f"Build {identity.build} of {entry.product_name} {entry.version_label} "
        f"is not listed on {entry.history_uri} and is not the release baseline "
        f"({entry.initial_build})"
    )


def select_latest(
    updates: Sequence[RawLinkElement],
    identity: OSIdentity,
    origin: str = DEFAULT_ORIGIN,
) -> Optional[UpdateRecord]:
    major = identity.major_build
    for link in updates:
        if not mentions_build(link.markup, major):
            continue
        if any(marker in link.markup for marker in _EXCLUDED_MARKERS):
            continue
        return parse(link, origin)
    return None


class UpdateHistoryResolver:
    """Wire the identity query, catalog and page fetcher into one resolution."""

    def __init__(
        self,
        identity_source: IdentitySource,
        fetcher: PageFetcher,
        catalog: Sequence[CatalogEntry] = CATALOG,
        origin: str = DEFAULT_ORIGIN,
    ) -> None:
        self._identity_source = identity_source
        self._fetcher = fetcher
        self._catalog = catalog
        self._origin = origin

    def _identity(self) -> OSIdentity:
        try:
            return self._identity_source()
        except EnvironmentQueryFailed:
            raise
        except Exception as exc:  # noqa: BLE001
            raise EnvironmentQueryFailed(f"Could not read local OS identity: {exc}") from exc

    def resolve(self) -> Resolution:
        identity = self._identity()
        entry = lookup(identity.product_name, identity.version_label, self._catalog)

        links = self._fetcher(entry.history_uri)
        updates = filter_update_links(links, entry.history_uri)

        installed = select_installed(updates, identity, entry, self._origin)
        latest = select_latest(updates, identity, self._origin)

        return Resolution(identity=identity, entry=entry, installed=installed, latest=latest)
