"""Error hierarchy for patch-lag.

Every error is fatal for the run: the CLI prints the message to stderr and
exits non-zero without emitting any JSON.
"""


class PatchLagError(Exception):
    """Base class for all pipeline failures."""


class EnvironmentQueryFailed(PatchLagError):
    """The local OS identity (product, version, build) could not be read."""


class CatalogLookupFailed(PatchLagError):
    """No catalog row matches the local product and version."""


class PageFetchFailed(PatchLagError):
    """The update-history page could not be downloaded."""


class UnexpectedPageFormat(PatchLagError):
    """The page was downloaded but contains no hyperlinks at all."""


class NoUpdateLinksFound(PatchLagError):
    """The page has hyperlinks but none of them describe an OS build."""


class InstalledUpdateNotFound(PatchLagError):
    """The local build is neither on the page nor the catalog baseline."""


class MalformedUpdateLink(PatchLagError):
    """An update link is missing one of the pieces the parser extracts."""


class DateParseFailed(MalformedUpdateLink):
    """The release date in an update link label is not a valid date."""
