"""Parse update-history hyperlinks into UpdateRecord objects.

The vendor's left-hand navigation lists one anchor per cumulative update, e.g.::

    <a class="supLeftNavLink" href="/help/5028185">July 11, 2023—KB5028185 (OS Build 22621.1992)</a>

Each piece of the record comes from its own extraction function so that a
change in the vendor markup fails loudly at the step that broke, instead of
producing an empty string further down the pipeline. No network calls here.
"""

from __future__ import annotations

import datetime
import html
import re
from urllib.parse import urlsplit

from ..errors import DateParseFailed, MalformedUpdateLink
from ..models.schema import RawLinkElement, UpdateRecord

NAV_LINK_CLASS = "supLeftNavLink"
BUILD_MARKER   = "OS Build"
DEFAULT_ORIGIN = "https://support.microsoft.com"

# Vendor date format, e.g. "July 11, 2023"
_DATE_FORMAT = "%B %d, %Y"

# Em-dash as a character and as the escaped text some pages carry verbatim
_EM_DASHES = ("—", "\\u2014")

_WS_RE          = re.compile(r"\s+")
_BUILD_TOKEN_RE = re.compile(r"\d+\.\d+")
_BUILD_LABEL_RE = re.compile(r"^\s*OS\s+Builds?\s*", re.IGNORECASE)


# ── predicate ─────────────────────────────────────────────────────────────────

def is_update_link(element: RawLinkElement) -> bool:
    """Return True for navigation anchors that describe an OS build."""
    return NAV_LINK_CLASS in element.css_class.split() and BUILD_MARKER in element.markup


def mentions_build(text: str, build: str) -> bool:
    """Return True if *build* appears in *text* as a whole build token.

    "22621" matches "OS Build 22621.1992" but "2262", "1992" and "22621.19"
    do not; a plain substring test would accept all three.
    """
    if not build:
        return False
    pattern = r"(?<![\d.])" + re.escape(build) + r"(?!\d)"
    return re.search(pattern, text) is not None


# ── extraction steps ──────────────────────────────────────────────────────────

def extract_label(markup: str) -> str:
    """Return the anchor's inner text: between the first '>' and the next '<'."""
    start = markup.find(">")
    if start == -1:
        raise MalformedUpdateLink(f"No opening tag end in link markup: {markup!r}")
    end = markup.find("<", start + 1)
    if end == -1:
        raise MalformedUpdateLink(f"No closing tag in link markup: {markup!r}")
    label = markup[start + 1:end].strip()
    if not label:
        raise MalformedUpdateLink(f"Empty label in link markup: {markup!r}")
    return label


def normalize_label(label: str) -> str:
    """Decode entities and replace the em-dash separator with ' - '."""
    text = html.unescape(label)
    for dash in _EM_DASHES:
        text = text.replace(dash, " - ")
    return _WS_RE.sub(" ", text).strip()


def extract_release_date(name: str) -> datetime.date:
    """Parse the date that precedes the first '-' of a normalised label."""
    raw = name.split("-", 1)[0].strip()
    try:
        return datetime.datetime.strptime(raw, _DATE_FORMAT).date()
    except ValueError as exc:
        raise DateParseFailed(f"Unparseable release date {raw!r} in {name!r}") from exc


def extract_kb(href: str) -> str:
    """Return 'KB' + the last path segment of *href*."""
    segment = urlsplit(href).path.rstrip("/").rsplit("/", 1)[-1]
    if not segment:
        raise MalformedUpdateLink(f"No KB number in link href: {href!r}")
    return f"KB{segment}"


def extract_info_url(href: str, origin: str = DEFAULT_ORIGIN) -> str:
    if href.startswith(("http://", "https://")):
        return href
    if not href.startswith("/"):
        raise MalformedUpdateLink(f"Link href is not site-relative: {href!r}")
    return origin.rstrip("/") + href


def extract_build(markup: str) -> str:
    """Return the build token(s) inside the first parenthesised group.

    "(OS Build 22621.1992)" gives "22621.1992"; a dual entry such as
    "(OS Builds 22621.2506 and 22631.2506)" keeps both builds and the text
    between them, so the result is always a literal slice of *markup*.
    """
    start = markup.find("(")
    end = markup.find(")", start + 1) if start != -1 else -1
    if start == -1 or end == -1:
        raise MalformedUpdateLink(f"No '(OS Build ...)' group in link markup: {markup!r}")
    inner = _BUILD_LABEL_RE.sub("", markup[start + 1:end])
    tokens = list(_BUILD_TOKEN_RE.finditer(inner))
    if not tokens:
        raise MalformedUpdateLink(f"No build number in link markup: {markup!r}")
    return inner[tokens[0].start():tokens[-1].end()]


# ── public API ────────────────────────────────────────────────────────────────

def parse(element: RawLinkElement, origin: str = DEFAULT_ORIGIN) -> UpdateRecord:
    """Convert one update-history anchor into an UpdateRecord.

    Raises:
        MalformedUpdateLink: If the element is not an update link or a part
            of it cannot be extracted.
        DateParseFailed: If the label does not start with a valid date.
    """
    if not is_update_link(element):
        raise MalformedUpdateLink(f"Not an update link: {element.markup!r}")

    name = normalize_label(extract_label(element.markup))
    return UpdateRecord(
        name=name,
        kb=extract_kb(element.href),
        info_url=extract_info_url(element.href, origin),
        build=extract_build(element.markup),
        release_date=extract_release_date(name),
    )
