"""Download an update-history page and list its hyperlinks."""

from __future__ import annotations

import requests
from bs4 import BeautifulSoup

from ..errors import PageFetchFailed
from ..models.schema import RawLinkElement

DEFAULT_TIMEOUT = 30
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0 Safari/537.36"
)


def extract_links(page_html: str) -> list[RawLinkElement]:
    """Return every <a> element of *page_html* in document order."""
    soup = BeautifulSoup(page_html, "html.parser")
    links: list[RawLinkElement] = []
    for tag in soup.find_all("a"):
        css = tag.get("class") or []
        links.append(RawLinkElement(
            label=tag.get_text(strip=True),
            href=tag.get("href") or "",
            css_class=" ".join(css) if isinstance(css, list) else str(css),
            markup=str(tag),
        ))
    return links


def fetch_update_links(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
) -> list[RawLinkElement]:
    """GET *url* once and return its hyperlinks.

    Raises:
        PageFetchFailed: On any transport error, non-2xx response or a
            page the HTML parser cannot read.
    """
    try:
        resp = requests.get(url, headers={"User-Agent": user_agent}, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise PageFetchFailed(f"Could not fetch update history page {url}: {exc}") from exc
    try:
        return extract_links(resp.text)
    except Exception as exc:  # noqa: BLE001
        raise PageFetchFailed(f"Could not read update history page {url}: {exc}") from exc
