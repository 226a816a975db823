from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from xml.etree import ElementTree

from bytespark.i18n.locales import LocaleRegistry

SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"
STATIC_ROUTES = ("", "/about", "/blogs")


@dataclass(slots=True)
class SitemapEntry:
    loc: str
    lastmod: datetime | None = None
    changefreq: str = "weekly"
    priority: float = 0.5


def build_sitemap_entries(
    base_url: str,
    registry: LocaleRegistry,
    articles: Iterable[tuple[str, str, datetime | None]],
) -> list[SitemapEntry]:
    """Static pages for every locale followed by each published article."""
    base = base_url.rstrip("/")
    entries: list[SitemapEntry] = []
    for code in registry.codes:
        for route in STATIC_ROUTES:
            entries.append(
                SitemapEntry(
                    loc=f"{base}/{code}{route}",
                    changefreq="daily" if route in ("", "/blogs") else "monthly",
                    priority=1.0 if route == "" else 0.8,
                )
            )
    for slug, locale, updated_at in articles:
        entries.append(
            SitemapEntry(
                loc=f"{base}/{locale}/blog/{slug}",
                lastmod=updated_at,
                priority=0.7,
            )
        )
    return entries


def render_sitemap(entries: Iterable[SitemapEntry]) -> str:
    urlset = ElementTree.Element("urlset", xmlns=SITEMAP_NAMESPACE)
    for entry in entries:
        url = ElementTree.SubElement(urlset, "url")
        ElementTree.SubElement(url, "loc").text = entry.loc
        if entry.lastmod is not None:
            ElementTree.SubElement(url, "lastmod").text = entry.lastmod.date().isoformat()
        ElementTree.SubElement(url, "changefreq").text = entry.changefreq
        ElementTree.SubElement(url, "priority").text = f"{entry.priority:.1f}"
    body = ElementTree.tostring(urlset, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'
