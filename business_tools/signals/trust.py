"""
Trust and site-structure signals: E-E-A-T cues, breadcrumbs, hreflang and
pagination links.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from urllib.parse import urljoin, urlparse

import pycountry

from ..dom import attr, text_of
from ..extractor import ParsedPage
from ..models import EeatSignals, MetaFacts, StructuredDataReport, TrustSignals

HREFLANG_CODE_RE = re.compile(r"^[A-Za-z]{2,3}(?:-[A-Za-z]{4})?(?:-(?:[A-Za-z]{2}|\d{3}))?$")

PUBLISHED_SELECTOR = 'meta[property="article:published_time"], time[datetime], [itemprop="datePublished"]'
MODIFIED_SELECTOR = 'meta[property="article:modified_time"], time[datetime], [itemprop="dateModified"]'
AUTHOR_BIO_SELECTOR = '.author-bio, .author-info, [class*="author"], [id*="author"]'
BREADCRUMB_NAV_SELECTOR = 'nav[aria-label*="breadcrumb"], .breadcrumb, .breadcrumbs, [class*="breadcrumb"]'

ABOUT_CONTACT_TEXT = ("về chúng tôi", "about us", "liên hệ", "contact us")
CITATION_SUFFIXES = (".edu", ".gov", ".org")
CITATION_HOST_WORDS = ("wikipedia", "research", "study")
MIN_AUTHOR_BIO_CHARS = 50


@lru_cache(maxsize=1)
def load_iso_sets() -> tuple[frozenset[str], frozenset[str]]:
    lang_codes = frozenset(
        item.alpha_2.lower() for item in pycountry.languages if str(getattr(item, "alpha_2", "")).strip()
    )
    region_codes = frozenset(
        item.alpha_2.upper() for item in pycountry.countries if str(getattr(item, "alpha_2", "")).strip()
    )
    return lang_codes, region_codes


def is_valid_hreflang(raw_code: str) -> bool:
    code = raw_code.strip()
    if code.lower() == "x-default":
        return True
    if not HREFLANG_CODE_RE.fullmatch(code):
        return False
    lang_codes, region_codes = load_iso_sets()
    parts = code.split("-")
    if parts[0].lower() not in lang_codes:
        return False
    region = parts[-1] if len(parts) > 1 and len(parts[-1]) == 2 else None
    return region is None or region.upper() in region_codes


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def is_citation(href: str, page_url: str) -> bool:
    try:
        host = (urlparse(urljoin(page_url, href)).hostname or "").lower()
    except ValueError:
        return False
    if not host:
        return False
    return host.endswith(CITATION_SUFFIXES) or any(word in host for word in CITATION_HOST_WORDS)


def collect_eeat(page: ParsedPage, schema: StructuredDataReport) -> EeatSignals:
    links = page.main.find_all("a")
    signals = EeatSignals(
        author_schema=schema.has_author,
        published_date=page.cleaned.select_one(PUBLISHED_SELECTOR) is not None,
        modified_date=page.cleaned.select_one(MODIFIED_SELECTOR) is not None,
    )

    for link in links:
        href = attr(link, "href").lower()
        text = text_of(link).lower()
        if "about" in href or "contact" in href or any(phrase in text for phrase in ABOUT_CONTACT_TEXT):
            signals.about_contact_links = True
            break

    signals.citation_links = sum(1 for link in links if is_citation(attr(link, "href"), page.url))

    bio_nodes = page.cleaned.select(AUTHOR_BIO_SELECTOR)
    bio_text = " ".join(text_of(node) for node in bio_nodes).strip()
    signals.author_bio = bool(bio_nodes) and len(bio_text) > MIN_AUTHOR_BIO_CHARS

    raw = 0.0
    raw += 2 if signals.author_schema else 0
    raw += 1 if signals.published_date else 0
    raw += 0.5 if signals.modified_date else 0
    raw += 0.5 if signals.about_contact_links else 0
    if signals.citation_links >= 2:
        raw += 1.5
    elif signals.citation_links == 1:
        raw += 0.5
    raw += 0.5 if signals.author_bio else 0
    signals.raw_points = raw
    signals.points = round_half_up(raw)
    return signals


def collect_trust(page: ParsedPage, schema: StructuredDataReport, meta: MetaFacts) -> TrustSignals:
    codes = [entry["hreflang"] for entry in meta.hreflang]
    return TrustSignals(
        eeat=collect_eeat(page, schema),
        breadcrumb_schema=schema.has_breadcrumb_list,
        breadcrumb_nav=page.cleaned.select_one(BREADCRUMB_NAV_SELECTOR) is not None,
        hreflang_count=len(codes),
        hreflang_x_default=any(code == "x-default" for code in codes),
        hreflang_invalid=[code for code in codes if not is_valid_hreflang(code)],
        pagination_next=bool(meta.pagination_next),
        pagination_prev=bool(meta.pagination_prev),
    )
