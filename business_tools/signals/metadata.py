from __future__ import annotations

import re
from collections import Counter

from bs4 import BeautifulSoup, Tag

from ..dom import attr, meta, nfc, rel_tokens, text_of
from ..extractor import ParsedPage
from ..models import HeadingOutline, MetaFacts

DEPRECATED_TAGS = [
    "center",
    "font",
    "marquee",
    "blink",
    "applet",
    "basefont",
    "big",
    "dir",
    "frame",
    "frameset",
    "isindex",
    "noframes",
    "strike",
    "tt",
    "u",
    "acronym",
    "bgsound",
    "keygen",
    "listing",
    "nextid",
    "spacer",
    "xmp",
]

HEADING_LEVELS = ("h1", "h2", "h3", "h4")


def original_href(tag: Tag | None) -> str:
    if tag is None:
        return ""
    return (attr(tag, "data-original-href") or attr(tag, "href")).strip()


def find_link(soup: BeautifulSoup, *rels: str) -> Tag | None:
    wanted = [r.lower() for r in rels]
    for link in soup.find_all("link"):
        tokens = rel_tokens(link)
        joined = " ".join(tokens)
        if any(token in wanted for token in tokens) or joined in wanted:
            return link
    return None


def detect_charset(soup: BeautifulSoup) -> str:
    tag = soup.find("meta", charset=True)
    if tag is not None:
        return attr(tag, "charset").strip()
    tag = soup.find("meta", attrs={"http-equiv": re.compile(r"^content-type$", re.I)})
    if tag is not None:
        return attr(tag, "content").strip()
    return ""


def count_deprecated_tags(soup: BeautifulSoup) -> list[dict[str, object]]:
    counts = Counter(tag.name for tag in soup.find_all(DEPRECATED_TAGS))
    return [{"tag": name, "count": counts[name]} for name in DEPRECATED_TAGS if counts.get(name)]


def collect_metadata(page: ParsedPage) -> MetaFacts:
    soup = page.document
    title_tag = soup.find("title")
    html_tag = soup.find("html")

    hreflang = []
    for link in soup.find_all("link", hreflang=True):
        if "alternate" not in rel_tokens(link):
            continue
        hreflang.append({"hreflang": attr(link, "hreflang").strip(), "href": original_href(link)})

    return MetaFacts(
        title=text_of(title_tag),
        meta_description=nfc(meta(soup, name="description") or ""),
        meta_keywords=nfc(meta(soup, name="keywords") or ""),
        canonical=original_href(find_link(soup, "canonical")),
        robots=meta(soup, name="robots") or "",
        viewport=meta(soup, name="viewport") or "",
        charset=detect_charset(soup),
        lang=attr(html_tag, "lang").strip() if html_tag is not None else "",
        favicon=original_href(find_link(soup, "icon", "shortcut icon")),
        og_title=nfc(meta(soup, prop="og:title") or ""),
        og_description=nfc(meta(soup, prop="og:description") or ""),
        og_image=meta(soup, prop="og:image") or "",
        og_url=meta(soup, prop="og:url") or "",
        twitter_card=meta(soup, name="twitter:card") or "",
        twitter_title=nfc(meta(soup, name="twitter:title") or ""),
        twitter_description=nfc(meta(soup, name="twitter:description") or ""),
        twitter_image=meta(soup, name="twitter:image") or "",
        twitter_site=meta(soup, name="twitter:site") or "",
        twitter_creator=meta(soup, name="twitter:creator") or "",
        hreflang=hreflang,
        pagination_next=original_href(find_link(soup, "next")),
        pagination_prev=original_href(find_link(soup, "prev")),
        deprecated_tags=count_deprecated_tags(page.cleaned),
    )


def collect_headings(page: ParsedPage) -> HeadingOutline:
    outline = HeadingOutline()
    for tag in page.main.find_all(list(HEADING_LEVELS)):
        text = text_of(tag)
        getattr(outline, tag.name).append(text)
        outline.outline.append({"level": tag.name, "text": text})
    return outline
