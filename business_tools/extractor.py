"""
Main-content extraction.

The raw markup is neutralized first so nothing it references (images, styles,
scripts, CSS imports) would ever be loaded, then parsed once into three trees:

* ``document``: the full neutralized document (JSON-LD, head metadata),
* ``cleaned``: the document without script/style/media elements,
* ``main``: the region of ``cleaned`` judged to be the main content.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from .dom import attr, nfc, rel_tokens, soup_of, text_of
from .models import ExtractedContent

BLANK_GIF = "data:image/gif;base64,R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7"

KEEP_LINK_RELS = {"canonical", "icon", "alternate", "next", "prev"}

NON_CONTENT_TAGS = ["script", "style", "noscript", "iframe", "embed", "object", "applet", "audio", "video", "canvas", "svg"]

MAIN_CONTENT_SELECTORS = [
    "main",
    "article",
    '[role="main"]',
    ".main-content",
    ".content",
    "#main-content",
    "#content",
    ".post-content",
    ".entry-content",
    ".article-content",
    "main article",
    "article .content",
]

BOILERPLATE_SELECTORS = (
    "header, footer, nav, aside, .sidebar, .footer, .header, .navigation, "
    '.menu, .widget, .advertisement, .ads, [class*="ad-"], [id*="ad-"]'
)
BODY_FALLBACK_SELECTORS = "header, footer, nav, aside, .sidebar, .footer, .header, .navigation"

MIN_SELECTOR_TEXT = 100
MIN_AUTODETECT_TEXT = 200
MIN_REGION_TEXT = 10

CSS_IMPORT_RE = re.compile(r"""@import\s+(?:url\(\s*)?["']?([^"')\s;]+)["']?\s*\)?""", re.I)
BACKGROUND_IMAGE_RE = re.compile(r"""background-image\s*:\s*url\(\s*["']?([^"')]+)["']?\s*\)""", re.I)


@dataclass
class ParsedPage:
    html: str
    url: str
    document: BeautifulSoup
    cleaned: BeautifulSoup
    main: Tag | BeautifulSoup
    content: ExtractedContent


def neutralize_css(html: str) -> str:
    html = CSS_IMPORT_RE.sub(lambda m: f"/* @import disabled: {m.group(1)} */", html)
    return BACKGROUND_IMAGE_RE.sub(
        lambda m: f"background-image: url({BLANK_GIF}); /* original: {m.group(1)} */",
        html,
    )


def neutralize_tree(soup: BeautifulSoup) -> None:
    for img in soup.find_all("img", src=True):
        original = attr(img, "src")
        if original.startswith("data:") and img.get("data-original-src"):
            continue
        img["data-original-src"] = original
        img["src"] = BLANK_GIF
    for link in soup.find_all("link", href=True):
        rels = rel_tokens(link)
        if any(rel in KEEP_LINK_RELS for rel in rels):
            continue
        link["data-original-href"] = attr(link, "href")
        link["href"] = "about:blank"
    for script in soup.find_all("script", src=True):
        script["data-original-src"] = attr(script, "src")
        del script["src"]


def strip_non_content(soup: BeautifulSoup) -> BeautifulSoup:
    for node in soup.find_all(NON_CONTENT_TAGS):
        node.decompose()
    return soup


def _remove(soup: BeautifulSoup, selectors: str) -> BeautifulSoup:
    for node in soup.select(selectors):
        node.decompose()
    return soup


def _text_length(node: Tag | BeautifulSoup) -> int:
    return len(node.get_text(" ", strip=True))


def detect_main_content(cleaned: BeautifulSoup, neutralized: str) -> tuple[Tag | BeautifulSoup, str]:
    """Return the main-content region and the rule that picked it."""
    for selector in MAIN_CONTENT_SELECTORS:
        found = cleaned.select_one(selector)
        if found is not None and _text_length(found) > MIN_SELECTOR_TEXT:
            return found, selector

    pruned = _remove(strip_non_content(soup_of(neutralized)), BOILERPLATE_SELECTORS)
    best: Tag | None = None
    best_length = 0
    for node in pruned.find_all(["div", "section"]):
        classes = node.get("class") or []
        if "wrapper" in classes or "container" in classes:
            continue
        length = _text_length(node)
        if length > best_length and length > MIN_AUTODETECT_TEXT:
            best, best_length = node, length
    if best is not None:
        return best, "auto-detected"

    fallback = _remove(strip_non_content(soup_of(neutralized)), BODY_FALLBACK_SELECTORS)
    return (fallback.body or fallback), "body-fallback"


def regex_text(html: str) -> str:
    text = re.sub(r"<script[^>]*>[\s\S]*?</script>", " ", html, flags=re.I)
    text = re.sub(r"<style[^>]*>[\s\S]*?</style>", " ", text, flags=re.I)
    text = re.sub(r"<noscript[^>]*>[\s\S]*?</noscript>", " ", text, flags=re.I)
    text = re.sub(r"<[^>]+>", " ", text)
    text = text.replace("&nbsp;", " ")
    text = re.sub(r"&[a-z]+;", " ", text, flags=re.I)
    return nfc(re.sub(r"\s+", " ", text).strip())


def parse_page(html: str, url: str) -> ParsedPage:
    neutral_soup = soup_of(neutralize_css(html))
    neutralize_tree(neutral_soup)
    neutralized = str(neutral_soup)

    document = soup_of(neutralized)
    cleaned = strip_non_content(soup_of(neutralized))
    main, selector = detect_main_content(cleaned, neutralized)

    plain_text = text_of(main)
    if len(plain_text) < MIN_REGION_TEXT:
        plain_text = regex_text(neutralized)
        selector = "regex-fallback"
    words = [w for w in plain_text.split() if w]

    content = ExtractedContent(
        main_content_html=str(main),
        plain_text=plain_text,
        words=words,
        selector=selector,
    )
    return ParsedPage(html=neutralized, url=url, document=document, cleaned=cleaned, main=main, content=content)
