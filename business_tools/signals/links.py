from __future__ import annotations

import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from ..dom import attr, canonical_host, text_of
from ..models import LinkDetail, LinkReport

EMPTY_HREFS = {"", "#", "javascript:void(0)"}
GENERIC_ANCHOR_RE = re.compile(r"^(click here|read more|here|link|this|page)", re.I)
MAX_EXACT_ANCHORS = 3


def link_kind(href: str, page_host: str) -> str:
    if href.startswith(("http://", "https://")):
        host = urlparse(href).hostname or ""
        if not host:
            return "other"
        return "internal" if canonical_host(host) == canonical_host(page_host) else "external"
    if href.startswith(("/", "#")):
        return "internal"
    return "other"


def query_of(href: str) -> str:
    if href.startswith(("http://", "https://")):
        query = urlparse(href).query
        return f"?{query}" if query else ""
    index = href.find("?")
    if index > 0 and href[index + 1 :]:
        return href[index:]
    return ""


def classify_anchor(report: LinkReport, href: str, anchor: str, keyword: str) -> None:
    if keyword and anchor == keyword:
        report.anchors.exact_match += 1
        if report.anchors.exact_match > MAX_EXACT_ANCHORS:
            report.anchors.over_optimized.append(
                {"href": href, "anchor": anchor, "issue": "Exact keyword match (may look like keyword stuffing)"}
            )
    elif keyword and keyword in anchor:
        report.anchors.partial_match += 1
    elif GENERIC_ANCHOR_RE.match(anchor):
        report.anchors.generic += 1


def collect_links(main: Tag | BeautifulSoup, url: str, anchor_keyword: str | None = None) -> LinkReport:
    report = LinkReport()
    page_host = urlparse(url).hostname or ""
    keyword = (anchor_keyword or "").strip().lower()

    for link in main.find_all("a"):
        href = attr(link, "href").strip()
        rel = attr(link, "rel").lower()
        title = attr(link, "title").strip()
        text = text_of(link)

        if href in EMPTY_HREFS:
            report.empty += 1
        if "nofollow" in rel:
            report.nofollow += 1
        if "noopener" in rel or "noreferrer" in rel:
            report.noopener += 1
        if title:
            report.with_title += 1
        if attr(link, "target") == "_blank" and "noopener" not in rel and "noreferrer" not in rel:
            report.unsafe.append(
                {"href": href, "text": text or href, "issue": 'Missing rel="noopener" or rel="noreferrer"'}
            )

        kind = link_kind(href, page_host)
        if kind == "internal":
            report.internal += 1
            if text:
                anchor = text.lower()
                report.internal_anchors.append({"href": href, "anchor": anchor, "length": len(anchor)})
                classify_anchor(report, href, anchor, keyword)
            params = query_of(href)
            if params and "nofollow" not in rel:
                report.dynamic_params.append({"href": href, "text": text or href, "params": params})
        elif kind == "external":
            report.external += 1

        report.details.append(LinkDetail(href=href, text=text, title=title, rel=rel, kind=kind))
    return report
