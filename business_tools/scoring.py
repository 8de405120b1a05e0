"""
Deterministic point table.

Each category is one row of CATEGORIES: a key, a label, a point budget and a
rule that maps the collected signals to ``(points, status)``. The budgets of
the scored (non nice-to-have) rows add up to exactly 100; the module refuses to
import otherwise.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from loguru import logger

from .models import ERROR, GOOD, WARNING, CategoryScore, Signals

TOTAL_POINTS = 100

Rule = Callable[[Signals], tuple[float, str]]


class CategoryUnavailable(Exception):
    """Raised by a rule whose input was never collected (e.g. a probe that did not run)."""

    def __init__(self, points: float, status: str, note: str) -> None:
        super().__init__(note)
        self.points = points
        self.status = status
        self.note = note


@dataclass(frozen=True)
class Category:
    key: str
    label: str
    max_points: float
    rule: Rule
    nice_to_have: bool = False
    sources: tuple[str, ...] = ()


def tiered(points: float, good: float, warning: float) -> str:
    if points >= good:
        return GOOD
    if points >= warning:
        return WARNING
    return ERROR


def percent(part: int, total: int) -> float:
    return part / total * 100 if total else 0.0


def score_title(s: Signals) -> tuple[float, str]:
    length = len(s.meta.title)
    if 30 <= length <= 60:
        return 9, GOOD
    if 0 < length < 30:
        return 4, WARNING
    return 0, ERROR


def score_meta_description(s: Signals) -> tuple[float, str]:
    length = len(s.meta.meta_description)
    if 120 <= length <= 160:
        return 6, GOOD
    if length > 0:
        return 3, WARNING
    return 0, ERROR


def score_h1(s: Signals) -> tuple[float, str]:
    count = len(s.headings.h1)
    if count == 1:
        return 5, GOOD
    if count > 1:
        return 2, WARNING
    return 0, ERROR


def score_content_length(s: Signals) -> tuple[float, str]:
    words = s.content.word_count
    if 300 <= words <= 2500:
        return 4, GOOD
    if words >= 200:
        return 2, WARNING
    return 0, ERROR


def score_images(s: Signals) -> tuple[float, str]:
    images = s.images
    if not images.total:
        return 0, WARNING
    points = 0
    alt_share = percent(images.with_alt, images.total)
    if alt_share >= 90:
        points += 3
    elif alt_share >= 50:
        points += 1
    if percent(images.lazy_loading, images.total) >= 50:
        points += 1
    if percent(images.modern_format, images.total) >= 30:
        points += 1
    points = min(points, 4)
    return points, tiered(points, 3, 2)


def score_image_file_size(s: Signals) -> tuple[float, str]:
    points = 0
    if s.images.total:
        share = percent(s.images.size_optimized, s.images.total)
        if share >= 70:
            points = 3
        elif share >= 50:
            points = 2
        elif share >= 30:
            points = 1
    return points, tiered(points, 2, 1)


def score_keyword(s: Signals) -> tuple[float, str]:
    points = 0
    focus = s.keywords.focus
    if focus is not None:
        points += 3 if focus.in_title else 0
        points += 2 if focus.in_title_start else 0
        points += 2 if focus.in_meta_description else 0
        points += 2 if focus.in_h1 else 0
        points += 2 if focus.in_first_paragraph else 0
    elif s.keywords.usage:
        top = s.keywords.usage[0]
        points += 3 if top.in_title else 0
        points += 1 if top.in_title_start else 0
        points += 2 if top.in_meta_description else 0
        points += 2 if top.in_h1 else 0
        points += 2 if top.in_first_paragraph else 0
        points += 1 if 0.5 <= top.density <= 2.5 else 0
    return points, tiered(points, 9, 6)


def score_headings(s: Signals) -> tuple[float, str]:
    points = (2 if len(s.headings.h1) == 1 else 0) + (2 if len(s.headings.h2) >= 2 else 0)
    return points, tiered(points, 3, 2)


def score_internal_links(s: Signals) -> tuple[float, str]:
    if s.links.internal >= 3:
        return 4, GOOD
    if s.links.internal > 0:
        return 2, WARNING
    return 0, ERROR


def score_external_links(s: Signals) -> tuple[float, str]:
    if 0 < s.links.external <= 10:
        return 3, GOOD
    if s.links.external > 10:
        return 1, WARNING
    return 0, WARNING


def score_open_graph(s: Signals) -> tuple[float, str]:
    points = sum(1 for value in (s.meta.og_title, s.meta.og_description, s.meta.og_image) if value)
    return points, tiered(points, 2, 1)


def score_schema(s: Signals) -> tuple[float, str]:
    if not s.schema.has_schema:
        return 0, WARNING
    points = min(s.schema.score, 4) if s.schema.valid_schemas else 3
    return points, tiered(points, 3, 2)


def score_mobile_usability(s: Signals) -> tuple[float, str]:
    points = s.mobile.passed_checks
    return points, tiered(points, 3, 2)


def score_canonical(s: Signals) -> tuple[float, str]:
    return (2, GOOD) if s.meta.canonical else (0, WARNING)


def score_readability(s: Signals) -> tuple[float, str]:
    flesch = s.readability.flesch
    if flesch >= 60:
        return 3, GOOD
    if flesch >= 40:
        return 1, WARNING
    return 0, ERROR


def score_ssl(s: Signals) -> tuple[float, str]:
    return (4, GOOD) if s.is_https else (0, ERROR)


def score_robots_txt(s: Signals) -> tuple[float, str]:
    exists = s.site_checks.robots_txt_exists
    if exists is None:
        raise CategoryUnavailable(0, WARNING, "robots.txt was not checked")
    return (2, GOOD) if exists else (0, WARNING)


def score_sitemap(s: Signals) -> tuple[float, str]:
    exists = s.site_checks.sitemap_exists
    if exists is None:
        raise CategoryUnavailable(0, WARNING, "sitemap was not checked")
    return (2, GOOD) if exists else (0, WARNING)


def score_viewport(s: Signals) -> tuple[float, str]:
    return (2, GOOD) if s.meta.viewport else (0, ERROR)


def score_lang(s: Signals) -> tuple[float, str]:
    return (1, GOOD) if s.meta.lang else (0, WARNING)


def score_www_issue(s: Signals) -> tuple[float, str]:
    www = s.site_checks.www
    if www is None:
        raise CategoryUnavailable(2, GOOD, "www and non-www variants were not checked")
    return (0, ERROR) if www.has_issue else (2, GOOD)


def score_eeat(s: Signals) -> tuple[float, str]:
    # Raw E-E-A-T points reach 6; the budget row is 5 so the table totals 100.
    points = min(s.trust.eeat.points, 5)
    return points, tiered(points, 5, 3)


def score_breadcrumbs(s: Signals) -> tuple[float, str]:
    if s.trust.breadcrumb_schema:
        points = 2
    elif s.trust.breadcrumb_nav:
        points = 1
    else:
        points = 0
    return points, tiered(points, 2, 1)


def score_hreflang(s: Signals) -> tuple[float, str]:
    count = s.trust.hreflang_count
    if count >= 2 and s.trust.hreflang_x_default:
        points = 2.0
    elif count >= 2:
        points = 1.0
    elif count == 1:
        points = 0.5
    else:
        points = 0.0
    return points, tiered(points, 1.5, 0.5)


def score_pagination(s: Signals) -> tuple[float, str]:
    if s.trust.pagination_next or s.trust.pagination_prev:
        return 1, GOOD
    return 0, ERROR


def score_pagespeed(s: Signals) -> tuple[float, str]:
    perf = s.performance
    if perf is None:
        raise CategoryUnavailable(0, WARNING, "PageSpeed metrics not loaded yet")
    if not perf.available:
        raise CategoryUnavailable(0, WARNING, perf.reason or "PageSpeed metrics unavailable")
    points = 0.0
    if perf.lcp is not None:
        if perf.lcp <= 2.5:
            points += 3
        elif perf.lcp <= 4.0:
            points += 1.5
    if perf.cls is not None:
        if perf.cls <= 0.1:
            points += 3
        elif perf.cls <= 0.25:
            points += 1.5
    if perf.inp is not None:
        if perf.inp <= 200:
            points += 2
        elif perf.inp <= 500:
            points += 1
    elif perf.fid is not None:
        if perf.fid <= 100:
            points += 2
        elif perf.fid <= 300:
            points += 1
    return points, tiered(points, 6, 3)


def score_twitter_cards(s: Signals) -> tuple[float, str]:
    count = (1 if s.meta.twitter_card else 0) + (1 if s.meta.twitter_title or s.meta.twitter_description else 0)
    return 0, tiered(count, 2, 1)


def score_charset(s: Signals) -> tuple[float, str]:
    return 0, GOOD if s.meta.charset else WARNING


def score_favicon(s: Signals) -> tuple[float, str]:
    return 0, GOOD if s.meta.favicon else WARNING


META = ("metadata",)
HEADINGS = ("headings",)
LINKS = ("links",)
IMAGES = ("images",)

CATEGORIES: tuple[Category, ...] = (
    Category("title", "Title tag", 9, score_title, sources=META),
    Category("metaDesc", "Meta description", 6, score_meta_description, sources=META),
    Category("h1", "H1 heading", 5, score_h1, sources=HEADINGS),
    Category("contentLength", "Content length", 4, score_content_length),
    Category("images", "Image optimization", 4, score_images, sources=IMAGES),
    Category("imageFileSize", "Image file size (estimated)", 3, score_image_file_size, sources=IMAGES),
    Category("keyword", "Keyword optimization", 11, score_keyword, sources=("keywords", "metadata", "headings")),
    Category("headings", "Heading structure", 4, score_headings, sources=HEADINGS),
    Category("internalLinks", "Internal links", 4, score_internal_links, sources=LINKS),
    Category("externalLinks", "External links", 3, score_external_links, sources=LINKS),
    Category("openGraph", "Open Graph", 3, score_open_graph, sources=META),
    Category("schema", "Structured data", 4, score_schema, sources=("schema",)),
    Category("mobileUsability", "Mobile usability", 4, score_mobile_usability, sources=("mobile",)),
    Category("canonical", "Canonical URL", 2, score_canonical, sources=META),
    Category("readability", "Readability", 3, score_readability, sources=("readability",)),
    Category("ssl", "SSL/HTTPS", 4, score_ssl),
    Category("robotsTxt", "robots.txt", 2, score_robots_txt),
    Category("sitemap", "XML sitemap", 2, score_sitemap),
    Category("viewport", "Viewport meta tag", 2, score_viewport, sources=META),
    Category("lang", "Language attribute", 1, score_lang, sources=META),
    Category("wwwIssue", "www / non-www", 2, score_www_issue),
    Category("eeat", "E-E-A-T signals", 5, score_eeat, sources=("trust", "schema")),
    Category("breadcrumbs", "Breadcrumbs", 2, score_breadcrumbs, sources=("trust", "schema")),
    Category("hreflang", "Hreflang", 2, score_hreflang, sources=("trust", "metadata")),
    Category("pagination", "Pagination", 1, score_pagination, sources=("trust", "metadata")),
    Category("pagespeed", "PageSpeed (Core Web Vitals)", 8, score_pagespeed),
    Category("twitterCards", "Twitter Cards", 0, score_twitter_cards, nice_to_have=True, sources=META),
    Category("charset", "Charset", 0, score_charset, nice_to_have=True, sources=META),
    Category("favicon", "Favicon", 0, score_favicon, nice_to_have=True, sources=META),
)


def budget_total(categories: tuple[Category, ...] = CATEGORIES) -> float:
    return sum(c.max_points for c in categories if not c.nice_to_have)


if budget_total() != TOTAL_POINTS:
    raise RuntimeError(f"Scoring budget must total {TOTAL_POINTS} points, got {budget_total()}")


def require_collected(category: Category, signals: Signals) -> None:
    failed = [name for name in category.sources if name in signals.degraded]
    if failed:
        raise CategoryUnavailable(0, WARNING, f"{', '.join(failed)} collector failed")


def evaluate(category: Category, signals: Signals) -> CategoryScore:
    base = dict(key=category.key, label=category.label, max=category.max_points, nice_to_have=category.nice_to_have)
    try:
        require_collected(category, signals)
        points, status = category.rule(signals)
    except CategoryUnavailable as exc:
        return CategoryScore(points=exc.points, status=exc.status, available=False, note=exc.note, **base)
    except Exception as exc:
        logger.warning("Scoring rule {} failed: {}", category.key, exc)
        return CategoryScore(points=0, status=WARNING, available=False, note=f"Rule failed: {exc}", **base)
    points = min(max(points, 0), category.max_points)
    return CategoryScore(points=points, status=status, **base)


def score_signals(signals: Signals) -> dict[str, CategoryScore]:
    return {category.key: evaluate(category, signals) for category in CATEGORIES}
