"""
Engine entry points: ``analyze`` turns raw HTML into a scored AnalysisResult,
``merge_performance_metrics`` folds PageSpeed data into an existing result.

Neither function performs I/O.
"""

from __future__ import annotations

import unicodedata
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, Callable, TypeVar
from urllib.parse import urlparse

from loguru import logger

from . import errors
from .errors import AnalysisError
from .extractor import parse_page
from .models import (
    AnalysisResult,
    HeadingOutline,
    ImageReport,
    KeywordProfile,
    LinkReport,
    MetaFacts,
    MobileUsabilityReport,
    PerformanceMetrics,
    ReadabilityReport,
    Signals,
    SiteChecks,
    StructuredDataReport,
    TrustSignals,
)
from .recommendations import build_recommendations
from .scoring import score_signals
from .signals import (
    KeywordContext,
    collect_headings,
    collect_images,
    collect_keywords,
    collect_links,
    collect_metadata,
    collect_mobile_usability,
    collect_readability,
    collect_structured_data,
    collect_trust,
)

T = TypeVar("T")


def validate_url(url: str) -> str:
    value = (url or "").strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise AnalysisError(f"Invalid URL: {url!r}", code=errors.INVALID_URL)
    return value


def _collect(name: str, degraded: list[str], collector: Callable[[], T], fallback: Callable[[], T]) -> T:
    try:
        return collector()
    except Exception as exc:
        logger.warning("Collector {} failed, using empty report: {}", name, exc)
        degraded.append(name)
        return fallback()


def analyze(
    html_content: str,
    url: str,
    focus_keyword: str | None = None,
    site_checks: SiteChecks | None = None,
) -> AnalysisResult:
    url = validate_url(url)
    if not html_content or not html_content.strip():
        raise AnalysisError("No HTML content to analyze", code=errors.PARSE_ERROR)
    keyword = unicodedata.normalize("NFC", focus_keyword.strip()) if focus_keyword and focus_keyword.strip() else None

    try:
        page = parse_page(html_content, url)
    except Exception as exc:
        raise AnalysisError(f"Could not parse HTML: {exc}", code=errors.PARSE_ERROR) from exc
    logger.debug("Main content picked by {} ({} words)", page.content.selector, page.content.word_count)

    degraded: list[str] = []
    meta = _collect("metadata", degraded, lambda: collect_metadata(page), MetaFacts)
    headings = _collect("headings", degraded, lambda: collect_headings(page), HeadingOutline)
    schema = _collect("schema", degraded, lambda: collect_structured_data(page.document), StructuredDataReport)
    mobile = _collect(
        "mobile", degraded, lambda: collect_mobile_usability(page.document, page.cleaned), MobileUsabilityReport
    )
    readability = _collect(
        "readability",
        degraded,
        lambda: collect_readability(page.content.plain_text, page.content.words),
        ReadabilityReport,
    )
    context = KeywordContext(
        text=page.content.plain_text,
        words=page.content.words,
        title=meta.title,
        meta_description=meta.meta_description,
        h1=headings.first_h1,
        url=url,
    )
    keywords = _collect("keywords", degraded, lambda: collect_keywords(context, keyword), KeywordProfile)
    anchor_keyword = keyword or (keywords.usage[0].keyword if keywords.usage else None)
    links = _collect("links", degraded, lambda: collect_links(page.main, url, anchor_keyword), LinkReport)
    images = _collect("images", degraded, lambda: collect_images(page.main), ImageReport)
    trust = _collect("trust", degraded, lambda: collect_trust(page, schema, meta), TrustSignals)

    signals = Signals(
        url=url,
        focus_keyword=keyword,
        content=page.content,
        meta=meta,
        headings=headings,
        links=links,
        images=images,
        schema=schema,
        mobile=mobile,
        readability=readability,
        keywords=keywords,
        trust=trust,
        site_checks=site_checks or SiteChecks(),
        degraded=degraded,
    )
    breakdown = score_signals(signals)
    result = AnalysisResult(
        url=url,
        focus_keyword=keyword,
        analyzed_at=datetime.now(UTC).isoformat(),
        signals=signals,
        breakdown=breakdown,
        recommendations=build_recommendations(signals, breakdown),
    )
    logger.debug("Analyzed {}: {}/{}", url, result.score, result.max_score)
    return result


def coerce_metrics(metrics: PerformanceMetrics | dict[str, Any] | None) -> PerformanceMetrics:
    if metrics is None:
        return PerformanceMetrics.unavailable("PageSpeed metrics unavailable")
    if isinstance(metrics, PerformanceMetrics):
        return metrics
    return PerformanceMetrics.from_mapping(metrics)


def merge_performance_metrics(
    result: AnalysisResult,
    metrics: PerformanceMetrics | dict[str, Any] | None,
) -> AnalysisResult:
    """Return a new result with the pagespeed category and recommendations recomputed.

    Merging the same metrics again yields an equal result.
    """
    performance = coerce_metrics(metrics)
    signals = replace(result.signals, performance=performance)
    breakdown = score_signals(signals)
    return replace(
        result,
        signals=signals,
        breakdown=breakdown,
        recommendations=build_recommendations(signals, breakdown),
    )
