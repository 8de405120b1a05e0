"""
Two-stage analysis flow.

Stage one fetches the page, probes the site and scores it. Stage two fetches
PageSpeed metrics and merges them into the stage-one result. Blocking requests
calls run in worker threads.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable

from loguru import logger

from . import fetcher
from .cache import AnalysisCache
from .engine import analyze, merge_performance_metrics
from .models import AnalysisResult, PerformanceMetrics, SiteChecks
from .rate_limit import RateLimiter

PAGESPEED_TIMEOUT = 60

PrimaryCallback = Callable[[AnalysisResult], Any]


async def probe_site_safely(url: str) -> SiteChecks:
    try:
        return await asyncio.to_thread(fetcher.probe_site, url)
    except Exception as exc:
        logger.warning("Site probes failed for {}: {}", url, exc)
        return SiteChecks()


async def analyze_url(
    url: str,
    focus_keyword: str | None = None,
    *,
    timeout: int = fetcher.REQUEST_TIMEOUT,
    site_checks: bool = True,
    cache: AnalysisCache | None = None,
    limiter: RateLimiter | None = None,
    client: str | None = None,
) -> AnalysisResult:
    if limiter is not None:
        limiter.check(client or "anonymous")
    if cache is not None and not focus_keyword:
        cached = cache.get(url)
        if cached is not None:
            logger.debug("Cache hit for {}", url)
            return cached

    page = await asyncio.to_thread(fetcher.fetch_page, url, timeout)
    checks = await probe_site_safely(page.url) if site_checks else SiteChecks()
    result = analyze(page.html, page.url, focus_keyword, site_checks=checks)
    if cache is not None and not focus_keyword:
        cache.set(url, result)
    return result


async def attach_performance(
    result: AnalysisResult,
    api_key: str | None,
    *,
    strategy: str = "mobile",
    timeout: float = PAGESPEED_TIMEOUT,
) -> AnalysisResult:
    if not api_key:
        return merge_performance_metrics(result, PerformanceMetrics.unavailable("PageSpeed API key is not configured"))
    try:
        payload = await asyncio.wait_for(
            asyncio.to_thread(fetcher.fetch_pagespeed, result.url, api_key, strategy), timeout=timeout
        )
    except asyncio.TimeoutError:
        logger.warning("PageSpeed request for {} timed out after {}s", result.url, timeout)
        return merge_performance_metrics(result, PerformanceMetrics.unavailable("PageSpeed request timed out"))
    except Exception as exc:
        logger.warning("PageSpeed request for {} failed: {}", result.url, exc)
        return merge_performance_metrics(result, PerformanceMetrics.unavailable(str(exc)))

    if payload.get("status") != "ok":
        reason = payload.get("reason", "PageSpeed request failed")
        logger.warning("PageSpeed unavailable for {}: {}", result.url, reason)
        return merge_performance_metrics(result, PerformanceMetrics.unavailable(reason))
    return merge_performance_metrics(result, payload["metrics"])


async def run_two_phase(
    url: str,
    focus_keyword: str | None = None,
    *,
    api_key: str | None = None,
    on_primary: PrimaryCallback | None = None,
    **options,
) -> AnalysisResult:
    """Score the page, hand the primary result to ``on_primary``, then merge performance."""
    result = await analyze_url(url, focus_keyword, **options)
    if on_primary is not None:
        outcome = on_primary(result)
        if asyncio.iscoroutine(outcome):
            await outcome
    return await attach_performance(result, api_key)
