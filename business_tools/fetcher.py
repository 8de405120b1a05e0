"""
Network boundary for the SEO checker: page fetch, robots.txt / sitemap / www
probes and the PageSpeed Insights client.

Every request goes through ``request_public`` which follows redirects by hand
and refuses any hop that resolves to a non-public address.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import urljoin, urlparse

import requests
from loguru import logger

from . import errors
from .dom import is_public_target, normalize_url
from .errors import AnalysisError
from .models import SiteChecks, WwwCheck

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
BROWSER_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8,"
        "application/signed-exchange;v=b3;q=0.7"
    ),
    "Accept-Language": "vi-VN,vi;q=0.9,en-US;q=0.8,en;q=0.7",
    "Accept-Encoding": "gzip, deflate",
    "Cache-Control": "max-age=0",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}
SIMPLE_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "vi-VN,vi;q=0.9",
}

REQUEST_TIMEOUT = 30
PROBE_TIMEOUT = 5
MAX_REDIRECT_HOPS = 5
PROBE_REDIRECT_HOPS = 2
MAX_CONTENT_BYTES = 10 * 1024 * 1024
MIN_BODY_CHARS = 100

SITEMAP_PATHS = ("/sitemap.xml", "/sitemap_index.xml", "/sitemap-index.xml", "/wp-sitemap.xml")
ROBOTS_DIRECTIVE_RE = re.compile(r"User-agent|Disallow|Allow|Sitemap", re.I)
HTML_MARKERS = ("<html", "<!doctype", "<head", "<body")

PAGESPEED_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
PAGESPEED_CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]
SECONDS_AUDITS = {
    "fcp": "first-contentful-paint",
    "speed_index": "speed-index",
    "tti": "interactive",
    "fmp": "first-meaningful-paint",
    "fci": "first-cpu-idle",
    "lcp": "largest-contentful-paint",
}
MILLISECOND_AUDITS = {
    "eil": "estimated-input-latency",
    "tbt": "total-blocking-time",
    "inp": "interaction-to-next-paint",
    "fid": "max-potential-fid",
}
OPPORTUNITY_AUDITS = [
    "render-blocking-resources",
    "unused-css-rules",
    "unused-javascript",
    "modern-image-formats",
    "offscreen-images",
    "unminified-css",
    "unminified-javascript",
    "efficient-animated-content",
    "uses-optimized-images",
    "uses-text-compression",
    "uses-responsive-images",
]

STATUS_MESSAGES = {
    403: "Access denied (403 Forbidden). The site may block server requests or require authentication.",
    404: "Page not found (404 Not Found). Check the URL.",
    500: "Server error (500 Internal Server Error). Try again later.",
    503: "Service temporarily unavailable (503). Try again later.",
}


@dataclass
class FetchedPage:
    url: str
    final_url: str
    html: str
    status_code: int
    content_type: str
    size: int


def base_url_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def request_public(
    method: str,
    url: str,
    headers: dict[str, str],
    timeout: int,
    max_redirects: int = MAX_REDIRECT_HOPS,
) -> tuple[requests.Response, str]:
    current_url = url
    redirects = 0
    while True:
        if not is_public_target(current_url):
            raise AnalysisError("Target URL resolves to non-public or invalid host", code=errors.INVALID_URL)
        resp = requests.request(method, current_url, headers=headers, timeout=timeout, allow_redirects=False)
        if 300 <= resp.status_code < 400:
            location = (resp.headers.get("Location") or "").strip()
            if not location:
                return resp, current_url
            if redirects >= max_redirects:
                raise AnalysisError(f"Too many redirects (>{max_redirects})", code=errors.FETCH_FAILED)
            try:
                current_url = normalize_url(urljoin(current_url, location))
            except ValueError as exc:
                raise AnalysisError(f"Invalid redirect URL: {exc}", code=errors.FETCH_FAILED) from exc
            redirects += 1
            continue
        return resp, current_url


def _get(url: str, headers: dict[str, str], timeout: int) -> tuple[requests.Response, str]:
    try:
        return request_public("GET", url, headers, timeout)
    except requests.exceptions.SSLError as exc:
        raise AnalysisError(f"SSL error: could not verify the site's certificate ({exc})", code=errors.SSL_ERROR) from exc
    except requests.exceptions.Timeout as exc:
        raise AnalysisError("Request timed out: the site did not respond", code=errors.TIMEOUT) from exc
    except requests.exceptions.ConnectionError as exc:
        raise AnalysisError(f"Could not connect to the site: {exc}", code=errors.CONNECTION_ERROR) from exc
    except requests.exceptions.RequestException as exc:
        raise AnalysisError(f"Could not fetch URL: {exc}", code=errors.FETCH_FAILED) from exc


def looks_like_html(content_type: str, body: str) -> bool:
    lowered = (content_type or "").lower()
    if "text/html" in lowered or "application/xhtml" in lowered:
        return True
    head = body[:200].lower()
    return any(marker in head for marker in HTML_MARKERS)


def fetch_page(url: str, timeout: int = REQUEST_TIMEOUT) -> FetchedPage:
    try:
        target = normalize_url(url)
    except ValueError as exc:
        raise AnalysisError(f"Invalid URL: {exc}", code=errors.INVALID_URL) from exc

    headers = dict(BROWSER_HEADERS)
    parsed = urlparse(target)
    headers["Referer"] = f"{parsed.scheme}://{parsed.hostname}/"

    resp, final_url = _get(target, headers, timeout)
    if resp.status_code == 403:
        logger.debug("403 from {}, retrying with simple headers", target)
        try:
            retry, retry_url = _get(target, SIMPLE_HEADERS, timeout)
        except AnalysisError as exc:
            logger.debug("Retry with simple headers failed: {}", exc)
        else:
            if 200 <= retry.status_code < 400:
                resp, final_url = retry, retry_url

    status = resp.status_code
    if status < 200 or status >= 400:
        message = STATUS_MESSAGES.get(status, f"URL returned status {status}")
        code = {404: errors.NOT_FOUND, 403: errors.FORBIDDEN}.get(status, errors.FETCH_FAILED)
        raise AnalysisError(message, code=code)

    body = resp.text or ""
    if not body:
        raise AnalysisError("Could not read any content from the URL", code=errors.FETCH_FAILED)
    size = len(resp.content or b"")
    if size > MAX_CONTENT_BYTES:
        raise AnalysisError("Page content is too large (over 10MB)", code=errors.BAD_SIZE)
    content_type = resp.headers.get("Content-Type", "")
    if not looks_like_html(content_type, body):
        raise AnalysisError("URL is not an HTML page", code=errors.NOT_HTML)
    if len(body) < MIN_BODY_CHARS:
        raise AnalysisError(
            "Page content is too short; the site may block access or need JavaScript to render",
            code=errors.BAD_SIZE,
        )
    logger.debug("Fetched {} ({} bytes, status {})", final_url, size, status)
    return FetchedPage(url=target, final_url=final_url, html=body, status_code=status, content_type=content_type, size=size)


def _probe(url: str, timeout: int) -> requests.Response | None:
    try:
        resp, _ = request_public("GET", url, {"User-Agent": USER_AGENT}, timeout, max_redirects=PROBE_REDIRECT_HOPS)
    except (requests.exceptions.RequestException, AnalysisError) as exc:
        logger.debug("Probe {} failed: {}", url, exc)
        return None
    return resp


def check_robots_txt(base_url: str, timeout: int = PROBE_TIMEOUT) -> bool:
    resp = _probe(f"{base_url.rstrip('/')}/robots.txt", timeout)
    if resp is None or resp.status_code != 200:
        return False
    body = resp.text or ""
    if not body:
        return False
    content_type = (resp.headers.get("Content-Type") or "").lower()
    return "text/plain" in content_type or "text/html" in content_type or bool(ROBOTS_DIRECTIVE_RE.search(body))


def check_sitemap(base_url: str, timeout: int = PROBE_TIMEOUT) -> bool:
    for path in SITEMAP_PATHS:
        resp = _probe(f"{base_url.rstrip('/')}{path}", timeout)
        if resp is None or resp.status_code != 200:
            continue
        body = resp.text or ""
        if not body:
            continue
        content_type = (resp.headers.get("Content-Type") or "").lower()
        lowered = body.lower()
        if "xml" in content_type or "<?xml" in lowered or "<urlset" in lowered or "<sitemapindex" in lowered:
            return True
    return False


def _variant_exists(url: str, timeout: int) -> bool:
    if not is_public_target(url):
        return False
    try:
        resp = requests.request(
            "HEAD", url, headers={"User-Agent": USER_AGENT}, timeout=timeout, allow_redirects=False
        )
    except requests.exceptions.RequestException as exc:
        logger.debug("HEAD {} failed: {}", url, exc)
        return False
    return 200 <= resp.status_code < 400


def check_www_subdomain(url: str, timeout: int = PROBE_TIMEOUT) -> WwwCheck:
    parsed = urlparse(url)
    host = parsed.hostname or ""
    if not host:
        return WwwCheck()
    has_www = host.startswith("www.")
    base_host = host[4:] if has_www else host
    scheme = parsed.scheme or "https"
    www_url = f"{scheme}://www.{base_host}{parsed.path}"
    non_www_url = f"{scheme}://{base_host}{parsed.path}"

    www_exists = _variant_exists(www_url, timeout)
    non_www_exists = _variant_exists(non_www_url, timeout)
    return WwwCheck(
        has_issue=www_exists and non_www_exists,
        www_exists=www_exists,
        non_www_exists=non_www_exists,
        current_has_www=has_www,
        www_url=www_url,
        non_www_url=non_www_url,
    )


def probe_site(url: str, timeout: int = PROBE_TIMEOUT) -> SiteChecks:
    base = base_url_of(url)
    return SiteChecks(
        robots_txt_exists=check_robots_txt(base, timeout),
        sitemap_exists=check_sitemap(base, timeout),
        www=check_www_subdomain(url, timeout),
    )


def _numeric(audits: dict[str, Any], audit_id: str) -> float | None:
    audit = audits.get(audit_id)
    if not isinstance(audit, dict):
        return None
    value = audit.get("numericValue", 0)
    return float(value) if isinstance(value, (int, float)) else 0.0


def parse_pagespeed_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Flatten a Lighthouse response into the metrics mapping the engine merges."""
    lighthouse = payload.get("lighthouseResult") or {}
    categories = lighthouse.get("categories") or {}
    audits = lighthouse.get("audits") or {}

    metrics: dict[str, Any] = {}
    for key, audit_id in SECONDS_AUDITS.items():
        value = _numeric(audits, audit_id)
        if value is not None:
            metrics[key] = round(value / 1000, 1)
    for key, audit_id in MILLISECOND_AUDITS.items():
        value = _numeric(audits, audit_id)
        if value is not None:
            metrics[key] = round(value)
    cls = _numeric(audits, "cumulative-layout-shift")
    if cls is not None:
        metrics["cls"] = round(cls, 3)

    scores = {}
    for name in PAGESPEED_CATEGORIES:
        score = (categories.get(name) or {}).get("score")
        scores[name] = round(score * 100) if isinstance(score, (int, float)) else 0
    metrics["scores"] = scores

    opportunities = []
    for audit_id in OPPORTUNITY_AUDITS:
        audit = audits.get(audit_id)
        if not isinstance(audit, dict):
            continue
        savings = (audit.get("details") or {}).get("overallSavingsMs")
        if savings is None:
            continue
        opportunities.append(
            {
                "id": audit_id,
                "title": audit.get("title", audit_id),
                "description": audit.get("description", ""),
                "savings": round(savings),
            }
        )
    opportunities.sort(key=lambda item: item["savings"], reverse=True)
    metrics["opportunities"] = opportunities
    return metrics


def fetch_pagespeed(url: str, api_key: str, strategy: str = "mobile", timeout: int = REQUEST_TIMEOUT) -> dict[str, Any]:
    if not api_key:
        return {"status": "error", "reason": "PageSpeed API key is not configured", "http_status": None}
    params: dict[str, Any] = {
        "url": url,
        "strategy": strategy,
        "category": PAGESPEED_CATEGORIES,
        "locale": "en_US",
        "key": api_key,
    }
    try:
        resp = requests.get(PAGESPEED_ENDPOINT, params=params, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        return {"status": "error", "reason": str(exc), "http_status": None}
    if resp.status_code != 200:
        reason = f"HTTP {resp.status_code}"
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            err = payload.get("error", {})
            if isinstance(err, dict) and err.get("message"):
                reason = f"{reason}: {err['message']}"
        return {"status": "error", "reason": reason, "http_status": resp.status_code}
    try:
        payload = resp.json()
    except ValueError as exc:
        return {"status": "error", "reason": f"Invalid JSON: {exc}", "http_status": 200}
    if not isinstance(payload, dict) or "lighthouseResult" not in payload:
        return {"status": "error", "reason": "Response has no Lighthouse result", "http_status": 200}
    metrics = parse_pagespeed_payload(payload)
    metrics["strategy"] = strategy
    return {"status": "ok", "metrics": metrics, "http_status": 200}
