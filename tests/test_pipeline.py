import pytest

from business_tools import fetcher, pipeline
from business_tools.cache import AnalysisCache
from business_tools.errors import RateLimitExceeded
from business_tools.fetcher import FetchedPage
from business_tools.models import SiteChecks, WwwCheck
from business_tools.rate_limit import RateLimiter


@pytest.fixture
def fake_network(monkeypatch, make_html, long_text):
    html = make_html(body=f"<p>{long_text(400)}</p>")
    calls = {"fetch": 0, "probe": 0, "pagespeed": 0}

    def fake_fetch(url, timeout=30):
        calls["fetch"] += 1
        return FetchedPage(
            url="https://example.com/page",
            final_url="https://example.com/page",
            html=html,
            status_code=200,
            content_type="text/html",
            size=len(html),
        )

    def fake_probe(url):
        calls["probe"] += 1
        return SiteChecks(robots_txt_exists=True, sitemap_exists=True, www=WwwCheck())

    def fake_pagespeed(url, api_key, strategy="mobile"):
        calls["pagespeed"] += 1
        return {"status": "ok", "metrics": {"lcp": 1.8, "cls": 0.02, "inp": 120}}

    monkeypatch.setattr(fetcher, "fetch_page", fake_fetch)
    monkeypatch.setattr(fetcher, "probe_site", fake_probe)
    monkeypatch.setattr(fetcher, "fetch_pagespeed", fake_pagespeed)
    return calls


@pytest.mark.asyncio
async def test_two_phase_renders_primary_then_merges(fake_network):
    seen = []
    result = await pipeline.run_two_phase("https://example.com/page", api_key="KEY", on_primary=seen.append)

    assert len(seen) == 1
    primary = seen[0]
    assert not primary.breakdown["pagespeed"].available
    assert primary.breakdown["robotsTxt"].points == 2
    assert result.breakdown["pagespeed"].available
    assert result.breakdown["pagespeed"].points == 8
    assert result.score == pytest.approx(primary.score + 8)


@pytest.mark.asyncio
async def test_async_primary_callback_is_awaited(fake_network):
    seen = []

    async def render(result):
        seen.append(result.url)

    await pipeline.run_two_phase("https://example.com/page", api_key="KEY", on_primary=render)
    assert seen == ["https://example.com/page"]


@pytest.mark.asyncio
async def test_missing_api_key_keeps_primary_score(fake_network):
    result = await pipeline.run_two_phase("https://example.com/page")

    assert fake_network["pagespeed"] == 0
    assert not result.breakdown["pagespeed"].available
    assert result.breakdown["pagespeed"].note == "PageSpeed API key is not configured"


@pytest.mark.asyncio
async def test_pagespeed_error_becomes_unavailable(fake_network, monkeypatch):
    monkeypatch.setattr(fetcher, "fetch_pagespeed", lambda url, key, strategy="mobile": {"status": "error", "reason": "HTTP 429"})
    primary = await pipeline.analyze_url("https://example.com/page")
    result = await pipeline.attach_performance(primary, "KEY")

    assert result.breakdown["pagespeed"].note == "HTTP 429"
    assert result.score == primary.score


@pytest.mark.asyncio
async def test_pagespeed_exception_becomes_unavailable(fake_network, monkeypatch):
    def boom(url, key, strategy="mobile"):
        raise RuntimeError("socket closed")

    monkeypatch.setattr(fetcher, "fetch_pagespeed", boom)
    primary = await pipeline.analyze_url("https://example.com/page", site_checks=False)
    result = await pipeline.attach_performance(primary, "KEY")

    assert fake_network["probe"] == 0
    assert not result.breakdown["pagespeed"].available
    assert result.breakdown["pagespeed"].note == "socket closed"


@pytest.mark.asyncio
async def test_cache_short_circuits_fetch(fake_network):
    cache = AnalysisCache()
    first = await pipeline.analyze_url("https://Example.com/page ", cache=cache)
    second = await pipeline.analyze_url("https://example.com/page", cache=cache)

    assert second is first
    assert fake_network["fetch"] == 1


@pytest.mark.asyncio
async def test_rate_limit_applies_before_fetch(fake_network):
    limiter = RateLimiter(max_requests=1, window=60)
    await pipeline.analyze_url("https://example.com/page", limiter=limiter, client="ip_1.2.3.4")

    with pytest.raises(RateLimitExceeded):
        await pipeline.analyze_url("https://example.com/page", limiter=limiter, client="ip_1.2.3.4")
    assert fake_network["fetch"] == 1
