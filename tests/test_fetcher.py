import pytest
import requests

from business_tools import fetcher
from business_tools.errors import AnalysisError

HTML = "<!DOCTYPE html><html><head><title>Page</title></head><body>" + "<p>content</p>" * 20 + "</body></html>"


class FakeResponse:
    def __init__(self, status_code=200, text="", headers=None, payload=None):
        self.status_code = status_code
        self.text = text
        self.content = text.encode("utf-8")
        self.headers = headers or {}
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


@pytest.fixture(autouse=True)
def public_targets(monkeypatch):
    monkeypatch.setattr(fetcher, "is_public_target", lambda url: True)


def install(monkeypatch, responses):
    """Serve queued responses (or raise queued exceptions) from requests.request."""
    calls = []

    def fake_request(method, url, headers=None, timeout=None, allow_redirects=True):
        calls.append({"method": method, "url": url, "headers": headers})
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(fetcher.requests, "request", fake_request)
    return calls


def test_fetch_page_returns_html(monkeypatch):
    calls = install(monkeypatch, [FakeResponse(200, HTML, {"Content-Type": "text/html; charset=utf-8"})])
    page = fetcher.fetch_page("example.com/article")

    assert page.url == "https://example.com/article"
    assert page.status_code == 200
    assert page.html == HTML
    assert page.size == len(HTML.encode("utf-8"))
    assert calls[0]["headers"]["Referer"] == "https://example.com/"
    assert calls[0]["headers"]["Accept-Language"].startswith("vi-VN")


def test_fetch_page_follows_redirects(monkeypatch):
    calls = install(
        monkeypatch,
        [
            FakeResponse(301, "", {"Location": "/moved"}),
            FakeResponse(200, HTML, {"Content-Type": "text/html"}),
        ],
    )
    page = fetcher.fetch_page("https://example.com/old")

    assert page.final_url == "https://example.com/moved"
    assert [c["url"] for c in calls] == ["https://example.com/old", "https://example.com/moved"]


def test_too_many_redirects(monkeypatch):
    install(monkeypatch, [FakeResponse(302, "", {"Location": f"/r{i}"}) for i in range(10)])
    with pytest.raises(AnalysisError) as excinfo:
        fetcher.fetch_page("https://example.com/")
    assert excinfo.value.code == "E003"


def test_forbidden_is_retried_with_simple_headers(monkeypatch):
    calls = install(
        monkeypatch,
        [FakeResponse(403, "denied"), FakeResponse(200, HTML, {"Content-Type": "text/html"})],
    )
    page = fetcher.fetch_page("https://example.com/")

    assert page.status_code == 200
    assert calls[1]["headers"] == fetcher.SIMPLE_HEADERS


def test_forbidden_twice_is_e010(monkeypatch):
    install(monkeypatch, [FakeResponse(403, "denied"), FakeResponse(403, "denied")])
    with pytest.raises(AnalysisError) as excinfo:
        fetcher.fetch_page("https://example.com/")
    assert excinfo.value.code == "E010"


@pytest.mark.parametrize("status, code", [(404, "E009"), (500, "E003")])
def test_error_statuses(monkeypatch, status, code):
    install(monkeypatch, [FakeResponse(status, "oops")])
    with pytest.raises(AnalysisError) as excinfo:
        fetcher.fetch_page("https://example.com/")
    assert excinfo.value.code == code


@pytest.mark.parametrize(
    "response, code",
    [
        (FakeResponse(200, "", {"Content-Type": "text/html"}), "E003"),
        (FakeResponse(200, '{"ok": true}' * 20, {"Content-Type": "application/json"}), "E002"),
        (FakeResponse(200, "<html>tiny</html>", {"Content-Type": "text/html"}), "E004"),
    ],
)
def test_unusable_bodies(monkeypatch, response, code):
    install(monkeypatch, [response])
    with pytest.raises(AnalysisError) as excinfo:
        fetcher.fetch_page("https://example.com/")
    assert excinfo.value.code == code


def test_html_is_sniffed_without_content_type(monkeypatch):
    install(monkeypatch, [FakeResponse(200, HTML, {})])
    assert fetcher.fetch_page("https://example.com/").html == HTML


@pytest.mark.parametrize(
    "exc, code",
    [
        (requests.exceptions.SSLError("bad cert"), "E008"),
        (requests.exceptions.ConnectTimeout("slow"), "E007"),
        (requests.exceptions.ConnectionError("refused"), "E006"),
    ],
)
def test_transport_errors(monkeypatch, exc, code):
    install(monkeypatch, [exc])
    with pytest.raises(AnalysisError) as excinfo:
        fetcher.fetch_page("https://example.com/")
    assert excinfo.value.code == code


def test_non_public_target_is_refused(monkeypatch):
    monkeypatch.setattr(fetcher, "is_public_target", lambda url: False)
    with pytest.raises(AnalysisError) as excinfo:
        fetcher.fetch_page("http://127.0.0.1/")
    assert excinfo.value.code == "E001"


def test_robots_txt_probe(monkeypatch):
    install(monkeypatch, [FakeResponse(200, "User-agent: *\nDisallow:", {"Content-Type": "text/plain"})])
    assert fetcher.check_robots_txt("https://example.com")

    install(monkeypatch, [FakeResponse(404, "")])
    assert not fetcher.check_robots_txt("https://example.com")


def test_sitemap_probe_tries_known_paths(monkeypatch):
    calls = install(
        monkeypatch,
        [
            FakeResponse(404, ""),
            FakeResponse(200, "<html>not a sitemap</html>", {"Content-Type": "text/html"}),
            FakeResponse(404, ""),
            FakeResponse(200, '<?xml version="1.0"?><urlset></urlset>', {"Content-Type": "application/xml"}),
        ],
    )
    assert fetcher.check_sitemap("https://example.com")
    assert calls[-1]["url"] == "https://example.com/wp-sitemap.xml"


def test_sitemap_probe_survives_network_errors(monkeypatch):
    install(monkeypatch, [requests.exceptions.ConnectionError("down")] * 4)
    assert not fetcher.check_sitemap("https://example.com")


def test_www_check_flags_duplicate_hosts(monkeypatch):
    calls = install(monkeypatch, [FakeResponse(200), FakeResponse(301, "", {"Location": "https://www.example.com/"})])
    www = fetcher.check_www_subdomain("https://example.com/blog")

    assert www.has_issue
    assert not www.current_has_www
    assert www.www_url == "https://www.example.com/blog"
    assert www.non_www_url == "https://example.com/blog"
    assert {c["method"] for c in calls} == {"HEAD"}


def test_www_check_single_host(monkeypatch):
    install(monkeypatch, [FakeResponse(200), requests.exceptions.ConnectionError("no such host")])
    www = fetcher.check_www_subdomain("https://www.example.com/")

    assert www.current_has_www
    assert www.www_exists and not www.non_www_exists
    assert not www.has_issue


LIGHTHOUSE = {
    "lighthouseResult": {
        "categories": {
            "performance": {"score": 0.87},
            "accessibility": {"score": 0.9},
            "best-practices": {"score": 1},
            "seo": {"score": 0.92},
        },
        "audits": {
            "largest-contentful-paint": {"numericValue": 2345.6},
            "first-contentful-paint": {"numericValue": 1200},
            "speed-index": {"numericValue": 3010},
            "interactive": {"numericValue": 4100},
            "cumulative-layout-shift": {"numericValue": 0.04567},
            "total-blocking-time": {"numericValue": 180.4},
            "interaction-to-next-paint": {"numericValue": 210},
            "unused-javascript": {"title": "Reduce unused JavaScript", "details": {"overallSavingsMs": 450.2}},
            "render-blocking-resources": {"title": "Eliminate render-blocking resources", "details": {"overallSavingsMs": 900}},
            "offscreen-images": {"title": "Defer offscreen images", "details": {}},
        },
    }
}


def test_parse_pagespeed_payload():
    metrics = fetcher.parse_pagespeed_payload(LIGHTHOUSE)

    assert metrics["lcp"] == 2.3
    assert metrics["fcp"] == 1.2
    assert metrics["speed_index"] == 3.0
    assert metrics["cls"] == 0.046
    assert metrics["tbt"] == 180
    assert metrics["inp"] == 210
    assert "fid" not in metrics
    assert metrics["scores"] == {"performance": 87, "accessibility": 90, "best-practices": 100, "seo": 92}
    assert [o["id"] for o in metrics["opportunities"]] == ["render-blocking-resources", "unused-javascript"]
    assert metrics["opportunities"][1]["savings"] == 450


def test_fetch_pagespeed_requires_key():
    result = fetcher.fetch_pagespeed("https://example.com/", "")
    assert result["status"] == "error"


def test_fetch_pagespeed_ok_and_error(monkeypatch):
    captured = {}

    def fake_get(url, params=None, timeout=None):
        captured["params"] = params
        return FakeResponse(200, "", payload=LIGHTHOUSE)

    monkeypatch.setattr(fetcher.requests, "get", fake_get)
    ok = fetcher.fetch_pagespeed("https://example.com/", "KEY")
    assert ok["status"] == "ok"
    assert ok["metrics"]["strategy"] == "mobile"
    assert captured["params"]["key"] == "KEY"

    monkeypatch.setattr(
        fetcher.requests,
        "get",
        lambda url, params=None, timeout=None: FakeResponse(400, "", payload={"error": {"message": "API key not valid"}}),
    )
    failed = fetcher.fetch_pagespeed("https://example.com/", "KEY")
    assert failed["status"] == "error"
    assert failed["reason"] == "HTTP 400: API key not valid"
