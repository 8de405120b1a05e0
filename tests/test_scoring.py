import pytest

from business_tools.engine import analyze
from business_tools.models import ERROR, GOOD, WARNING, SiteChecks, WwwCheck
from business_tools.scoring import CATEGORIES, TOTAL_POINTS, Category, budget_total, evaluate

URL = "https://example.com/page"


def breakdown_for(html, **kwargs):
    return analyze(html, URL, **kwargs).breakdown


def test_budget_totals_one_hundred():
    assert budget_total() == TOTAL_POINTS == 100
    keys = [c.key for c in CATEGORIES]
    assert len(keys) == len(set(keys))
    assert {c.key for c in CATEGORIES if c.nice_to_have} == {"twitterCards", "charset", "favicon"}


@pytest.mark.parametrize(
    "length, points, status",
    [(45, 9, GOOD), (15, 4, WARNING), (0, 0, ERROR), (70, 0, ERROR)],
)
def test_title_points(make_html, long_text, length, points, status):
    html = make_html(title="a" * length, body=f"<p>{long_text(40)}</p>")
    title = breakdown_for(html)["title"]

    assert title.points == points
    assert title.status == status


def test_meta_description_points(make_html, long_text):
    body = f"<p>{long_text(40)}</p>"
    assert breakdown_for(make_html(description="d" * 140, body=body))["metaDesc"].points == 6
    assert breakdown_for(make_html(description="d" * 50, body=body))["metaDesc"].points == 3
    assert breakdown_for(make_html(body=body))["metaDesc"].points == 0


def test_h1_points(make_html, long_text):
    body = f"<p>{long_text(40)}</p>"
    assert breakdown_for(make_html(body=body))["h1"].points == 5
    assert breakdown_for(make_html(body=body + "<h1>Another</h1>"))["h1"].points == 2
    assert breakdown_for(make_html(h1=None, body=body))["h1"].points == 0


def test_focus_keyword_earns_full_keyword_points(make_html, long_text):
    html = make_html(
        description="Dùng máy tính khoa học trực tuyến miễn phí",
        body=f"<p>{long_text(40)}</p>",
    )
    keyword = breakdown_for(html, focus_keyword="máy tính")["keyword"]

    assert keyword.points == 11
    assert keyword.status == GOOD


def test_full_eeat_signals_capped_at_row_budget(make_html, long_text):
    body = (
        f"<p>{long_text(40)}</p>"
        '<time datetime="2024-05-01">1 May 2024</time>'
        '<a href="https://en.wikipedia.org/wiki/Fox">Wikipedia</a>'
        '<a href="https://www.cdc.gov/foxes">CDC</a>'
        '<a href="/contact">Contact</a>'
        '<div class="author-bio">Written by An, a journalist covering wildlife for over ten years.</div>'
    )
    schema = {
        "@context": "https://schema.org",
        "@type": "Article",
        "headline": "Foxes",
        "author": {"@type": "Person", "name": "An"},
        "datePublished": "2024-05-01",
    }
    result = analyze(make_html(body=body, schema=schema), URL)

    assert result.signals.trust.eeat.points == 6
    eeat = result.breakdown["eeat"]
    assert eeat.max == 5
    assert eeat.points == 5
    assert eeat.status == GOOD


def test_schema_present_but_invalid_scores_three(make_html, long_text):
    head = '<script type="application/ld+json">{broken</script>'
    schema = breakdown_for(make_html(head_extra=head, body=f"<p>{long_text(40)}</p>"))["schema"]

    assert schema.points == 3


def test_site_probe_categories(make_html, long_text):
    html = make_html(body=f"<p>{long_text(40)}</p>")
    unprobed = breakdown_for(html)
    assert not unprobed["robotsTxt"].available
    assert unprobed["robotsTxt"].points == 0
    assert not unprobed["wwwIssue"].available
    assert unprobed["wwwIssue"].points == 2

    checks = SiteChecks(
        robots_txt_exists=True,
        sitemap_exists=False,
        www=WwwCheck(has_issue=True, www_exists=True, non_www_exists=True),
    )
    probed = breakdown_for(html, site_checks=checks)
    assert probed["robotsTxt"].points == 2
    assert probed["sitemap"].points == 0
    assert probed["wwwIssue"].points == 0
    assert probed["wwwIssue"].status == ERROR


def test_ssl_follows_scheme(make_html, long_text):
    html = make_html(body=f"<p>{long_text(40)}</p>")
    assert analyze(html, "https://example.com/").breakdown["ssl"].points == 4
    assert analyze(html, "http://example.com/").breakdown["ssl"].points == 0


def test_failing_rule_degrades_to_warning():
    def broken(signals):
        raise ValueError("boom")

    score = evaluate(Category("broken", "Broken", 5, broken), signals=None)

    assert score.points == 0
    assert score.status == WARNING
    assert not score.available


def test_points_never_exceed_budget():
    score = evaluate(Category("greedy", "Greedy", 2, lambda s: (10, GOOD)), signals=None)
    assert score.points == 2
