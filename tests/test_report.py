import json

from business_tools.engine import analyze, merge_performance_metrics
from business_tools.report import REPORT_NAME, SUMMARY_NAME, bar, render_markdown, write_reports

URL = "https://example.com/page"


def test_bar():
    assert bar(100) == "█" * 10
    assert bar(0) == "░" * 10
    assert bar(54) == "█" * 5 + "░" * 5


def test_markdown_lists_categories_and_buckets(make_html, long_text):
    result = analyze(make_html(body=f"<p>{long_text(300)}</p>"), URL, focus_keyword="máy tính")
    markdown = render_markdown(result)

    assert markdown.startswith("# SEO Check Report")
    assert "Title tag" in markdown
    assert "### Critical" in markdown and "### Important" in markdown and "### Optional" in markdown
    assert "| máy tính |" in markdown
    assert "PageSpeed metrics not loaded yet" in markdown
    assert "- Not requested" in markdown


def test_write_reports(tmp_path, make_html, long_text):
    result = analyze(make_html(body=f"<p>{long_text(300)}</p>"), URL)
    result = merge_performance_metrics(result, {"lcp": 2.0, "cls": 0.01, "inp": 100, "scores": {"performance": 95}})
    report, summary = write_reports(result, tmp_path / "out")

    assert report.name == REPORT_NAME
    assert "Lighthouse performance: 95/100" in report.read_text(encoding="utf-8")
    payload = json.loads(summary.read_text(encoding="utf-8"))
    assert summary.name == SUMMARY_NAME
    assert payload["score"] == result.score
    assert payload["max_score"] == 100
    assert payload["breakdown"]["pagespeed"]["points"] == 8
    assert {r["priority"] for r in payload["recommendations"]} <= {"critical", "important", "optional"}
