"""Markdown report and SUMMARY.json for one analysis."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .models import CRITICAL, IMPORTANT, OPTIONAL, AnalysisResult, CategoryScore

REPORT_NAME = "SEO-CHECK-REPORT.md"
SUMMARY_NAME = "SUMMARY.json"
PRIORITY_HEADINGS = {CRITICAL: "Critical", IMPORTANT: "Important", OPTIONAL: "Optional"}


def bar(score: float) -> str:
    blocks = int(round(max(0.0, min(score, 100.0)) / 10))
    return ("█" * blocks) + ("░" * (10 - blocks))


def _fmt(value: float) -> str:
    return f"{value:g}"


def _category_line(cat: CategoryScore) -> str:
    if cat.nice_to_have:
        return f"{cat.label:<30} {'nice to have':>11}  [{cat.status}]"
    share = cat.points / cat.max * 100 if cat.max else 0
    line = f"{cat.label:<30} {_fmt(cat.points):>5}/{_fmt(cat.max):<5} {bar(share)}  [{cat.status}]"
    if not cat.available:
        line += f"  ({cat.note})"
    return line


def _performance_section(result: AnalysisResult) -> str:
    perf = result.signals.performance
    if perf is None:
        return "- Not requested"
    if not perf.available:
        return f"- Unavailable: {perf.reason}"
    rows = [
        f"- Strategy: {perf.strategy}",
        f"- LCP: {perf.lcp}s",
        f"- CLS: {perf.cls}",
        f"- INP: {perf.inp}ms" if perf.inp is not None else f"- FID: {perf.fid}ms",
        f"- TBT: {perf.tbt}ms",
        f"- FCP: {perf.fcp}s",
        f"- Speed Index: {perf.speed_index}s",
    ]
    for name, score in (perf.scores or {}).items():
        rows.append(f"- Lighthouse {name}: {score}/100")
    for opp in (perf.opportunities or [])[:5]:
        rows.append(f"- Opportunity: {opp.get('title')} (~{opp.get('savings')} ms)")
    return "\n".join(rows)


def render_markdown(result: AnalysisResult) -> str:
    s = result.signals
    score_card = "\n".join(_category_line(cat) for cat in result.breakdown.values())
    keyword_rows = "\n".join(
        f"| {u.keyword} | {u.count} | {u.density}% | {'yes' if u.in_title else 'no'} | "
        f"{'yes' if u.in_h1 else 'no'} | {u.usage_score} |"
        for u in ([s.keywords.focus] if s.keywords.focus else []) + s.keywords.usage[:5]
    )
    grouped = result.recommendations_by_priority()
    recs = "\n".join(
        f"### {PRIORITY_HEADINGS[priority]}\n" + ("\n".join(f"- {r.text}" for r in items) or "- None")
        for priority, items in grouped.items()
    )
    degraded = ", ".join(s.degraded) if s.degraded else "None"
    return f"""# SEO Check Report

## Executive Summary
- URL: `{result.url}`
- Focus keyword: `{result.focus_keyword or "auto-detected"}`
- Analyzed at: {result.analyzed_at}
- Overall Score: **{_fmt(result.score)}/{_fmt(result.max_score)}**  {bar(result.score)}

## Score Card
```
{score_card}
```

## Key Metrics
- Title length: {len(s.meta.title)}
- Meta description length: {len(s.meta.meta_description)}
- H1 count: {len(s.headings.h1)} / H2 count: {len(s.headings.h2)}
- Word count: {s.content.word_count} (main content from `{s.content.selector}`)
- Readability (Flesch): {s.readability.flesch:.1f}
- Internal / external links: {s.links.internal} / {s.links.external}
- Images with alt: {s.images.with_alt}/{s.images.total}
- Schema types: {", ".join(s.schema.schema_types) if s.schema.schema_types else "None"}
- E-E-A-T points: {_fmt(s.trust.eeat.points)}
- Degraded collectors: {degraded}

## Keywords
| Keyword | Count | Density | In title | In H1 | Usage score |
|---|---|---|---|---|---|
{keyword_rows or "| - | - | - | - | - | - |"}

## Recommendations
{recs}

## PageSpeed (Core Web Vitals)
{_performance_section(result)}
"""


def summary_payload(result: AnalysisResult) -> dict[str, Any]:
    return {
        "url": result.url,
        "focus_keyword": result.focus_keyword,
        "analyzed_at": result.analyzed_at,
        "score": result.score,
        "max_score": result.max_score,
        "breakdown": {
            key: {"points": cat.points, "max": cat.max, "status": cat.status, "available": cat.available}
            for key, cat in result.breakdown.items()
        },
        "recommendations": [{"text": r.text, "priority": r.priority} for r in result.recommendations],
        "degraded": list(result.signals.degraded),
    }


def write_reports(result: AnalysisResult, out_dir: str | Path) -> tuple[Path, Path]:
    out = Path(out_dir).resolve()
    out.mkdir(parents=True, exist_ok=True)
    report = out / REPORT_NAME
    summary = out / SUMMARY_NAME
    report.write_text(render_markdown(result), encoding="utf-8")
    summary.write_text(json.dumps(summary_payload(result), indent=2, ensure_ascii=False), encoding="utf-8")
    return report, summary
