#!/usr/bin/env python3
"""
On-page SEO checker: fetch a URL (or read a saved HTML file), score it out of
100 and write SEO-CHECK-REPORT.md plus SUMMARY.json.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[3]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from business_tools import errors  # noqa: E402
from business_tools.engine import analyze  # noqa: E402
from business_tools.errors import BusinessToolsError  # noqa: E402
from business_tools.log import setup_logger  # noqa: E402
from business_tools.models import AnalysisResult  # noqa: E402
from business_tools.pipeline import attach_performance, run_two_phase  # noqa: E402
from business_tools.report import bar, write_reports  # noqa: E402


def print_primary(result: AnalysisResult) -> None:
    print(f"URL: {result.url}")
    print(f"Score (before PageSpeed): {result.score:g}/{result.max_score:g}  {bar(result.score)}")


async def run(args: argparse.Namespace) -> AnalysisResult:
    api_key = None if args.no_pagespeed else args.pagespeed_key
    if args.html_file:
        html = Path(args.html_file).read_text(encoding="utf-8", errors="replace")
        result = analyze(html, args.url, args.keyword)
        print_primary(result)
        if args.no_pagespeed:
            return result
        return await attach_performance(result, api_key)
    result = await run_two_phase(
        args.url,
        args.keyword,
        api_key=api_key,
        on_primary=print_primary,
        timeout=args.timeout,
        site_checks=not args.no_site_checks,
    )
    return result


def main() -> int:
    p = argparse.ArgumentParser(description="Score a page's on-page SEO out of 100.")
    p.add_argument("url", help="Page URL (also used as the base URL with --html-file)")
    p.add_argument("--html-file", help="Analyze a saved HTML file instead of fetching the URL")
    p.add_argument("--keyword", help="Optional focus keyword/phrase")
    p.add_argument("--timeout", type=int, default=30)
    p.add_argument("--pagespeed-key", default=os.getenv("PAGESPEED_API_KEY", ""))
    p.add_argument("--no-site-checks", action="store_true", help="Skip robots.txt, sitemap and www probes")
    p.add_argument("--no-pagespeed", action="store_true", help="Skip the PageSpeed Insights stage")
    p.add_argument("--output-dir", default="seo-checker-output")
    p.add_argument("--log-level", default=os.getenv("BUSINESS_TOOLS_LOG_LEVEL", "WARNING"))
    p.add_argument("--log-file", default=os.getenv("BUSINESS_TOOLS_LOG_FILE"))
    args = p.parse_args()

    setup_logger(args.log_level, args.log_file, tool="seo-checker")
    try:
        result = asyncio.run(run(args))
    except BusinessToolsError as exc:
        print(f"Error [{exc.code}]: {exc.message}")
        return 2 if exc.code == errors.INVALID_URL else 1
    except OSError as exc:
        print(f"Error: {exc}")
        return 1

    report, summary = write_reports(result, args.output_dir)
    pagespeed = result.breakdown.get("pagespeed")
    if pagespeed is not None and not pagespeed.available:
        print(f"PageSpeed: {pagespeed.note}")
    print(f"Overall score: {result.score:g}/{result.max_score:g}")
    print(f"Report: {report}")
    print(f"Summary: {summary}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
