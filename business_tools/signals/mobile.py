from __future__ import annotations

from bs4 import BeautifulSoup

from ..dom import attr, declared_size, inline_px, meta, text_of
from ..models import CheckResult, MobileUsabilityReport

MIN_TOUCH_TARGET = 48
MIN_FONT_SIZE = 12
MIN_BODY_WIDTH = 320

TOUCH_TARGET_SELECTOR = 'a, button, input[type="button"], input[type="submit"], [role="button"]'
TEXT_TAGS = ["p", "span", "div", "li", "td", "th", "a", "h1", "h2", "h3", "h4", "h5", "h6"]


def check_viewport(viewport: str) -> CheckResult:
    if not viewport:
        return CheckResult(valid=False, issues=["Missing viewport meta tag"])
    issues = []
    if "width=" not in viewport:
        issues.append("Missing width=device-width")
    if "initial-scale=" not in viewport:
        issues.append("Missing initial-scale")
    if "user-scalable=no" in viewport:
        issues.append("user-scalable=no prevents zooming (accessibility issue)")
    return CheckResult(valid=not issues, issues=issues)


def collect_mobile_usability(document: BeautifulSoup, cleaned: BeautifulSoup) -> MobileUsabilityReport:
    viewport = meta(document, name="viewport") or ""
    report = MobileUsabilityReport(viewport_exists=bool(viewport), viewport=check_viewport(viewport))

    for el in cleaned.select(TOUCH_TARGET_SELECTOR):
        width = declared_size(el, "width")
        height = declared_size(el, "height")
        if width > 0 and height > 0 and (width < MIN_TOUCH_TARGET or height < MIN_TOUCH_TARGET):
            report.small_targets.append(
                {
                    "text": text_of(el)[:30] or attr(el, "aria-label") or "Element",
                    "width": width,
                    "height": height,
                    "min_size": MIN_TOUCH_TARGET,
                }
            )
    if report.small_targets:
        report.touch_targets = CheckResult(
            valid=False,
            issues=[
                f"Found {len(report.small_targets)} touch targets smaller than "
                f"{MIN_TOUCH_TARGET}x{MIN_TOUCH_TARGET}px (Google's minimum)"
            ],
        )

    for el in cleaned.find_all(TEXT_TAGS):
        size = inline_px(attr(el, "style"), "font-size")
        if 0 < size < MIN_FONT_SIZE:
            report.small_fonts.append({"text": text_of(el)[:20], "font_size": f"{size:g}px", "min_size": f"{MIN_FONT_SIZE}px"})
    if report.small_fonts:
        report.font_sizes = CheckResult(
            valid=False,
            issues=[f"Found {len(report.small_fonts)} text elements with font size smaller than {MIN_FONT_SIZE}px"],
        )

    body = cleaned.find("body")
    if body is not None:
        width = declared_size(body, "width")
        if 0 < width < MIN_BODY_WIDTH:
            report.content_width = CheckResult(
                valid=False,
                issues=[f"Body width ({width:g}px) may be too narrow for mobile devices"],
            )

    report.score = (
        (3 if report.viewport.valid else 0)
        + (2 if report.touch_targets.valid else 0)
        + (2 if report.font_sizes.valid else 0)
        + (1 if report.content_width.valid else 0)
    )
    return report
