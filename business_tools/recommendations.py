"""
Prioritized recommendations.

Three buckets (critical, important, optional) are filled independently and
concatenated in that order. Nothing inside a bucket is re-sorted. Advice that
depends on a collector which fell back to an empty report is left out.
"""

from __future__ import annotations

from .models import CRITICAL, IMPORTANT, OPTIONAL, CategoryScore, Recommendation, Signals


def _critical(s: Signals) -> list[str]:
    out: list[str] = []
    if s.collected("metadata"):
        title_len = len(s.meta.title)
        if title_len < 30:
            out.append("Add or improve the title tag (recommended: 30-60 characters)")
        elif title_len > 60:
            out.append("Shorten the title tag (recommended: 30-60 characters)")

        desc_len = len(s.meta.meta_description)
        if desc_len < 120:
            out.append("Add or improve the meta description (recommended: 120-160 characters)")
        elif desc_len > 160:
            out.append("Shorten the meta description (recommended: 120-160 characters)")

    if s.collected("headings"):
        h1_count = len(s.headings.h1)
        if h1_count == 0:
            out.append("Add one H1 heading to the page")
        elif h1_count > 1:
            out.append(f"Use a single H1 heading (found {h1_count})")

    top = s.keywords.top
    if top is not None and s.collected("keywords", "metadata", "headings"):
        if not top.in_title:
            out.append(f'Add the main keyword "{top.keyword}" to the title tag')
        if top.density < 0.5:
            out.append(f"Increase keyword density (currently {top.density}%, recommended 0.5-2.5%)")
        elif top.density > 2.5:
            out.append(f"Reduce keyword density (currently {top.density}%, recommended 0.5-2.5%)")
        if not top.in_meta_description:
            out.append(f'Add the main keyword "{top.keyword}" to the meta description')
        if not top.in_h1:
            out.append(f'Add the main keyword "{top.keyword}" to the H1 heading')

    words = s.content.word_count
    if words < 300:
        out.append(f"Write more content (currently {words} words, recommended at least 300)")
    if s.collected("links") and s.links.internal < 3:
        out.append(f"Add internal links (found {s.links.internal}, recommended at least 3)")
    if not s.is_https:
        out.append("Switch to HTTPS; it is required for SEO and security")
    if s.collected("metadata") and not s.meta.viewport:
        out.append("Add a viewport meta tag; it is essential for mobile SEO")
    if s.collected("schema") and s.schema.has_schema and s.schema.errors:
        out.append("Fix structured data errors: " + ", ".join(s.schema.errors))
    if s.collected("mobile") and s.mobile.viewport_exists and not s.mobile.viewport.valid:
        out.append("Fix the viewport meta tag: " + ", ".join(s.mobile.viewport.issues))
    www = s.site_checks.www
    if www is not None and www.has_issue:
        out.append(
            f"Both {www.www_url} and {www.non_www_url} resolve; redirect one to the other (301) "
            "to avoid duplicate content"
        )
    return out


def _performance(s: Signals) -> list[str]:
    perf = s.performance
    if perf is None or not perf.available:
        return []
    out = []
    if perf.lcp is not None and perf.lcp > 2.5:
        out.append(f"Improve Largest Contentful Paint (currently {perf.lcp}s, target 2.5s or less)")
    if perf.cls is not None and perf.cls > 0.1:
        out.append(f"Reduce Cumulative Layout Shift (currently {perf.cls}, target 0.1 or less)")
    if perf.inp is not None:
        if perf.inp > 200:
            out.append(f"Improve Interaction to Next Paint (currently {perf.inp:g}ms, target 200ms or less)")
    elif perf.fid is not None and perf.fid > 100:
        out.append(f"Improve First Input Delay (currently {perf.fid:g}ms, target 100ms or less)")
    return out


def _important(s: Signals) -> list[str]:
    out: list[str] = []
    top = s.keywords.top
    if top is not None and s.collected("keywords") and not top.in_first_paragraph:
        out.append(f'Add the main keyword "{top.keyword}" to the first paragraph')
    words = s.content.word_count
    if words > 2500:
        out.append(f"Consider splitting the article (currently {words} words, recommended under 2500)")
    if s.collected("images") and s.images.without_alt > 0:
        out.append(f"Add alt text to {s.images.without_alt} image(s)")
    if s.collected("headings"):
        h2_count = len(s.headings.h2)
        if h2_count == 0:
            out.append("Add H2 headings to structure the content")
        elif h2_count < 2:
            out.append("Use at least 2-3 H2 headings for a clearer structure")
    if s.collected("readability") and s.readability.flesch < 60:
        out.append(f"Improve readability (score {s.readability.flesch:.1f}/100, recommended above 60)")
    if s.collected("schema"):
        if not s.schema.has_schema:
            out.append("Add Schema.org structured data to qualify for rich results")
    if s.collected("metadata"):
        if not s.meta.canonical:
            out.append("Add a canonical URL to avoid duplicate content")
        if not s.meta.lang:
            out.append("Add a lang attribute to the <html> tag so search engines know the page language")
    if s.collected("schema") and s.schema.has_schema:
        if s.schema.conflicts:
            out.append("Resolve structured data conflicts: " + ", ".join(c["message"] for c in s.schema.conflicts))
        if s.schema.warnings:
            out.append("Improve structured data: " + ", ".join(s.schema.warnings[:2]))
    if s.collected("mobile"):
        if not s.mobile.touch_targets.valid:
            out.append("Enlarge touch targets (at least 48x48px): " + ", ".join(s.mobile.touch_targets.issues))
        if not s.mobile.font_sizes.valid:
            out.append("Increase font sizes (at least 12px): " + ", ".join(s.mobile.font_sizes.issues))
    if s.collected("images") and s.images.oversized > 0:
        out.append(f"Resize images: {s.images.oversized} image(s) are larger than 2000px")
    if s.collected("links") and s.links.anchors.over_optimized:
        out.append("Reduce internal anchors that exactly match the keyword (may look like keyword stuffing)")
    if s.collected("trust", "schema"):
        eeat = s.trust.eeat
        if not eeat.author_schema and not eeat.author_bio:
            out.append("Add author information (Person schema or an author bio) to strengthen E-E-A-T")
        if not eeat.published_date:
            out.append("Add a publication date to make the content more trustworthy")
        if s.trust.breadcrumb_nav and not s.trust.breadcrumb_schema:
            out.append("Add BreadcrumbList schema for the existing breadcrumbs")
    if s.collected("trust", "metadata"):
        if s.trust.hreflang_count > 0 and not s.trust.hreflang_x_default:
            out.append("Add an hreflang x-default entry for the default page")
        if s.trust.hreflang_invalid:
            out.append("Fix invalid hreflang codes: " + ", ".join(s.trust.hreflang_invalid))
    if s.site_checks.robots_txt_exists is False:
        out.append("Create a robots.txt file to guide search engine crawlers")
    if s.site_checks.sitemap_exists is False:
        out.append("Create an XML sitemap and submit it to search engines")
    return out


def _optional(s: Signals) -> list[str]:
    out: list[str] = []
    if s.collected("metadata"):
        if not s.meta.og_title or not s.meta.og_description:
            out.append("Add Open Graph tags (og:title, og:description) for better social sharing")
        if not s.meta.og_image:
            out.append("Add og:image so shared links show a picture")
        if not s.meta.twitter_card:
            out.append("Add Twitter Card tags (twitter:card, twitter:title) for better previews on X/Twitter")
    if s.collected("links") and s.links.external == 0:
        out.append("Consider linking to reputable external sources")
    images = s.images
    if s.collected("images") and images.optimized < images.total * 0.8:
        out.append("Use descriptive image file names together with alt text")
    if s.collected("metadata"):
        if not s.meta.charset:
            out.append("Declare the character set (UTF-8) so characters render correctly")
        if not s.meta.favicon:
            out.append("Add a favicon to improve branding and user experience")
    if s.collected("images") and images.total:
        if images.lazy_loading < images.total * 0.5:
            out.append("Lazy-load images to speed up page loading")
        if images.modern_format < images.total * 0.3:
            out.append("Consider modern image formats (WebP/AVIF) to reduce file sizes")
    if s.collected("links") and s.links.anchors.generic > s.links.internal * 0.3:
        out.append("Replace generic anchors (click here, read more) with descriptive anchor text")
    if s.collected("trust"):
        if s.trust.eeat.citation_links < 2:
            out.append("Cite reputable sources to strengthen trust (E-E-A-T)")
    if s.collected("trust", "schema") and not s.trust.breadcrumb_schema and not s.trust.breadcrumb_nav:
        out.append("Add breadcrumbs with schema markup to improve navigation and rich results")
    if s.collected("trust", "metadata") and s.trust.pagination_next and not s.trust.pagination_prev:
        out.append('Add rel="prev" to complete the pagination links')
    if s.collected("metadata") and s.meta.deprecated_tags:
        tags = ", ".join(f"<{d['tag']}> ({d['count']})" for d in s.meta.deprecated_tags)
        out.append(f"Replace deprecated HTML tags: {tags}")
    return out


def build_recommendations(signals: Signals, breakdown: dict[str, CategoryScore] | None = None) -> list[Recommendation]:
    """Critical first, then important, then optional.

    Core Web Vitals advice is only given once the pagespeed category has been
    scored from real metrics.
    """
    pagespeed = (breakdown or {}).get("pagespeed")
    important = _important(signals)
    if pagespeed is None or pagespeed.available:
        important.extend(_performance(signals))

    buckets = ((CRITICAL, _critical(signals)), (IMPORTANT, important), (OPTIONAL, _optional(signals)))
    return [Recommendation(text=text, priority=priority) for priority, texts in buckets for text in texts]
