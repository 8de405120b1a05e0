"""
Records produced by one SEO analysis run.

Everything here is created fresh per analysis and treated as read-only
afterwards. The only later write is the performance merge, which builds a new
AnalysisResult instead of touching an existing one.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

GOOD = "good"
WARNING = "warning"
ERROR = "error"

CRITICAL = "critical"
IMPORTANT = "important"
OPTIONAL = "optional"
PRIORITIES = (CRITICAL, IMPORTANT, OPTIONAL)


@dataclass
class ExtractedContent:
    main_content_html: str
    plain_text: str
    words: list[str]
    selector: str

    @property
    def word_count(self) -> int:
        return len(self.words)


@dataclass
class MetaFacts:
    title: str = ""
    meta_description: str = ""
    meta_keywords: str = ""
    canonical: str = ""
    robots: str = ""
    viewport: str = ""
    charset: str = ""
    lang: str = ""
    favicon: str = ""
    og_title: str = ""
    og_description: str = ""
    og_image: str = ""
    og_url: str = ""
    twitter_card: str = ""
    twitter_title: str = ""
    twitter_description: str = ""
    twitter_image: str = ""
    twitter_site: str = ""
    twitter_creator: str = ""
    hreflang: list[dict[str, str]] = field(default_factory=list)
    pagination_next: str = ""
    pagination_prev: str = ""
    deprecated_tags: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class HeadingOutline:
    h1: list[str] = field(default_factory=list)
    h2: list[str] = field(default_factory=list)
    h3: list[str] = field(default_factory=list)
    h4: list[str] = field(default_factory=list)
    outline: list[dict[str, str]] = field(default_factory=list)

    @property
    def first_h1(self) -> str:
        return self.h1[0] if self.h1 else ""


@dataclass
class LinkDetail:
    href: str
    text: str
    title: str
    rel: str
    kind: str


@dataclass
class AnchorTextAnalysis:
    exact_match: int = 0
    partial_match: int = 0
    generic: int = 0
    over_optimized: list[dict[str, str]] = field(default_factory=list)


@dataclass
class LinkReport:
    internal: int = 0
    external: int = 0
    nofollow: int = 0
    noopener: int = 0
    with_title: int = 0
    empty: int = 0
    unsafe: list[dict[str, str]] = field(default_factory=list)
    dynamic_params: list[dict[str, str]] = field(default_factory=list)
    internal_anchors: list[dict[str, Any]] = field(default_factory=list)
    anchors: AnchorTextAnalysis = field(default_factory=AnchorTextAnalysis)
    details: list[LinkDetail] = field(default_factory=list)


@dataclass
class ImageDetail:
    src: str
    alt: str
    title: str
    width: int
    height: int
    has_alt: bool
    is_responsive: bool
    has_lazy_loading: bool
    is_modern_format: bool
    is_descriptive: bool
    is_optimized: bool
    is_oversized: bool
    estimated_kb: float
    size_optimized: bool


@dataclass
class ImageReport:
    total: int = 0
    with_alt: int = 0
    without_alt: int = 0
    with_title: int = 0
    optimized: int = 0
    responsive: int = 0
    lazy_loading: int = 0
    modern_format: int = 0
    oversized: int = 0
    size_optimized: int = 0
    details: list[ImageDetail] = field(default_factory=list)


@dataclass
class SchemaNode:
    type: str
    context: Any
    has_required_props: bool
    missing_props: list[str]


@dataclass
class StructuredDataReport:
    has_schema: bool = False
    valid_schemas: list[SchemaNode] = field(default_factory=list)
    invalid_schemas: list[dict[str, str]] = field(default_factory=list)
    schema_types: list[str] = field(default_factory=list)
    conflicts: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    score: int = 0
    has_author: bool = False
    has_breadcrumb_list: bool = False


@dataclass
class CheckResult:
    valid: bool = True
    issues: list[str] = field(default_factory=list)


@dataclass
class MobileUsabilityReport:
    viewport_exists: bool = False
    viewport: CheckResult = field(default_factory=lambda: CheckResult(valid=False))
    touch_targets: CheckResult = field(default_factory=CheckResult)
    small_targets: list[dict[str, Any]] = field(default_factory=list)
    font_sizes: CheckResult = field(default_factory=CheckResult)
    small_fonts: list[dict[str, Any]] = field(default_factory=list)
    content_width: CheckResult = field(default_factory=CheckResult)
    score: int = 0

    @property
    def passed_checks(self) -> int:
        checks = (self.viewport, self.touch_targets, self.font_sizes, self.content_width)
        return sum(1 for check in checks if check.valid)


@dataclass
class ReadabilityReport:
    word_count: int = 0
    sentence_count: int = 0
    avg_words_per_sentence: float = 0.0
    avg_syllables_per_word: float = 0.0
    avg_chars_per_word: float = 0.0
    flesch: float = 0.0


@dataclass
class KeywordStat:
    phrase: str
    count: int
    kind: str
    density: float


@dataclass
class KeywordUsage:
    keyword: str
    count: int
    density: float
    in_title: bool = False
    in_title_start: bool = False
    in_meta_description: bool = False
    in_h1: bool = False
    in_url: bool = False
    in_first_paragraph: bool = False
    in_first_sentence: bool = False
    in_last_paragraph: bool = False
    prominence_score: int = 0
    proximity_score: int = 0
    usage_score: int = 0


@dataclass
class KeywordProfile:
    most_common: list[KeywordStat] = field(default_factory=list)
    usage: list[KeywordUsage] = field(default_factory=list)
    focus: KeywordUsage | None = None

    @property
    def top(self) -> KeywordUsage | None:
        if self.focus is not None:
            return self.focus
        return self.usage[0] if self.usage else None


@dataclass
class EeatSignals:
    author_schema: bool = False
    author_bio: bool = False
    published_date: bool = False
    modified_date: bool = False
    about_contact_links: bool = False
    citation_links: int = 0
    raw_points: float = 0.0
    points: int = 0


@dataclass
class TrustSignals:
    eeat: EeatSignals = field(default_factory=EeatSignals)
    breadcrumb_schema: bool = False
    breadcrumb_nav: bool = False
    hreflang_count: int = 0
    hreflang_x_default: bool = False
    hreflang_invalid: list[str] = field(default_factory=list)
    pagination_next: bool = False
    pagination_prev: bool = False


@dataclass
class WwwCheck:
    has_issue: bool = False
    www_exists: bool = False
    non_www_exists: bool = False
    current_has_www: bool = False
    www_url: str = ""
    non_www_url: str = ""


@dataclass
class SiteChecks:
    """Probe results supplied by the boundary; None means the probe was not run."""

    robots_txt_exists: bool | None = None
    sitemap_exists: bool | None = None
    www: WwwCheck | None = None


METRIC_ALIASES = {
    "speedIndex": "speed_index",
    "speed-index": "speed_index",
}


@dataclass
class PerformanceMetrics:
    available: bool = True
    reason: str = ""
    strategy: str = "mobile"
    lcp: float | None = None
    cls: float | None = None
    inp: float | None = None
    fid: float | None = None
    tbt: float | None = None
    fcp: float | None = None
    speed_index: float | None = None
    tti: float | None = None
    fmp: float | None = None
    fci: float | None = None
    eil: float | None = None
    scores: dict[str, int] = field(default_factory=dict)
    opportunities: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def unavailable(cls, reason: str) -> PerformanceMetrics:
        return cls(available=False, reason=reason)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> PerformanceMetrics:
        values: dict[str, Any] = {}
        for raw_key, value in data.items():
            key = METRIC_ALIASES.get(raw_key, raw_key)
            if key in ("lcp", "cls", "inp", "fid", "tbt", "fcp", "speed_index", "tti", "fmp", "fci", "eil"):
                values[key] = float(value) if isinstance(value, (int, float)) else None
            elif key in ("scores", "opportunities", "strategy"):
                values[key] = value
        if not any(values.get(k) is not None for k in ("lcp", "cls", "inp", "fid", "tbt", "fcp", "speed_index", "tti")):
            return cls.unavailable("No metrics data returned")
        return cls(**values)


@dataclass
class CategoryScore:
    key: str
    label: str
    points: float
    max: float
    status: str
    nice_to_have: bool = False
    available: bool = True
    note: str = ""


@dataclass
class Recommendation:
    text: str
    priority: str


@dataclass
class Signals:
    url: str
    focus_keyword: str | None
    content: ExtractedContent
    meta: MetaFacts
    headings: HeadingOutline
    links: LinkReport
    images: ImageReport
    schema: StructuredDataReport
    mobile: MobileUsabilityReport
    readability: ReadabilityReport
    keywords: KeywordProfile
    trust: TrustSignals
    site_checks: SiteChecks = field(default_factory=SiteChecks)
    performance: PerformanceMetrics | None = None
    degraded: list[str] = field(default_factory=list)

    @property
    def is_https(self) -> bool:
        return self.url.lower().startswith("https://")

    def collected(self, *collectors: str) -> bool:
        """True when none of the named collectors fell back to an empty report."""
        return not any(name in self.degraded for name in collectors)


@dataclass
class AnalysisResult:
    url: str
    focus_keyword: str | None
    analyzed_at: str
    signals: Signals
    breakdown: dict[str, CategoryScore]
    recommendations: list[Recommendation]

    @property
    def score(self) -> float:
        total = sum(c.points for c in self.breakdown.values() if not c.nice_to_have)
        return round(min(total, self.max_score), 1)

    @property
    def max_score(self) -> float:
        return sum(c.max for c in self.breakdown.values() if not c.nice_to_have)

    def recommendations_by_priority(self) -> dict[str, list[Recommendation]]:
        grouped: dict[str, list[Recommendation]] = {p: [] for p in PRIORITIES}
        for rec in self.recommendations:
            grouped[rec.priority].append(rec)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["score"] = self.score
        payload["max_score"] = self.max_score
        return payload
