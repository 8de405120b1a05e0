"""
Keyword frequency (unigrams, bigrams, trigrams) and keyword placement analysis.

Tokens keep their Vietnamese diacritics: cleaning only drops characters that are
neither letters nor digits.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from ..models import KeywordProfile, KeywordStat, KeywordUsage
from .readability import split_sentences

STOP_WORDS = {
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by", "from", "as",
    "is", "was", "are", "were", "been", "be", "have", "has", "had", "do", "does", "did", "will", "would",
    "should", "could", "may", "might", "must", "can", "this", "that", "these", "those", "i", "you", "he",
    "she", "it", "we", "they", "what", "which", "who", "whom", "whose", "where", "when", "why", "how", "all",
    "each", "every", "both", "few", "more", "most", "other", "some", "such", "no", "nor", "not", "only",
    "own", "same", "so", "than", "too", "very", "just", "don", "now",
    "và", "của", "cho", "với", "trong", "từ", "đến", "có", "là", "được", "một", "những", "các", "về",
    "này", "đó", "sẽ", "đã", "cũng", "như", "khi", "nếu", "thì", "mà", "để", "vì", "nên", "hoặc", "nhưng",
}

KIND_PRIORITY = {"trigram": 3, "bigram": 2, "unigram": 1}
TOP_PHRASES = 15
USAGE_PHRASES = 5
FIRST_PARAGRAPH_WORDS = 100
LAST_PARAGRAPH_WORDS = 50
TITLE_START_CHARS = 60


@dataclass
class KeywordContext:
    text: str
    words: list[str]
    title: str
    meta_description: str
    h1: str
    url: str

    @property
    def first_paragraph(self) -> str:
        return " ".join(self.words[:FIRST_PARAGRAPH_WORDS]).lower()

    @property
    def last_paragraph(self) -> str:
        return " ".join(self.words[-LAST_PARAGRAPH_WORDS:]).lower()


def clean_token(word: str) -> str:
    return "".join(ch for ch in word if ch.isalnum())


def density(count: int, word_count: int) -> float:
    if word_count <= 0:
        return 0.0
    return round(count / word_count * 100, 2)


def significant_tokens(words: list[str]) -> list[str]:
    """Cleaned tokens (original case) that are long enough and not stop-words."""
    kept = []
    for word in words:
        cleaned = clean_token(word)
        if len(cleaned) > 2 and cleaned.lower() not in STOP_WORDS:
            kept.append(cleaned)
    return kept


def rank_phrases(words: list[str]) -> list[KeywordStat]:
    tokens = significant_tokens(words)
    display: dict[str, str] = {}
    counts: dict[str, Counter] = {"unigram": Counter(), "bigram": Counter(), "trigram": Counter()}

    for size, kind in ((1, "unigram"), (2, "bigram"), (3, "trigram")):
        for i in range(len(tokens) - size + 1):
            gram = tokens[i : i + size]
            key = " ".join(g.lower() for g in gram)
            counts[kind][key] += 1
            display.setdefault(f"{kind}:{key}", " ".join(gram))

    word_count = len(words)
    ranked: list[KeywordStat] = []
    for kind in ("trigram", "bigram", "unigram"):
        for key, count in counts[kind].items():
            if kind != "unigram" and count < 2:
                continue
            ranked.append(KeywordStat(display[f"{kind}:{key}"], count, kind, density(count, word_count)))
    ranked.sort(key=lambda s: (-s.count, -KIND_PRIORITY[s.kind]))
    return ranked


def prominence(text_lower: str, phrase: str) -> int:
    index = text_lower.find(phrase)
    if index < 0 or not text_lower:
        return 0
    ratio = index / len(text_lower)
    if ratio <= 0.1:
        return 3
    if ratio <= 0.25:
        return 2
    if ratio <= 0.5:
        return 1
    return 0


def proximity(text_lower: str, phrase: str) -> int:
    parts = phrase.split()
    if len(parts) < 2:
        return 0
    first = text_lower.find(parts[0])
    if first < 0:
        return 0
    second = text_lower.find(parts[1], first)
    if second < 0:
        return 0
    distance = second - first
    if distance <= 50:
        return 2
    if distance <= 100:
        return 1
    return 0


def analyze_usage(keyword: str, count: int, ctx: KeywordContext) -> KeywordUsage:
    phrase = keyword.lower().strip()
    title = ctx.title.lower()
    text_lower = ctx.text.lower()
    sentences = split_sentences(ctx.text)
    title_index = title.find(phrase) if phrase else -1

    usage = KeywordUsage(
        keyword=keyword,
        count=count,
        density=density(count, len(ctx.words)),
        in_title=bool(phrase) and phrase in title,
        in_title_start=0 <= title_index < TITLE_START_CHARS,
        in_meta_description=bool(phrase) and phrase in ctx.meta_description.lower(),
        in_h1=bool(phrase) and phrase in ctx.h1.lower(),
        in_url=bool(phrase) and phrase in ctx.url.lower(),
        in_first_paragraph=bool(phrase) and phrase in ctx.first_paragraph,
        in_first_sentence=bool(phrase and sentences) and phrase in sentences[0].lower(),
        in_last_paragraph=bool(phrase) and phrase in ctx.last_paragraph,
        prominence_score=prominence(text_lower, phrase) if phrase else 0,
        proximity_score=proximity(text_lower, phrase) if phrase else 0,
    )
    usage.usage_score = (
        (3 if usage.in_title else 0)
        + (1 if usage.in_title_start else 0)
        + (2 if usage.in_meta_description else 0)
        + (2 if usage.in_h1 else 0)
        + (1 if usage.in_url else 0)
        + (2 if usage.in_first_paragraph else 0)
        + usage.prominence_score
        + usage.proximity_score
    )
    return usage


def collect_keywords(ctx: KeywordContext, focus_keyword: str | None = None) -> KeywordProfile:
    ranked = rank_phrases(ctx.words)
    most_common = ranked[:TOP_PHRASES]
    usage = [analyze_usage(stat.phrase, stat.count, ctx) for stat in most_common[:USAGE_PHRASES]]
    usage.sort(key=lambda u: -u.usage_score)

    focus = None
    keyword = (focus_keyword or "").strip()
    if keyword:
        occurrences = ctx.text.lower().count(keyword.lower())
        focus = analyze_usage(keyword, occurrences, ctx)
    return KeywordProfile(most_common=most_common, usage=usage, focus=focus)
