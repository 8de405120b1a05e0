"""
Flesch Reading Ease over the main-content text, with a syllable estimate that
understands Vietnamese words as well as English ones.
"""

from __future__ import annotations

import re

from ..dom import clamp
from ..models import ReadabilityReport

SENTENCE_SPLIT_RE = re.compile(r"[.!?。！？]+")
NUMERIC_ONLY_RE = re.compile(r"^[\d\s.,;:]+$")

VI_VOWELS = "àáạảãâầấậẩẫăằắặẳẵèéẹẻẽêềếệểễìíịỉĩòóọỏõôồốộổỗơờớợởỡùúụủũưừứựửữỳýỵỷỹ"
VI_LETTERS = VI_VOWELS + "đ"

WORD_CHARS_RE = re.compile(rf"[^a-z0-9_{VI_LETTERS}]")
VIETNAMESE_RE = re.compile(rf"[{VI_LETTERS}]")
VI_VOWEL_GROUP_RE = re.compile(rf"[{VI_VOWELS}aeiouy]+")
SILENT_SUFFIX_RE = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
EN_VOWEL_GROUP_RE = re.compile(r"[aeiouy]{1,2}")


def split_sentences(text: str) -> list[str]:
    sentences = []
    for piece in SENTENCE_SPLIT_RE.split(text or ""):
        trimmed = piece.strip()
        if len(trimmed) < 3 or NUMERIC_ONLY_RE.match(trimmed):
            continue
        sentences.append(trimmed)
    return sentences


def syllables(word: str) -> int:
    """Syllable estimate for one cleaned token; 0 when nothing is left after cleaning."""
    token = WORD_CHARS_RE.sub("", word.lower())
    if not token:
        return 0
    if VIETNAMESE_RE.search(token):
        return max(1, len(VI_VOWEL_GROUP_RE.findall(token)))
    if len(token) <= 3:
        return 1
    token = SILENT_SUFFIX_RE.sub("", token)
    token = re.sub(r"^y", "", token)
    return max(1, len(EN_VOWEL_GROUP_RE.findall(token)))


def average_syllables(words: list[str]) -> float:
    counts = [syllables(w) for w in words]
    counts = [c for c in counts if c > 0]
    if not counts:
        return 0.0
    return sum(counts) / len(counts)


def flesch_score(word_count: int, sentence_count: int, syllables_per_word: float) -> float:
    if word_count == 0 or sentence_count == 0:
        return 0.0
    score = 206.835 - 1.015 * (word_count / sentence_count) - 84.6 * syllables_per_word
    return clamp(round(score, 1), 0.0, 100.0)


def collect_readability(text: str, words: list[str]) -> ReadabilityReport:
    sentences = split_sentences(text)
    word_count = len(words)
    sentence_count = len(sentences)
    spw = average_syllables(words)
    chars = len(re.sub(r"\s", "", text or ""))
    return ReadabilityReport(
        word_count=word_count,
        sentence_count=sentence_count,
        avg_words_per_sentence=round(word_count / sentence_count, 1) if sentence_count else 0.0,
        avg_syllables_per_word=round(spw, 2),
        avg_chars_per_word=round(chars / word_count, 1) if word_count else 0.0,
        flesch=flesch_score(word_count, sentence_count, spw),
    )
