from business_tools.signals.keywords import KeywordContext, collect_keywords, significant_tokens

TEXT = (
    "Máy tính khoa học trực tuyến giúp bạn tính toán nhanh. "
    "Máy tính này hoàn toàn miễn phí. Hãy dùng máy tính mỗi ngày."
)


def make_context(**overrides):
    values = {
        "text": TEXT,
        "words": TEXT.split(),
        "title": "Máy tính khoa học trực tuyến",
        "meta_description": "Dùng máy tính khoa học trực tuyến miễn phí",
        "h1": "Máy tính khoa học",
        "url": "https://example.com/may-tinh",
    }
    values.update(overrides)
    return KeywordContext(**values)


def test_stop_words_and_short_tokens_are_dropped():
    assert significant_tokens(["the", "and", "Python", "of", "is", "code,"]) == ["Python", "code"]


def test_vietnamese_phrases_keep_diacritics():
    profile = collect_keywords(make_context())
    phrases = {stat.phrase: stat for stat in profile.most_common}

    assert "Máy tính" in phrases
    assert phrases["Máy tính"].kind == "bigram"
    assert phrases["Máy tính"].count == 3
    assert "nhanh" in phrases


def test_ranking_prefers_count_then_longer_phrases():
    profile = collect_keywords(make_context())
    first, second = profile.most_common[:2]

    assert (first.phrase.lower(), first.count) == ("tính", 4)
    assert second.kind == "bigram"


def test_focus_keyword_usage_bonuses():
    profile = collect_keywords(make_context(), "máy tính")
    focus = profile.focus

    assert focus.count == 3
    assert focus.in_title and focus.in_title_start
    assert focus.in_meta_description
    assert focus.in_h1
    assert focus.in_first_paragraph
    assert focus.in_first_sentence
    assert not focus.in_url
    assert focus.prominence_score == 3
    assert focus.proximity_score == 2
    assert focus.usage_score == 15
    assert profile.top is focus


def test_title_start_requires_keyword_within_first_60_chars():
    title = "x" * 70 + " máy tính"
    focus = collect_keywords(make_context(title=title), "máy tính").focus

    assert focus.in_title
    assert not focus.in_title_start


def test_without_focus_top_is_best_usage():
    profile = collect_keywords(make_context())

    assert profile.focus is None
    assert profile.top is profile.usage[0]
    scores = [u.usage_score for u in profile.usage]
    assert scores == sorted(scores, reverse=True)
