from business_tools.signals.readability import collect_readability, split_sentences, syllables


def test_sentence_split_ignores_fragments_and_numbers():
    text = "First sentence here. Ok. 12.5. Second one follows! Is this the third?"
    assert split_sentences(text) == ["First sentence here", "Second one follows", "Is this the third"]


def test_english_syllables():
    assert syllables("cat") == 1
    assert syllables("make") == 1
    assert syllables("reading") == 2
    assert syllables("!!!") == 0


def test_vietnamese_syllables_count_vowel_groups():
    assert syllables("người") == 1
    assert syllables("đường") == 1
    assert syllables("Việt") == 1


def test_simple_text_scores_high():
    text = "The cat sat on the mat. " * 20
    report = collect_readability(text, text.split())

    assert report.sentence_count == 20
    assert report.flesch >= 60


def test_run_on_long_words_score_low():
    text = " ".join(["responsibilities internationalization"] * 40)
    report = collect_readability(text, text.split())

    assert report.sentence_count == 1
    assert report.flesch < 40


def test_empty_text():
    report = collect_readability("", [])
    assert report.flesch == 0.0
    assert report.avg_words_per_sentence == 0.0
