"""Anchor text validation tests."""

from __future__ import annotations

import pytest

from linkweaver.engine.anchors import quality_tier, validate_anchor


def test_weak_leading_article_is_rejected_with_reason():
    result = validate_anchor("the best guide")

    assert not result.valid
    assert result.quality_tier == "rejected"
    assert result.score == 25
    assert '"the"' in result.reason


def test_descriptive_phrase_scores_high():
    result = validate_anchor("comprehensive digital marketing strategies")

    assert result.valid
    assert result.quality_tier in {"excellent", "good"}
    assert result.metrics.word_count == 4
    assert result.metrics.meaningful_word_ratio == pytest.approx(1.0)


@pytest.mark.parametrize("phrase", ["", "   ", None])
def test_empty_phrase_is_rejected(phrase):
    result = validate_anchor(phrase)

    assert not result.valid
    assert result.score == 0
    assert result.reason == "Empty phrase"


def test_contraction_fragment_is_rejected_first():
    result = validate_anchor("marketing teams doesn")

    assert result.quality_tier == "rejected"
    assert "contraction" in result.reason


@pytest.mark.parametrize(
    "phrase, fragment",
    [
        ("keyword research", "Only 2 word(s)"),
        ("one two three four five six seven eight", "8 words exceeds maximum 7"),
    ],
)
def test_word_count_bounds(phrase, fragment):
    result = validate_anchor(phrase)

    assert not result.valid
    assert fragment in result.reason


@pytest.mark.parametrize("phrase", ["click here for pricing", "read more about marketing", "www.example.com landing page"])
def test_banned_generic_anchors(phrase):
    result = validate_anchor(phrase)

    assert not result.valid
    assert "banned" in result.reason


def test_weak_trailing_word_scores_25():
    result = validate_anchor("marketing strategies for")

    assert result.score == 25
    assert result.reason == 'Ends with weak word "for"'


def test_character_length_bounds():
    too_short = validate_anchor("big red dog")
    too_long = validate_anchor(
        "extraordinarily comprehensive internationalization considerations checklist"
    )

    assert not too_short.valid and "chars" in too_short.reason
    assert not too_long.valid and "exceeds maximum 65" in too_long.reason


def test_low_meaningful_ratio_is_poor():
    result = validate_anchor("ux on it by my ai")

    assert not result.valid
    assert result.quality_tier == "poor"
    assert result.score == 30


def test_title_relevance_raises_score():
    without_title = validate_anchor("comprehensive digital marketing strategies")
    with_title = validate_anchor(
        "comprehensive digital marketing strategies", "Digital Marketing Strategies Handbook"
    )

    assert with_title.metrics.semantic_relevance == pytest.approx(0.6)
    assert with_title.score > without_title.score


def test_digit_bonus():
    result = validate_anchor("seo audit checklist 2024")

    assert result.score == 88
    assert result.quality_tier == "excellent"


def test_proper_noun_bonus_is_capped():
    lower = validate_anchor("google search console tips")
    capitalised = validate_anchor("Google Search Console tips")

    assert capitalised.score - lower.score == 4
    assert capitalised.metrics.has_proper_nouns


def test_markup_and_entities_are_ignored():
    plain = validate_anchor("comprehensive digital marketing strategies")
    marked_up = validate_anchor("<strong>comprehensive</strong> digital marketing strategies")
    spaced = validate_anchor("digital&nbsp;marketing strategy guide")

    assert marked_up.score == plain.score
    assert spaced.valid
    assert spaced.metrics.word_count == 4


@pytest.mark.parametrize(
    "score, tier",
    [(100, "excellent"), (85, "excellent"), (84, "good"), (70, "good"), (69, "acceptable"), (55, "acceptable"), (54, "poor")],
)
def test_quality_tiers(score, tier):
    assert quality_tier(score) == tier
