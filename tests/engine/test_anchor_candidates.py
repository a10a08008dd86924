"""Anchor candidate generation tests."""

from __future__ import annotations

import pytest

from linkweaver.engine.anchors import (
    clean_title,
    generate_anchor_candidates,
    generate_optimal_anchors,
    rank_anchor_candidates,
    validate_anchor,
)


@pytest.mark.parametrize("title", ["", "SEO tips", "A B C D E F G H", None])
def test_short_or_empty_titles_produce_nothing(title):
    assert generate_anchor_candidates(title) == []


def test_full_title_ranks_first():
    candidates = generate_anchor_candidates("Keyword Research Fundamentals Guide")

    assert candidates[0] == "Keyword Research Fundamentals Guide"
    assert "Keyword Research Fundamentals" in candidates


def test_candidates_are_unique_and_sorted():
    ranked = rank_anchor_candidates("The Complete Guide to Email Marketing Automation")

    phrases = [candidate.phrase.lower() for candidate in ranked]
    scores = [candidate.score for candidate in ranked]
    assert len(set(phrases)) == len(phrases)
    assert scores == sorted(scores, reverse=True)


def test_noun_phrase_pattern_is_extracted():
    candidates = generate_anchor_candidates("The Complete Guide to Email Marketing Automation")

    assert "Email Marketing Automation" in candidates


def test_candidate_cap_is_respected():
    assert len(generate_anchor_candidates("The Complete Guide to Email Marketing Automation", 3)) == 3


def test_every_candidate_is_a_valid_anchor():
    for phrase in generate_anchor_candidates("Link Building Strategy Playbook"):
        assert validate_anchor(phrase).valid, phrase


@pytest.mark.parametrize(
    "title, expected",
    [
        ("Keyword Research: The Complete Guide", "Keyword Research"),
        ("Content Pruning Checklist (2024)", "Content Pruning Checklist"),
        ("Technical SEO | Audit Workflow", "Technical SEO Audit Workflow"),
    ],
)
def test_clean_title(title, expected):
    assert clean_title(title) == expected


def test_optimal_anchors_skip_leading_weak_word():
    anchors = generate_optimal_anchors("The Ultimate Link Building Playbook")

    assert anchors[0] == "Ultimate Link Building Playbook"
    assert all(not anchor.lower().startswith("the ") for anchor in anchors)


def test_optimal_anchors_need_fifteen_characters():
    assert generate_optimal_anchors("SEO Basics") == []


def test_leading_article_is_skipped_in_candidate_windows():
    candidates = generate_anchor_candidates("The Complete Keyword Research Workflow")

    assert candidates[0] == "Complete Keyword Research Workflow"
    assert "Complete Keyword Research" in candidates
    assert all(not candidate.startswith("The ") for candidate in candidates)


def test_action_prefixed_candidates():
    candidates = generate_anchor_candidates("Keyword Research Fundamentals Guide", max_candidates=20)

    for prefix in ("mastering", "understanding", "implementing", "optimizing", "creating"):
        assert f"{prefix} Keyword Research Fundamentals" in candidates
        assert f"{prefix} Keyword Research" in candidates
    assert candidates.index("mastering Keyword Research Fundamentals") < candidates.index("mastering Keyword Research")
