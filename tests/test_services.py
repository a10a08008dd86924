"""Service-layer tests."""

from __future__ import annotations

import json

import pytest

from linkweaver.engine.types import LinkTarget
from linkweaver.services import (
    TargetLoadError,
    extract_injected_links,
    inject_internal_links,
    load_targets,
    strip_injected_links,
)

OPTIONS = {"minLinks": 0, "minDistanceBetweenLinks": 40}


def test_inject_and_read_back(article, destinations):
    result = inject_internal_links(article, destinations, "https://example.com/seo", OPTIONS)
    links = extract_injected_links(result.document)

    assert [link.url for link in links] == [insertion.url for insertion in result.insertions]
    assert [link.text for link in links] == [insertion.anchor_text for insertion in result.insertions]
    assert links[0].title == "Keyword Research Fundamentals Guide"
    assert all(0.0 < link.score <= 1.0 for link in links)


def test_config_path_is_merged(tmp_path, article, destinations):
    path = tmp_path / "linkweaver.yaml"
    path.write_text("max_links: 1\n", encoding="utf-8")

    result = inject_internal_links(article, destinations, options=OPTIONS, config=path)

    assert result.links_added == 1


def test_strip_restores_original_markup(article, destinations):
    result = inject_internal_links(article, destinations, options=OPTIONS)

    assert result.links_added == 3
    assert strip_injected_links(result.document) == article


def test_strip_keeps_editorial_links():
    document = '<p>See <a href="/manual">the manual</a> for details.</p>'

    assert strip_injected_links(document) == document
    assert extract_injected_links(document) == []


def test_load_targets_from_yaml_and_json(tmp_path):
    yaml_path = tmp_path / "targets.yaml"
    yaml_path.write_text(
        "links:\n  - url: /keyword-research\n    title: Keyword Research Fundamentals Guide\n",
        encoding="utf-8",
    )
    json_path = tmp_path / "targets.json"
    json_path.write_text(json.dumps([{"url": "/cro", "title": "Conversion Rate Optimization Experiments"}]))

    assert load_targets(yaml_path) == [LinkTarget("/keyword-research", "Keyword Research Fundamentals Guide")]
    assert load_targets(json_path) == [LinkTarget("/cro", "Conversion Rate Optimization Experiments")]


@pytest.mark.parametrize(
    "name, content",
    [
        ("targets.yaml", "just a string\n"),
        ("targets.yaml", "- title: Missing url entry here\n"),
        ("targets.json", "{not json"),
    ],
)
def test_load_targets_errors(tmp_path, name, content):
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")

    with pytest.raises(TargetLoadError):
        load_targets(path)


def test_load_targets_missing_file(tmp_path):
    with pytest.raises(TargetLoadError):
        load_targets(tmp_path / "missing.yaml")


def test_strip_reserializes_fragment_without_wrapping():
    document = '<p>Line one<br>line two with <a href="/x" data-internal-link="semantic">an injected anchor</a></p>'

    stripped = strip_injected_links(document)

    assert stripped == "<p>Line one<br/>line two with an injected anchor</p>"
    assert "<html>" not in stripped and "<body>" not in stripped
